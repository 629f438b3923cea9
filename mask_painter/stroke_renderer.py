"""Brush rasterization into the RGBA mask bitmap.

A segment is stroked with a line width of ``size_px / scale`` image pixels so
the brush keeps the same apparent size on screen at any zoom. Pixel
``(row, col)`` is treated as covered when its centre ``(col + 0.5, row + 0.5)``
lies inside the stroked shape:

- circle: within ``width / 2`` of the segment (round caps and joins)
- square: inside the segment's rectangle extended by ``width / 2`` past both
  ends (square caps)

Drawing composites the mask colour over covered pixels at the brush opacity
(source-over); erasing clears covered pixels completely.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

import numpy as np
from skimage.draw import polygon

from .config import DEFAULT_BRUSH_OPACITY, DEFAULT_BRUSH_SIZE, MASK_COLOR
from .errors import InvalidBrushConfigError

Point = Tuple[float, float]

SHAPES = ('circle', 'square')
MODES = ('draw', 'erase')


@dataclass(frozen=True)
class BrushConfig:
    size_px: float = DEFAULT_BRUSH_SIZE   # screen-space diameter
    shape: str = 'circle'
    opacity: float = DEFAULT_BRUSH_OPACITY
    mode: str = 'draw'

    def validate(self) -> 'BrushConfig':
        try:
            size = float(self.size_px)
            opacity = float(self.opacity)
        except (TypeError, ValueError):
            raise InvalidBrushConfigError(f"size/opacity must be numbers: {self!r}")
        if not math.isfinite(size) or size <= 0:
            raise InvalidBrushConfigError(f"size_px must be > 0, got {self.size_px!r}")
        if not math.isfinite(opacity) or not (0.0 < opacity <= 1.0):
            raise InvalidBrushConfigError(f"opacity must be in (0, 1], got {self.opacity!r}")
        if self.shape not in SHAPES:
            raise InvalidBrushConfigError(f"shape must be one of {SHAPES}, got {self.shape!r}")
        if self.mode not in MODES:
            raise InvalidBrushConfigError(f"mode must be one of {MODES}, got {self.mode!r}")
        return self

    def with_changes(self, **changes) -> 'BrushConfig':
        try:
            updated = replace(self, **changes)
        except TypeError as e:
            raise InvalidBrushConfigError(str(e)) from e
        return updated.validate()


class StrokeRenderer:
    def __init__(self, color=MASK_COLOR):
        self.color = tuple(int(c) for c in color)

    def line_width(self, brush: BrushConfig, scale: float) -> float:
        return float(brush.size_px) / max(1e-9, float(scale))

    def paint_segment(self, bitmap: np.ndarray, p1: Point, p2: Point,
                      brush: BrushConfig, scale: float) -> int:
        """Stroke ``p1 -> p2`` (image space) into ``bitmap`` in place.

        A zero-length segment paints a single dot of the full brush width.
        Returns the number of pixels touched.
        """
        radius = self.line_width(brush, scale) / 2.0
        h, w = bitmap.shape[:2]
        found = self._coverage((h, w), p1, p2, brush.shape, radius)
        if found is None:
            return 0
        (r0, r1, c0, c1), covered = found
        n = int(np.count_nonzero(covered))
        if n == 0:
            return 0
        region = bitmap[r0:r1, c0:c1]
        if brush.mode == 'erase':
            region[covered] = 0
        else:
            self._blend(region, covered, float(brush.opacity))
        return n

    # -------------- Coverage --------------
    def _coverage(self, shape_hw, p1: Point, p2: Point, shape: str, radius: float):
        h, w = shape_hw
        x0, y0 = float(p1[0]), float(p1[1])
        x1, y1 = float(p2[0]), float(p2[1])
        # square corners reach radius * sqrt(2) from the segment ends
        pad = radius * (math.sqrt(2.0) if shape == 'square' else 1.0) + 1.0
        c0 = max(0, int(math.floor(min(x0, x1) - pad)))
        c1 = min(w, int(math.ceil(max(x0, x1) + pad)) + 1)
        r0 = max(0, int(math.floor(min(y0, y1) - pad)))
        r1 = min(h, int(math.ceil(max(y0, y1) + pad)) + 1)
        if c1 <= c0 or r1 <= r0:
            return None
        box = (r0, r1, c0, c1)
        if shape == 'square':
            covered = self._square_coverage(box, (x0, y0), (x1, y1), radius, (h, w))
        else:
            covered = self._round_coverage(box, (x0, y0), (x1, y1), radius)
        return box, covered

    @staticmethod
    def _round_coverage(box, p1: Point, p2: Point, radius: float) -> np.ndarray:
        r0, r1, c0, c1 = box
        x0, y0 = p1
        x1, y1 = p2
        yy, xx = np.ogrid[r0:r1, c0:c1]
        px = xx + 0.5
        py = yy + 0.5
        dx = x1 - x0
        dy = y1 - y0
        len2 = dx * dx + dy * dy
        if len2 == 0.0:
            d2 = (px - x0) ** 2 + (py - y0) ** 2
        else:
            t = np.clip(((px - x0) * dx + (py - y0) * dy) / len2, 0.0, 1.0)
            d2 = (px - (x0 + t * dx)) ** 2 + (py - (y0 + t * dy)) ** 2
        return d2 <= radius * radius

    @staticmethod
    def _square_coverage(box, p1: Point, p2: Point, radius: float, shape_hw) -> np.ndarray:
        r0, r1, c0, c1 = box
        x0, y0 = p1
        x1, y1 = p2
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0.0:
            ux, uy = 1.0, 0.0     # a tap stamps an axis-aligned square
        else:
            ux, uy = (x1 - x0) / length, (y1 - y0) / length
        nx, ny = -uy, ux
        ax, ay = x0 - ux * radius, y0 - uy * radius
        bx, by = x1 + ux * radius, y1 + uy * radius
        xs = [ax + nx * radius, bx + nx * radius, bx - nx * radius, ax - nx * radius]
        ys = [ay + ny * radius, by + ny * radius, by - ny * radius, ay - ny * radius]
        # skimage samples pixel centres at integer coordinates
        rr, cc = polygon(np.asarray(ys) - 0.5, np.asarray(xs) - 0.5, shape=shape_hw)
        covered = np.zeros((r1 - r0, c1 - c0), dtype=bool)
        keep = (rr >= r0) & (rr < r1) & (cc >= c0) & (cc < c1)
        covered[rr[keep] - r0, cc[keep] - c0] = True
        return covered

    # -------------- Compositing --------------
    def _blend(self, region: np.ndarray, covered: np.ndarray, opacity: float):
        px = region[covered].astype(np.float32)
        dst_a = px[:, 3] / 255.0
        out_a = opacity + dst_a * (1.0 - opacity)
        color = np.asarray(self.color, dtype=np.float32)
        rgb = (color[None, :] * opacity + px[:, :3] * (dst_a * (1.0 - opacity))[:, None]) / out_a[:, None]
        px[:, :3] = rgb
        px[:, 3] = out_a * 255.0
        region[covered] = np.clip(np.rint(px), 0, 255).astype(np.uint8)


def blank_mask(width: int, height: int) -> np.ndarray:
    return np.zeros((int(height), int(width), 4), dtype=np.uint8)


def coverage_alpha(bitmap: Optional[np.ndarray]) -> Optional[np.ndarray]:
    """Alpha plane of an RGBA mask as float32 in [0, 1]."""
    if bitmap is None:
        return None
    return bitmap[..., 3].astype(np.float32) / 255.0


__all__ = ['BrushConfig', 'StrokeRenderer', 'SHAPES', 'MODES', 'blank_mask', 'coverage_alpha']
