"""Screen <-> image coordinate mapping for the mask editor viewport.

The viewport keeps an (offset, scale) pair: an image point ``p`` is drawn at
``p * scale + offset`` on the host canvas. Zoom keeps the image point under
the cursor fixed on screen; pan moves the offset freely (the image may be
dragged completely out of view).
"""
from __future__ import annotations

from typing import Optional, Tuple

from .config import MAX_SCALE, MIN_SCALE, WHEEL_FACTOR
from .logging_config import logger

Point = Tuple[float, float]
Size = Tuple[float, float]


class ViewportTransform:
    def __init__(
        self,
        min_scale: float = MIN_SCALE,
        max_scale: float = MAX_SCALE,
        wheel_factor: float = WHEEL_FACTOR,
    ):
        self.min_scale = float(min_scale)
        self.max_scale = float(max_scale)
        self.wheel_factor = float(wheel_factor)
        self.scale = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0
        self._container: Optional[Size] = None
        self._image: Optional[Size] = None

    def __repr__(self):
        return f"ViewportTransform(scale={self.scale:.4f}, offset=({self.offset_x:.2f}, {self.offset_y:.2f}))"

    @property
    def offset(self) -> Point:
        return (self.offset_x, self.offset_y)

    @property
    def percent(self) -> int:
        return int(round(self.scale * 100))

    @property
    def container_size(self) -> Optional[Size]:
        return self._container

    def _clamp(self, s: float) -> float:
        return max(self.min_scale, min(self.max_scale, s))

    # -------------- Fit / reset --------------
    def fit(self, container_size: Size, image_size: Size):
        """Center the image in the container, shrinking it to fit but never
        enlarging past 100%."""
        cw, ch = float(container_size[0]), float(container_size[1])
        iw, ih = float(image_size[0]), float(image_size[1])
        if iw <= 0 or ih <= 0:
            return
        self._container = (cw, ch)
        self._image = (iw, ih)
        cw = max(1.0, cw)
        ch = max(1.0, ch)
        self.scale = self._clamp(min(cw / iw, ch / ih, 1.0))
        self.offset_x = (cw - iw * self.scale) / 2.0
        self.offset_y = (ch - ih * self.scale) / 2.0
        logger.debug(f"[Viewport] fit container=({cw:.0f},{ch:.0f}) image=({iw:.0f},{ih:.0f}) -> {self!r}")

    def reset(self):
        if self._container is None or self._image is None:
            return
        self.fit(self._container, self._image)

    def resize(self, container_size: Size):
        if self._image is None:
            self._container = (float(container_size[0]), float(container_size[1]))
            return
        self.fit(container_size, self._image)

    # -------------- Mapping --------------
    def to_image_space(self, point: Point) -> Point:
        x, y = point
        return ((x - self.offset_x) / self.scale, (y - self.offset_y) / self.scale)

    def to_screen_space(self, point: Point) -> Point:
        x, y = point
        return (x * self.scale + self.offset_x, y * self.scale + self.offset_y)

    # -------------- Zoom & pan --------------
    def zoom_at(self, point: Point, factor: float) -> bool:
        """Rescale by ``factor`` keeping the image point under ``point`` fixed.

        Returns False when the clamped scale would not change.
        """
        old_scale = self.scale
        new_scale = self._clamp(old_scale * float(factor))
        if abs(new_scale - old_scale) < 1e-12:
            return False
        x_c, y_c = float(point[0]), float(point[1])
        ratio = new_scale / old_scale
        self.offset_x = x_c - (x_c - self.offset_x) * ratio
        self.offset_y = y_c - (y_c - self.offset_y) * ratio
        self.scale = new_scale
        logger.debug(f"[Viewport] zoom {old_scale:.4f} -> {new_scale:.4f} at ({x_c:.1f},{y_c:.1f}) offset=({self.offset_x:.2f},{self.offset_y:.2f})")
        return True

    def wheel(self, point: Point, delta_y: float) -> bool:
        """Wheel notch: scrolling up (negative delta) zooms in."""
        if not delta_y:
            return False
        factor = self.wheel_factor if delta_y < 0 else 1.0 / self.wheel_factor
        return self.zoom_at(point, factor)

    def _center(self) -> Point:
        if self._container is None:
            return (0.0, 0.0)
        return (self._container[0] / 2.0, self._container[1] / 2.0)

    def zoom_in(self) -> bool:
        return self.zoom_at(self._center(), self.wheel_factor)

    def zoom_out(self) -> bool:
        return self.zoom_at(self._center(), 1.0 / self.wheel_factor)

    def pan(self, delta: Point):
        dx, dy = delta
        self.offset_x += float(dx)
        self.offset_y += float(dy)
        logger.debug(f"[Viewport] pan dx={dx} dy={dy} offset=({self.offset_x:.2f},{self.offset_y:.2f})")


__all__ = ['ViewportTransform']
