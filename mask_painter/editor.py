"""MaskEditor: the single entry point for hosts of the mask editor.

It owns the source image, the RGBA mask, the viewport transform, the history
and the gesture controller. Hosts forward input events to
``editor.gestures`` and call the methods below for everything else.
"""
from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import numpy as np

from .config import EditorSettings
from .errors import InvalidBrushConfigError, InvalidImageError, NotLoadedError
from .gesture import GestureController
from .history import HistoryStack
from .image_io import decode_image, encode_mask_png, image_size, read_image, to_uint8
from .logging_config import logger
from .stroke_renderer import BrushConfig, StrokeRenderer, blank_mask
from .viewport import ViewportTransform

Point = Tuple[float, float]


class MaskEditor:
    def __init__(self, settings: Optional[EditorSettings] = None, brush: Optional[BrushConfig] = None):
        self.settings = settings or EditorSettings()
        self.viewport = ViewportTransform(
            min_scale=self.settings.min_scale,
            max_scale=self.settings.max_scale,
            wheel_factor=self.settings.wheel_factor,
        )
        self.renderer = StrokeRenderer(color=self.settings.mask_color)
        self.history = HistoryStack(max_depth=self.settings.history_limit)
        self.gestures = GestureController(self, pan_key=self.settings.pan_key)
        self._brush = (brush or BrushConfig()).validate()
        self._source: Optional[np.ndarray] = None
        self._mask: Optional[np.ndarray] = None
        # called with (can_undo, can_redo) after each history change
        self.on_history_changed: List[Callable[[bool, bool], None]] = []

    # -------------- State --------------
    @property
    def is_loaded(self) -> bool:
        return self._mask is not None

    @property
    def source(self) -> Optional[np.ndarray]:
        return self._source

    @property
    def mask(self) -> Optional[np.ndarray]:
        """Live mask bitmap. Treat as read-only; use the editor to change it."""
        return self._mask

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        if self._source is None:
            return None
        return image_size(self._source)

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def _notify_history(self):
        for cb in list(self.on_history_changed):
            cb(self.can_undo, self.can_redo)

    def _require_loaded(self):
        if self._mask is None:
            raise NotLoadedError("load an image first")

    # -------------- Loading --------------
    def load(self, image, container_size: Optional[Tuple[float, float]] = None):
        """Start a new session on ``image`` (gray, BGR or BGRA uint8 array).

        ``container_size`` is the viewport (width, height); it defaults to
        the last known container, or the image size.
        """
        if not isinstance(image, np.ndarray) or image.ndim not in (2, 3):
            logger.warning(f"[Editor] rejected image of type {type(image).__name__}")
            raise InvalidImageError("image must be a 2-D or 3-D numpy array")
        h, w = int(image.shape[0]), int(image.shape[1])
        if w <= 0 or h <= 0:
            logger.warning(f"[Editor] rejected image with size {w}x{h}")
            raise InvalidImageError(f"image has no pixels ({w}x{h})")
        if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
            raise InvalidImageError(f"unsupported channel count {image.shape[2]}")

        source = np.array(to_uint8(image), copy=True)
        source.setflags(write=False)
        mask = blank_mask(w, h)
        if container_size is None:
            container_size = self.viewport.container_size or (w, h)

        self.gestures.abort()
        self._source = source
        self._mask = mask
        self.viewport.fit(container_size, (w, h))
        self.history.reset(mask)
        logger.info(f"[Editor] loaded {w}x{h} image, {self.viewport!r}")
        self._notify_history()

    def load_bytes(self, data, container_size=None):
        self.load(decode_image(data), container_size)

    def load_path(self, path, container_size=None):
        self.load(read_image(path), container_size)

    def resize_container(self, width: float, height: float):
        self.viewport.resize((width, height))

    # -------------- Brush --------------
    @property
    def brush(self) -> BrushConfig:
        return self._brush

    def set_brush(self, config: BrushConfig):
        """Takes effect from the next stroke; a stroke in progress keeps its brush."""
        if not isinstance(config, BrushConfig):
            try:
                config = BrushConfig(**config)
            except TypeError as e:
                raise InvalidBrushConfigError(str(e)) from e
        self._brush = config.validate()

    def update_brush(self, **changes):
        self._brush = self._brush.with_changes(**changes)

    # -------------- Painting (called by GestureController) --------------
    def paint_segment(self, p1: Point, p2: Point, brush: Optional[BrushConfig] = None) -> int:
        if self._mask is None:
            return 0
        return self.renderer.paint_segment(self._mask, p1, p2, brush or self._brush, self.viewport.scale)

    def commit(self):
        if self._mask is None:
            return
        self.history.push(self._mask)
        self._notify_history()

    # -------------- Edit actions --------------
    def clear(self):
        """Blank the mask. Always records a history entry, even if nothing was painted."""
        self._require_loaded()
        self._mask[...] = 0
        self.commit()

    def _restore(self, entry) -> bool:
        if entry is None:
            return False
        np.copyto(self._mask, entry)
        self._notify_history()
        return True

    def undo(self) -> bool:
        if self._mask is None or self.gestures.is_drawing:
            return False
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        if self._mask is None or self.gestures.is_drawing:
            return False
        return self._restore(self.history.redo())

    # -------------- Output --------------
    def mask_array(self) -> np.ndarray:
        self._require_loaded()
        return self._mask.copy()

    def export_mask(self) -> bytes:
        """PNG bytes of the mask at the source image's native size."""
        self._require_loaded()
        data = encode_mask_png(self._mask)
        logger.info(f"[Editor] exported mask {self._mask.shape[1]}x{self._mask.shape[0]} ({len(data)} bytes)")
        return data

    def save_mask(self, path: str) -> str:
        data = self.export_mask()
        with open(path, 'wb') as f:
            f.write(data)
        return path

    def cancel(self):
        """Drop the session without exporting."""
        self.gestures.abort()
        self._source = None
        self._mask = None
        self.history.clear()
        logger.info("[Editor] session cancelled")
        self._notify_history()


__all__ = ['MaskEditor']
