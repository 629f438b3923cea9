"""Defaults for the mask editor.

A 0.2x..5x zoom range, 1.1x per wheel notch and a pink 40 px half-opaque
round brush.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

MIN_SCALE = 0.2
MAX_SCALE = 5.0
WHEEL_FACTOR = 1.1

DEFAULT_BRUSH_SIZE = 40.0
DEFAULT_BRUSH_OPACITY = 0.5
BRUSH_SIZE_RANGE = (5.0, 150.0)      # toolbar slider limits
BRUSH_OPACITY_RANGE = (0.1, 1.0)

MASK_COLOR = (236, 72, 153)           # RGB

PAN_KEY = 'space'
UNDO_KEY = 'z'
REDO_KEY = 'y'
PRIMARY_BUTTON = 0


@dataclass
class EditorSettings:
    min_scale: float = MIN_SCALE
    max_scale: float = MAX_SCALE
    wheel_factor: float = WHEEL_FACTOR
    mask_color: Tuple[int, int, int] = MASK_COLOR
    # None keeps every snapshot for the session
    history_limit: Optional[int] = None
    pan_key: str = PAN_KEY

    def __post_init__(self):
        self.min_scale = float(self.min_scale)
        self.max_scale = float(self.max_scale)
        self.wheel_factor = float(self.wheel_factor)
        if not (0.0 < self.min_scale <= self.max_scale):
            raise ValueError(f"bad scale range {self.min_scale}..{self.max_scale}")
        if self.wheel_factor <= 1.0:
            raise ValueError(f"wheel_factor must be > 1, got {self.wheel_factor}")
        if self.history_limit is not None and int(self.history_limit) < 1:
            raise ValueError("history_limit must be at least 1")
        self.mask_color = tuple(int(c) for c in self.mask_color)


__all__ = [
    'MIN_SCALE', 'MAX_SCALE', 'WHEEL_FACTOR', 'DEFAULT_BRUSH_SIZE',
    'DEFAULT_BRUSH_OPACITY', 'BRUSH_SIZE_RANGE', 'BRUSH_OPACITY_RANGE',
    'MASK_COLOR', 'PAN_KEY', 'UNDO_KEY', 'REDO_KEY', 'PRIMARY_BUTTON',
    'EditorSettings',
]
