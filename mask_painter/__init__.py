"""mask_painter package: raster mask editor core plus a Tkinter host."""

from .config import EditorSettings
from .editor import MaskEditor
from .errors import (
    ExportError, InvalidBrushConfigError, InvalidImageError, MaskEditorError, NotLoadedError,
)
from .gesture import Drawing, GestureController, Idle, Panning
from .history import HistoryStack
from .stroke_renderer import BrushConfig, StrokeRenderer
from .viewport import ViewportTransform

__all__ = [
    'EditorSettings', 'MaskEditor',
    'MaskEditorError', 'InvalidImageError', 'InvalidBrushConfigError', 'NotLoadedError', 'ExportError',
    'GestureController', 'Idle', 'Panning', 'Drawing',
    'HistoryStack', 'BrushConfig', 'StrokeRenderer', 'ViewportTransform',
]
