"""Exceptions raised by the mask editor core."""


class MaskEditorError(Exception):
    """Base class for every error raised by mask_painter."""


class InvalidImageError(MaskEditorError):
    """The image handed to load() has no usable pixels."""


class InvalidBrushConfigError(MaskEditorError):
    """Brush size, opacity, shape or mode is out of range."""


class NotLoadedError(MaskEditorError):
    """An operation that needs an image was called before load()."""


class ExportError(MaskEditorError):
    """Encoding the mask raster failed."""


__all__ = [
    'MaskEditorError', 'InvalidImageError', 'InvalidBrushConfigError',
    'NotLoadedError', 'ExportError',
]
