"""Viewport preview: the source image with the mask composited on top."""
import cv2
import numpy as np

from .stroke_renderer import coverage_alpha

BACKGROUND_RGB = (51, 51, 51)   # Tk "gray20"


def _to_rgb(img):
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    if img.shape[2] == 1:
        return cv2.cvtColor(img[..., 0], cv2.COLOR_GRAY2RGB)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def viewport_matrix(scale, offset):
    """2x3 affine for cv2.warpAffine placing image pixels on the canvas.

    Image space puts pixel centres at +0.5 while OpenCV puts them on integer
    coordinates, hence the half-pixel terms.
    """
    ox, oy = offset
    t = 0.5 * scale - 0.5
    return np.float32([[scale, 0.0, ox + t], [0.0, scale, oy + t]])


def render_viewport(source, mask, scale, offset, container_size, background=BACKGROUND_RGB):
    """Composite ``mask`` (RGBA) over ``source`` as seen through the viewport.

    Returns an RGB uint8 array of ``container_size`` (width, height).
    """
    cw = max(1, int(container_size[0]))
    ch = max(1, int(container_size[1]))
    M = viewport_matrix(float(scale), offset)
    # Large upscaling -> Nearest Neighbor (crisp pixels)
    interp = cv2.INTER_NEAREST if scale >= 2.0 else cv2.INTER_LINEAR
    base = cv2.warpAffine(_to_rgb(source), M, (cw, ch), flags=interp,
                          borderMode=cv2.BORDER_CONSTANT, borderValue=tuple(int(c) for c in background))
    if mask is None:
        return base
    over = cv2.warpAffine(mask, M, (cw, ch), flags=cv2.INTER_NEAREST,
                          borderMode=cv2.BORDER_CONSTANT, borderValue=(0, 0, 0, 0))
    a = coverage_alpha(over)[..., None]
    out = base.astype(np.float32) * (1.0 - a) + over[..., :3].astype(np.float32) * a
    return np.clip(out, 0, 255).astype(np.uint8)


def render_editor(editor, container_size, background=BACKGROUND_RGB):
    """Preview of a MaskEditor's current view, or a blank frame before load."""
    if not editor.is_loaded:
        cw = max(1, int(container_size[0]))
        ch = max(1, int(container_size[1]))
        return np.full((ch, cw, 3), background, dtype=np.uint8)
    vp = editor.viewport
    return render_viewport(editor.source, editor.mask, vp.scale, vp.offset, container_size, background)


__all__ = ['BACKGROUND_RGB', 'viewport_matrix', 'render_viewport', 'render_editor']
