"""Decoding host images and encoding the finished mask."""
import os

import cv2
import numpy as np

from .errors import ExportError, InvalidImageError


def to_uint8(img):
    """Rescale 16-bit/float images to 0..255 uint8 using min/max."""
    if img.dtype == np.uint8:
        return img
    imin = float(np.min(img))
    imax = float(np.max(img))
    if imax <= imin:
        return np.zeros_like(img, dtype=np.uint8)
    img8 = cv2.normalize(img, None, alpha=0, beta=255, norm_type=cv2.NORM_MINMAX)
    return img8.astype(np.uint8)


def decode_image(data):
    """Decode encoded image bytes (PNG, JPEG, TIFF, ...) to a uint8 array.

    Gray stays (H, W); colour comes back BGR or BGRA as OpenCV reads it.
    """
    if not data:
        raise InvalidImageError("empty image buffer")
    buf = np.frombuffer(bytes(data), dtype=np.uint8)
    img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    if img is None:
        raise InvalidImageError("failed to decode image buffer")
    return to_uint8(img)


def read_image(path):
    if not os.path.isfile(path):
        raise InvalidImageError(f"no such image file: {path}")
    with open(path, 'rb') as f:
        return decode_image(f.read())


def image_size(img):
    """(width, height) of a numpy image."""
    return int(img.shape[1]), int(img.shape[0])


def encode_mask_png(mask_rgba):
    """PNG-encode an (H, W, 4) RGBA mask, keeping its alpha channel."""
    if mask_rgba is None or mask_rgba.ndim != 3 or mask_rgba.shape[2] != 4:
        raise ExportError("mask must be an (H, W, 4) array")
    try:
        bgra = cv2.cvtColor(np.ascontiguousarray(mask_rgba), cv2.COLOR_RGBA2BGRA)
        ok, buf = cv2.imencode('.png', bgra)
    except cv2.error as e:
        raise ExportError(f"PNG encoding failed: {e}") from e
    if not ok:
        raise ExportError("cv2.imencode returned False")
    return buf.tobytes()


def decode_mask_png(data):
    """Inverse of :func:`encode_mask_png`: PNG bytes -> (H, W, 4) RGBA."""
    buf = np.frombuffer(bytes(data), dtype=np.uint8)
    bgra = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
    if bgra is None or bgra.ndim != 3 or bgra.shape[2] != 4:
        raise InvalidImageError("not an RGBA PNG")
    return cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGBA)
