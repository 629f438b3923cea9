import numpy as np
import pytest

from mask_painter import BrushConfig, MaskEditor


@pytest.fixture()
def gray_image():
    """400x400 mid-gray source image."""
    return np.full((400, 400), 200, dtype=np.uint8)


@pytest.fixture()
def editor(gray_image):
    """Editor with the gray image loaded into a same-sized container (scale 1, no offset)."""
    ed = MaskEditor()
    ed.load(gray_image, container_size=(400, 400))
    return ed


@pytest.fixture()
def solid_brush():
    return BrushConfig(size_px=20, shape='circle', opacity=1.0, mode='draw')


def painted_bbox(mask):
    """(row_min, row_max, col_min, col_max) of pixels with non-zero alpha."""
    rows, cols = np.nonzero(mask[..., 3])
    return int(rows.min()), int(rows.max()), int(cols.min()), int(cols.max())


def stroke(editor, points):
    """Press at the first screen point, drag through the rest, release."""
    g = editor.gestures
    (x0, y0), rest = points[0], points[1:]
    g.pointer_down(x0, y0)
    for x, y in rest:
        g.pointer_move(x, y)
    g.pointer_up()
