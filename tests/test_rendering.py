import numpy as np

from mask_painter import BrushConfig, MaskEditor
from mask_painter.config import MASK_COLOR
from mask_painter.rendering import BACKGROUND_RGB, render_editor, render_viewport, viewport_matrix

from conftest import stroke


def test_blank_frame_before_load():
    out = render_editor(MaskEditor(), (30, 20))
    assert out.shape == (20, 30, 3)
    assert np.all(out == BACKGROUND_RGB)


def test_identity_view_shows_source_and_mask(editor):
    editor.set_brush(BrushConfig(size_px=20, opacity=1.0))
    stroke(editor, [(100, 100)])
    out = render_editor(editor, (400, 400))
    assert out.shape == (400, 400, 3)
    assert tuple(out[100, 100]) == MASK_COLOR
    assert tuple(out[300, 300]) == (200, 200, 200)


def test_translucent_mask_blends_with_source(editor):
    editor.set_brush(BrushConfig(size_px=20, opacity=0.5))
    stroke(editor, [(100, 100)])
    px = render_editor(editor, (400, 400))[100, 100].astype(int)
    expected = (np.array(MASK_COLOR) + 200) / 2.0
    assert np.all(np.abs(px - expected) <= 2)


def test_panned_view_exposes_background():
    src = np.full((50, 50), 120, dtype=np.uint8)
    out = render_viewport(src, None, 1.0, (10.0, 0.0), (60, 50))
    assert tuple(out[25, 5]) == BACKGROUND_RGB
    assert tuple(out[25, 30]) == (120, 120, 120)


def test_viewport_matrix_half_pixel_terms():
    M = viewport_matrix(2.0, (5.0, 7.0))
    np.testing.assert_allclose(M, [[2.0, 0.0, 5.5], [0.0, 2.0, 7.5]])
    M1 = viewport_matrix(1.0, (3.0, 4.0))
    np.testing.assert_allclose(M1, [[1.0, 0.0, 3.0], [0.0, 1.0, 4.0]])
