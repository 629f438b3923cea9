import cv2
import numpy as np
import pytest

from mask_painter import (
    BrushConfig, EditorSettings, ExportError, InvalidBrushConfigError, InvalidImageError,
    MaskEditor, NotLoadedError,
)
from mask_painter import image_io
from mask_painter.image_io import decode_mask_png

from conftest import stroke


@pytest.mark.parametrize("bad", [
    np.zeros((0, 10), dtype=np.uint8),
    np.zeros((10, 0, 3), dtype=np.uint8),
    np.zeros((2, 2, 2, 2), dtype=np.uint8),
    np.zeros((5, 5, 7), dtype=np.uint8),
    [[1, 2], [3, 4]],
    None,
])
def test_load_rejects_invalid_images(bad):
    with pytest.raises(InvalidImageError):
        MaskEditor().load(bad)


def test_failed_load_keeps_previous_session(editor, solid_brush):
    editor.set_brush(solid_brush)
    stroke(editor, [(100, 100)])
    source, mask, depth = editor.source, editor.mask.copy(), len(editor.history)
    with pytest.raises(InvalidImageError):
        editor.load(np.zeros((0, 0), dtype=np.uint8))
    assert editor.source is source
    np.testing.assert_array_equal(editor.mask, mask)
    assert len(editor.history) == depth


def test_load_allocates_blank_mask_and_fits(gray_image):
    ed = MaskEditor()
    ed.load(gray_image, container_size=(200, 400))
    assert ed.mask.shape == (400, 400, 4)
    assert ed.mask.dtype == np.uint8
    assert not ed.mask.any()
    assert ed.size == (400, 400)
    assert ed.viewport.scale == pytest.approx(0.5)
    assert len(ed.history) == 1
    assert not ed.can_undo and not ed.can_redo
    assert not ed.source.flags.writeable


def test_reload_resets_history(editor, solid_brush):
    editor.set_brush(solid_brush)
    stroke(editor, [(100, 100)])
    editor.load(np.zeros((50, 80, 3), dtype=np.uint8))
    assert editor.mask.shape == (50, 80, 4)
    assert len(editor.history) == 1


def test_set_brush_validates_and_keeps_old_on_failure(editor):
    good = BrushConfig(size_px=12, shape='square', opacity=0.3, mode='draw')
    editor.set_brush(good)
    with pytest.raises(InvalidBrushConfigError):
        editor.set_brush(BrushConfig(size_px=0))
    with pytest.raises(InvalidBrushConfigError):
        editor.set_brush({'size_px': 5, 'colour': 'red'})
    with pytest.raises(InvalidBrushConfigError):
        editor.update_brush(opacity=0)
    assert editor.brush == good
    editor.set_brush({'size_px': 5, 'mode': 'erase'})
    assert editor.brush.mode == 'erase'


def test_clear_on_blank_still_commits(editor):
    editor.clear()
    assert len(editor.history) == 2
    assert editor.can_undo
    assert not editor.mask.any()


def test_clear_blanks_painted_mask(editor, solid_brush):
    editor.set_brush(solid_brush)
    stroke(editor, [(100, 100), (200, 200)])
    editor.clear()
    assert not editor.mask.any()
    assert editor.undo()
    assert editor.mask.any()


def test_clear_before_load_raises():
    with pytest.raises(NotLoadedError):
        MaskEditor().clear()


def test_undo_all_returns_to_blank(editor, solid_brush):
    editor.set_brush(solid_brush)
    blank = editor.mask.copy()
    stroke(editor, [(50, 50), (120, 80)])
    stroke(editor, [(300, 300)])
    editor.clear()
    editor.set_brush(BrushConfig(size_px=30, opacity=0.4))
    stroke(editor, [(10, 390), (390, 10)])
    for _ in range(4):
        assert editor.undo()
    assert editor.mask.tobytes() == blank.tobytes()
    assert not editor.undo()


def test_redo_restores_exact_bitmap(editor, solid_brush):
    editor.set_brush(solid_brush)
    stroke(editor, [(50, 50), (300, 120)])
    before = editor.mask.tobytes()
    assert editor.undo()
    assert editor.redo()
    assert editor.mask.tobytes() == before
    assert not editor.redo()


def test_new_stroke_after_undo_discards_redo(editor, solid_brush):
    editor.set_brush(solid_brush)
    stroke(editor, [(50, 50)])
    stroke(editor, [(150, 150)])
    editor.undo()
    assert editor.can_redo
    stroke(editor, [(250, 250)])
    assert not editor.can_redo
    assert len(editor.history) == 3
    assert editor.mask[150, 150, 3] == 0


def test_undo_does_not_alias_history(editor, solid_brush):
    editor.set_brush(solid_brush)
    stroke(editor, [(50, 50)])
    editor.undo()
    editor.mask[0, 0] = 255
    editor.redo()
    editor.undo()
    assert editor.mask[0, 0, 3] == 0


def test_undo_redo_before_load_are_noops():
    ed = MaskEditor()
    assert not ed.undo()
    assert not ed.redo()
    assert not ed.can_undo and not ed.can_redo


def test_history_callback(editor, solid_brush):
    seen = []
    editor.on_history_changed.append(lambda u, r: seen.append((u, r)))
    editor.set_brush(solid_brush)
    stroke(editor, [(50, 50)])
    editor.undo()
    editor.redo()
    assert seen == [(True, False), (False, True), (True, False)]


def test_history_limit_setting(gray_image, solid_brush):
    ed = MaskEditor(settings=EditorSettings(history_limit=2))
    ed.load(gray_image)
    ed.set_brush(solid_brush)
    for p in [(10, 10), (50, 50), (90, 90)]:
        stroke(ed, [p])
    assert len(ed.history) == 2
    assert ed.undo()
    assert not ed.undo()


def test_settings_validation():
    with pytest.raises(ValueError):
        EditorSettings(min_scale=2.0, max_scale=1.0)
    with pytest.raises(ValueError):
        EditorSettings(wheel_factor=1.0)
    with pytest.raises(ValueError):
        EditorSettings(history_limit=0)


def test_export_before_load_raises():
    with pytest.raises(NotLoadedError):
        MaskEditor().export_mask()


def test_export_is_native_size_regardless_of_view(solid_brush):
    ed = MaskEditor()
    ed.load(np.full((120, 300, 3), 90, dtype=np.uint8), container_size=(150, 150))
    ed.set_brush(solid_brush)
    stroke(ed, [(40, 60), (90, 70)])
    ed.viewport.zoom_at((10, 10), 3.0)
    ed.viewport.pan((-400, 250))
    data = ed.export_mask()
    assert data[:8] == b'\x89PNG\r\n\x1a\n'
    decoded = decode_mask_png(data)
    assert decoded.shape == (120, 300, 4)
    np.testing.assert_array_equal(decoded, ed.mask)


def test_export_unpainted_is_fully_transparent(editor):
    decoded = decode_mask_png(editor.export_mask())
    assert decoded.shape == (400, 400, 4)
    assert not decoded[..., 3].any()


def test_export_encoder_failure(editor, monkeypatch):
    monkeypatch.setattr(image_io.cv2, 'imencode', lambda ext, img: (False, None))
    with pytest.raises(ExportError):
        editor.export_mask()


def test_save_mask_writes_png(editor, solid_brush, tmp_path):
    editor.set_brush(solid_brush)
    stroke(editor, [(30, 30)])
    path = editor.save_mask(str(tmp_path / 'mask.png'))
    written = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    assert written.shape == (400, 400, 4)
    assert written[30, 30, 3] == 255


def test_mask_array_is_a_copy(editor):
    arr = editor.mask_array()
    arr[...] = 255
    assert not editor.mask.any()


def test_cancel_drops_session_without_errors(editor, solid_brush):
    editor.set_brush(solid_brush)
    editor.gestures.pointer_down(100, 100)
    editor.cancel()
    assert not editor.is_loaded
    assert editor.gestures.is_idle
    assert len(editor.history) == 0
    with pytest.raises(NotLoadedError):
        editor.export_mask()
    editor.cancel()


def test_load_bytes_and_path(tmp_path):
    img = np.zeros((30, 40, 3), dtype=np.uint8)
    img[:, :20] = (255, 0, 0)
    ok, buf = cv2.imencode('.png', img)
    assert ok
    ed = MaskEditor()
    ed.load_bytes(buf.tobytes(), container_size=(40, 30))
    assert ed.size == (40, 30)
    np.testing.assert_array_equal(ed.source, img)

    path = tmp_path / 'src.png'
    path.write_bytes(buf.tobytes())
    ed.load_path(str(path))
    assert ed.mask.shape == (30, 40, 4)


def test_load_bytes_rejects_garbage(editor):
    with pytest.raises(InvalidImageError):
        editor.load_bytes(b'not an image')
    with pytest.raises(InvalidImageError):
        editor.load_bytes(b'')
    with pytest.raises(InvalidImageError):
        editor.load_path('/nonexistent/file.png')
    assert editor.is_loaded


def test_sixteen_bit_source_is_normalized():
    img = np.linspace(0, 65535, 16 * 16, dtype=np.uint16).reshape(16, 16)
    ed = MaskEditor()
    ed.load(img)
    assert ed.source.dtype == np.uint8
    assert ed.source.max() == 255


def test_update_brush_rejects_unknown_field(editor):
    with pytest.raises(InvalidBrushConfigError):
        editor.update_brush(hardness=0.5)
