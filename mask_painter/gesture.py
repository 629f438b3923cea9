"""Pointer / wheel / keyboard state machine for the mask editor.

Exactly one gesture is active at a time, held as a single state value:

    Idle                       nothing in progress
    Panning(anchor)            dragging the view; anchor is the last screen point
    Drawing(last_point, brush) painting; last_point is in image space

Wheel zoom works in every state and never changes it. Only a completed stroke
is committed to history; panning leaves no history entry.

Every handler returns True when the host should redraw.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .config import PAN_KEY, PRIMARY_BUTTON, REDO_KEY, UNDO_KEY
from .logging_config import logger
from .stroke_renderer import BrushConfig

Point = Tuple[float, float]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Panning:
    anchor: Point


@dataclass(frozen=True)
class Drawing:
    last_point: Point
    brush: BrushConfig


GestureState = Union[Idle, Panning, Drawing]

IDLE = Idle()


def normalize_key(key: str) -> str:
    if key == ' ':
        return 'space'
    return (key or '').lower()


class GestureController:
    """Drives the editor from raw input events.

    ``editor`` must provide ``is_loaded``, ``viewport``, ``brush``,
    ``paint_segment(p1, p2, brush)``, ``commit()``, ``undo()`` and ``redo()``;
    :class:`mask_painter.editor.MaskEditor` does.
    """

    def __init__(self, editor, pan_key: str = PAN_KEY):
        self.editor = editor
        self.pan_key = normalize_key(pan_key)
        self.state: GestureState = IDLE
        self.pan_modifier_held = False
        self.active = True

    @property
    def is_idle(self) -> bool:
        return isinstance(self.state, Idle)

    @property
    def is_drawing(self) -> bool:
        return isinstance(self.state, Drawing)

    @property
    def is_panning(self) -> bool:
        return isinstance(self.state, Panning)

    def _set_state(self, state: GestureState):
        if type(state) is not type(self.state):
            logger.debug(f"[Gesture] {type(self.state).__name__} -> {type(state).__name__}")
        self.state = state

    # -------------- Pointer --------------
    def pointer_down(self, x: float, y: float, button: int = PRIMARY_BUTTON) -> bool:
        if button != PRIMARY_BUTTON or not self.editor.is_loaded:
            return False
        if not self.is_idle:
            # a second press while a gesture runs is dropped, not queued
            return False
        if self.pan_modifier_held:
            self._set_state(Panning((float(x), float(y))))
            return False
        brush = self.editor.brush
        point = self.editor.viewport.to_image_space((x, y))
        self._set_state(Drawing(point, brush))
        self.editor.paint_segment(point, point, brush)
        return True

    def pointer_move(self, x: float, y: float) -> bool:
        state = self.state
        if isinstance(state, Drawing):
            point = self.editor.viewport.to_image_space((x, y))
            self.editor.paint_segment(state.last_point, point, state.brush)
            self._set_state(Drawing(point, state.brush))
            return True
        if isinstance(state, Panning):
            ax, ay = state.anchor
            self.editor.viewport.pan((x - ax, y - ay))
            self._set_state(Panning((float(x), float(y))))
            return True
        return False

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> bool:
        state = self.state
        if isinstance(state, Drawing):
            self._set_state(IDLE)
            self.editor.commit()
            return True
        if isinstance(state, Panning):
            self._set_state(IDLE)
        return False

    def pointer_leave(self) -> bool:
        return self.pointer_up()

    def capture_lost(self) -> bool:
        """The host stopped delivering pointer events mid-gesture."""
        return self.pointer_up()

    # -------------- Wheel --------------
    def wheel(self, x: float, y: float, delta_y: float) -> bool:
        if not self.editor.is_loaded:
            return False
        return self.editor.viewport.wheel((x, y), delta_y)

    # -------------- Keyboard --------------
    def key_down(self, key: str, ctrl: bool = False, meta: bool = False, shift: bool = False) -> bool:
        if not self.active:
            return False
        key = normalize_key(key)
        if key == self.pan_key:
            # pressing the modifier never interrupts a gesture in progress
            self.pan_modifier_held = True
            return False
        if not (ctrl or meta) or not self.is_idle:
            return False
        if key == UNDO_KEY and not shift:
            return self.editor.undo()
        if key == REDO_KEY or (key == UNDO_KEY and shift):
            return self.editor.redo()
        return False

    def key_up(self, key: str) -> bool:
        if not self.active:
            return False
        if normalize_key(key) != self.pan_key:
            return False
        self.pan_modifier_held = False
        if self.is_panning:
            self._set_state(IDLE)
        return False

    # -------------- Lifetime --------------
    def activate(self):
        self.active = True

    def deactivate(self) -> bool:
        """Stop listening to keys; a running gesture ends as if released."""
        self.active = False
        self.pan_modifier_held = False
        return self.capture_lost()

    def abort(self):
        """Return to Idle without committing anything."""
        self._set_state(IDLE)
        self.pan_modifier_held = False


class KeyReleaseDebouncer:
    """Holds back key releases briefly so auto-repeat does not look like a release.

    X11 reports a held key as repeated KeyRelease+KeyPress pairs. A release is
    delivered only if no press of the same key follows within ``delay_ms``.
    ``schedule(delay_ms, callback)`` returns a handle that ``cancel(handle)``
    accepts; Tk's ``after`` / ``after_cancel`` fit.
    """

    def __init__(self, schedule, cancel, delay_ms: int = 40):
        self._schedule = schedule
        self._cancel = cancel
        self.delay_ms = int(delay_ms)
        self._pending = {}

    def press(self, key: str) -> bool:
        """Returns True when the press is an auto-repeat of a held key."""
        handle = self._pending.pop(normalize_key(key), None)
        if handle is None:
            return False
        self._cancel(handle)
        return True

    def release(self, key: str, callback):
        key = normalize_key(key)
        old = self._pending.pop(key, None)
        if old is not None:
            self._cancel(old)

        def fire():
            self._pending.pop(key, None)
            callback()

        self._pending[key] = self._schedule(self.delay_ms, fire)

    def cancel_all(self):
        for handle in self._pending.values():
            self._cancel(handle)
        self._pending.clear()


__all__ = [
    'GestureController', 'GestureState', 'Idle', 'Panning', 'Drawing', 'IDLE',
    'normalize_key', 'KeyReleaseDebouncer',
]
