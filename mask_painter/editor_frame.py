"""
Tkinter host for the mask editor

Features:
- Open an image and paint a translucent mask over it
- Draw / Erase modes, circle or square brush, size and opacity sliders
- Scroll to zoom at cursor position, hold Space and drag to pan
- D / E switch between Draw and Erase
- Undo / Redo (Ctrl+Z, Ctrl+Y or Ctrl+Shift+Z), Clear
- Brush outline overlay around the cursor (constant on-screen size)
- Save the mask as a PNG with the image's native dimensions
"""

import os
import sys
import tkinter as tk
from tkinter import filedialog, messagebox, ttk

from .config import BRUSH_OPACITY_RANGE, BRUSH_SIZE_RANGE, EditorSettings
from .editor import MaskEditor
from .errors import MaskEditorError
from .gesture import KeyReleaseDebouncer
from .logging_config import configure_file_logging, logger
from .rendering import render_editor
from .ui_helpers import make_slider_row, to_photoimage

CONTROL_MASK = 0x4
SHIFT_MASK = 0x1
BUTTON1_MASK = 0x100
# Mod2 is NumLock on X11; only treat Command (macOS) as meta there
META_MASK = 0x8 if sys.platform == 'darwin' else 0


class MaskEditorFrame(tk.Frame):
    """
    Embeddable mask editor as a tkinter Frame.
    - on_save(png_bytes) is invoked by 'Save Mask'; without it the user picks a file
    - on_cancel() is invoked by 'Cancel' after the session is dropped
    """
    def __init__(self, master=None, on_save=None, on_cancel=None, settings: EditorSettings = None):
        super().__init__(master)
        self._on_save = on_save
        self._on_cancel = on_cancel
        self._own_root = None  # set when launched standalone via main()

        self.editor = MaskEditor(settings=settings)
        self.editor.on_history_changed.append(self._on_history_changed)
        self._photo = None
        self._cursor_item = None
        self._last_mouse_pos = None
        # X11 auto-repeat sends release/press pairs while a key is held
        self._key_debounce = KeyReleaseDebouncer(self.after, self.after_cancel)

        # Toolbar container (packs across the top)
        self.toolbar = ttk.Frame(self)
        self.toolbar.pack(side="top", fill="x")
        self._toolbar_items = []

        def add(item):
            self._toolbar_items.append(item)
            return item

        add(ttk.Button(self.toolbar, text="Open Image", command=self.open_image))
        add(ttk.Button(self.toolbar, text="Save Mask…", command=self.save_mask))
        add(ttk.Separator(self.toolbar, orient="vertical"))

        brush = self.editor.brush
        self.mode_var = tk.StringVar(value=brush.mode)
        add(ttk.Radiobutton(self.toolbar, text="Draw", value="draw", variable=self.mode_var,
                            command=self._on_brush_changed))
        add(ttk.Radiobutton(self.toolbar, text="Erase", value="erase", variable=self.mode_var,
                            command=self._on_brush_changed))
        self.shape_var = tk.StringVar(value=brush.shape)
        add(ttk.Radiobutton(self.toolbar, text="Circle", value="circle", variable=self.shape_var,
                            command=self._on_brush_changed))
        add(ttk.Radiobutton(self.toolbar, text="Square", value="square", variable=self.shape_var,
                            command=self._on_brush_changed))

        self.size_var = tk.DoubleVar(value=brush.size_px)
        row, _ = make_slider_row(self.toolbar, "Size", self.size_var, *BRUSH_SIZE_RANGE,
                                 is_int=True, command=self._on_brush_changed)
        add(row)
        self.opacity_var = tk.DoubleVar(value=brush.opacity)
        row, self.opacity_scale = make_slider_row(self.toolbar, "Opacity", self.opacity_var,
                                                  *BRUSH_OPACITY_RANGE, fmt="{:.2f}",
                                                  command=self._on_brush_changed)
        add(row)
        add(ttk.Separator(self.toolbar, orient="vertical"))

        add(ttk.Button(self.toolbar, text="Zoom In", command=self.zoom_in))
        add(ttk.Button(self.toolbar, text="Zoom Out", command=self.zoom_out))
        add(ttk.Button(self.toolbar, text="Reset View", command=self.reset_view))
        self.zoom_label = add(ttk.Label(self.toolbar, text="100%", width=6, anchor="e"))
        add(ttk.Separator(self.toolbar, orient="vertical"))

        self.undo_btn = add(ttk.Button(self.toolbar, text="Undo", command=self.undo, state="disabled"))
        self.redo_btn = add(ttk.Button(self.toolbar, text="Redo", command=self.redo, state="disabled"))
        add(ttk.Button(self.toolbar, text="Clear", command=self.clear))
        add(ttk.Button(self.toolbar, text="Cancel", command=self.cancel))

        # Flow layout using grid: reflow on resize
        def _layout_toolbar(event=None):
            avail = max(1, self.toolbar.winfo_width())
            for w in self._toolbar_items:
                w.grid_forget()
            row = 0
            col = 0
            cur_w = 0
            pad_x = 6
            for w in self._toolbar_items:
                req = max(1, w.winfo_reqwidth())
                # separators should be small but tall
                sticky = 'w'
                if isinstance(w, ttk.Separator):
                    sticky = 'ns'
                    req = 6
                if col > 0 and (cur_w + req + pad_x) > avail:
                    row += 1
                    col = 0
                    cur_w = 0
                w.grid(row=row, column=col, padx=3, pady=2, sticky=sticky)
                cur_w += req + pad_x
                col += 1

        self.toolbar.bind('<Configure>', _layout_toolbar)
        _layout_toolbar()

        # Status bar
        self.status = ttk.Label(self, text="Open an image to paint a mask… (hold Space to pan, D/E: draw/erase)", anchor="w")
        self.status.pack(side="bottom", fill="x")

        # Canvas
        self.canvas = tk.Canvas(self, bg="gray20", highlightthickness=0, cursor="crosshair", takefocus=1)
        self.canvas.pack(side="top", fill="both", expand=True)

        # Pointer bindings
        self.canvas.bind("<Configure>", self._on_canvas_configure)
        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<B1-Motion>", self._on_drag)
        self.canvas.bind("<ButtonRelease-1>", self._on_release)
        self.canvas.bind("<Motion>", self._on_mouse_move)
        self.canvas.bind("<Leave>", self._on_mouse_leave)
        self.canvas.bind("<Enter>", lambda e: self.canvas.focus_set())
        self.canvas.bind("<MouseWheel>", self._on_mouse_wheel)
        self.canvas.bind("<Button-4>", lambda e: self._wheel(e, -1))
        self.canvas.bind("<Button-5>", lambda e: self._wheel(e, 1))

        # Keys go to the canvas only while it has focus, so shortcuts live and
        # die with this editor rather than the whole application window.
        self.canvas.bind("<KeyPress>", self._on_key_press)
        self.canvas.bind("<KeyRelease>", self._on_key_release)
        self.canvas.bind("<FocusIn>", lambda e: self.editor.gestures.activate())
        self.canvas.bind("<FocusOut>", self._on_focus_out)
        self.canvas.bind("<Destroy>", self._on_destroy)

    # -------------- Public API --------------
    def set_image(self, image):
        """Start editing a numpy image (gray, BGR or BGRA)."""
        try:
            self.editor.load(image, self._canvas_size())
        except MaskEditorError as e:
            messagebox.showerror("Open error", str(e))
            return False
        h, w = image.shape[:2]
        self.set_status(f"Editing {w}×{h} image")
        self._refresh_display()
        return True

    def get_mask_png(self):
        return self.editor.export_mask()

    def set_status(self, text):
        self.status.config(text=text)

    # -------------- File actions --------------
    def open_image(self):
        path = filedialog.askopenfilename(
            parent=self.winfo_toplevel(),
            title="Open image",
            filetypes=[("Images", ("*.png", "*.jpg", "*.jpeg", "*.tif", "*.tiff", "*.bmp", "*.webp"))],
            initialdir=os.path.expanduser("~"),
        )
        if not path:
            return
        try:
            self.editor.load_path(path, self._canvas_size())
        except MaskEditorError as e:
            messagebox.showerror("Open error", f"Failed to read the image\n{e}")
            return
        w, h = self.editor.size
        self.set_status(f"Loaded: {os.path.basename(path)} — {w}×{h}")
        self._refresh_display()

    def save_mask(self):
        if not self.editor.is_loaded:
            messagebox.showinfo("Nothing to save", "Load an image first")
            return
        try:
            data = self.editor.export_mask()
        except MaskEditorError as e:
            messagebox.showerror("Save error", str(e))
            return
        if callable(self._on_save):
            self._on_save(data)
            self.set_status("Mask handed back")
            return
        path = filedialog.asksaveasfilename(
            parent=self.winfo_toplevel(),
            title="Save mask",
            defaultextension=".png",
            filetypes=[("PNG", "*.png")],
        )
        if not path:
            return
        try:
            with open(path, 'wb') as f:
                f.write(data)
        except OSError as e:
            messagebox.showerror("Save error", str(e))
            return
        self.set_status(f"Saved: {os.path.basename(path)}")

    # -------------- Edit actions --------------
    def undo(self):
        if self.editor.undo():
            self.set_status("Undid last stroke")
            self._refresh_display()

    def redo(self):
        if self.editor.redo():
            self.set_status("Redid stroke")
            self._refresh_display()

    def clear(self):
        if not self.editor.is_loaded:
            return
        self.editor.clear()
        self.set_status("Mask cleared")
        self._refresh_display()

    def cancel(self):
        self.editor.cancel()
        self._refresh_display()
        if callable(self._on_cancel):
            self._on_cancel()
            return
        # Standalone: close the root window if we own it
        if self._own_root is not None:
            self._own_root.destroy()
        else:
            self.set_status("Edits discarded")

    def zoom_in(self):
        if self.editor.viewport.zoom_in():
            self._refresh_display()

    def zoom_out(self):
        if self.editor.viewport.zoom_out():
            self._refresh_display()

    def reset_view(self):
        self.editor.viewport.reset()
        self._refresh_display()

    # -------------- Brush settings --------------
    def _on_brush_changed(self, _=None):
        try:
            self.editor.update_brush(
                size_px=float(self.size_var.get()),
                opacity=float(self.opacity_var.get()),
                shape=self.shape_var.get(),
                mode=self.mode_var.get(),
            )
        except MaskEditorError as e:
            self.set_status(str(e))
            return
        # opacity does not apply to the eraser
        self.opacity_scale.state(["disabled"] if self.mode_var.get() == "erase" else ["!disabled"])
        if self._last_mouse_pos is not None:
            self._update_cursor_outline(*self._last_mouse_pos)

    def _set_mode(self, mode):
        if mode in ("draw", "erase"):
            self.mode_var.set(mode)
            self._on_brush_changed()

    def _on_history_changed(self, can_undo, can_redo):
        self.undo_btn.config(state="normal" if can_undo else "disabled")
        self.redo_btn.config(state="normal" if can_redo else "disabled")

    # -------------- Rendering --------------
    def _canvas_size(self):
        return max(1, self.canvas.winfo_width()), max(1, self.canvas.winfo_height())

    def _on_canvas_configure(self, event=None):
        self.editor.resize_container(*self._canvas_size())
        self._refresh_display()

    def _refresh_display(self):
        self.canvas.delete("all")
        self._cursor_item = None
        self.zoom_label.config(text=f"{self.editor.viewport.percent}%")
        if not self.editor.is_loaded:
            return
        rgb = render_editor(self.editor, self._canvas_size())
        self._photo = to_photoimage(rgb)
        self.canvas.create_image(0, 0, anchor="nw", image=self._photo)
        if self._last_mouse_pos is not None:
            self._update_cursor_outline(*self._last_mouse_pos)

    # -------------- Pointer --------------
    def _on_press(self, event):
        self.canvas.focus_set()
        changed = self.editor.gestures.pointer_down(event.x, event.y, 0)
        if self.editor.gestures.is_panning:
            self.canvas.config(cursor="fleur")
        self._last_mouse_pos = (event.x, event.y)
        if changed:
            self._refresh_display()

    def _on_drag(self, event):
        self._last_mouse_pos = (event.x, event.y)
        if self.editor.gestures.pointer_move(event.x, event.y):
            self._refresh_display()
        else:
            self._update_cursor_outline(event.x, event.y)

    def _on_release(self, event):
        self.editor.gestures.pointer_up(event.x, event.y)
        self.canvas.config(cursor="crosshair")
        self._refresh_display()

    def _on_mouse_move(self, event):
        self._last_mouse_pos = (event.x, event.y)
        self._update_cursor_outline(event.x, event.y)

    def _on_mouse_leave(self, event):
        if self._cursor_item is not None:
            self.canvas.delete(self._cursor_item)
            self._cursor_item = None
        self._last_mouse_pos = None
        # With button 1 held Tk keeps delivering motion to the canvas (implicit
        # grab), so the stroke continues; otherwise leaving ends the gesture.
        if not (getattr(event, "state", 0) & BUTTON1_MASK):
            if self.editor.gestures.pointer_leave():
                self._refresh_display()

    def _on_focus_out(self, event=None):
        self._key_debounce.cancel_all()
        if self.editor.gestures.deactivate():
            self._refresh_display()
        self.canvas.config(cursor="crosshair")

    def _on_destroy(self, event=None):
        self._key_debounce.cancel_all()
        self.editor.gestures.deactivate()

    # -------------- Wheel --------------
    def _on_mouse_wheel(self, event):
        delta = int(getattr(event, "delta", 0))
        if delta == 0:
            return
        # Tk reports wheel-up as positive delta; DOM-style delta_y is negative
        self._wheel(event, -delta)

    def _wheel(self, event, delta_y):
        if self.editor.gestures.wheel(event.x, event.y, delta_y):
            self._last_mouse_pos = (event.x, event.y)
            self._refresh_display()

    # -------------- Keyboard --------------
    def _on_key_press(self, event):
        self._key_debounce.press(event.keysym)
        state = int(getattr(event, "state", 0))
        ctrl = bool(state & CONTROL_MASK)
        meta = bool(META_MASK and state & META_MASK)
        shift = bool(state & SHIFT_MASK)
        key = event.keysym
        if not (ctrl or meta) and key.lower() in ("d", "e"):
            self._set_mode("draw" if key.lower() == "d" else "erase")
            return "break"
        if self.editor.gestures.key_down(key, ctrl=ctrl, meta=meta, shift=shift):
            self._refresh_display()
            return "break"
        return None

    def _on_key_release(self, event):
        key = event.keysym
        self._key_debounce.release(key, lambda: self._apply_key_up(key))

    def _apply_key_up(self, key):
        self.editor.gestures.key_up(key)
        if not self.editor.gestures.is_panning:
            self.canvas.config(cursor="crosshair")

    # -------------- Cursor overlay --------------
    def _update_cursor_outline(self, x, y):
        if not self.editor.is_loaded:
            if self._cursor_item is not None:
                self.canvas.delete(self._cursor_item)
                self._cursor_item = None
            return
        brush = self.editor.brush
        # size_px is already a screen-space diameter
        r = max(1.0, brush.size_px / 2.0)
        coords = (x - r, y - r, x + r, y + r)
        color = "#00ff88" if brush.mode == "draw" else "#ff5555"
        if self._cursor_item is not None:
            self.canvas.delete(self._cursor_item)
        if brush.shape == "square":
            self._cursor_item = self.canvas.create_rectangle(*coords, outline=color, width=1)
        else:
            self._cursor_item = self.canvas.create_oval(*coords, outline=color, width=1)


def main():
    log_file = configure_file_logging()
    logger.info(f"Mask editor starting, logging to {log_file}")
    root = tk.Tk()
    root.title("Mask Editor")
    root.geometry("1000x760")
    editor = MaskEditorFrame(root)
    editor._own_root = root
    editor.pack(fill="both", expand=True)
    root.mainloop()


if __name__ == "__main__":
    main()
