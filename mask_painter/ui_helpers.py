import tkinter as tk
from tkinter import ttk

from PIL import Image, ImageTk


def to_photoimage(rgb):
    """Convert an RGB numpy array to a Tk PhotoImage."""
    if rgb is None:
        return ImageTk.PhotoImage(Image.new('RGB', (1, 1)))
    # Always create a fresh PIL Image to reflect current pixel data
    return ImageTk.PhotoImage(Image.fromarray(rgb))


def make_slider_row(parent, label_text, var, frm, to, is_int=False, fmt=None, command=None):
    """Create a labeled slider with a live value label; returns (row frame, Scale)."""
    if command is None:
        # no-op default
        def command(_=None):
            return
    row = ttk.Frame(parent)
    ttk.Label(row, text=label_text).pack(side='left')
    scale = ttk.Scale(row, from_=frm, to=to, variable=var, command=command, length=110)
    scale.pack(side='left', padx=(4, 0))
    val_var = tk.StringVar()
    if fmt is None:
        fmt = "{}"

    def _update_val(*a):
        try:
            v = var.get()
            if is_int:
                val_var.set(f"{int(round(v))}")
            else:
                val_var.set(fmt.format(v))
        except (tk.TclError, ValueError):
            val_var.set('')

    _update_val()
    var.trace_add('write', lambda *a: _update_val())

    ttk.Label(row, textvariable=val_var, width=5, anchor='e').pack(side='left', padx=(4, 0))
    return row, scale
