"""Desktop interface (tkinter). The filtering itself runs in background threads."""
from __future__ import annotations

import logging
import threading
import tkinter as tk
from tkinter import filedialog, messagebox, ttk

import numpy as np
from PIL import Image, ImageTk

from . import __version__
from .averaging import Strategy
from .errors import ImageFiltererError, NoImageOpenedError, NoOutputGeneratedError
from .image_io import SUPPORTED_EXTENSIONS
from .runner import IterativeFilterRunner
from .session import MAX_ITERATIONS, MIN_ITERATIONS, FilterSession
from .tasks import CancellableTaskRegistry
from .zoom import ZoomView, fit_zoom

logger = logging.getLogger(__name__)

OPEN_FILETYPES = [
    ("Images (.png, .jpg, .jpeg)", " ".join(f"*{ext}" for ext in sorted(SUPPORTED_EXTENSIONS))),
]
SAVE_FILETYPES = [("PNG Images (.png)", "*.png")]


def in_background(target, *args) -> None:
    threading.Thread(target=target, args=args, daemon=True).start()


class ZoomPanel(ttk.LabelFrame):
    """Scrollable image with its own zoom slider, backed by a ZoomView."""

    def __init__(self, master: tk.Widget, text: str, image_provider, registry, dispatch) -> None:
        super().__init__(master, text=text)
        self.photo = None
        self.view = ZoomView(image_provider, self._show, registry=registry, dispatch=dispatch)

        self.canvas = tk.Canvas(self, highlightthickness=0)
        xscroll = ttk.Scrollbar(self, orient="horizontal", command=self.canvas.xview)
        yscroll = ttk.Scrollbar(self, orient="vertical", command=self.canvas.yview)
        self.canvas.configure(xscrollcommand=xscroll.set, yscrollcommand=yscroll.set)

        self.zoom_var = tk.DoubleVar(value=100.0)
        self.zoom_label = ttk.Label(self, text="100%", width=6)
        scale = ttk.Scale(self, from_=10, to=400, variable=self.zoom_var, command=self._on_zoom)

        self.canvas.grid(row=0, column=0, columnspan=2, sticky="nsew")
        yscroll.grid(row=0, column=2, sticky="ns")
        xscroll.grid(row=1, column=0, columnspan=2, sticky="ew")
        scale.grid(row=2, column=0, sticky="ew", padx=5, pady=2)
        self.zoom_label.grid(row=2, column=1, padx=5)
        self.rowconfigure(0, weight=1)
        self.columnconfigure(0, weight=1)

    def _on_zoom(self, _value=None) -> None:
        zoom = max(0.1, self.zoom_var.get() / 100.0)
        self.zoom_label.configure(text=f"{int(zoom * 100)}%")
        self.view.zoom = zoom

    def reset(self, image) -> None:
        """Shows a new image, fitted to the default size."""
        if image is None:
            self.clear()
            return
        zoom = fit_zoom(image.width, image.height)
        self.zoom_var.set(zoom * 100.0)
        self._on_zoom()

    def refresh(self) -> None:
        self.view.refresh()

    def clear(self) -> None:
        self.canvas.delete("all")
        self.photo = None

    def _show(self, array: np.ndarray, zoom: float) -> None:
        height, width = array.shape[:2]
        self.photo = ImageTk.PhotoImage(Image.frombytes("RGBA", (width, height), array.tobytes()))
        self.canvas.delete("all")
        self.canvas.create_image(0, 0, image=self.photo, anchor="nw")
        self.canvas.configure(scrollregion=(0, 0, width, height))


class ImageFiltererApp(tk.Tk):
    def __init__(self) -> None:
        super().__init__()
        self.title("Image Filterer")
        self.geometry("1000x600")

        registry = CancellableTaskRegistry()
        self.registry = registry
        self.session = FilterSession(
            runner=IterativeFilterRunner(registry),
            dispatch=self._dispatch,
        )
        self.session.subscribe(self._on_session_event)

        self.strategy_var = tk.StringVar(value=Strategy.FAST.value)
        self.iterations_var = tk.IntVar(value=MIN_ITERATIONS)
        self._build_menu()

        panels = ttk.Frame(self)
        panels.pack(fill="both", expand=True)
        panels.columnconfigure((0, 1), weight=1, uniform="panels")
        panels.rowconfigure(0, weight=1)
        self.input_panel = ZoomPanel(
            panels, "Input", lambda: self.session.input_image, registry, self._dispatch
        )
        self.output_panel = ZoomPanel(
            panels, "Output", lambda: self.session.output_image, registry, self._dispatch
        )
        self.input_panel.grid(row=0, column=0, sticky="nsew", padx=2, pady=2)
        self.output_panel.grid(row=0, column=1, sticky="nsew", padx=2, pady=2)

        status = ttk.Frame(self)
        status.pack(side=tk.BOTTOM, fill=tk.X)
        self.status_var = tk.StringVar(value="Ready.")
        ttk.Label(status, textvariable=self.status_var, relief=tk.SUNKEN, anchor="w").pack(
            side="left", fill="x", expand=True
        )
        self.progress = ttk.Progressbar(status, mode="indeterminate", length=120)

        self.protocol("WM_DELETE_WINDOW", self._quit)

    def _build_menu(self) -> None:
        menubar = tk.Menu(self)

        file_menu = tk.Menu(menubar, tearoff=False)
        file_menu.add_command(label="Open", command=self._open)
        file_menu.add_command(label="Save", command=self._save)
        file_menu.add_separator()
        file_menu.add_command(label="About Image Filterer", command=self._about)
        file_menu.add_command(label="Quit", command=self._quit)
        menubar.add_cascade(label="File", menu=file_menu)

        self.filter_menu = tk.Menu(menubar, tearoff=False)
        for strategy in Strategy:
            self.filter_menu.add_radiobutton(
                label=strategy.label, value=strategy.value, variable=self.strategy_var
            )
        self.filter_menu.add_separator()
        self.filter_menu.add_command(label="Iterations...", command=self._ask_iterations)
        self.filter_menu.add_separator()
        self.filter_menu.add_command(label="Apply Filter", command=self._apply)
        menubar.add_cascade(label="Filter", menu=self.filter_menu)

        self.config(menu=menubar)

    # --- threading ---
    def _dispatch(self, fn) -> None:
        """Runs `fn` on the tkinter thread."""
        self.after(0, fn)

    def _show_error(self, error: ImageFiltererError) -> None:
        messagebox.showerror(error.title, str(error), parent=self)

    def _set_busy(self, busy: bool) -> None:
        state = "disabled" if busy else "normal"
        self.filter_menu.entryconfigure("Apply Filter", state=state)
        if busy:
            self.config(cursor="watch")
            self.progress.pack(side="right", padx=5)
            self.progress.start(10)
        else:
            self.config(cursor="")
            self.progress.stop()
            self.progress.pack_forget()

    # --- commands ---

    def _open(self) -> None:
        path = filedialog.askopenfilename(title="Open image", filetypes=OPEN_FILETYPES)
        if not path:
            return
        try:
            self.session.open(path)
        except ImageFiltererError as e:
            self._show_error(e)
            return
        self._set_busy(False)
        self.status_var.set(f"Opened {path}")

    def _save(self) -> None:
        if self.session.output_image is None:
            self._show_error(NoOutputGeneratedError())
            return
        path = filedialog.asksaveasfilename(title="Save output", filetypes=SAVE_FILETYPES)
        if not path:
            return
        written = self._show_error_from(self.session.save, path)
        if written is not None:
            self.status_var.set(f"Saved {written}")

    def _show_error_from(self, command, *args):
        try:
            return command(*args)
        except ImageFiltererError as e:
            self._show_error(e)
            return None

    def _ask_iterations(self) -> None:
        dialog = tk.Toplevel(self)
        dialog.title("Iterations")
        dialog.transient(self)
        ttk.Label(dialog, text="Iterations").pack(side="left", padx=5, pady=5)
        ttk.Spinbox(
            dialog,
            from_=MIN_ITERATIONS,
            to=MAX_ITERATIONS,
            textvariable=self.iterations_var,
            width=5,
            state="readonly",
        ).pack(side="left", padx=5, pady=5)
        ttk.Button(dialog, text="OK", command=dialog.destroy).pack(side="left", padx=5, pady=5)

    def _apply(self) -> None:
        strategy = Strategy(self.strategy_var.get())
        iterations = self.iterations_var.get()
        if self.session.input_image is None:
            self._show_error(NoImageOpenedError())
            return

        self._set_busy(True)
        self.status_var.set("Processing... (pure Python, this can take a while)")

        try:
            self.session.apply(
                strategy,
                iterations,
                on_progress=self._on_progress,
                on_complete=self._on_complete,
                on_error=self._on_error,
            )
        except ImageFiltererError as e:
            self._set_busy(False)
            self._show_error(e)

    def _on_progress(self, image, index: int, count: int) -> None:
        self.status_var.set(f"Pass {index}/{count}")

    def _on_complete(self, image) -> None:
        self._set_busy(False)
        self.status_var.set("Done.")

    def _on_error(self, error: Exception) -> None:
        self._set_busy(False)
        self.status_var.set(f"Error: {error}")

    def _on_session_event(self, event: str, image) -> None:
        if event == "input":
            self.input_panel.reset(image)
        elif event == "output":
            if image is None:
                self.output_panel.clear()
            else:
                self.output_panel.refresh()

    def _about(self) -> None:
        messagebox.showinfo(
            "About Image Filterer",
            f"Image Filterer {__version__}\n\n3x3 blur filter with live progress.",
            parent=self,
        )

    def _quit(self) -> None:
        self.session.cancel()
        # cancel() waits for each task, keep it off the tkinter thread
        in_background(self.registry.shutdown)
        self.destroy()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    app = ImageFiltererApp()
    app.mainloop()


if __name__ == "__main__":
    main()
