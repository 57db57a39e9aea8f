"""
Headless application state: the opened image, the filter output and the
commands that change them (Open, Save, Apply).

Changing a value and telling observers about it are two separate steps
(_set_* then _notify) so the filter logic never touches the UI. Background
results reach the observers through `dispatch`, which the UI points at its
own thread; results of a run that has been replaced or cancelled are
dropped there.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

from .averaging import Strategy
from .errors import InvalidIterationCountError, NoImageOpenedError, NoOutputGeneratedError
from .image_io import PathLike, load_image, save_image
from .runner import FilterRun, IterativeFilterRunner
from .utils import RasterImage

logger = logging.getLogger(__name__)

MIN_ITERATIONS = 1
MAX_ITERATIONS = 10

Listener = Callable[[str, Optional[RasterImage]], None]


def validate_iterations(iterations: int) -> int:
    if not MIN_ITERATIONS <= iterations <= MAX_ITERATIONS:
        raise InvalidIterationCountError(iterations, MIN_ITERATIONS, MAX_ITERATIONS)
    return iterations


class FilterSession:
    def __init__(
        self,
        runner: Optional[IterativeFilterRunner] = None,
        loader: Callable[[PathLike], RasterImage] = load_image,
        saver: Callable[[RasterImage, PathLike], Path] = save_image,
        dispatch: Optional[Callable[[Callable[[], None]], None]] = None,
    ) -> None:
        self.runner = runner if runner is not None else IterativeFilterRunner()
        self.loader = loader
        self.saver = saver
        self.dispatch = dispatch or (lambda fn: fn())
        self._input: Optional[RasterImage] = None
        self._output: Optional[RasterImage] = None
        self._listeners: List[Listener] = []

    @property
    def input_image(self) -> Optional[RasterImage]:
        return self._input

    @property
    def output_image(self) -> Optional[RasterImage]:
        return self._output

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def open(self, path: PathLike) -> RasterImage:
        """Loads `path`; on failure the current image is left as it was."""
        image = self.loader(path)
        self.runner.cancel()
        self._set_input(image)
        self._set_output(None)
        self._notify("input", image)
        self._notify("output", None)
        return image

    def save(self, path: PathLike) -> Path:
        if self._output is None:
            raise NoOutputGeneratedError()
        return self.saver(self._output, path)

    def apply(
        self,
        strategy: Strategy,
        iterations: int,
        on_progress: Optional[Callable[[RasterImage, int, int], None]] = None,
        on_complete: Optional[Callable[[RasterImage], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> FilterRun:
        """
        Starts filtering the opened image in the background.

        Each pass replaces the output image; `on_progress`/`on_complete` are
        called after the observers, through `dispatch`.
        """
        if self._input is None:
            raise NoImageOpenedError()
        validate_iterations(iterations)

        run: Optional[FilterRun] = None

        def live() -> bool:
            # runner.current_run is set before the worker starts, so it
            # stands in for `run` until start() has returned.
            current = self.runner.current_run
            if current is None or (run is not None and current is not run):
                return False
            return not current.cancelled

        def progress(image: RasterImage, index: int, count: int) -> None:
            def publish():
                if not live():
                    return
                self._set_output(image)
                self._notify("output", image)
                self._notify("progress", image)
                if on_progress is not None:
                    on_progress(image, index, count)

            self.dispatch(publish)

        def complete(image: RasterImage) -> None:
            def publish():
                if not live():
                    return
                self._notify("complete", image)
                if on_complete is not None:
                    on_complete(image)

            self.dispatch(publish)

        def failed(error: Exception) -> None:
            if on_error is not None:
                self.dispatch(lambda: on_error(error))

        run = self.runner.start(self._input, strategy, iterations, progress, complete, failed)
        return run

    def cancel(self) -> None:
        self.runner.cancel()

    def _set_input(self, image: Optional[RasterImage]) -> None:
        self._input = image

    def _set_output(self, image: Optional[RasterImage]) -> None:
        self._output = image

    def _notify(self, event: str, image: Optional[RasterImage]) -> None:
        for listener in list(self._listeners):
            listener(event, image)
