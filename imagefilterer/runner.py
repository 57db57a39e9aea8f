"""
Iterative filter runner.

SUMMARY:
Applies the blur filter N times in a row on a background thread. Every pass
reads the previous pass's output, and each intermediate image is handed to
`on_progress(image, index, count)` so a caller can show live frames. When
all passes are done `on_complete(image)` is called once.

States of a run:

    IDLE -> RUNNING -> COMPLETED
                    -> CANCELLED   (cancel() was called)
                    -> FAILED      (a pass or a callback raised)

Cancellation is checked before and after every pass: a pass that already
started is finished, then the run stops without further callbacks.

The loop is submitted to a CancellableTaskRegistry under the runner's
identity, so starting a new run stops the previous one before its first
pass.
"""
from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from .blur_filter import blur_filter
from .tasks import CancellableTaskRegistry, TaskHandle
from .utils import RasterImage

logger = logging.getLogger(__name__)

APPLY_FILTER = "apply-filter"

ProgressCallback = Callable[[RasterImage, int, int], None]
CompleteCallback = Callable[[RasterImage], None]
ErrorCallback = Callable[[Exception], None]


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def finished(self) -> bool:
        return self in (RunState.COMPLETED, RunState.CANCELLED, RunState.FAILED)


class FilterRun:
    """One iterative application of the filter, from start to a final state."""

    def __init__(self, source: RasterImage, strategy, iteration_count: int) -> None:
        self.source = source
        self.strategy = strategy
        self.iteration_count = iteration_count
        self.iteration = 0
        self.state = RunState.IDLE
        self.result: Optional[RasterImage] = None
        self.error: Optional[Exception] = None
        self.handle: Optional[TaskHandle] = None
        self._cancel_requested = threading.Event()

    def __repr__(self) -> str:
        return f"FilterRun({self.state.value}, {self.iteration}/{self.iteration_count})"

    @property
    def cancelled(self) -> bool:
        handle = self.handle
        return self._cancel_requested.is_set() or (handle is not None and handle.cancelled)

    def cancel(self) -> None:
        """Requests cancellation; takes effect at the next pass boundary."""
        self._cancel_requested.set()
        handle = self.handle
        if handle is not None:
            handle.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Blocks until the worker thread ends; returns True if it did."""
        if self.handle is None:
            return True
        return self.handle.join(timeout)


class IterativeFilterRunner:
    def __init__(
        self,
        registry: Optional[CancellableTaskRegistry] = None,
        identity=APPLY_FILTER,
    ) -> None:
        self.registry = registry if registry is not None else CancellableTaskRegistry()
        self.identity = identity
        self.current_run: Optional[FilterRun] = None

    @property
    def state(self) -> RunState:
        if self.current_run is None:
            return RunState.IDLE
        return self.current_run.state

    def start(
        self,
        source: RasterImage,
        strategy,
        iteration_count: int,
        on_progress: Optional[ProgressCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> FilterRun:
        """
        Starts a run in the background and returns it immediately.

        A run still going under this runner's identity is cancelled; the new
        run's thread waits for it (bounded) before its first pass, so this
        never blocks the caller.
        """
        if iteration_count < 1:
            raise ValueError(f"iteration_count must be at least 1, got {iteration_count}")

        run = FilterRun(source, strategy, iteration_count)
        previous = self.current_run
        if previous is not None:
            previous.cancel()
        self.current_run = run
        run.state = RunState.RUNNING

        def work(handle: TaskHandle) -> None:
            run.handle = handle
            self._run(run, on_progress, on_complete, on_error)

        run.handle = self.registry.submit(self.identity, work)
        return run

    def cancel(self) -> None:
        if self.current_run is not None:
            self.current_run.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        if self.current_run is None:
            return True
        return self.current_run.wait(timeout)

    def _run(
        self,
        run: FilterRun,
        on_progress: Optional[ProgressCallback],
        on_complete: Optional[CompleteCallback],
        on_error: Optional[ErrorCallback],
    ) -> None:
        count = run.iteration_count
        logger.info(
            "Filtering %dx%d image, %d pass(es), strategy %s",
            run.source.width,
            run.source.height,
            count,
            getattr(run.strategy, "value", run.strategy),
        )
        current = run.source
        try:
            for index in range(1, count + 1):
                if run.cancelled:
                    break
                current = blur_filter(current, run.strategy)
                if run.cancelled:
                    break
                run.iteration = index
                logger.debug("Pass %d/%d done", index, count)
                if on_progress is not None:
                    on_progress(current, index, count)

            if run.cancelled:
                run.state = RunState.CANCELLED
                logger.info("Run cancelled after %d/%d pass(es)", run.iteration, count)
                return

            run.result = current
            if on_complete is not None:
                on_complete(current)
            run.state = RunState.COMPLETED
            logger.info("Run completed (%d pass(es))", count)
        except Exception as e:
            run.error = e
            run.state = RunState.FAILED
            if on_error is None:
                raise
            logger.exception("Run failed at pass %d/%d", run.iteration + 1, count)
            on_error(e)
