"""
Single-slot cancellable background tasks.

SUMMARY:
A CancellableTaskRegistry maps an identity (any hashable: a string, a view
object...) to at most one TaskHandle. Submitting new work under an identity
that is still busy cancels the previous task and returns right away; the new
task's thread then waits for the previous one for a bounded time before
running the work, so two tasks of one identity never run side by side
(unless the previous one overstays the bound).

Cancellation is cooperative: work receives its handle and is expected to
check `handle.cancelled` at convenient points. A task that outlives the
bounded wait may still finish later, so consumers of its results must check
`registry.is_current(handle)` before applying them.
"""
from __future__ import annotations

import itertools
import logging
import threading
from typing import Any, Callable, Dict, Hashable, Optional

logger = logging.getLogger(__name__)

DEFAULT_STOP_TIMEOUT = 1.0


class TaskHandle:
    def __init__(
        self,
        identity: Hashable,
        generation: int,
        previous: Optional["TaskHandle"] = None,
    ) -> None:
        self.identity = identity
        self.generation = generation
        self.previous = previous
        self.error: Optional[BaseException] = None
        self._cancel_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else ("alive" if self.is_alive() else "done")
        return f"TaskHandle({self.identity!r}, generation={self.generation}, {state})"

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> None:
        self._cancel_event.set()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Waits for the work to finish; returns True if it has terminated."""
        if self._thread is None:
            return True
        if self._thread is not threading.current_thread():
            self._thread.join(timeout)
        return not self._thread.is_alive()

    def _start(self, work: Callable[["TaskHandle"], Any], stop_timeout: float) -> None:
        def target():
            previous, self.previous = self.previous, None
            if previous is not None and not previous.join(stop_timeout):
                logger.warning(
                    "%r did not stop within %.1fs; its results will be ignored",
                    previous,
                    stop_timeout,
                )
            try:
                work(self)
            except Exception as e:
                self.error = e
                logger.exception("Task %r (generation %d) failed", self.identity, self.generation)

        self._thread = threading.Thread(
            target=target, name=f"task-{self.identity!r}-{self.generation}", daemon=True
        )
        self._thread.start()


class CancellableTaskRegistry:
    def __init__(self, stop_timeout: float = DEFAULT_STOP_TIMEOUT) -> None:
        self.stop_timeout = stop_timeout
        self._handles: Dict[Hashable, TaskHandle] = {}
        self._generations = itertools.count(1)
        self._lock = threading.Lock()

    def submit(self, identity: Hashable, work: Callable[[TaskHandle], Any]) -> TaskHandle:
        """
        Schedules `work(handle)` under `identity` and returns without waiting.

        A previous task under the same identity is cancelled; the new thread
        waits for it (at most `stop_timeout` seconds) before calling `work`.
        Work is always called, so it can notice a cancellation that arrived
        while it was waiting and finish its own bookkeeping.
        """
        with self._lock:
            previous = self._handles.get(identity)
            if previous is not None:
                previous.cancel()
            handle = TaskHandle(identity, next(self._generations), previous)
            self._handles[identity] = handle
            handle._start(work, self.stop_timeout)
        logger.debug("Started %r", handle)
        return handle

    def cancel(self, identity: Hashable) -> bool:
        """
        Cancels the task under `identity` and clears the slot.

        Returns True when the task was seen to terminate (or nothing was
        running), False if it was still alive after `stop_timeout`. Blocks
        for up to `stop_timeout`; the lock is not held while waiting.
        """
        with self._lock:
            handle = self._handles.pop(identity, None)
        if handle is None:
            return True
        handle.cancel()
        terminated = handle.join(self.stop_timeout)
        if not terminated:
            logger.warning(
                "%r did not stop within %.1fs; its results will be ignored",
                handle,
                self.stop_timeout,
            )
        return terminated

    def get(self, identity: Hashable) -> Optional[TaskHandle]:
        return self._handles.get(identity)

    def is_current(self, handle: TaskHandle) -> bool:
        """True while `handle` is the uncancelled task of its identity."""
        return self._handles.get(handle.identity) is handle and not handle.cancelled

    def shutdown(self) -> None:
        with self._lock:
            identities = list(self._handles)
        for identity in identities:
            self.cancel(identity)
