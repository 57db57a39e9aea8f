"""Tests the single-slot cancellable task registry."""
import threading
import time

from imagefilterer.tasks import CancellableTaskRegistry

TIMEOUT = 5


def wait_for_cancel(handle):
    while not handle.cancelled:
        handle._cancel_event.wait(0.01)


def test_second_submit_stops_the_first():
    registry = CancellableTaskRegistry()
    started = threading.Event()
    applied = []

    def slow(handle):
        started.set()
        wait_for_cancel(handle)
        if registry.is_current(handle):
            applied.append("first")

    def fast(handle):
        if registry.is_current(handle):
            applied.append("second")

    first = registry.submit("pane", slow)
    assert started.wait(TIMEOUT)
    second = registry.submit("pane", fast)

    assert first.cancelled
    assert second.join(TIMEOUT)
    assert not first.is_alive()
    assert applied == ["second"]
    assert registry.get("pane") is second
    assert second.generation > first.generation


def test_late_result_is_ignored_after_bounded_wait():
    registry = CancellableTaskRegistry(stop_timeout=0.05)
    release = threading.Event()
    applied = []

    def stubborn(handle):
        release.wait(TIMEOUT)
        if registry.is_current(handle):
            applied.append("stale")

    first = registry.submit("filter", stubborn)
    second = registry.submit("filter", lambda handle: applied.append("fresh"))
    assert first.is_alive()
    assert not registry.is_current(first)

    release.set()
    assert first.join(TIMEOUT)
    assert second.join(TIMEOUT)
    assert applied == ["fresh"]


def test_cancel_clears_the_slot():
    registry = CancellableTaskRegistry()
    handle = registry.submit("zoom", wait_for_cancel)
    assert registry.is_current(handle)
    assert registry.cancel("zoom") is True
    assert registry.get("zoom") is None
    assert not handle.is_alive()
    assert not registry.is_current(handle)


def test_cancel_unknown_identity():
    assert CancellableTaskRegistry().cancel("nothing") is True


def test_cancel_reports_timeout():
    registry = CancellableTaskRegistry(stop_timeout=0.05)
    release = threading.Event()
    handle = registry.submit("stuck", lambda h: release.wait(TIMEOUT))
    assert registry.cancel("stuck") is False
    assert registry.get("stuck") is None
    release.set()
    assert handle.join(TIMEOUT)


def test_identities_are_independent():
    registry = CancellableTaskRegistry()
    left = registry.submit("left", wait_for_cancel)
    right = registry.submit("right", wait_for_cancel)
    assert registry.is_current(left) and registry.is_current(right)
    registry.shutdown()
    assert not left.is_alive() and not right.is_alive()
    assert registry.get("left") is None and registry.get("right") is None


def test_work_error_is_captured():
    registry = CancellableTaskRegistry()

    def broken(handle):
        raise RuntimeError("boom")

    handle = registry.submit("broken", broken)
    assert handle.join(TIMEOUT)
    assert isinstance(handle.error, RuntimeError)


def test_submit_returns_while_previous_task_is_stopping():
    registry = CancellableTaskRegistry(stop_timeout=TIMEOUT)
    release = threading.Event()
    second_started = threading.Event()

    first = registry.submit("filter", lambda handle: release.wait(TIMEOUT))
    begin = time.monotonic()
    second = registry.submit("filter", lambda handle: second_started.set())
    assert time.monotonic() - begin < 0.2

    # the new work only runs once the previous task has ended
    assert not second_started.wait(0.1)
    release.set()
    assert second_started.wait(TIMEOUT)
    assert first.join(TIMEOUT) and second.join(TIMEOUT)


def test_other_identities_are_not_held_up_by_a_replacement():
    registry = CancellableTaskRegistry()
    release = threading.Event()
    registry.submit("filter", lambda handle: release.wait(TIMEOUT))
    replacing = threading.Thread(
        target=lambda: registry.submit("filter", lambda handle: None)
    )
    replacing.start()

    begin = time.monotonic()
    zoom_done = threading.Event()
    zoom = registry.submit("zoom-pane", lambda handle: zoom_done.set())
    assert time.monotonic() - begin < 0.2
    assert zoom_done.wait(TIMEOUT)

    release.set()
    replacing.join(TIMEOUT)
    assert zoom.join(TIMEOUT)


def test_cancelled_before_running_still_calls_work():
    registry = CancellableTaskRegistry(stop_timeout=TIMEOUT)
    release = threading.Event()
    seen = []
    registry.submit("slot", lambda handle: release.wait(TIMEOUT))
    second = registry.submit("slot", lambda handle: seen.append(handle.cancelled))
    registry.submit("slot", lambda handle: None)
    release.set()
    assert second.join(TIMEOUT)
    assert seen == [True]
