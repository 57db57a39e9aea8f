"""Tests the zoom rescale helpers and ZoomView."""
import threading
import time

import numpy as np
import pytest

from imagefilterer.color import argb
from imagefilterer.tasks import CancellableTaskRegistry
from imagefilterer.utils import RasterImage
from imagefilterer.zoom import ZoomView, fit_zoom, rescale, scaled_size

TIMEOUT = 5


def test_fit_zoom():
    assert fit_zoom(100, 80) == 1.0
    assert fit_zoom(1200, 600) == 0.5
    assert fit_zoom(300, 1200, max_size=600) == 0.5


def test_scaled_size():
    assert scaled_size(10, 5, 2.0) == (20, 10)
    assert scaled_size(10, 5, 0.25) == (2, 1)
    assert scaled_size(3, 3, 0.01) == (1, 1)
    with pytest.raises(ValueError):
        scaled_size(3, 3, 0)


def test_rescale_keeps_colors_of_uniform_image():
    color = argb(255, 10, 20, 30)
    image = RasterImage.uniform(4, 2, color)
    scaled = rescale(image, 2.0)
    assert scaled.shape == (4, 8, 4)
    assert scaled.dtype == np.uint8
    expected = np.array([10, 20, 30, 255], dtype=np.int16)
    assert np.abs(scaled.astype(np.int16) - expected).max() <= 1

    half = rescale(RasterImage.uniform(8, 8, color), 0.5)
    assert half.shape == (4, 4, 4)
    assert (half == np.array([10, 20, 30, 255], dtype=np.uint8)).all()


def test_view_delivers_rescaled_image():
    image = RasterImage.uniform(10, 10, argb(255, 1, 2, 3))
    delivered = []
    done = threading.Event()

    def on_rescaled(array, zoom):
        delivered.append((array.shape, zoom))
        done.set()

    view = ZoomView(lambda: image, on_rescaled)
    view.zoom = 0.5
    assert done.wait(TIMEOUT)
    assert delivered == [((5, 5, 4), 0.5)]


def test_view_without_image_does_nothing():
    view = ZoomView(lambda: None, lambda array, zoom: pytest.fail("no image to rescale"))
    assert view.refresh() is None


def test_views_use_their_own_slots():
    registry = CancellableTaskRegistry()
    image = RasterImage.uniform(4, 4, 0)
    left = ZoomView(lambda: image, lambda a, z: None, registry=registry)
    right = ZoomView(lambda: image, lambda a, z: None, registry=registry)
    a = left.refresh()
    b = right.refresh()
    assert registry.get(left) is a
    assert registry.get(right) is b
    assert a.join(TIMEOUT) and b.join(TIMEOUT)


def test_rejects_non_positive_zoom():
    view = ZoomView(lambda: None, lambda a, z: None)
    with pytest.raises(ValueError):
        view.zoom = 0


def test_latest_refresh_wins():
    registry = CancellableTaskRegistry(stop_timeout=TIMEOUT)
    images = [RasterImage.uniform(4, 4, 0)]
    first_dispatch, release = threading.Event(), threading.Event()
    delivered = []

    def dispatch(fn):
        if not first_dispatch.is_set():
            first_dispatch.set()
            release.wait(TIMEOUT)
        fn()

    view = ZoomView(
        lambda: images[-1],
        lambda array, zoom: delivered.append(array.shape),
        registry=registry,
        dispatch=dispatch,
    )
    first = view.refresh()
    assert first_dispatch.wait(TIMEOUT)

    images.append(RasterImage.uniform(6, 2, 0))
    begin = time.monotonic()
    second = view.refresh()
    assert time.monotonic() - begin < 0.2

    release.set()
    assert first.join(TIMEOUT) and second.join(TIMEOUT)
    assert delivered == [(2, 6, 4)]
