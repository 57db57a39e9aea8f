"""
Zoom rescaling for the image views.

Each ZoomView rescales its image in the background through the task
registry, under its own identity: changing the zoom again while a rescale
is running replaces that rescale, and results of replaced rescales are
dropped.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from .tasks import CancellableTaskRegistry, TaskHandle
from .utils import RasterImage, to_rgba_array

logger = logging.getLogger(__name__)

# Longest side, in pixels, of an image when a view first shows it
MAX_DIMENSION = 600


def fit_zoom(width: int, height: int, max_size: int = MAX_DIMENSION) -> float:
    """Zoom factor that makes the longer side fit in `max_size` (never enlarges)."""
    if max(width, height) <= max_size:
        return 1.0
    return max_size / max(width, height)


def scaled_size(width: int, height: int, zoom: float) -> Tuple[int, int]:
    if zoom <= 0:
        raise ValueError(f"Zoom must be positive, got {zoom}")
    return max(1, int(width * zoom)), max(1, int(height * zoom))


def rescale(image: RasterImage, zoom: float) -> np.ndarray:
    """Returns the image as an RGBA uint8 array scaled by `zoom`."""
    new_w, new_h = scaled_size(image.width, image.height, zoom)
    rgba = to_rgba_array(image)
    if (new_w, new_h) == (image.width, image.height):
        return rgba
    interpolation = cv2.INTER_AREA if zoom < 1 else cv2.INTER_CUBIC
    return cv2.resize(rgba, (new_w, new_h), interpolation=interpolation)


class ZoomView:
    """
    Display-independent part of a zoomable image panel.

    `image_provider` returns the unscaled image (or None when there is
    nothing to show); `on_rescaled(array, zoom)` receives each finished
    rescale through `dispatch`, which the UI uses to get back on its own
    thread.
    """

    def __init__(
        self,
        image_provider: Callable[[], Optional[RasterImage]],
        on_rescaled: Callable[[np.ndarray, float], None],
        registry: Optional[CancellableTaskRegistry] = None,
        dispatch: Optional[Callable[[Callable[[], None]], None]] = None,
    ) -> None:
        self.image_provider = image_provider
        self.on_rescaled = on_rescaled
        self.registry = registry if registry is not None else CancellableTaskRegistry()
        self.dispatch = dispatch or (lambda fn: fn())
        self._zoom = 1.0

    @property
    def zoom(self) -> float:
        return self._zoom

    @zoom.setter
    def zoom(self, value: float) -> None:
        if value <= 0:
            raise ValueError(f"Zoom must be positive, got {value}")
        self._zoom = value
        self.refresh()

    def refresh(self) -> Optional[TaskHandle]:
        """
        Rescales the current image at the current zoom, replacing any rescale
        in flight. Returns at once; call it from the thread that owns the
        image so requests are submitted in the order they were made.
        """
        image = self.image_provider()
        if image is None:
            return None
        zoom = self._zoom

        def work(handle: TaskHandle) -> None:
            if handle.cancelled:
                return
            scaled = rescale(image, zoom)
            if not self.registry.is_current(handle):
                logger.debug("Dropping stale rescale %r", handle)
                return

            def deliver() -> None:
                if self.registry.is_current(handle):
                    self.on_rescaled(scaled, zoom)

            self.dispatch(deliver)

        return self.registry.submit(self, work)

    def cancel(self) -> bool:
        return self.registry.cancel(self)
