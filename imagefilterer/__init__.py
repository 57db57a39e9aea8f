"""3x3 blur filter engine with cancellable, progress-reporting runs."""
from __future__ import annotations

from .averaging import Strategy, channel_average, integer_average, packed_average
from .blur_filter import blur_filter
from .color import ColorChannels, argb, compose, decompose
from .errors import (
    ImageFiltererError,
    ImageIOError,
    InvalidIterationCountError,
    NoImageOpenedError,
    NoOutputGeneratedError,
    UnsupportedImageFormatError,
)
from .image_io import load_image, save_image
from .neighborhood import neighborhood
from .runner import FilterRun, IterativeFilterRunner, RunState
from .session import FilterSession
from .tasks import CancellableTaskRegistry, TaskHandle
from .utils import RasterImage

__version__ = "1.0.0"

__all__ = [
    "CancellableTaskRegistry",
    "ColorChannels",
    "FilterRun",
    "FilterSession",
    "ImageFiltererError",
    "ImageIOError",
    "InvalidIterationCountError",
    "IterativeFilterRunner",
    "NoImageOpenedError",
    "NoOutputGeneratedError",
    "RasterImage",
    "RunState",
    "Strategy",
    "TaskHandle",
    "UnsupportedImageFormatError",
    "argb",
    "blur_filter",
    "channel_average",
    "compose",
    "decompose",
    "integer_average",
    "load_image",
    "neighborhood",
    "packed_average",
    "save_image",
]
