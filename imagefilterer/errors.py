"""Errors reported to the user. Cancellation is not an error and has no class here."""
from __future__ import annotations


class ImageFiltererError(Exception):
    """Base class; `title` is the caption of the notice shown to the user."""

    title = "Error"


class NoImageOpenedError(ImageFiltererError):
    title = "No image opened"

    def __init__(self, message: str = "Open an image first.") -> None:
        super().__init__(message)


class NoOutputGeneratedError(ImageFiltererError):
    title = "No output generated"

    def __init__(self, message: str = "Apply a filter before saving.") -> None:
        super().__init__(message)


class InvalidIterationCountError(ImageFiltererError, ValueError):
    title = "Invalid iteration count"

    def __init__(self, count: int, minimum: int, maximum: int) -> None:
        super().__init__(f"Iterations must be between {minimum} and {maximum}, got {count}.")
        self.count = count


class ImageIOError(ImageFiltererError, OSError):
    title = "Image I/O error"


class UnsupportedImageFormatError(ImageIOError):
    title = "Unsupported image"
