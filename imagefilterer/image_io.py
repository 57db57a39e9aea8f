"""
Loading and saving images.

Images are decoded with OpenCV (any of grayscale, BGR or BGRA, 8 or 16 bit)
and normalized to packed ARGB. Output is always written as PNG with Pillow.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image

from .errors import ImageIOError, UnsupportedImageFormatError
from .utils import RasterImage, to_list, to_rgba_array

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg"}
OUTPUT_EXTENSION = ".png"


def is_supported(path: PathLike) -> bool:
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def png_path(path: PathLike) -> Path:
    """Appends ".png" unless the name already ends with it (any case)."""
    path = Path(path)
    if path.name.lower().endswith(OUTPUT_EXTENSION):
        return path
    return path.with_name(path.name + OUTPUT_EXTENSION)


def _to_bgra(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ImageIOError(f"Unsupported pixel depth: {image.dtype}")

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    channels = image.shape[2]
    if channels == 1:
        return cv2.cvtColor(image[..., 0], cv2.COLOR_GRAY2BGRA)
    if channels == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    if channels == 4:
        return image
    raise ImageIOError(f"Unsupported channel count: {channels}")


def load_image(path: PathLike) -> RasterImage:
    path = Path(path)
    if not is_supported(path):
        raise UnsupportedImageFormatError(
            f"{path.name}: only {', '.join(sorted(SUPPORTED_EXTENSIONS))} images can be opened."
        )
    # cv2.imread returns None instead of raising
    image = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ImageIOError(f"Could not read image {path}")

    raster = to_list(_to_bgra(image))
    logger.info("Loaded %s (%dx%d)", path, raster.width, raster.height)
    return raster


def to_pil_image(image: RasterImage) -> Image.Image:
    return Image.frombytes("RGBA", image.size, to_rgba_array(image).tobytes())


def save_image(image: RasterImage, path: PathLike) -> Path:
    """Writes `image` as PNG; returns the path actually written."""
    target = png_path(path)
    try:
        to_pil_image(image).save(target, format="PNG")
    except (OSError, ValueError) as e:
        raise ImageIOError(f"Could not save {target}: {e}") from e
    logger.info("Saved %s", target)
    return target
