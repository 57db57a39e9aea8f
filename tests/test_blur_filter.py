"""Tests a single blur pass."""
import random

from imagefilterer.averaging import Strategy, channel_average
from imagefilterer.blur_filter import blur_filter
from imagefilterer.color import argb
from imagefilterer.utils import RasterImage


def random_image(width, height, seed=0):
    rng = random.Random(seed)
    return RasterImage.from_rows(
        [[rng.getrandbits(32) for _ in range(width)] for _ in range(height)]
    )


def test_uniform_image_is_a_fixed_point():
    color = argb(200, 10, 120, 250)
    image = RasterImage.uniform(6, 4, color)
    for strategy in Strategy:
        assert blur_filter(image, strategy) == image


def test_output_is_a_new_image_and_source_is_untouched():
    image = random_image(5, 5)
    snapshot = [list(row) for row in image.rows]
    result = blur_filter(image, Strategy.FAST)
    assert result is not image
    assert result.size == image.size
    assert image.rows == snapshot


def test_reads_only_from_source():
    # A bright pixel in the corner spreads into its 2x2 neighborhood only.
    black = argb(255, 0, 0, 0)
    image = RasterImage.uniform(3, 3, black)
    image[0, 0] = argb(255, 255, 255, 255)
    result = blur_filter(image, channel_average)
    assert result[0, 0] == argb(255, 63, 63, 63)
    assert result[1, 0] == argb(255, 42, 42, 42)
    assert result[1, 1] == argb(255, 28, 28, 28)
    assert result[2, 2] == black


def test_strategies_give_identical_images():
    image = random_image(7, 5, seed=3)
    assert blur_filter(image, Strategy.FAST) == blur_filter(image, Strategy.SLOW)


def test_pure():
    image = random_image(4, 4, seed=11)
    assert blur_filter(image, Strategy.SLOW) == blur_filter(image, Strategy.SLOW)
