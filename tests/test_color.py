"""Tests the packed ARGB color codec."""
import random

from imagefilterer.color import ColorChannels, argb, compose, decompose


def test_decompose_channels():
    assert decompose(0x80FF4020) == ColorChannels(red=0xFF, green=0x40, blue=0x20, alpha=0x80)
    assert decompose(0) == ColorChannels(0, 0, 0, 0)
    assert decompose(0xFFFFFFFF) == ColorChannels(255, 255, 255, 255)


def test_compose_layout():
    assert compose(red=1, green=2, blue=3, alpha=4) == 0x04010203
    assert argb(255, 255, 0, 0) == 0xFFFF0000
    assert compose(0, 0, 0) == 0xFF000000


def test_compose_truncates_out_of_range_channels():
    assert compose(red=0x1FF, green=256, blue=-1, alpha=0) == 0x00FF00FF


def test_round_trip():
    rng = random.Random(1234)
    samples = [0, 1, 0xFF, 0xFF00, 0xFF0000, 0xFF000000, 0xFFFFFFFF]
    samples += [rng.getrandbits(32) for _ in range(500)]
    for color in samples:
        assert compose(*decompose(color)) == color
