"""
RESUMO:
Modelo de dados de baixo nível usado por todos os módulos:
1. RasterImage: grade largura x altura de cores ARGB empacotadas (lista de linhas).
2. Conversão entre RasterImage e buffers numpy (BGRA do OpenCV na entrada,
   RGBA para o Pillow e para exibição).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple

import numpy as np


@dataclass
class RasterImage:
    width: int
    height: int
    rows: List[List[int]]

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ValueError(f"Image must be at least 1x1, got {self.width}x{self.height}")
        if len(self.rows) != self.height:
            raise ValueError(f"Expected {self.height} rows, got {len(self.rows)}")
        for y, row in enumerate(self.rows):
            if len(row) != self.width:
                raise ValueError(f"Row {y} has {len(row)} pixels, expected {self.width}")

    @classmethod
    def blank(cls, width: int, height: int) -> "RasterImage":
        return cls.uniform(width, height, 0)

    @classmethod
    def uniform(cls, width: int, height: int, color: int) -> "RasterImage":
        return cls(width, height, zeros(height, width, color))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "RasterImage":
        if not rows:
            raise ValueError("Image must have at least one row")
        return cls(len(rows[0]), len(rows), [list(row) for row in rows])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def __getitem__(self, position: Tuple[int, int]) -> int:
        x, y = position
        return self.rows[y][x]

    def __setitem__(self, position: Tuple[int, int], color: int) -> None:
        x, y = position
        self.rows[y][x] = color

    def pixels(self) -> Iterator[int]:
        for row in self.rows:
            yield from row


def zeros(height: int, width: int, value: int = 0) -> List[List[int]]:
    return [[value for _ in range(width)] for _ in range(height)]


def to_list(image: np.ndarray) -> RasterImage:
    """
    Converte array BGRA (uint8, altura x largura x 4) do OpenCV para RasterImage.

    O empacotamento é feito em arrays uint32; o trabalho por pixel em Python
    se resume a uma chamada de tolist().
    """
    if image.ndim != 3 or image.shape[2] != 4:
        raise ValueError(f"Expected a BGRA array, got shape {image.shape}")
    channels = image.astype(np.uint32)
    packed = (
        (channels[..., 3] << 24)
        | (channels[..., 2] << 16)
        | (channels[..., 1] << 8)
        | channels[..., 0]
    )
    height, width = packed.shape
    return RasterImage(width, height, [[int(pixel) for pixel in row] for row in packed.tolist()])


def to_rgba_array(image: RasterImage) -> np.ndarray:
    """Converte RasterImage para array RGBA uint8 (altura x largura x 4)."""
    packed = np.array(image.rows, dtype=np.uint32)
    return np.dstack(
        [
            (packed >> 16) & 0xFF,
            (packed >> 8) & 0xFF,
            packed & 0xFF,
            (packed >> 24) & 0xFF,
        ]
    ).astype(np.uint8)
