"""
Vizinhança 3x3 (Neighborhood Processing).

REFERENCIAL TEÓRICO:
[1] Gonzalez, R. C., & Woods, R. E. "Digital Image Processing".
    (Capítulo 3: Spatial Filtering).

RESUMO:
O filtro lê, para cada pixel, o bloco 3x3 centrado nele. Pixels na borda da
imagem não têm vizinhos em um ou dois lados; em vez de preencher (padding)
ou repetir o pixel da extremidade, a linha e/ou coluna inteira que cai fora
da imagem é descartada:

    interior  -> 9 amostras
    borda     -> 6 amostras
    canto     -> 4 amostras

O pixel central sempre faz parte da vizinhança, que portanto nunca é vazia.
"""
from __future__ import annotations

from typing import List, Tuple

from .utils import RasterImage

OFFSETS = (-1, 0, 1)


def _axis_offsets(position: int, length: int) -> List[int]:
    offsets = list(OFFSETS)
    if position == 0:
        offsets.remove(-1)
    if position == length - 1:
        offsets.remove(1)
    return offsets


def neighborhood_offsets(image: RasterImage, x: int, y: int) -> List[Tuple[int, int]]:
    """Deslocamentos (dx, dy) mantidos para (x, y), em ordem de linhas."""
    if not image.contains(x, y):
        raise IndexError(f"({x}, {y}) is outside a {image.width}x{image.height} image")
    columns = _axis_offsets(x, image.width)
    return [(dx, dy) for dy in _axis_offsets(y, image.height) for dx in columns]


def neighborhood(image: RasterImage, x: int, y: int) -> List[int]:
    """
    Amostra a vizinhança 3x3 de (x, y), sem as linhas/colunas fora da imagem.

    A ordem é por linhas (de cima para baixo, da esquerda para a direita),
    para resultados reproduzíveis, embora a média não dependa dela.
    """
    rows = image.rows
    return [rows[y + dy][x + dx] for dx, dy in neighborhood_offsets(image, x, y)]
