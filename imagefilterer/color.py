"""
Codificação de cores ARGB empacotadas.

RESUMO:
Cada pixel de uma RasterImage é um único inteiro de 32 bits com quatro
canais de 8 bits:

    bits 24-31  alfa
    bits 16-23  vermelho
    bits  8-15  verde
    bits  0-7   azul

decompose() e compose() convertem entre a forma empacotada e os canais
separados. compose(*decompose(c)) == c para todo c de 32 bits.
"""
from __future__ import annotations

from typing import NamedTuple

CHANNEL_MASK = 0xFF
COLOR_MASK = 0xFFFFFFFF

ALPHA_SHIFT = 24
RED_SHIFT = 16
GREEN_SHIFT = 8
BLUE_SHIFT = 0


class ColorChannels(NamedTuple):
    red: int
    green: int
    blue: int
    alpha: int


def decompose(color: int) -> ColorChannels:
    """Separa uma cor empacotada em seus canais."""
    color &= COLOR_MASK
    return ColorChannels(
        red=(color >> RED_SHIFT) & CHANNEL_MASK,
        green=(color >> GREEN_SHIFT) & CHANNEL_MASK,
        blue=(color >> BLUE_SHIFT) & CHANNEL_MASK,
        alpha=(color >> ALPHA_SHIFT) & CHANNEL_MASK,
    )


def compose(red: int, green: int, blue: int, alpha: int = 255) -> int:
    """
    Empacota quatro canais em uma cor.

    Cada canal mantém apenas seus 8 bits menos significativos: valores fora
    da faixa são truncados, nunca rejeitados. Quem precisar de clipping deve
    limitar os valores antes.
    """
    return (
        ((alpha & CHANNEL_MASK) << ALPHA_SHIFT)
        | ((red & CHANNEL_MASK) << RED_SHIFT)
        | ((green & CHANNEL_MASK) << GREEN_SHIFT)
        | ((blue & CHANNEL_MASK) << BLUE_SHIFT)
    )


def argb(alpha: int, red: int, green: int, blue: int) -> int:
    return compose(red, green, blue, alpha)
