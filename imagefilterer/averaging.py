"""
Estratégias de média usadas pelo filtro de borramento.

REFERENCIAL TEÓRICO:
[1] Gonzalez, R. C., & Woods, R. E. "Digital Image Processing".
    Seção: Smoothing Spatial Filters (Linear Filters).

RESUMO:
Uma estratégia reduz uma vizinhança (lista de cores empacotadas) a uma única
cor. Há duas estratégias e elas sempre produzem o mesmo resultado:

- packed_average (FAST): soma cada canal direto do inteiro empacotado, com
  deslocamentos e máscaras de bits.
- channel_average (SLOW): decompõe cada cor em um objeto ColorChannels e
  calcula integer_average de cada canal.

Ambas usam divisão inteira com truncamento por canal, e o alfa é tratado
como qualquer outro canal (sem alfa pré-multiplicado).
"""
from __future__ import annotations

from enum import Enum
from typing import Callable, Sequence

from .color import compose, decompose

Averager = Callable[[Sequence[int]], int]


def integer_average(values: Sequence[int]) -> int:
    """Média com truncamento: integer_average([4, 5]) == 4."""
    if not values:
        raise ValueError("Cannot average an empty sequence")
    return sum(values) // len(values)


def channel_average(colors: Sequence[int]) -> int:
    if not colors:
        raise ValueError("Cannot average an empty neighborhood")
    channels = [decompose(color) for color in colors]
    return compose(
        integer_average([c.red for c in channels]),
        integer_average([c.green for c in channels]),
        integer_average([c.blue for c in channels]),
        integer_average([c.alpha for c in channels]),
    )


def packed_average(colors: Sequence[int]) -> int:
    count = len(colors)
    if count == 0:
        raise ValueError("Cannot average an empty neighborhood")
    alpha = red = green = blue = 0
    for color in colors:
        alpha += (color >> 24) & 0xFF
        red += (color >> 16) & 0xFF
        green += (color >> 8) & 0xFF
        blue += color & 0xFF
    return (
        ((alpha // count) << 24)
        | ((red // count) << 16)
        | ((green // count) << 8)
        | (blue // count)
    )


class Strategy(Enum):
    FAST = "fast-packed"
    SLOW = "slow-channel-object"

    @property
    def averager(self) -> Averager:
        return _AVERAGERS[self]

    @property
    def label(self) -> str:
        return "Fast (packed integers)" if self is Strategy.FAST else "Slow (channel objects)"

    @classmethod
    def parse(cls, name: str) -> "Strategy":
        key = name.strip().lower()
        for strategy in cls:
            if key in (strategy.value, strategy.value.split("-")[0], strategy.name.lower()):
                return strategy
        choices = ", ".join(s.value for s in cls)
        raise ValueError(f"Unknown strategy {name!r} (expected one of: {choices})")


_AVERAGERS = {
    Strategy.FAST: packed_average,
    Strategy.SLOW: channel_average,
}


def resolve_averager(strategy) -> Averager:
    """Aceita um membro de Strategy ou qualquer função de média."""
    if isinstance(strategy, Strategy):
        return strategy.averager
    if callable(strategy):
        return strategy
    raise TypeError(f"Not an averaging strategy: {strategy!r}")
