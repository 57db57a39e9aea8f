"""
Filtro de Borramento (Filtro de Média 3x3 sobre cores ARGB).

REFERENCIAL TEÓRICO GERAL:
[1] Gonzalez, R. C., & Woods, R. E. (2002). "Digital Image Processing".
    Prentice Hall. (Capítulo 3: Intensity Transformations and Spatial Filtering).
[2] McDonnell, M. J. (1981). "Box-filtering techniques".
    Computer Graphics and Image Processing, 17(1), 65-70.

RESUMO:
O filtro de média substitui cada pixel pela média da sua vizinhança 3x3.
Diferente de uma convolução com kernel normalizado, a borda não é
preenchida: as amostras que cairiam fora da imagem são descartadas e a
média é feita sobre as restantes (ver neighborhood.py). Aplicado várias
vezes seguidas, o borramento fica progressivamente mais forte.
"""
from __future__ import annotations

from .averaging import resolve_averager
from .neighborhood import neighborhood
from .utils import RasterImage, zeros


def blur_filter(source: RasterImage, strategy) -> RasterImage:
    """
    Aplica uma passada do filtro na imagem inteira.

    COMPORTAMENTO:
    - Passada única: toda vizinhança é lida de `source`, nunca da saída em
      construção, então o resultado não depende da ordem de varredura.
    - Função pura: `source` não é alterada e a mesma entrada sempre gera a
      mesma saída.
    - Ponto fixo: uma imagem de cor uniforme volta inalterada.

    `strategy` é um membro de Strategy ou qualquer função que reduza uma
    lista de cores empacotadas a uma cor.
    """
    average = resolve_averager(strategy)
    width, height = source.width, source.height
    output = zeros(height, width, 0)

    for y in range(height):
        row = output[y]
        for x in range(width):
            row[x] = average(neighborhood(source, x, y))

    return RasterImage(width, height, output)
