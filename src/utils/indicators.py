"""
Technical Analysis Indicators
=============================
Funciones de utilidad para calcular indicadores técnicos usando pandas.

Convenciones de alineación:
- SMA devuelve la misma longitud que la entrada, con None en las primeras
  period-1 posiciones.
- EMA NO está alineada con la entrada: su índice 0 corresponde al elemento
  period-1 de la serie original (longitud = N - period + 1).
"""

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd


def _validate_period(period: int) -> None:
    if period <= 0:
        raise ValueError(f"period must be > 0, got {period}")


def calculate_sma(values: Sequence[float], period: int) -> List[Optional[float]]:
    """
    Calcula la Media Móvil Simple (SMA).

    Args:
        values: Serie de precios, más antiguo primero (típicamente Close)
        period: Periodo de la media (ej: 50)

    Returns:
        List[Optional[float]]: Misma longitud que values. None donde no hay
        suficientes datos (índices < period-1) o la ventana contiene NaN.
    """
    _validate_period(period)
    series = pd.Series(list(values), dtype=float)
    sma = series.rolling(window=period).mean()
    return [None if pd.isna(value) else float(value) for value in sma]


def calculate_ema(values: Sequence[float], period: int) -> List[float]:
    """
    Calcula la Media Móvil Exponencial (EMA) sembrada con una SMA.

    k = 2 / (period + 1). La semilla es la media simple de los primeros
    `period` valores; a partir de ahí ema[i] = v[i] * k + ema[i-1] * (1 - k).

    Args:
        values: Serie de valores, más antiguo primero
        period: Periodo de la EMA (ej: 3)

    Returns:
        List[float]: len(values) - period + 1 valores (vacía si no alcanza)
    """
    _validate_period(period)
    values = list(values)
    if len(values) < period:
        return []

    seed = pd.Series(values[:period], dtype=float).mean(skipna=False)
    seeded = pd.Series([seed] + values[period:], dtype=float)

    # ewm(adjust=False) con span=period usa alpha = 2 / (period + 1)
    ema = seeded.ewm(span=period, adjust=False).mean()
    return [float(value) for value in ema]


def find_crossovers(
    short_ma: Sequence[Optional[float]],
    long_ma: Sequence[Optional[float]],
    lookback: int
) -> List[int]:
    """
    Busca cruces al alza de la media corta sobre la media larga.

    Hay cruce en i cuando short[i] > long[i] y short[i-1] <= long[i-1].
    Solo se revisan los últimos `lookback` índices (nunca el índice 0).
    Un valor ausente (None/NaN) en cualquiera de los dos puntos anula el cruce.

    Args:
        short_ma: Media de periodo corto, alineada con la serie original
        long_ma: Media de periodo largo, alineada con la serie original
        lookback: Número de índices finales a revisar

    Returns:
        List[int]: Índices (sobre la serie original) donde hubo cruce
    """
    if len(short_ma) != len(long_ma):
        raise ValueError(
            f"moving averages must be aligned, got {len(short_ma)} and {len(long_ma)} values"
        )
    if lookback < 0:
        raise ValueError(f"lookback must be >= 0, got {lookback}")

    short = np.array([np.nan if v is None else v for v in short_ma], dtype=float)
    long_ = np.array([np.nan if v is None else v for v in long_ma], dtype=float)

    size = len(short)
    idx = np.arange(max(1, size - lookback), size)
    if idx.size == 0:
        return []

    crossed = (short[idx] > long_[idx]) & (short[idx - 1] <= long_[idx - 1])
    return [int(i) for i in idx[crossed]]


def has_golden_cross(
    closes: Sequence[float],
    short_period: int = 50,
    long_period: int = 200,
    lookback: int = 10
) -> bool:
    """
    Indica si hubo un cruce dorado (SMA corta cruza sobre SMA larga)
    en las últimas `lookback` velas.

    Args:
        closes: Precios de cierre, más antiguo primero
        short_period: Periodo de la SMA corta
        long_period: Periodo de la SMA larga
        lookback: Velas recientes a revisar

    Returns:
        bool: True si se detecta al menos un cruce
    """
    short_ma = calculate_sma(closes, short_period)
    long_ma = calculate_sma(closes, long_period)
    return bool(find_crossovers(short_ma, long_ma, lookback))
