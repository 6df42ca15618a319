"""
Business Logic Layer - Bithumb Signal Reporter
===============================================
Contiene la lógica de negocio central del sistema:
- Modelo de velas y parseo de datos del proveedor
- Ranking del universo de símbolos
- Detectores de patrones sobre ventanas de velas
- Combinación de señales (intersección, exclusión, unión)

Esta capa es independiente de los servicios de infraestructura.
"""

from .candle import Candle, CandleSeries, parse_float
from .ranking import MarketSnapshot, PriceInfo, rank_by_value, rank_by_return, find_common_symbols
from .detectors import (
    DetectorResult,
    continuous_rise,
    continuous_fall,
    continuous_green,
    continuous_red,
    low_to_high,
    bullish_engulfing,
    volume_spike,
    volume_spike_legacy,
    golden_cross,
)
from .combinators import intersect, exclude, union, combine_results

__all__ = [
    "Candle",
    "CandleSeries",
    "parse_float",
    "MarketSnapshot",
    "PriceInfo",
    "rank_by_value",
    "rank_by_return",
    "find_common_symbols",
    "DetectorResult",
    "continuous_rise",
    "continuous_fall",
    "continuous_green",
    "continuous_red",
    "low_to_high",
    "bullish_engulfing",
    "volume_spike",
    "volume_spike_legacy",
    "golden_cross",
    "intersect",
    "exclude",
    "union",
    "combine_results",
]
