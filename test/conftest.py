"""
Fixtures compartidas para los tests
====================================
Constructores de velas, series y snapshots en memoria (sin red).
"""

from typing import Dict, List, Optional, Sequence

import pytest

from src.logic.candle import Candle, CandleSeries
from src.logic.ranking import PriceInfo


def make_candle(
    open_price: float,
    close: float,
    volume: float = 1.0,
    timestamp: float = 0.0
) -> Candle:
    """Vela con high/low derivados de open/close."""
    return Candle(
        timestamp=timestamp,
        open=open_price,
        close=close,
        high=max(open_price, close),
        low=min(open_price, close),
        volume=volume,
    )


def make_series(
    symbol: str,
    closes: Sequence[float],
    opens: Optional[Sequence[float]] = None,
    volumes: Optional[Sequence[float]] = None,
    interval: str = "30m"
) -> CandleSeries:
    """
    Serie "0000" a partir de cierres.

    Si no se indican aperturas, cada vela abre en el cierre anterior
    (la primera abre en su propio cierre).
    """
    if opens is None:
        opens = [closes[0]] + list(closes[:-1])
    if volumes is None:
        volumes = [1.0] * len(closes)

    candles: List[Candle] = [
        make_candle(o, c, v, timestamp=float(i))
        for i, (o, c, v) in enumerate(zip(opens, closes, volumes))
    ]
    return CandleSeries(symbol=symbol, interval=interval, status="0000", candles=candles)


def make_price(
    opening: float,
    closing: float,
    value: float,
    units: float = 1.0
) -> PriceInfo:
    return PriceInfo(
        opening_price=opening,
        closing_price=closing,
        units_traded_24h=units,
        acc_trade_value_24h=value,
    )


@pytest.fixture
def series_factory():
    return make_series


@pytest.fixture
def price_factory():
    return make_price


@pytest.fixture
def golden_cross_closes() -> Dict[str, List[float]]:
    """
    Cierres para SMA3/SMA5: una caída seguida de un repunte produce un
    cruce al alza en el índice 8 (penúltima vela de 10).
    """
    return {
        "cross": [10, 9, 8, 7, 6, 5, 4, 4, 9, 9],
        "flat": [5.0] * 10,
    }
