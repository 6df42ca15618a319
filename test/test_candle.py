"""
Tests del Modelo de Velas
==========================
Parseo de filas del proveedor y reglas de una sola vela.
"""

import math

from src.logic.candle import Candle, CandleSeries, is_bullish_engulfing, parse_float

from conftest import make_candle


def test_parse_float_handles_text_and_garbage():
    assert parse_float("12.5") == 12.5
    assert parse_float(3) == 3.0
    assert math.isnan(parse_float("n/a"))
    assert math.isnan(parse_float(None))


def test_candle_from_row():
    candle = Candle.from_row([1700000000000, "100", "110", "115", "95", "3.5"])

    assert candle.open == 100.0
    assert candle.close == 110.0
    assert candle.high == 115.0
    assert candle.low == 95.0
    assert candle.volume == 3.5
    assert candle.is_green
    assert not candle.is_red


def test_unparseable_field_never_satisfies_rules():
    candle = Candle.from_row([0, "100", "oops", "0", "0", "0"])

    assert math.isnan(candle.close)
    assert not candle.is_green
    assert not candle.is_red
    assert candle.direction == "DOJI"


def test_bullish_engulfing_single_pair():
    prev = make_candle(10, 8)
    current = make_candle(7.5, 11)
    assert is_bullish_engulfing(prev, current)

    # El cuerpo no envuelve al previo
    assert not is_bullish_engulfing(prev, make_candle(8.5, 11))
    # Vela previa verde
    assert not is_bullish_engulfing(make_candle(8, 10), current)


def test_series_from_response_ok():
    payload = {
        "status": "0000",
        "data": [
            [1, "10", "11", "12", "9", "100"],
            [2, "11", "12", "13", "10", "150"],
        ],
    }
    series = CandleSeries.from_response("BTC", "1h", payload)

    assert series.is_ok
    assert len(series) == 2
    assert series.closes == [11.0, 12.0]
    assert series.volumes == [100.0, 150.0]
    assert [c.close for c in series.last(1)] == [12.0]
    assert series.last(0) == []


def test_series_from_response_error_status():
    series = CandleSeries.from_response("XYZ", "1h", {"status": "5500", "message": "Invalid Parameter"})

    assert not series.is_ok
    assert series.status == "5500"
    assert series.error == "Invalid Parameter"
    assert len(series) == 0


def test_series_from_response_malformed_rows():
    payload = {"status": "0000", "data": [[1, "10", "11"]]}
    series = CandleSeries.from_response("BTC", "1h", payload)

    assert not series.is_ok
    assert "malformed" in series.error


def test_series_from_response_non_list_data():
    series = CandleSeries.from_response("BTC", "1h", {"status": "0000", "data": {"a": 1}})
    assert not series.is_ok


def test_series_from_response_rejects_mapping_rows():
    row = {str(i): "1" for i in range(6)}
    series = CandleSeries.from_response("BTC", "1h", {"status": "0000", "data": [row]})

    assert not series.is_ok
    assert "malformed" in series.error
