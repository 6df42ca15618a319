"""
Tests de Ranking del Universo
==============================
"""

import math

import pytest

from src.logic.ranking import (
    MarketSnapshot,
    PriceInfo,
    find_common_symbols,
    rank_by_return,
    rank_by_value,
)


def test_rank_by_value_orders_descending(price_factory):
    prices = {
        "A": price_factory(1, 1, value=10),
        "B": price_factory(1, 1, value=30),
        "C": price_factory(1, 1, value=20),
    }
    assert rank_by_value(prices, limit=10) == ["B", "C", "A"]


def test_rank_by_value_respects_limit(price_factory):
    prices = {symbol: price_factory(1, 1, value=i) for i, symbol in enumerate("ABCDE")}
    assert rank_by_value(prices, limit=2) == ["E", "D"]
    assert rank_by_value(prices, limit=0) == []


def test_rank_by_value_ties_keep_snapshot_order(price_factory):
    prices = {
        "X": price_factory(1, 1, value=5),
        "Y": price_factory(1, 1, value=5),
        "Z": price_factory(1, 1, value=5),
    }
    assert rank_by_value(prices) == ["X", "Y", "Z"]


def test_rank_by_value_excludes_unparseable(price_factory):
    prices = {
        "A": price_factory(1, 1, value=math.nan),
        "B": price_factory(1, 1, value=3, units=math.nan),
        "C": price_factory(1, 1, value=1),
    }
    assert rank_by_value(prices) == ["C"]


def test_rank_by_return_orders_by_session_return(price_factory):
    prices = {
        "A": price_factory(100, 110, value=1),  # +10%
        "B": price_factory(100, 150, value=1),  # +50%
        "C": price_factory(100, 90, value=1),  # -10%
    }
    assert rank_by_return(prices) == ["B", "A", "C"]


def test_rank_by_return_excludes_zero_open_and_nan(price_factory):
    prices = {
        "ZERO": price_factory(0, 10, value=1),
        "NAN": price_factory(math.nan, 10, value=1),
        "OK": price_factory(10, 11, value=1),
    }
    assert rank_by_return(prices) == ["OK"]


def test_rank_rejects_negative_limit(price_factory):
    with pytest.raises(ValueError):
        rank_by_value({}, limit=-1)
    with pytest.raises(ValueError):
        rank_by_return({}, limit=-1)


def test_common_symbols_follow_base_order():
    by_value = ["A", "B", "C", "D"]
    by_return = ["D", "X", "B"]

    assert find_common_symbols(by_value, by_return, base="return") == ["D", "B"]
    assert find_common_symbols(by_value, by_return, base="value") == ["B", "D"]


def test_common_symbols_rejects_unknown_base():
    with pytest.raises(ValueError):
        find_common_symbols(["A"], ["A"], base="volume")


# =============================================================================
# SNAPSHOT
# =============================================================================

def test_snapshot_drops_non_object_entries():
    payload = {
        "status": "0000",
        "data": {
            "BTC": {
                "opening_price": "100",
                "closing_price": "110",
                "units_traded_24H": "5",
                "acc_trade_value_24H": "550",
            },
            "ETH": {
                "opening_price": "abc",
                "closing_price": "1",
                "units_traded_24H": "1",
                "acc_trade_value_24H": "1",
            },
            "date": "1700000000000",
        },
    }
    snapshot = MarketSnapshot.from_response(payload)

    assert snapshot.is_ok
    assert list(snapshot.prices) == ["BTC", "ETH"]
    assert snapshot.prices["BTC"] == PriceInfo(100.0, 110.0, 5.0, 550.0)
    assert math.isnan(snapshot.prices["ETH"].opening_price)


def test_snapshot_failure_status():
    snapshot = MarketSnapshot.from_response({"status": "5600", "message": "maintenance"})

    assert not snapshot.is_ok
    assert snapshot.status == "5600"
    assert snapshot.error == "maintenance"
    assert snapshot.prices == {}


def test_snapshot_malformed_payload():
    assert not MarketSnapshot.from_response({"status": "0000", "data": []}).is_ok
    assert not MarketSnapshot.from_response(None).is_ok
