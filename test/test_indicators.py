"""
Tests de Indicadores Técnicos
==============================
SMA, EMA sembrada y detección de cruces al alza.
"""

import math

import pytest

from src.utils.indicators import calculate_ema, calculate_sma, find_crossovers, has_golden_cross


# =============================================================================
# SMA
# =============================================================================

def test_sma_leading_positions_are_none():
    sma = calculate_sma([1, 2, 3, 4, 5], 3)

    assert len(sma) == 5
    assert sma[:2] == [None, None]
    assert sma[2:] == pytest.approx([2.0, 3.0, 4.0])


def test_sma_of_constant_series_is_constant():
    sma = calculate_sma([7.0] * 6, 4)
    assert sma[3:] == pytest.approx([7.0, 7.0, 7.0])


def test_sma_shorter_than_period_is_all_none():
    assert calculate_sma([1, 2], 5) == [None, None]


def test_sma_rejects_non_positive_period():
    with pytest.raises(ValueError):
        calculate_sma([1, 2, 3], 0)


# =============================================================================
# EMA
# =============================================================================

def test_ema_length_and_seed():
    values = [2, 4, 6, 8, 10]
    ema = calculate_ema(values, 3)

    assert len(ema) == len(values) - 3 + 1
    # Semilla: media simple de los 3 primeros
    assert ema[0] == pytest.approx(4.0)


def test_ema_recurrence():
    values = [2, 4, 6, 8, 10]
    ema = calculate_ema(values, 3)

    k = 2 / (3 + 1)
    expected = [4.0]
    for value in values[3:]:
        expected.append(value * k + expected[-1] * (1 - k))
    assert ema == pytest.approx(expected)


def test_ema_of_constant_series_is_constant():
    assert calculate_ema([3.0] * 8, 3) == pytest.approx([3.0] * 6)


def test_ema_too_short_returns_empty():
    assert calculate_ema([1.0, 2.0], 3) == []


def test_ema_matches_volume_example():
    ema = calculate_ema([10, 10, 10, 10, 10, 12, 13, 30], 3)
    assert ema == pytest.approx([10.0, 10.0, 10.0, 11.0, 12.0, 21.0])


# =============================================================================
# CRUCES
# =============================================================================

def test_no_crossover_when_short_always_above():
    short = [5.0, 6.0, 7.0, 8.0]
    long_ = [1.0, 1.0, 1.0, 1.0]
    assert find_crossovers(short, long_, lookback=4) == []


def test_single_crossover_index():
    short = [1.0, 1.0, 3.0, 4.0]
    long_ = [2.0, 2.0, 2.0, 2.0]
    assert find_crossovers(short, long_, lookback=4) == [2]


def test_crossover_from_equality_counts():
    short = [2.0, 2.0, 3.0]
    long_ = [2.0, 2.0, 2.0]
    assert find_crossovers(short, long_, lookback=3) == [2]


def test_crossover_outside_lookback_is_ignored():
    short = [1.0, 3.0, 3.0, 3.0, 3.0]
    long_ = [2.0, 2.0, 2.0, 2.0, 2.0]

    assert find_crossovers(short, long_, lookback=4) == [1]
    assert find_crossovers(short, long_, lookback=3) == []


def test_missing_values_never_cross():
    short = [None, None, 3.0, 4.0]
    long_ = [None, None, None, 2.0]
    assert find_crossovers(short, long_, lookback=4) == []

    assert find_crossovers([math.nan, 3.0], [1.0, 2.0], lookback=2) == []


def test_index_zero_is_never_a_crossover():
    assert find_crossovers([3.0], [1.0], lookback=5) == []


def test_crossover_rejects_misaligned_inputs():
    with pytest.raises(ValueError):
        find_crossovers([1.0, 2.0], [1.0], lookback=1)


def test_has_golden_cross(golden_cross_closes):
    closes = golden_cross_closes["cross"]

    assert has_golden_cross(closes, short_period=3, long_period=5, lookback=3)
    assert has_golden_cross(closes, short_period=3, long_period=5, lookback=2)
    assert not has_golden_cross(closes, short_period=3, long_period=5, lookback=1)
    assert not has_golden_cross(golden_cross_closes["flat"], 3, 5, 10)


def test_no_crossover_when_short_always_below():
    short = [1.0, 1.5, 2.0, 2.5, 3.0]
    long_ = [2.0, 2.5, 3.0, 3.5, 4.0]
    assert find_crossovers(short, long_, lookback=5) == []


def test_falling_prices_never_form_golden_cross():
    # En una caída constante la SMA corta queda siempre por debajo de la larga
    closes = [float(price) for price in range(30, 10, -1)]
    assert not has_golden_cross(closes, short_period=3, long_period=5, lookback=len(closes))
