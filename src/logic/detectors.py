"""
Pattern Detectors - Candle Window Rules
========================================
Detectores independientes que filtran un universo de símbolos según una
regla evaluada sobre las velas más recientes de cada símbolo.

Contrato común:
    detector(universe, candles, parámetro) -> DetectorResult

- `universe`: símbolos ordenados por ranking (el orden se conserva).
- `candles`: mapa símbolo -> CandleSeries.
- Un símbolo sin serie, con serie fallida o con menos velas de las que
  necesita la ventana se omite en silencio (log DEBUG).
- Un error al evaluar un símbolo se registra y se omite solo ese símbolo.
- Un error fuera de la evaluación por símbolo degrada la sección completa a
  DetectorResult.failure(...) en lugar de propagar la excepción.

Ventanas (en velas):
    continuous_rise    n + 1  (n comparaciones)
    continuous_fall    n      (n - 1 comparaciones)
    continuous_green   n
    continuous_red     n
    low_to_high        n
    bullish_engulfing  2
    volume_spike       8
    golden_cross       long_period + 1

Author: Bithumb Signal Reporter Team
"""

from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Optional, Sequence

import numpy as np

from src.logic.candle import CandleSeries, is_bullish_engulfing
from src.utils.indicators import calculate_ema, has_golden_cross
from src.utils.logger import get_logger, log_exception


logger = get_logger(__name__)


# Parámetros del detector de volumen
VOLUME_WINDOW = 8  # Velas analizadas
VOLUME_EMA_PERIOD = 3  # Periodo de la EMA usada como línea base
VOLUME_RECENT = 3  # Velas finales que pueden disparar la señal
VOLUME_LEGACY_BASE = 5  # Velas iniciales promediadas (variante legacy)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class DetectorResult:
    """
    Resultado de un detector.

    `error` es None si el detector terminó; en caso contrario contiene el
    motivo del fallo y `symbols` está vacío.
    """
    name: str
    symbols: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, name: str, symbols: Sequence[str]) -> "DetectorResult":
        return cls(name=name, symbols=list(symbols))

    @classmethod
    def failure(cls, name: str, reason: str) -> "DetectorResult":
        return cls(name=name, symbols=[], error=reason)


SeriesPredicate = Callable[[CandleSeries], bool]


# =============================================================================
# HARNESS
# =============================================================================

def _validate_count(name: str, value: int, minimum: int = 1) -> None:
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")


def _skip_reason(series: Optional[CandleSeries], min_candles: int) -> Optional[str]:
    """Motivo por el que una serie no es utilizable, o None si lo es."""
    if series is None:
        return "sin datos"
    if not series.is_ok:
        return f"status {series.status} ({series.error})"
    if len(series) < min_candles:
        return f"{len(series)} velas < {min_candles} requeridas"
    return None


def _matching_symbols(
    name: str,
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    min_candles: int,
    predicate: SeriesPredicate
) -> List[str]:
    """Evalúa `predicate` símbolo a símbolo, en el orden del universo."""
    matched: List[str] = []

    for symbol in universe:
        try:
            series = candles.get(symbol)
            reason = _skip_reason(series, min_candles)
            if reason:
                logger.debug(f"[{name}] {symbol} omitido: {reason}")
                continue

            if predicate(series):
                matched.append(symbol)
        except Exception as e:
            log_exception(logger, f"[{name}] Error evaluando {symbol}", e)

    return matched


def _detect(name: str, compute: Callable[[], List[str]]) -> DetectorResult:
    """Ejecuta un detector sin dejar escapar excepciones."""
    try:
        symbols = compute()
    except Exception as e:
        log_exception(logger, f"❌ Detector {name} falló", e)
        return DetectorResult.failure(name, f"{type(e).__name__}: {e}")

    logger.info(f"🔎 {name}: {len(symbols)} símbolos {symbols}")
    return DetectorResult.success(name, symbols)


# =============================================================================
# STREAK DETECTORS
# =============================================================================

def _strictly_monotonic(values: Sequence[float], rising: bool) -> bool:
    pairs = zip(values, values[1:])
    if rising:
        return all(current > prev for prev, current in pairs)
    return all(current < prev for prev, current in pairs)


def continuous_rise(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    n: int = 3
) -> DetectorResult:
    """
    Cierres estrictamente crecientes en las últimas n + 1 velas.

    Args:
        universe: Símbolos a evaluar
        candles: Series por símbolo
        n: Subidas consecutivas requeridas
    """
    _validate_count("n", n)

    def rule(series: CandleSeries) -> bool:
        closes = [candle.close for candle in series.last(n + 1)]
        return _strictly_monotonic(closes, rising=True)

    return _detect(
        "continuous_rise",
        lambda: _matching_symbols("continuous_rise", universe, candles, n + 1, rule)
    )


def continuous_fall(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    n: int = 3
) -> DetectorResult:
    """
    Cierres estrictamente decrecientes en las últimas n velas.

    NOTA: la ventana es n (no n + 1 como en continuous_rise).
    """
    _validate_count("n", n)

    def rule(series: CandleSeries) -> bool:
        closes = [candle.close for candle in series.last(n)]
        return _strictly_monotonic(closes, rising=False)

    return _detect(
        "continuous_fall",
        lambda: _matching_symbols("continuous_fall", universe, candles, n, rule)
    )


def continuous_green(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    n: int = 3
) -> DetectorResult:
    """Las últimas n velas son verdes (close > open)."""
    _validate_count("n", n)

    def rule(series: CandleSeries) -> bool:
        return all(candle.is_green for candle in series.last(n))

    return _detect(
        "continuous_green",
        lambda: _matching_symbols("continuous_green", universe, candles, n, rule)
    )


def continuous_red(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    n: int = 3
) -> DetectorResult:
    """Las últimas n velas son rojas (close < open)."""
    _validate_count("n", n)

    def rule(series: CandleSeries) -> bool:
        return all(candle.is_red for candle in series.last(n))

    return _detect(
        "continuous_red",
        lambda: _matching_symbols("continuous_red", universe, candles, n, rule)
    )


def low_to_high(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    n: int = 5
) -> DetectorResult:
    """El cierre de la última vela supera al de la primera de la ventana de n velas."""
    _validate_count("n", n, minimum=2)

    def rule(series: CandleSeries) -> bool:
        window = series.last(n)
        return window[-1].close > window[0].close

    return _detect(
        "low_to_high",
        lambda: _matching_symbols("low_to_high", universe, candles, n, rule)
    )


def bullish_engulfing(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries]
) -> DetectorResult:
    """Envolvente alcista entre las dos últimas velas."""

    def rule(series: CandleSeries) -> bool:
        prev, current = series.last(2)
        return is_bullish_engulfing(prev, current)

    return _detect(
        "bullish_engulfing",
        lambda: _matching_symbols("bullish_engulfing", universe, candles, 2, rule)
    )


# =============================================================================
# VOLUME SPIKE
# =============================================================================

def has_volume_spike(volumes: Sequence[float], factor: float = 1.5) -> bool:
    """
    Detecta un pico de volumen con línea base EMA(3).

    Para cada una de las últimas 3 velas de la ventana, la línea base es el
    último valor de la EMA(3) calculada hasta la vela anterior. Hay pico si
    alguno de esos volúmenes supera estrictamente factor * línea base.

    Args:
        volumes: Volúmenes de la ventana (8 velas, más antiguo primero)
        factor: Multiplicador sobre la línea base

    Returns:
        bool: True si hay pico
    """
    ema = calculate_ema(volumes, VOLUME_EMA_PERIOD)

    for index in range(len(volumes) - VOLUME_RECENT, len(volumes)):
        # ema[k] cubre volumes[:k + VOLUME_EMA_PERIOD]
        baseline_index = index - VOLUME_EMA_PERIOD
        if baseline_index < 0:
            continue
        if volumes[index] > ema[baseline_index] * factor:
            return True
    return False


def has_volume_spike_legacy(volumes: Sequence[float], factor: float = 1.5) -> bool:
    """
    Variante legacy: línea base = media de los primeros 5 volúmenes.

    Se conserva para paridad con reportes anteriores.
    """
    baseline = float(np.mean(volumes[:VOLUME_LEGACY_BASE]))
    return any(volume > baseline * factor for volume in volumes[-VOLUME_RECENT:])


def _volume_spike(
    name: str,
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    factor: float,
    spike_rule: Callable[[Sequence[float], float], bool]
) -> DetectorResult:
    if factor <= 0:
        raise ValueError(f"factor must be > 0, got {factor}")

    def window_volumes(series: CandleSeries) -> List[float]:
        return [candle.volume for candle in series.last(VOLUME_WINDOW)]

    def compute() -> List[str]:
        matched = _matching_symbols(
            name, universe, candles, VOLUME_WINDOW,
            lambda series: spike_rule(window_volumes(series), factor)
        )
        peak = {symbol: float(np.nanmax(window_volumes(candles[symbol]))) for symbol in matched}
        # Orden por volumen máximo de la ventana (estable ante empates)
        return sorted(matched, key=lambda symbol: peak[symbol], reverse=True)

    return _detect(name, compute)


def volume_spike(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    factor: float = 1.5
) -> DetectorResult:
    """
    Símbolos con pico de volumen (línea base EMA) en las últimas 8 velas,
    ordenados por volumen máximo de la ventana (descendente).
    """
    return _volume_spike("volume_spike", universe, candles, factor, has_volume_spike)


def volume_spike_legacy(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    factor: float = 1.5
) -> DetectorResult:
    """Igual que volume_spike pero con la línea base de media simple (legacy)."""
    return _volume_spike("volume_spike_legacy", universe, candles, factor, has_volume_spike_legacy)


# =============================================================================
# GOLDEN CROSS
# =============================================================================

def golden_cross(
    universe: Sequence[str],
    candles: Mapping[str, CandleSeries],
    lookback: int = 10,
    short_period: int = 50,
    long_period: int = 200
) -> DetectorResult:
    """
    Cruce dorado (SMA corta cruza sobre SMA larga) en las últimas `lookback` velas.

    Args:
        universe: Símbolos a evaluar
        candles: Series por símbolo
        lookback: Velas recientes donde buscar el cruce
        short_period: Periodo de la SMA corta
        long_period: Periodo de la SMA larga
    """
    _validate_count("lookback", lookback)
    _validate_count("short_period", short_period)
    if long_period <= short_period:
        raise ValueError(f"long_period ({long_period}) must be > short_period ({short_period})")

    def rule(series: CandleSeries) -> bool:
        return has_golden_cross(series.closes, short_period, long_period, lookback)

    name = "golden_cross"
    return _detect(
        name,
        lambda: _matching_symbols(name, universe, candles, long_period + 1, rule)
    )
