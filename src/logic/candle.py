"""
Candle Model - Parsing & Single-Candle Logic
=============================================
Módulo que define la vela (OHLCV) y la serie de velas de un símbolo,
con el parseo de las filas de texto que entrega Bithumb.

Formato de fila del proveedor (todas las columnas como texto):
    [timestamp, open, close, high, low, volume]

Reglas de parseo:
- Un campo que no se puede convertir a float queda como NaN (nunca es fatal).
- NaN nunca satisface una comparación, así que una vela con campos inválidos
  jamás cumple una regla que asume datos válidos.

Author: Bithumb Signal Reporter Team
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from config import Config


# Columnas de la fila de velas de Bithumb
ROW_TIMESTAMP = 0
ROW_OPEN = 1
ROW_CLOSE = 2
ROW_HIGH = 3
ROW_LOW = 4
ROW_VOLUME = 5
ROW_SIZE = 6


def parse_float(value: Any) -> float:
    """
    Convierte un valor numérico codificado como texto a float.

    Args:
        value: Valor crudo (str, int, float, None...)

    Returns:
        float: Valor convertido o NaN si no es parseable
    """
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def get_candle_direction(open_price: float, close: float) -> str:
    """
    Determina la dirección de una vela basándose en apertura y cierre.

    Args:
        open_price: Precio de apertura
        close: Precio de cierre

    Returns:
        str: "VERDE" (alcista), "ROJA" (bajista), o "DOJI" (neutral o inválida)
    """
    if close > open_price:
        return "VERDE"
    elif close < open_price:
        return "ROJA"
    else:
        return "DOJI"


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class Candle:
    """Vela OHLCV de un intervalo."""
    timestamp: float
    open: float
    close: float
    high: float
    low: float
    volume: float

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Candle":
        """
        Construye una vela a partir de una fila posicional del proveedor.

        Raises:
            ValueError: Si la fila no tiene las 6 columnas esperadas
        """
        if not isinstance(row, (list, tuple)) or len(row) < ROW_SIZE:
            raise ValueError(f"candle row must have {ROW_SIZE} columns, got {row!r}")

        return cls(
            timestamp=parse_float(row[ROW_TIMESTAMP]),
            open=parse_float(row[ROW_OPEN]),
            close=parse_float(row[ROW_CLOSE]),
            high=parse_float(row[ROW_HIGH]),
            low=parse_float(row[ROW_LOW]),
            volume=parse_float(row[ROW_VOLUME]),
        )

    @property
    def direction(self) -> str:
        return get_candle_direction(self.open, self.close)

    @property
    def is_green(self) -> bool:
        return self.direction == "VERDE"

    @property
    def is_red(self) -> bool:
        return self.direction == "ROJA"


def is_bullish_engulfing(prev: Candle, current: Candle) -> bool:
    """
    Detecta el patrón Envolvente Alcista (Bullish Engulfing).

    CARACTERÍSTICAS:
    - Vela previa bajista (open > close)
    - Vela actual alcista (open < close)
    - Apertura actual por debajo del cierre previo
    - Cierre actual por encima de la apertura previa

    Args:
        prev: Vela anterior
        current: Vela más reciente

    Returns:
        bool: True si el cuerpo actual envuelve al previo
    """
    return (
        prev.is_red
        and current.is_green
        and current.open < prev.close
        and current.close > prev.open
    )


@dataclass
class CandleSeries:
    """
    Serie de velas de un símbolo e intervalo, más antigua primero.

    `status` es el código devuelto por el proveedor. Solo una serie con
    status de éxito ("0000") es confiable; las series fallidas no tienen velas
    y llevan el motivo en `error`.
    """
    symbol: str
    interval: str
    status: str
    candles: List[Candle] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == Config.SUCCESS_STATUS and self.error is None

    def __len__(self) -> int:
        return len(self.candles)

    def last(self, count: int) -> List[Candle]:
        """Últimas `count` velas (la última es la más reciente)."""
        if count <= 0:
            return []
        return self.candles[-count:]

    @property
    def closes(self) -> List[float]:
        return [candle.close for candle in self.candles]

    @property
    def volumes(self) -> List[float]:
        return [candle.volume for candle in self.candles]

    @classmethod
    def failed(
        cls,
        symbol: str,
        interval: str,
        reason: str,
        status: str = "ERROR"
    ) -> "CandleSeries":
        """Crea la variante fallida (sin velas)."""
        return cls(symbol=symbol, interval=interval, status=status, candles=[], error=reason)

    @classmethod
    def from_response(cls, symbol: str, interval: str, payload: Dict[str, Any]) -> "CandleSeries":
        """
        Construye la serie desde la respuesta JSON de /public/candlestick.

        Nunca lanza excepción: un status distinto de éxito o un payload
        malformado producen la variante fallida.

        Args:
            symbol: Símbolo (ej: "BTC")
            interval: Intervalo solicitado (ej: "1h")
            payload: JSON decodificado ({"status": ..., "data": [...]})
        """
        if not isinstance(payload, dict):
            return cls.failed(symbol, interval, "malformed payload")

        status = str(payload.get("status", ""))
        if status != Config.SUCCESS_STATUS:
            reason = payload.get("message") or f"provider status {status or 'missing'}"
            return cls.failed(symbol, interval, reason, status=status or "ERROR")

        rows = payload.get("data")
        if not isinstance(rows, list):
            return cls.failed(symbol, interval, "malformed payload: data is not a list", status=status)

        try:
            candles = [Candle.from_row(row) for row in rows]
        except (TypeError, ValueError, KeyError, IndexError) as e:
            return cls.failed(symbol, interval, f"malformed payload: {e}", status=status)

        return cls(symbol=symbol, interval=interval, status=status, candles=candles)
