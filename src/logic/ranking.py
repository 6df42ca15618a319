"""
Ticker Ranking - Universe Selection
====================================
Funciones puras que ordenan un snapshot de tickers (24h) y devuelven una
lista acotada de símbolos.

Reglas comunes:
- Símbolos con campos numéricos no parseables se excluyen en silencio.
- El orden es estable: ante empate se respeta el orden del snapshot.

Author: Bithumb Signal Reporter Team
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config import Config
from src.logic.candle import parse_float
from src.logic.combinators import intersect


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class PriceInfo:
    """Estadísticas de 24h de un símbolo (valores ya parseados, NaN si inválidos)."""
    opening_price: float
    closing_price: float
    units_traded_24h: float
    acc_trade_value_24h: float

    @classmethod
    def from_raw(cls, raw: Dict[str, Any]) -> "PriceInfo":
        return cls(
            opening_price=parse_float(raw.get("opening_price")),
            closing_price=parse_float(raw.get("closing_price")),
            units_traded_24h=parse_float(raw.get("units_traded_24H")),
            acc_trade_value_24h=parse_float(raw.get("acc_trade_value_24H")),
        )


@dataclass
class MarketSnapshot:
    """Snapshot de precios de todo el mercado, en el orden del proveedor."""
    status: str
    prices: Dict[str, PriceInfo] = field(default_factory=dict)
    error: Optional[str] = None

    @property
    def is_ok(self) -> bool:
        return self.status == Config.SUCCESS_STATUS and self.error is None

    @classmethod
    def failed(cls, reason: str, status: str = "ERROR") -> "MarketSnapshot":
        return cls(status=status, prices={}, error=reason)

    @classmethod
    def from_response(cls, payload: Dict[str, Any]) -> "MarketSnapshot":
        """
        Construye el snapshot desde la respuesta de /public/ticker/ALL_{quote}.

        Las entradas de `data` que no son objetos (ej: "date") se descartan.
        """
        if not isinstance(payload, dict):
            return cls.failed("malformed payload")

        status = str(payload.get("status", ""))
        if status != Config.SUCCESS_STATUS:
            reason = payload.get("message") or f"provider status {status or 'missing'}"
            return cls.failed(reason, status=status or "ERROR")

        data = payload.get("data")
        if not isinstance(data, dict):
            return cls.failed("malformed payload: data is not an object", status=status)

        prices = {
            symbol: PriceInfo.from_raw(raw)
            for symbol, raw in data.items()
            if isinstance(raw, dict)
        }
        return cls(status=status, prices=prices)


# =============================================================================
# RANKING
# =============================================================================

def _validate_limit(limit: int) -> None:
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")


def rank_by_value(snapshot: Dict[str, PriceInfo], limit: int = 100) -> List[str]:
    """
    Ordena los símbolos por valor operado en 24h (descendente).

    Args:
        snapshot: Mapa símbolo -> PriceInfo
        limit: Máximo de símbolos a devolver

    Returns:
        List[str]: Top `limit` símbolos por acc_trade_value_24h
    """
    _validate_limit(limit)

    coins = [
        (symbol, info.acc_trade_value_24h)
        for symbol, info in snapshot.items()
        if math.isfinite(info.units_traded_24h) and math.isfinite(info.acc_trade_value_24h)
    ]

    # sorted() es estable también con reverse=True
    ranked = sorted(coins, key=lambda coin: coin[1], reverse=True)
    return [symbol for symbol, _ in ranked[:limit]]


def rank_by_return(snapshot: Dict[str, PriceInfo], limit: int = 100) -> List[str]:
    """
    Ordena los símbolos por rendimiento de la sesión (close - open) / open.

    Símbolos con apertura 0 o precios no parseables se excluyen.

    Args:
        snapshot: Mapa símbolo -> PriceInfo
        limit: Máximo de símbolos a devolver

    Returns:
        List[str]: Top `limit` símbolos por rendimiento
    """
    _validate_limit(limit)

    coins = []
    for symbol, info in snapshot.items():
        open_price, close_price = info.opening_price, info.closing_price
        if not (math.isfinite(open_price) and math.isfinite(close_price)) or open_price == 0:
            continue
        coins.append((symbol, (close_price - open_price) / open_price))

    ranked = sorted(coins, key=lambda coin: coin[1], reverse=True)
    return [symbol for symbol, _ in ranked[:limit]]


def find_common_symbols(
    by_value: List[str],
    by_return: List[str],
    base: str = "return"
) -> List[str]:
    """
    Símbolos presentes en ambos rankings.

    Args:
        by_value: Ranking por valor operado
        by_return: Ranking por rendimiento
        base: Ranking que define el orden del resultado ("value" o "return")

    Returns:
        List[str]: Símbolos comunes en el orden del ranking base
    """
    if base not in ("value", "return"):
        raise ValueError(f"base must be 'value' or 'return', got {base!r}")

    primary, secondary = (by_value, by_return) if base == "value" else (by_return, by_value)
    return intersect(primary, secondary)
