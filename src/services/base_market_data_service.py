"""
Base Collaborator Protocols
============================
Define las interfaces que el compositor de reportes espera de sus
colaboradores externos: el proveedor de datos de mercado y el notificador.

Permiten probar el compositor con implementaciones en memoria sin
credenciales ni red.

Author: Bithumb Signal Reporter Team
"""

from typing import Dict, Protocol, Sequence

from src.logic.candle import CandleSeries
from src.logic.ranking import MarketSnapshot


class MarketDataService(Protocol):
    """
    Protocolo del proveedor de datos de mercado.

    Ningún método debe lanzar excepciones por errores de datos: los fallos
    se devuelven como variantes fallidas (status distinto de "0000").
    """

    async def fetch_snapshot(self) -> MarketSnapshot:
        """
        Obtiene el snapshot de precios de 24h del mercado completo.

        Returns:
            MarketSnapshot: Mapa símbolo -> PriceInfo con su status
        """
        ...

    async def fetch_all_candlesticks(
        self,
        symbols: Sequence[str],
        interval: str
    ) -> Dict[str, CandleSeries]:
        """
        Obtiene las velas de cada símbolo para un intervalo.

        ESTRUCTURA DE RETORNO:
        {
            "BTC": CandleSeries(status="0000", candles=[...]),
            "XYZ": CandleSeries(status="5600", error="..."),
        }

        Returns:
            Dict[str, CandleSeries]: Series por símbolo
        """
        ...


class Notifier(Protocol):
    """Protocolo del notificador (fire-and-forget)."""

    async def send(self, text: str, title: str = "") -> bool:
        """
        Entrega un bloque de texto formateado.

        Returns:
            bool: True si la entrega fue aceptada
        """
        ...
