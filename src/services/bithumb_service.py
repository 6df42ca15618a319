"""
Bithumb Service - Market Data & Account Client
===============================================
Cliente asíncrono (aiohttp) para la API REST de Bithumb.

Endpoints públicos:
- /public/ticker/ALL_{quote}        Snapshot de precios de todo el mercado
- /public/candlestick/{sym}_{quote}/{interval}
- /public/orderbook/{ticker}
- /public/transaction_history/{ticker}

Endpoints privados (firmados con HMAC-SHA512):
- /info/account, /info/balance, /info/orders,
  /info/order_detail, /info/user_transactions

Ningún método propaga errores de red: un fallo se convierte en la variante
fallida del modelo (MarketSnapshot / CandleSeries) o en None.

Author: Bithumb Signal Reporter Team
"""

import asyncio
import base64
import hashlib
import hmac
import time
from typing import Any, Dict, Optional, Sequence
from urllib.parse import urlencode

import aiohttp

from config import Config, BithumbConfig
from src.logic.candle import CandleSeries, parse_float
from src.logic.ranking import MarketSnapshot
from src.utils.logger import get_logger, log_exception


logger = get_logger(__name__)


# Errores de transporte que se degradan a "dato no disponible"
TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, ValueError)


# =============================================================================
# HELPERS
# =============================================================================

def build_signature_headers(
    endpoint: str,
    params: Dict[str, Any],
    api_key: str,
    api_secret: str,
    nonce: Optional[str] = None
) -> Dict[str, str]:
    """
    Genera los headers de autenticación de la API privada de Bithumb.

    Api-Sign = base64( hex( HMAC-SHA512(secret, endpoint NUL query NUL nonce) ) )

    Args:
        endpoint: Ruta del endpoint (ej: "/info/balance")
        params: Parámetros del formulario (incluyendo "endpoint")
        api_key: Connect key
        api_secret: Secret key
        nonce: Nonce en milisegundos (se genera si no se indica)

    Returns:
        Dict[str, str]: Headers listos para la petición
    """
    nonce = nonce or str(int(time.time() * 1000))
    message = f"{endpoint}\0{urlencode(params)}\0{nonce}"
    digest = hmac.new(api_secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha512).hexdigest()

    return {
        "Api-Key": api_key,
        "Api-Sign": base64.b64encode(digest.encode("utf-8")).decode("utf-8"),
        "Api-Nonce": nonce,
        "Content-Type": "application/x-www-form-urlencoded",
        "accept": "application/json",
    }


def filter_positive_totals(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Conserva solo los saldos `total_*` con valor positivo.

    Args:
        data: Objeto `data` de /info/balance

    Returns:
        Dict[str, Any]: Entradas total_<moneda> > 0
    """
    return {
        key: value
        for key, value in data.items()
        if key.startswith("total_") and parse_float(value) > 0
    }


# =============================================================================
# BITHUMB SERVICE
# =============================================================================

class BithumbService:
    """
    Proveedor de datos de mercado y de cuenta.

    Responsabilidades:
    - Snapshot de precios para el ranking del universo
    - Series de velas por símbolo con concurrencia acotada y timeout
    - Consultas firmadas de la cuenta (saldo, órdenes, historial)
    """

    def __init__(self, config: BithumbConfig = Config.BITHUMB):
        """
        Inicializa el cliente.

        Args:
            config: Parámetros de conexión y credenciales
        """
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None
        self._stopped = False
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        self._semaphore = asyncio.Semaphore(config.max_concurrency)

        logger.info(
            f"🏦 Bithumb Service inicializado "
            f"(URL: {config.api_url}, Cotización: {config.quote_currency}, "
            f"Concurrencia: {config.max_concurrency}, Timeout: {config.request_timeout}s, "
            f"Credenciales: {'✅' if config.has_credentials else '❌'})"
        )

    async def start(self) -> None:
        """Abre la sesión HTTP."""
        self._stopped = False
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self._timeout)
        logger.info("✅ Bithumb Service iniciado")

    async def stop(self) -> None:
        """Cierra la sesión HTTP."""
        self._stopped = True
        if self.session and not self.session.closed:
            await self.session.close()
        logger.info("✅ Bithumb Service detenido")

    async def __aenter__(self) -> "BithumbService":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    def _get_session(self) -> aiohttp.ClientSession:
        # Tras stop() no se abre una sesión nueva
        if self._stopped:
            raise aiohttp.ClientConnectionError("Bithumb Service detenido")
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self._timeout)
        return self.session

    # -------------------------------------------------------------------------
    # TRANSPORTE
    # -------------------------------------------------------------------------

    async def _get_json(self, path: str) -> Any:
        url = f"{self.config.api_url}{path}"
        async with self._get_session().get(url, headers={"accept": "application/json"}) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def _signed_post(self, endpoint: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Ejecuta una petición privada firmada.

        Returns:
            Optional[Dict]: JSON de respuesta o None si falla o faltan credenciales
        """
        if not self.config.has_credentials:
            logger.warning(f"⚠️  {endpoint}: credenciales de Bithumb no configuradas (BITHUMB_CON_KEY/BITHUMB_SEC_KEY)")
            return None

        form = {"endpoint": endpoint, **params}
        headers = build_signature_headers(endpoint, form, self.config.api_key, self.config.api_secret)
        url = f"{self.config.api_url}{endpoint}"

        try:
            async with self._get_session().post(url, data=urlencode(form), headers=headers) as response:
                response.raise_for_status()
                payload = await response.json(content_type=None)
        except TRANSPORT_ERRORS as e:
            log_exception(logger, f"Bithumb private request {endpoint} failed", e)
            return None

        if not isinstance(payload, dict) or payload.get("status") != Config.SUCCESS_STATUS:
            logger.error(f"❌ {endpoint} respondió con error: {payload}")
            return None
        return payload

    # -------------------------------------------------------------------------
    # DATOS PÚBLICOS
    # -------------------------------------------------------------------------

    async def fetch_snapshot(self) -> MarketSnapshot:
        """
        Obtiene el snapshot de precios de 24h de todo el mercado.

        Returns:
            MarketSnapshot: Snapshot (variante fallida si hubo error)
        """
        path = f"/public/ticker/ALL_{self.config.quote_currency}"
        try:
            payload = await self._get_json(path)
        except TRANSPORT_ERRORS as e:
            log_exception(logger, "Bithumb snapshot request failed", e)
            return MarketSnapshot.failed(f"{type(e).__name__}: {e}")

        snapshot = MarketSnapshot.from_response(payload)
        if snapshot.is_ok:
            logger.info(f"📈 Snapshot recibido: {len(snapshot.prices)} símbolos")
        else:
            logger.error(f"❌ Snapshot no disponible: {snapshot.error}")
        return snapshot

    async def fetch_candlestick(self, symbol: str, interval: str = "24h") -> CandleSeries:
        """
        Obtiene la serie de velas de un símbolo.

        Args:
            symbol: Símbolo (ej: "BTC")
            interval: Intervalo (1m, 3m, 5m, 10m, 30m, 1h, 6h, 12h, 24h)

        Returns:
            CandleSeries: Serie (variante fallida si hubo error)
        """
        if interval not in Config.CHART_INTERVALS:
            return CandleSeries.failed(symbol, interval, f"unsupported interval {interval}")

        path = f"/public/candlestick/{symbol}_{self.config.quote_currency}/{interval}"
        async with self._semaphore:
            try:
                payload = await self._get_json(path)
            except TRANSPORT_ERRORS as e:
                logger.warning(f"⚠️  Velas de {symbol} ({interval}) no disponibles: {type(e).__name__}: {e}")
                return CandleSeries.failed(symbol, interval, f"{type(e).__name__}: {e}")

        try:
            series = CandleSeries.from_response(symbol, interval, payload)
        except Exception as e:
            log_exception(logger, f"Velas de {symbol} ({interval}) no parseables", e)
            return CandleSeries.failed(symbol, interval, f"{type(e).__name__}: {e}")

        if not series.is_ok:
            logger.warning(f"⚠️  Velas de {symbol} ({interval}) descartadas: {series.error}")
        return series

    async def fetch_all_candlesticks(
        self,
        symbols: Sequence[str],
        interval: str = "1h"
    ) -> Dict[str, CandleSeries]:
        """
        Obtiene las velas de varios símbolos con concurrencia acotada.

        Args:
            symbols: Universo de símbolos
            interval: Intervalo de las velas

        Returns:
            Dict[str, CandleSeries]: Series por símbolo, en el orden del universo
        """
        logger.info(f"📥 Descargando velas {interval} de {len(symbols)} símbolos...")
        started = time.monotonic()

        results = await asyncio.gather(
            *(self.fetch_candlestick(symbol, interval) for symbol in symbols),
            return_exceptions=True
        )

        candles: Dict[str, CandleSeries] = {}
        for symbol, result in zip(symbols, results):
            if isinstance(result, Exception):
                logger.error(f"❌ Velas de {symbol} ({interval}) fallaron: {type(result).__name__}: {result}")
                result = CandleSeries.failed(symbol, interval, f"{type(result).__name__}: {result}")
            candles[symbol] = result

        ok_count = sum(1 for series in candles.values() if series.is_ok)
        logger.info(
            f"✅ Velas {interval}: {ok_count}/{len(symbols)} series válidas "
            f"en {time.monotonic() - started:.1f}s"
        )
        return candles

    async def fetch_orderbook(self, ticker: str = "ALL_KRW") -> Optional[Dict[str, Any]]:
        """Libro de órdenes (JSON crudo) o None si falla."""
        try:
            return await self._get_json(f"/public/orderbook/{ticker}")
        except TRANSPORT_ERRORS as e:
            log_exception(logger, f"Bithumb orderbook request failed ({ticker})", e)
            return None

    async def fetch_recent_transactions(self, ticker: str = "BTC_KRW") -> Optional[Dict[str, Any]]:
        """Últimas transacciones del mercado (JSON crudo) o None si falla."""
        try:
            return await self._get_json(f"/public/transaction_history/{ticker}")
        except TRANSPORT_ERRORS as e:
            log_exception(logger, f"Bithumb transaction history request failed ({ticker})", e)
            return None

    # -------------------------------------------------------------------------
    # DATOS PRIVADOS
    # -------------------------------------------------------------------------

    async def fetch_account(self, order_currency: str = "BTC") -> Optional[Dict[str, Any]]:
        """Información de la cuenta (comisiones, fecha de alta)."""
        return await self._signed_post("/info/account", {
            "order_currency": order_currency,
            "payment_currency": self.config.quote_currency,
        })

    async def fetch_balance(self, currency: str = "ALL") -> Optional[Dict[str, Any]]:
        """
        Saldos de la cuenta, solo entradas total_* positivas.

        Returns:
            Optional[Dict[str, Any]]: {"total_btc": "0.5", ...} o None si falla
        """
        payload = await self._signed_post("/info/balance", {"currency": currency})
        if payload is None:
            return None

        data = payload.get("data")
        if not isinstance(data, dict):
            logger.error(f"❌ /info/balance sin objeto data: {payload}")
            return None
        return filter_positive_totals(data)

    async def fetch_orders(self, order_currency: str = "BTC") -> Optional[Dict[str, Any]]:
        """Órdenes abiertas de una moneda."""
        return await self._signed_post("/info/orders", {"order_currency": order_currency})

    async def fetch_order_detail(self, order_id: str, order_currency: str = "BTC") -> Optional[Dict[str, Any]]:
        """Detalle de una orden."""
        return await self._signed_post("/info/order_detail", {
            "order_id": order_id,
            "order_currency": order_currency,
        })

    async def fetch_trade_history(
        self,
        order_currency: str = "BTC",
        payment_currency: Optional[str] = None
    ) -> Optional[Dict[str, Any]]:
        """Historial de transacciones del usuario."""
        return await self._signed_post("/info/user_transactions", {
            "order_currency": order_currency,
            "payment_currency": payment_currency or self.config.quote_currency,
        })
