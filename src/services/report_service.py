"""
Report Service - Signal Composition & Digest
=============================================
Orquesta una ejecución de reporte:

1. Snapshot del mercado completo
2. Ranking por valor operado y por rendimiento (top N)
3. Velas del universo (top por valor) en los intervalos del perfil
4. Detectores del perfil
5. Combinación de señales (intersección / exclusión)
6. Render del texto (una sección por señal, también las vacías)
7. Envío al notificador (sin reintentos)

Política de errores: nada de lo que falle en una sección impide producir el
reporte con el resto. Una sección fallida se muestra con un marcador de error.

Author: Bithumb Signal Reporter Team
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from config import Config, ReportConfig, ReportProfile
from src.logic.candle import CandleSeries
from src.logic.combinators import combine_results, exclude, intersect
from src.logic.detectors import (
    DetectorResult,
    bullish_engulfing,
    continuous_fall,
    continuous_green,
    continuous_red,
    continuous_rise,
    golden_cross,
    low_to_high,
    volume_spike,
)
from src.logic.ranking import MarketSnapshot, find_common_symbols, rank_by_return, rank_by_value
from src.services.base_market_data_service import MarketDataService, Notifier
from src.utils.logger import get_logger, log_exception


logger = get_logger(__name__)


SECTION_DIVIDER = "━━━━━━━━━━━━━━━━━━━━━━"

# Caracteres con significado en Markdown (modo legacy de Telegram)
MARKDOWN_SPECIAL = ("_", "*", "`", "[")

CandleMap = Dict[str, CandleSeries]


def escape_markdown(text: str) -> str:
    """Escapa el texto plano para que no se interprete como Markdown."""
    for char in MARKDOWN_SPECIAL:
        text = text.replace(char, f"\\{char}")
    return text


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class ReportSection:
    """Una sección del reporte: título + resultado del detector."""
    title: str
    emoji: str
    result: DetectorResult


@dataclass(frozen=True)
class AnalysisReport:
    """Reporte final, inmutable una vez construido."""
    profile: str
    title: str
    generated_at: datetime
    sections: Tuple[ReportSection, ...]
    text: str
    universe: Tuple[str, ...] = field(default_factory=tuple)

    def section(self, title: str) -> Optional[ReportSection]:
        """Busca una sección por título exacto."""
        return next((section for section in self.sections if section.title == title), None)


@dataclass
class RunContext:
    """Datos obtenidos para una ejecución (transitorios)."""
    snapshot: MarketSnapshot
    by_value: List[str]
    by_return: List[str]
    candles: Dict[str, CandleMap]

    def candles_for(self, interval: str) -> CandleMap:
        return self.candles.get(interval, {})


# =============================================================================
# REPORT SERVICE
# =============================================================================

class ReportService:
    """
    Compositor de reportes de señales.

    Responsabilidades:
    - Obtener el universo y las velas desde el proveedor de datos
    - Ejecutar y combinar los detectores del perfil
    - Renderizar el texto y entregarlo al notificador
    """

    def __init__(
        self,
        market_data: MarketDataService,
        notifier: Notifier,
        report_config: ReportConfig = Config.REPORT,
        quote_currency: str = Config.BITHUMB.quote_currency
    ):
        """
        Inicializa el compositor.

        Args:
            market_data: Proveedor de snapshot y velas
            notifier: Destino del texto renderizado
            report_config: Tamaño del universo y plantilla de enlaces
            quote_currency: Moneda de cotización usada en los enlaces
        """
        self.market_data = market_data
        self.notifier = notifier
        self.report_config = report_config
        self.quote_currency = quote_currency

    # -------------------------------------------------------------------------
    # API PÚBLICA
    # -------------------------------------------------------------------------

    async def run(self, profile: ReportProfile, send: bool = True) -> AnalysisReport:
        """
        Ejecuta el pipeline completo de un perfil.

        Args:
            profile: Perfil de reporte (corto o largo plazo)
            send: Si es False, solo construye el reporte (dry-run)

        Returns:
            AnalysisReport: Reporte construido (se devuelve aunque el envío falle)
        """
        logger.info(f"🚀 Generando reporte {profile.name}...")
        report = await self.build_report(profile)

        if send:
            await self._deliver(report)
        else:
            logger.info(f"📝 Dry-run: reporte {profile.name} no enviado\n{report.text}")

        return report

    async def build_report(self, profile: ReportProfile) -> AnalysisReport:
        """Obtiene los datos, ejecuta los detectores y renderiza el reporte."""
        context = await self._collect(profile)
        sections = self._compose_sections(profile, context)
        generated_at = datetime.now()

        text = self.render(profile, sections, generated_at)
        logger.info(
            f"✅ Reporte {profile.name} listo: {len(sections)} secciones, "
            f"{sum(1 for s in sections if not s.result.ok)} fallidas"
        )
        return AnalysisReport(
            profile=profile.name,
            title=profile.title,
            generated_at=generated_at,
            sections=tuple(sections),
            text=text,
            universe=tuple(context.by_value),
        )

    # -------------------------------------------------------------------------
    # OBTENCIÓN DE DATOS
    # -------------------------------------------------------------------------

    async def _collect(self, profile: ReportProfile) -> RunContext:
        snapshot = await self._fetch_snapshot()
        prices = snapshot.prices if snapshot.is_ok else {}

        limit = self.report_config.universe_size
        by_value = rank_by_value(prices, limit)
        by_return = rank_by_return(prices, limit)
        logger.info(f"🏆 Universo: {len(by_value)} por valor, {len(by_return)} por rendimiento")

        candles: Dict[str, CandleMap] = {}
        if by_value:
            # Intervalos independientes: se descargan en paralelo
            fetched = await asyncio.gather(
                *(self.market_data.fetch_all_candlesticks(by_value, interval) for interval in profile.intervals),
                return_exceptions=True
            )
            for interval, result in zip(profile.intervals, fetched):
                if isinstance(result, Exception):
                    logger.error(f"❌ Descarga de velas {interval} falló: {type(result).__name__}: {result}")
                    candles[interval] = {}
                else:
                    candles[interval] = result

        return RunContext(snapshot=snapshot, by_value=by_value, by_return=by_return, candles=candles)

    async def _fetch_snapshot(self) -> MarketSnapshot:
        try:
            snapshot = await self.market_data.fetch_snapshot()
        except Exception as e:
            log_exception(logger, "Snapshot fetch failed", e)
            return MarketSnapshot.failed(f"{type(e).__name__}: {e}")

        if not snapshot.is_ok:
            logger.error(f"❌ Snapshot no disponible ({snapshot.status}): {snapshot.error}. Universo vacío.")
        return snapshot

    # -------------------------------------------------------------------------
    # COMPOSICIÓN
    # -------------------------------------------------------------------------

    def _compose_sections(self, profile: ReportProfile, context: RunContext) -> List[ReportSection]:
        universe = context.by_value
        primary = context.candles_for(profile.primary_interval)
        n = profile.streak_candles
        interval = profile.primary_interval

        builders: List[Tuple[str, str, Callable[[], DetectorResult]]] = [
            (
                "Top valor ∧ top rendimiento", "🏆",
                lambda: DetectorResult.success(
                    "common_value_return",
                    find_common_symbols(context.by_value, context.by_return, base="return")
                ),
            ),
            (
                f"Pico de volumen x{profile.volume_factor} ({interval})", "📢",
                lambda: volume_spike(universe, primary, profile.volume_factor),
            ),
            (
                f"Subida continua + velas verdes ({n} velas, {interval})", "🟢",
                lambda: combine_results(
                    "rise_and_green",
                    continuous_rise(universe, primary, n),
                    continuous_green(universe, primary, n),
                    intersect,
                ),
            ),
        ]

        if profile.include_falling:
            builders.append((
                f"Bajada continua + velas rojas ({n} velas, {interval})", "🔴",
                lambda: combine_results(
                    "fall_and_red",
                    continuous_fall(universe, primary, n),
                    continuous_red(universe, primary, n),
                    intersect,
                ),
            ))

        if profile.include_low_to_high:
            builders.append((
                f"De mínimo a máximo ({profile.low_to_high_candles} velas, {interval})", "📈",
                lambda: low_to_high(universe, primary, profile.low_to_high_candles),
            ))

        if profile.include_engulfing and profile.secondary_interval:
            secondary = context.candles_for(profile.secondary_interval)
            builders.append((
                f"Envolvente alcista ({profile.secondary_interval})", "🕯️",
                lambda: bullish_engulfing(universe, secondary),
            ))

        sections = [
            ReportSection(title=title, emoji=emoji, result=self._guarded(title, build))
            for title, emoji, build in builders
        ]
        return sections + self._golden_cross_sections(profile, context)

    def _golden_cross_sections(self, profile: ReportProfile, context: RunContext) -> List[ReportSection]:
        """
        Dos secciones de cruce dorado: las últimas `recent` velas y la ventana
        ampliada `lookback` sin repetir los símbolos ya reportados.
        """
        universe = context.by_value
        interval = profile.primary_interval
        if profile.golden_cross_on_secondary and profile.secondary_interval:
            interval = profile.secondary_interval
        candles = context.candles_for(interval)

        short, long_ = profile.golden_cross_short, profile.golden_cross_long
        label = f"Cruce dorado SMA{short}/SMA{long_}"
        recent_title = f"{label} (últimas {profile.golden_cross_recent} velas, {interval})"
        earlier_title = f"{label} (últimas {profile.golden_cross_lookback} velas, {interval})"

        recent = self._guarded(
            recent_title,
            lambda: golden_cross(universe, candles, profile.golden_cross_recent, short, long_)
        )
        earlier = self._guarded(
            earlier_title,
            lambda: combine_results(
                "golden_cross_earlier",
                golden_cross(universe, candles, profile.golden_cross_lookback, short, long_),
                recent,
                exclude,
            )
        )
        return [
            ReportSection(title=recent_title, emoji="✨", result=recent),
            ReportSection(title=earlier_title, emoji="🌟", result=earlier),
        ]

    @staticmethod
    def _guarded(title: str, build: Callable[[], DetectorResult]) -> DetectorResult:
        """Ninguna sección puede abortar el reporte."""
        try:
            return build()
        except Exception as e:
            log_exception(logger, f"Sección '{title}' falló", e)
            return DetectorResult.failure(title, f"{type(e).__name__}: {e}")

    # -------------------------------------------------------------------------
    # RENDER
    # -------------------------------------------------------------------------

    def format_symbol(self, symbol: str) -> str:
        """Referencia markdown del símbolo con enlace a su gráfico."""
        url = self.report_config.chart_url_template.format(symbol=symbol, quote=self.quote_currency)
        # Solo se escapa la etiqueta; el destino del enlace va tal cual
        return f"[{escape_markdown(symbol)}]({url})"

    def render_section(self, section: ReportSection) -> str:
        result = section.result
        if not result.ok:
            return f"{section.emoji} {escape_markdown(section.title)}\n⚠️ error: {escape_markdown(result.error)}"

        body = ", ".join(self.format_symbol(symbol) for symbol in result.symbols)
        return f"{section.emoji} {escape_markdown(section.title)} ({len(result.symbols)})\n{body}"

    def render(
        self,
        profile: ReportProfile,
        sections: Sequence[ReportSection],
        generated_at: datetime
    ) -> str:
        """
        Renderiza el reporte completo.

        Las secciones sin coincidencias se muestran vacías para mantener
        estable la forma del reporte.
        """
        header = (
            f"📊 *{escape_markdown(profile.title)}*\n"
            f"🕒 {generated_at.strftime('%Y-%m-%d %H:%M')}\n"
            f"{SECTION_DIVIDER}"
        )
        body = "\n\n".join(self.render_section(section) for section in sections)
        return f"{header}\n{body}\n"

    # -------------------------------------------------------------------------
    # ENTREGA
    # -------------------------------------------------------------------------

    async def _deliver(self, report: AnalysisReport) -> bool:
        """Entrega el reporte al notificador. Un fallo se registra y no se reintenta."""
        try:
            sent = await self.notifier.send(report.text, title=f"{report.title} ({report.profile})")
        except Exception as e:
            log_exception(logger, f"Notifier failed for report {report.profile}", e)
            return False

        if sent:
            logger.info(f"📨 Reporte {report.profile} entregado")
        else:
            logger.warning(f"⚠️  Reporte {report.profile} no entregado (sin reintento)")
        return bool(sent)
