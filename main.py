"""
Bithumb Signal Reporter - Main Entry Point
===========================================
v0.1.0 - Short-Term & Long-Term Signal Digests

Este es el punto de entrada principal del bot. Orquesta todos los servicios:
- Bithumb Service (Market Data)
- Report Service (Signal Composition)
- Telegram Service (Notifications)

Uso:
    python main.py                      # Ambos perfiles, cada REPORT_INTERVAL_MINUTES
    python main.py --profile short --once
    python main.py --profile long --once --dry-run

Author: Bithumb Signal Reporter Team
"""

import argparse
import asyncio
import signal
import sys
from typing import List, Optional

from config import Config, ReportProfile
from src.services import BithumbService, ReportService, TelegramService
from src.utils.logger import get_logger, log_exception, log_shutdown, log_startup_banner


logger = get_logger(__name__)


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class ReportBot:
    """
    Orquestador principal del bot de reportes.

    Responsabilidades:
    - Inicializar y coordinar todos los servicios
    - Ejecutar los perfiles de reporte (una vez o periódicamente)
    - Implementar graceful shutdown
    """

    def __init__(self, profiles: List[ReportProfile], once: bool = False, dry_run: bool = False):
        """
        Inicializa el bot y sus servicios.

        Args:
            profiles: Perfiles a ejecutar en cada ciclo
            once: Ejecutar un solo ciclo y salir
            dry_run: Construir los reportes sin enviarlos
        """
        self.profiles = profiles
        self.once = once
        self.dry_run = dry_run

        self.bithumb_service: Optional[BithumbService] = None
        self.telegram_service: Optional[TelegramService] = None
        self.report_service: Optional[ReportService] = None

        self.is_running: bool = False
        self.shutdown_event: asyncio.Event = asyncio.Event()

    async def initialize(self) -> None:
        """
        Inicializa todos los servicios con inyección de dependencias.
        """
        logger.info("🔧 Initializing services...")

        # 1. Proveedor de datos y notificador (sin dependencias)
        self.bithumb_service = BithumbService(Config.BITHUMB)
        await self.bithumb_service.start()

        self.telegram_service = TelegramService(Config.TELEGRAM)
        await self.telegram_service.start()

        # 2. Report Service (depende de ambos)
        self.report_service = ReportService(
            market_data=self.bithumb_service,
            notifier=self.telegram_service,
            report_config=Config.REPORT,
            quote_currency=Config.BITHUMB.quote_currency,
        )

        logger.info("✅ All services initialized successfully")

    async def start(self) -> None:
        """
        Inicia el bot y ejecuta los ciclos de reporte.
        """
        self.is_running = True

        # Banner de inicio
        log_startup_banner(logger, version="0.1.0")

        # Validar configuración
        try:
            Config.validate_all(include_notifier=not self.dry_run)
            logger.info("✅ Configuration validated")
        except ValueError as e:
            logger.critical(f"❌ Configuration error: {e}")
            sys.exit(1)

        await self.initialize()

        # Registrar handlers de señales para graceful shutdown
        self._register_signal_handlers()

        names = ", ".join(profile.name for profile in self.profiles)
        logger.info(f"🚀 Report Bot started. Profiles: {names}")
        logger.info(f"📊 Universe size: {Config.REPORT.universe_size} | Quote: {Config.BITHUMB.quote_currency}")
        if not self.once:
            logger.info(f"⏱️  Report interval: {Config.REPORT.interval_minutes} min")

        while self.is_running:
            await self.run_cycle()

            if self.once:
                break

            try:
                await asyncio.wait_for(
                    self.shutdown_event.wait(),
                    timeout=Config.REPORT.interval_minutes * 60
                )
            except asyncio.TimeoutError:
                continue

    async def run_cycle(self) -> None:
        """Ejecuta todos los perfiles; un perfil fallido no detiene a los demás."""
        for profile in self.profiles:
            if not self.is_running:
                break
            try:
                await self.report_service.run(profile, send=not self.dry_run)
            except Exception as e:
                log_exception(logger, f"Report {profile.name} crashed", e)

    async def stop(self) -> None:
        """
        Detiene el bot de forma limpia.
        """
        if not self.is_running:
            return

        logger.info("🛑 Initiating graceful shutdown...")
        self.is_running = False
        self.shutdown_event.set()

        # Detener servicios en orden inverso
        if self.telegram_service:
            await self.telegram_service.stop()

        if self.bithumb_service:
            await self.bithumb_service.stop()

        log_shutdown(logger)

    def _register_signal_handlers(self) -> None:
        """
        Registra handlers para señales de sistema (SIGINT, SIGTERM).
        """
        def handle_signal(sig):
            logger.info(f"⚠️  Received signal {sig}. Initiating shutdown...")
            asyncio.create_task(self.stop())

        try:
            loop = asyncio.get_running_loop()

            # SIGINT (Ctrl+C)
            loop.add_signal_handler(signal.SIGINT, lambda: handle_signal("SIGINT"))

            # SIGTERM (kill)
            loop.add_signal_handler(signal.SIGTERM, lambda: handle_signal("SIGTERM"))

        except NotImplementedError:
            # Windows no soporta add_signal_handler
            # Se manejará con KeyboardInterrupt en el try-except
            pass


# =============================================================================
# ENTRY POINT
# =============================================================================

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Argumentos de línea de comandos."""
    parser = argparse.ArgumentParser(description="Bithumb Signal Reporter")
    parser.add_argument(
        "--profile",
        choices=["short", "long", "all"],
        default="all",
        help="Perfil de reporte a ejecutar (default: all)"
    )
    parser.add_argument("--once", action="store_true", help="Ejecutar un solo ciclo y salir")
    parser.add_argument("--dry-run", action="store_true", help="Construir y registrar el reporte sin enviarlo")
    return parser.parse_args(argv)


def select_profiles(name: str) -> List[ReportProfile]:
    """Perfiles para el argumento --profile."""
    if name == "all":
        return list(Config.PROFILES.values())
    return [Config.PROFILES[name]]


async def main(argv: Optional[List[str]] = None) -> None:
    """
    Función principal asíncrona.
    """
    args = parse_args(argv)
    bot = ReportBot(select_profiles(args.profile), once=args.once, dry_run=args.dry_run)

    try:
        await bot.start()
    except KeyboardInterrupt:
        logger.info("⚠️  Keyboard interrupt received")
    except Exception as e:
        logger.critical(f"❌ Fatal error: {e}", exc_info=True)
        sys.exit(1)
    finally:
        await bot.stop()


def run() -> None:
    """Punto de entrada de consola (bithumb-reporter)."""
    # Configuración de políticas de asyncio para Windows
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical(f"❌ Fatal error in main: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
