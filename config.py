"""
Configuration Module - Bithumb Signal Reporter v0.1.0
======================================================
Gestiona la carga de variables de entorno, credenciales de Bithumb,
configuración del notificador y perfiles de reporte (corto y largo plazo).

Author: Bithumb Signal Reporter Team
"""

import os
from typing import Dict, Optional, Tuple
from dataclasses import dataclass
from dotenv import load_dotenv

# Cargar variables de entorno desde .env
load_dotenv()


# =============================================================================
# DATA CLASSES PARA CONFIGURACIÓN ESTRUCTURADA
# =============================================================================

@dataclass(frozen=True)
class BithumbConfig:
    """Configuración del proveedor de datos de mercado (Bithumb REST)."""
    api_url: str
    api_key: str  # Solo necesario para endpoints privados (/info/*)
    api_secret: str
    quote_currency: str  # Moneda de cotización (ej: "KRW")
    request_timeout: float  # Timeout por petición en segundos
    max_concurrency: int  # Peticiones de velas simultáneas (1 = secuencial)

    @property
    def has_credentials(self) -> bool:
        """Indica si hay credenciales para los endpoints firmados."""
        return bool(self.api_key and self.api_secret)

    def validate(self) -> None:
        """Valida los parámetros de conexión."""
        if not self.api_url:
            raise ValueError("BITHUMB_API_URL is empty")
        if self.request_timeout <= 0:
            raise ValueError(f"BITHUMB_REQUEST_TIMEOUT must be > 0, got {self.request_timeout}")
        if self.max_concurrency < 1:
            raise ValueError(f"BITHUMB_MAX_CONCURRENCY must be >= 1, got {self.max_concurrency}")


@dataclass(frozen=True)
class TelegramConfig:
    """Configuración del servicio de notificaciones Telegram."""
    api_url: str
    api_key: str
    subscription: str
    enable_notifications: bool  # Habilitar/deshabilitar envío de notificaciones

    def validate(self) -> None:
        """Valida que todos los parámetros estén configurados."""
        # Solo validar credenciales si las notificaciones están habilitadas
        if self.enable_notifications and (not self.api_url or not self.api_key or not self.subscription):
            raise ValueError(
                "Telegram configuration incomplete. Check TELEGRAM_API_URL, "
                "TELEGRAM_API_KEY, and TELEGRAM_SUBSCRIPTION in .env"
            )


@dataclass(frozen=True)
class ReportProfile:
    """
    Parámetros de un perfil de reporte.

    Los dos perfiles solo difieren en intervalos, tamaños de ventana y
    secciones incluidas. Las ventanas están expresadas en número de velas.
    """
    name: str  # "short-term" o "long-term"
    title: str  # Título mostrado en el mensaje
    primary_interval: str  # Intervalo principal (ej: "30m", "24h")
    secondary_interval: Optional[str] = None  # Segundo intervalo (solo corto plazo)

    # Rachas
    streak_candles: int = 3  # Velas para subida/bajada/verdes/rojas continuas
    low_to_high_candles: int = 5
    include_falling: bool = False  # Sección "bajada ∧ rojas"
    include_low_to_high: bool = False
    include_engulfing: bool = False  # Envolvente alcista sobre el intervalo secundario

    # Volumen
    volume_factor: float = 1.5

    # Cruce dorado
    golden_cross_short: int = 50
    golden_cross_long: int = 200
    golden_cross_recent: int = 3  # Velas "recientes"
    golden_cross_lookback: int = 10  # Ventana ampliada (se excluyen las recientes)
    golden_cross_on_secondary: bool = False  # Calcular sobre el intervalo secundario

    @property
    def intervals(self) -> Tuple[str, ...]:
        """Intervalos que hay que descargar para este perfil."""
        if self.secondary_interval:
            return (self.primary_interval, self.secondary_interval)
        return (self.primary_interval,)


@dataclass(frozen=True)
class ReportConfig:
    """Configuración general de generación de reportes."""
    universe_size: int  # Top N por valor operado / por rendimiento
    interval_minutes: int  # Periodo entre reportes en modo continuo
    chart_url_template: str  # Enlace externo al gráfico ({symbol}, {quote})

    def validate(self) -> None:
        """Valida los parámetros numéricos."""
        if self.universe_size < 1:
            raise ValueError(f"REPORT_UNIVERSE_SIZE must be >= 1, got {self.universe_size}")
        if self.interval_minutes < 1:
            raise ValueError(f"REPORT_INTERVAL_MINUTES must be >= 1, got {self.interval_minutes}")
        if "{symbol}" not in self.chart_url_template:
            raise ValueError("CHART_URL_TEMPLATE must contain '{symbol}'")


# =============================================================================
# PERFILES DE REPORTE
# =============================================================================

SHORT_TERM_PROFILE = ReportProfile(
    name="short-term",
    title="Reporte de Corto Plazo",
    primary_interval="30m",
    secondary_interval="1h",
    streak_candles=3,
    include_falling=True,
    include_engulfing=True,
    volume_factor=1.5,
    golden_cross_short=7,
    golden_cross_long=25,
    golden_cross_recent=3,
    golden_cross_lookback=10,
    golden_cross_on_secondary=True,
)

LONG_TERM_PROFILE = ReportProfile(
    name="long-term",
    title="Reporte de Largo Plazo",
    primary_interval="24h",
    streak_candles=3,
    low_to_high_candles=5,
    include_low_to_high=True,
    volume_factor=1.5,
    golden_cross_short=50,
    golden_cross_long=200,
    golden_cross_recent=3,
    golden_cross_lookback=10,
)


# =============================================================================
# CONFIGURACIÓN PRINCIPAL
# =============================================================================

class Config:
    """Clase Singleton para acceso global a la configuración."""

    # Código de éxito de la API de Bithumb
    SUCCESS_STATUS: str = "0000"

    # Intervalos de velas soportados por /public/candlestick
    CHART_INTERVALS: Tuple[str, ...] = ("1m", "3m", "5m", "10m", "30m", "1h", "6h", "12h", "24h")

    # Bithumb REST
    BITHUMB = BithumbConfig(
        api_url=os.getenv("BITHUMB_API_URL", "https://api.bithumb.com"),
        api_key=os.getenv("BITHUMB_CON_KEY", ""),
        api_secret=os.getenv("BITHUMB_SEC_KEY", ""),
        quote_currency=os.getenv("BITHUMB_QUOTE_CURRENCY", "KRW"),
        request_timeout=float(os.getenv("BITHUMB_REQUEST_TIMEOUT", "10")),
        max_concurrency=int(os.getenv("BITHUMB_MAX_CONCURRENCY", "4")),
    )

    # Telegram Notifications
    TELEGRAM = TelegramConfig(
        api_url=os.getenv("TELEGRAM_API_URL", ""),
        api_key=os.getenv("TELEGRAM_API_KEY", ""),
        subscription=os.getenv("TELEGRAM_SUBSCRIPTION", "crypto_signals"),
        enable_notifications=os.getenv("ENABLE_NOTIFICATIONS", "true").lower() == "true",
    )

    # Reportes
    REPORT = ReportConfig(
        universe_size=int(os.getenv("REPORT_UNIVERSE_SIZE", "100")),
        interval_minutes=int(os.getenv("REPORT_INTERVAL_MINUTES", "60")),
        chart_url_template=os.getenv(
            "CHART_URL_TEMPLATE",
            "https://www.bithumb.com/react/trade/order/{symbol}-{quote}"
        ),
    )

    PROFILES: Dict[str, ReportProfile] = {
        "short": SHORT_TERM_PROFILE,
        "long": LONG_TERM_PROFILE,
    }

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE: Optional[str] = os.getenv("LOG_FILE") or None

    @classmethod
    def validate_all(cls, include_notifier: bool = True) -> None:
        """
        Valida toda la configuración crítica antes de iniciar el bot.

        Args:
            include_notifier: Validar también Telegram (False en dry-run)

        Raises:
            ValueError: Si alguna configuración crítica falta o es inválida
        """
        cls.BITHUMB.validate()
        if include_notifier:
            cls.TELEGRAM.validate()
        cls.REPORT.validate()

        for profile in cls.PROFILES.values():
            for interval in profile.intervals:
                if interval not in cls.CHART_INTERVALS:
                    raise ValueError(f"Unsupported interval '{interval}' in profile {profile.name}")
            if profile.golden_cross_short >= profile.golden_cross_long:
                raise ValueError(
                    f"Profile {profile.name}: golden_cross_short ({profile.golden_cross_short}) "
                    f"must be < golden_cross_long ({profile.golden_cross_long})"
                )


# =============================================================================
# VALIDACIÓN AL IMPORTAR
# =============================================================================

# Validar configuración automáticamente cuando se importa el módulo
try:
    Config.validate_all()
except ValueError as e:
    # No lanzar excepción aquí para permitir imports de testing
    # La validación se hará explícitamente en main.py
    print(f"⚠️  Configuration Warning: {e}")
