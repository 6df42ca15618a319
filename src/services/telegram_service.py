"""
Telegram Service - Report Notification
=======================================
Gestiona el envío de los reportes a través del gateway de la API de Telegram.

El envío es "fire-and-forget": cualquier fallo se registra en el log y se
informa con el valor de retorno, nunca con una excepción. No hay reintentos
dentro de la misma ejecución.

Author: Bithumb Signal Reporter Team
"""

import asyncio
from typing import Optional

import aiohttp

from config import Config, TelegramConfig
from src.utils.logger import get_logger, log_exception


logger = get_logger(__name__)


# =============================================================================
# TELEGRAM SERVICE
# =============================================================================

class TelegramService:
    """
    Servicio de notificaciones.

    Responsabilidades:
    - Recibir el texto ya renderizado del Report Service
    - Enviarlo a Telegram vía API REST (formato markdown)
    - Registrar el resultado sin interrumpir al llamador
    """

    def __init__(self, config: TelegramConfig = Config.TELEGRAM, timeout: float = 15.0):
        """
        Inicializa el servicio de notificaciones.

        Args:
            config: Endpoint, API key y suscripción del gateway
            timeout: Timeout total de la petición en segundos
        """
        self.config = config
        self.timeout = timeout
        self.session: Optional[aiohttp.ClientSession] = None

        logger.info(
            f"📱 Telegram Service inicializado "
            f"(Suscripción: {config.subscription}, "
            f"Notificaciones HTTP: {'✅ Habilitadas' if config.enable_notifications else '❌ Deshabilitadas'})"
        )

    async def start(self) -> None:
        """Inicia el servicio de notificaciones."""
        self.session = aiohttp.ClientSession()
        logger.info("✅ Telegram Service iniciado")

    async def stop(self) -> None:
        """Detiene el servicio de notificaciones."""
        logger.info("🛑 Deteniendo Telegram Service...")

        # Cerrar sesión HTTP
        if self.session and not self.session.closed:
            await self.session.close()

        logger.info("✅ Telegram Service detenido")

    async def send(self, text: str, title: str = "") -> bool:
        """
        Envía un bloque de texto a Telegram API.

        Args:
            text: Cuerpo del mensaje (markdown)
            title: Primer mensaje / título

        Returns:
            bool: True si el gateway respondió 200
        """
        # El título es texto plano: sin guiones bajos para no romper el Markdown.
        # El cuerpo llega ya escapado y sus enlaces no se tocan.
        title = title.replace("_", " ")
        message = text

        # Verificar si las notificaciones HTTP están habilitadas
        if not self.config.enable_notifications:
            logger.debug("📵 Notificaciones HTTP deshabilitadas. Mensaje no enviado a Telegram API.")
            return False

        if not self.session or self.session.closed:
            logger.error("❌ No se puede enviar mensaje: Sesión HTTP no inicializada")
            return False

        payload = {
            "first_message": title,
            "image_base64": "",
            "message_type": "markdown",
            "entries": [
                {
                    "subscription": self.config.subscription,
                    "message": message
                }
            ]
        }

        headers = {
            "x-api-key": self.config.api_key,
            "Content-Type": "application/json"
        }

        logger.info(
            f"📤 Enviando reporte a Telegram | Título: {title} | "
            f"Tamaño: {len(message)} caracteres | Suscripción: {self.config.subscription}"
        )

        try:
            async with self.session.post(
                self.config.api_url,
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as response:
                response_text = await response.text()

                if response.status == 200:
                    logger.info(f"✅ PETICIÓN HTTP EXITOSA | Estado: {response.status} | Respuesta: {response_text[:200]}")
                    return True

                logger.error(
                    f"\n{'='*80}\n"
                    f"❌ PETICIÓN HTTP FALLÓ\n"
                    f"{'='*80}\n"
                    f"🔹 Estado HTTP: {response.status}\n"
                    f"🔹 URL: {self.config.api_url}\n"
                    f"🔹 Respuesta: {response_text}\n"
                    f"{'='*80}"
                )
                return False

        except asyncio.TimeoutError:
            logger.error("❌ Timeout en solicitud a Telegram API")
        except aiohttp.ClientError as e:
            log_exception(logger, "Telegram API request failed", e)
        except Exception as e:
            log_exception(logger, "Unexpected error sending report", e)
        return False
