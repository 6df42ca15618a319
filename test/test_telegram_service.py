"""
Tests del Telegram Service
===========================
Solo los caminos que no requieren red.
"""

import asyncio

from config import TelegramConfig
from src.services.telegram_service import TelegramService


def make_config(enabled: bool) -> TelegramConfig:
    return TelegramConfig(
        api_url="https://gateway.example/send",
        api_key="secret",
        subscription="crypto_signals",
        enable_notifications=enabled,
    )


def test_disabled_notifications_are_not_sent():
    service = TelegramService(make_config(enabled=False))
    assert asyncio.run(service.send("hola", title="Reporte")) is False


def test_send_without_session_returns_false():
    service = TelegramService(make_config(enabled=True))
    assert asyncio.run(service.send("hola", title="Reporte")) is False


class FakeResponse:
    status = 200

    async def text(self):
        return "ok"

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Sesión HTTP que guarda el payload enviado."""

    closed = False

    def __init__(self):
        self.payloads = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.payloads.append(json)
        return FakeResponse()


def test_send_keeps_chart_links_intact():
    service = TelegramService(make_config(enabled=True))
    service.session = FakeSession()
    text = "🟢 Subida (1)\n[BTC](https://charts.example/BTC_KRW)"

    sent = asyncio.run(service.send(text, title="Reporte short_term"))

    payload = service.session.payloads[0]
    assert sent is True
    assert payload["entries"][0]["message"] == text
    assert payload["first_message"] == "Reporte short term"
