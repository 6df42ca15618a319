"""Services package initialization."""

from .bithumb_service import BithumbService
from .telegram_service import TelegramService
from .report_service import ReportService, AnalysisReport, ReportSection

__all__ = [
    "BithumbService",
    "TelegramService",
    "ReportService",
    "AnalysisReport",
    "ReportSection",
]
