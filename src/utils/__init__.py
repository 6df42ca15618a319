"""Utils package initialization."""

from .logger import get_logger, setup_logger, log_exception
from .indicators import calculate_sma, calculate_ema, find_crossovers, has_golden_cross

__all__ = [
    "get_logger",
    "setup_logger",
    "log_exception",
    "calculate_sma",
    "calculate_ema",
    "find_crossovers",
    "has_golden_cross",
]
