"""Structured JSON logging for projection runs"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from ledger_projection.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level or settings.log_level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_projection(
    start: str,
    end: str,
    days: int,
    real_entries: int,
    simulated_entries: int,
    card_bills: int,
    opening_balance_cents: int,
    final_balance_cents: int,
    duration_ms: float,
) -> None:
    """Log structured projection outcome"""
    logging.getLogger("ledger_projection.projection").info(
        "Projection completed",
        extra={
            "step": "projection_complete",
            "window_start": start,
            "window_end": end,
            "days": days,
            "real_entries": real_entries,
            "simulated_entries": simulated_entries,
            "card_bills": card_bills,
            "opening_balance_cents": opening_balance_cents,
            "final_balance_cents": final_balance_cents,
            "duration_ms": duration_ms,
        },
    )
