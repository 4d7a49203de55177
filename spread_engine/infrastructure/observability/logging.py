"""Structured JSON logging for split planning"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from spread_engine.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping every record with time, level and service name"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str | None = None) -> None:
    """Configure structured JSON logging on the root logger, defaulting to settings.log_level"""
    logger = logging.getLogger()
    logger.setLevel(level or settings.log_level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_split(
    request_id: str,
    mode: str,
    total_amount_cents: int,
    unallocated_cents: int,
    total_people: int,
    goals_completed: int,
    rejected_count: int,
    duration_ms: float,
) -> None:
    """Log structured split outcome for analysis"""
    logging.getLogger("spread_engine.split").info(
        "Split computed",
        extra={
            "request_id": request_id,
            "step": "split_complete",
            "mode": mode,
            "total_amount_cents": total_amount_cents,
            "unallocated_cents": unallocated_cents,
            "total_people": total_people,
            "goals_completed": goals_completed,
            "rejected_count": rejected_count,
            "duration_ms": duration_ms,
        },
    )
