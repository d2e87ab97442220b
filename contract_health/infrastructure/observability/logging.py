"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from contract_health.config import settings


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # Route NoApplicableDataWarning and friends through the JSON log
    logging.captureWarnings(True)


def log_health_computed(
    request_id: str,
    contract_id: Optional[str],
    overall: int,
    grade: str,
    data_completeness: float,
    duration_ms: float,
) -> None:
    """Log structured health outcome for analysis"""
    logging.info(
        "Health computed",
        extra={
            "request_id": request_id,
            "contract_id": contract_id,
            "step": "health_complete",
            "health_score": overall,
            "grade": grade,
            "data_completeness": data_completeness,
            "duration_ms": duration_ms,
        },
    )
