"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from outbehaving.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and app metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.app_name
        log_record["environment"] = settings.app_env


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level.upper())

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_backend_failure(
    context: str,
    error_type: str,
    status_code: Optional[int],
    error: BaseException,
) -> None:
    """Log a classified backend failure; the raw message stays in logs only"""
    logging.getLogger("outbehaving.errors").error(
        f"Error in {context}",
        extra={
            "step": "backend_failure",
            "context": context,
            "error_type": error_type,
            "status_code": status_code,
            "error": str(error),
            "exception_class": type(error).__name__,
        },
    )


def log_goal_payment(
    user_id: str,
    goal_id: str,
    account_id: Optional[str],
    amount: str,
    outcome: str,
) -> None:
    """Log structured goal payment outcome"""
    logging.getLogger("outbehaving.payments").info(
        "Goal payment completed",
        extra={
            "user_id": user_id,
            "goal_id": goal_id,
            "account_id": account_id,
            "amount": amount,
            "step": "goal_payment",
            "outcome": outcome,
        },
    )
