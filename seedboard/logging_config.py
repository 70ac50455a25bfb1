"""Logging setup: structlog diagnostics on stdout plus a Korean activity log."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Optional

import structlog
from structlog.types import Processor

from seedboard.config import settings
from seedboard.models import SEEDING_STATUS_LABELS, SeedingStatus

ACTIVITY_LOGGER_PREFIX = "seeding.activity"

# Rendered first and in this order; anything else follows as key=value.
ACTIVITY_FIELD_LABELS = {
    "brand": "브랜드",
    "project_id": "프로젝트",
    "influencer_id": "인플루언서",
    "account_id": "계정",
    "previous_status": "이전 상태",
    "status": "상태",
    "rejection_reason": "거절 사유",
    "carrier": "택배사",
    "tracking_number": "송장번호",
    "template_id": "템플릿",
    "guide_id": "가이드",
    "valid": "유효",
    "invalid": "무효",
    "failed": "실패",
}

STATUS_FIELDS = ("status", "previous_status")

_logging_configured = False


def activity_log_path(raw_path: Optional[str] = None) -> Path:
    """Resolve the activity log file; relative paths hang off the project root."""
    path = Path(raw_path or settings.activity_log_path)
    if not path.is_absolute():
        path = Path(__file__).parent.parent / path
    return path


def _status_label(value: Any) -> str:
    try:
        status = SeedingStatus(getattr(value, "value", value))
    except ValueError:
        return str(value)
    return f"{SEEDING_STATUS_LABELS[status]}({status.value})"


def _korean_message_renderer(
    _: logging.Logger,
    __: str,
    event_dict: dict[str, Any],
) -> str:
    """Render an activity event as ``time | [source] event | 라벨: 값; ...``."""
    event_dict = dict(event_dict)
    timestamp = event_dict.pop("timestamp", "")
    event = str(event_dict.pop("event", ""))
    source = str(event_dict.pop("logger", "")).removeprefix(f"{ACTIVITY_LOGGER_PREFIX}.")
    event_dict.pop("level", None)

    details: list[str] = []
    for key, label in ACTIVITY_FIELD_LABELS.items():
        value = event_dict.pop(key, None)
        if value in (None, "", []):
            continue
        if key in STATUS_FIELDS:
            value = _status_label(value)
        details.append(f"{label}: {value}")

    details.extend(f"{key}={value}" for key, value in event_dict.items() if value not in (None, "", []))

    headline = f"[{source}] {event}" if source else event
    parts = [str(timestamp), headline, "; ".join(details)]
    return " | ".join(part for part in parts if part)


def get_activity_logger(name: str) -> Any:
    """Return a logger whose records also land in the activity log file."""
    return structlog.get_logger(f"{ACTIVITY_LOGGER_PREFIX}.{name}")


def setup_logging(log_path: Optional[str] = None) -> None:
    """
    Configure structlog over stdlib logging, once per process.

    Every logger writes to stdout through ``ConsoleRenderer``. Records from the
    ``seeding.activity`` family are also appended to the activity log file so
    operators can read status changes, tracking numbers and bulk imports in Korean.
    """
    global _logging_configured

    if _logging_configured:
        return

    log_level = settings.log_level.upper()
    file_path = activity_log_path(log_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    shared_processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=settings.debug),
            foreign_pre_chain=shared_processors,
        )
    )

    activity_handler = logging.FileHandler(file_path, encoding="utf-8")
    activity_handler.addFilter(logging.Filter(ACTIVITY_LOGGER_PREFIX))
    activity_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_korean_message_renderer,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [console_handler, activity_handler]
    root_logger.setLevel(log_level)

    # Per-statement SQL and access lines drown out the activity events.
    for noisy_logger in ("sqlalchemy.engine", "uvicorn.access", "httpx"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    _logging_configured = True
