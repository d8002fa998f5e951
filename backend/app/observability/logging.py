from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from .context import get_request_id

# Third-party loggers that are noisy below WARNING.
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3")
# Loggers whose records should reach the root JSON handler instead of their own.
_ROUTED_TO_ROOT = ("uvicorn", "uvicorn.error", "uvicorn.access")

_configured = False


def _add_request_id(_: Any, __: str, event_dict: dict) -> dict:
    rid = get_request_id()
    if rid and "request_id" not in event_dict:
        event_dict["request_id"] = rid
    return event_dict


def _drop_none(_: Any, __: str, event_dict: dict) -> dict:
    return {k: v for k, v in event_dict.items() if v is not None}


def _shared_processors() -> list[Any]:
    # Used both for structlog events and for plain stdlib records.
    return [
        _add_request_id,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _coerce_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level or "").strip().upper() or "INFO")
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(*, level: str | int = "INFO") -> None:
    """One JSON object per line on stdout, for structlog and stdlib loggers alike.

    Idempotent: `create_app()` and the repair worker both call it.
    """
    global _configured
    if _configured:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_shared_processors(),
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(_coerce_level(level))

    for name in _ROUTED_TO_ROOT:
        routed = logging.getLogger(name)
        routed.handlers = []
        routed.propagate = True
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            *_shared_processors(),
            _drop_none,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)
