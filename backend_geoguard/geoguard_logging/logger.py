"""
Structured logging for the location engine and its API.

One JSON object per line on stdout. Every record carries `event_type`,
`level`, `logger` and an ISO-8601 UTC `timestamp`; engine events add their
own keys. Events emitted by the engine:

- anti_spoofing_evaluated: employee_id, risk_score, uncapped_score, is_valid,
  risk_flags, verified
- location_gate_blocked: reason, distance, accuracy
- ip_cross_check_failed, ip_geolocation_timeout, ip_geolocation_request_failed,
  ip_geolocation_invalid_json, ip_geolocation_malformed_payload,
  ip_geolocation_error_payload, ip_geolocation_resolved
- api_settings_loaded, api_geoguard_error, location_verify_called, api_shutdown

Raw coordinates of employees are not logged; only distances and accuracy.

Must not import other backend_geoguard modules (config imports would be
circular); LOG_LEVEL / LOG_FORMAT are read straight from the environment.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import structlog

DEFAULT_LOG_LEVEL = "INFO"
# "json" for aggregation, anything else renders for a terminal
DEFAULT_LOG_FORMAT = "json"


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _event_type(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _enum_values(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Render RiskFlag / VerificationFailure / IpCheckStatus members by value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
        elif isinstance(value, (list, tuple, set, frozenset)) and any(isinstance(v, Enum) for v in value):
            event_dict[key] = sorted(v.value if isinstance(v, Enum) else v for v in value)
    return event_dict


def configure_structlog(level: str | None = None, fmt: str | None = None) -> None:
    """
    (Re)configure structlog. Arguments override LOG_LEVEL / LOG_FORMAT.

    Loggers created before a reconfiguration keep the settings they were
    created with.
    """
    level_name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    level_value = getattr(logging, level_name, logging.INFO)
    output = (fmt or os.getenv("LOG_FORMAT") or DEFAULT_LOG_FORMAT).strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        _add_timestamp,
        _event_type,
        _enum_values,
    ]
    if output == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger with `logger=<name>` bound.

        logger = get_logger(__name__)
        logger.warning("ip_geolocation_timeout", timeout_sec=5.0)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_employee(employee_id: str) -> structlog.BoundLogger:
    """Logger for one evaluation: employee_id is attached to every record."""
    return get_logger("backend_geoguard.location").bind(employee_id=employee_id)
