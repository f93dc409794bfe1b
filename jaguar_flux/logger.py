"""Structured logging configuration using structlog."""

import logging
from typing import Any, TextIO

import structlog

# Both the client and this module are skipped so perf lines point at the request site.
_CALLSITE = structlog.processors.CallsiteParameterAdder(
    [
        structlog.processors.CallsiteParameter.FILENAME,
        structlog.processors.CallsiteParameter.FUNC_NAME,
        structlog.processors.CallsiteParameter.LINENO,
    ],
    additional_ignores=["jaguar_flux.logger"],
)


def _render_value(value: Any) -> str:
    text = str(value)
    if not text or any(ch.isspace() for ch in text) or "=" in text:
        return repr(text)
    return text


def _format_log_message(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict,
) -> str:
    """
    Render an event as a single line.

    Produces output like: 12:00:01 INFO    [client.py:_request:301] request_perf status=200
    Values containing whitespace are quoted so lines stay splittable on spaces.
    """
    timestamp = event_dict.pop("timestamp", None)
    level = event_dict.pop("level", "info").upper()
    event = event_dict.pop("event", "")

    filename = event_dict.pop("filename", None)
    func_name = event_dict.pop("func_name", None)
    lineno = event_dict.pop("lineno", None)

    parts = [f"{level:<7}"]
    if timestamp:
        parts.insert(0, timestamp)
    if filename:
        parts.append(f"[{filename}:{func_name}:{lineno}]")
    parts.append(str(event))
    parts.extend(f"{k}={_render_value(v)}" for k, v in event_dict.items())
    return " ".join(parts)


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> None:
    """
    Configure structlog for the client.

    Args:
        debug: Emit debug events and tag each line with its call site
        stream: Destination for log lines (stdout by default)
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
    ]
    if debug:
        processors.append(_CALLSITE)
    processors.append(_format_log_message)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,  # Allow reconfiguration
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def _outcome_from_status(status_code: int | None) -> str:
    if status_code is None:
        return "transport_error"
    if 200 <= status_code < 400:
        return "success"
    if 400 <= status_code < 500:
        return "client_error"
    return "server_error"


def log_request_performance(
    *,
    endpoint: str,
    method: str,
    status_code: int | None,
    duration_ms: float,
) -> None:
    """Emit one structured line per outbound API attempt."""
    get_logger("jaguar_flux.performance").info(
        "request_perf",
        endpoint=endpoint,
        method=method,
        status=status_code,
        outcome=_outcome_from_status(status_code),
        duration_ms=round(duration_ms, 3),
    )
