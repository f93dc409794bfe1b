import io

import structlog

from jaguar_flux.logger import _format_log_message, get_logger, log_request_performance, setup_logging


def test_format_log_message_renders_key_value_pairs() -> None:
    line = _format_log_message(
        None, "info", {"level": "info", "event": "request_perf", "status": 200}
    )

    assert line.startswith("INFO ")
    assert line.endswith("request_perf status=200")


def test_format_log_message_quotes_values_with_spaces() -> None:
    line = _format_log_message(
        None,
        "warning",
        {"level": "warning", "event": "request_retry", "error": "HTTP error! status: 503"},
    )

    assert line.endswith("request_retry error='HTTP error! status: 503'")


def test_request_performance_is_logged_to_stream() -> None:
    stream = io.StringIO()
    try:
        setup_logging(debug=False, stream=stream)
        log_request_performance(
            endpoint="generate", method="GET", status_code=503, duration_ms=12.34567
        )
        log_request_performance(endpoint="info", method="GET", status_code=None, duration_ms=1.0)
    finally:
        structlog.reset_defaults()

    lines = stream.getvalue().splitlines()
    assert "request_perf" in lines[0]
    assert "outcome=server_error" in lines[0]
    assert "duration_ms=12.346" in lines[0]
    assert "outcome=transport_error" in lines[1]
    assert "[" not in lines[0]


def test_debug_level_filtered_unless_debug() -> None:
    stream = io.StringIO()
    try:
        setup_logging(debug=False, stream=stream)
        get_logger("test").debug("hidden_event")
        setup_logging(debug=True, stream=stream)
        get_logger("test").debug("shown_event")
    finally:
        structlog.reset_defaults()

    output = stream.getvalue()
    assert "hidden_event" not in output
    assert "shown_event" in output
    assert "[test_logger.py:test_debug_level_filtered_unless_debug:" in output
