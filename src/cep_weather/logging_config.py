"""Centralized logging configuration."""

import logging

from opentelemetry import trace

from cep_weather.config import LOG_LEVEL


class TraceContextFilter(logging.Filter):
    """Stamp every record with the trace id of the active span."""

    def filter(self, record: logging.LogRecord) -> bool:
        span_context = trace.get_current_span().get_span_context()
        if span_context.is_valid:
            record.trace_id = format(span_context.trace_id, "032x")
        else:
            record.trace_id = "-"
        return True


def configure_logging(level: str = LOG_LEVEL):
    """
    Configure a consistent logging format for both services.
    """
    # Define the standard formatter
    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - [trace_id=%(trace_id)s] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    trace_filter = TraceContextFilter()

    # Configure the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(trace_filter)
    root_logger.addHandler(console_handler)

    # Third-party loggers get their own handler with the same format
    loggers_to_configure = [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpx",
        "fastapi",
    ]

    for logger_name in loggers_to_configure:
        logger = logging.getLogger(logger_name)
        # httpx logs full request URLs, which carry the weather API key
        logger.setLevel(logging.WARNING if logger_name == "httpx" else level)

        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        # Don't propagate to avoid duplicate messages
        logger.propagate = False

        handler = logging.StreamHandler()
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(trace_filter)

        logger.addHandler(handler)
