"""Logging setup: correlation IDs on every record, diagnostics on stderr."""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import TextIO

# Worker threads show up in the thread name column
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(threadName)s] correlation_id=%(correlation_id)s %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Loggers of the HTTP stack used by the scan transport
HTTP_LOGGERS = ("urllib3", "urllib3.connectionpool", "requests")

correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str:
    """Correlation ID of the current run, generated on first use."""
    corr_id = correlation_id_var.get()
    if corr_id is None:
        corr_id = str(uuid.uuid4())
        correlation_id_var.set(corr_id)
    return corr_id


def set_correlation_id(corr_id: str | None) -> None:
    correlation_id_var.set(corr_id)


class CorrelationIDFilter(logging.Filter):
    """Stamps records with the ambient correlation ID unless the caller passed one in ``extra``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()  # type: ignore[attr-defined]
        return True


def http_log_level(verbose: bool) -> int:
    """Request-level HTTP logs are only wanted in verbose mode."""
    return logging.INFO if verbose else logging.WARNING


def configure_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """
    Install a single root handler with correlation ID support.

    Records go to ``stream`` (stderr by default) so that WFP text and JSON
    results written to stdout can be piped into other tools.

    Args:
        level: Root logging level
        verbose: Let the HTTP stack log at INFO instead of WARNING
        stream: Destination stream (default: ``sys.stderr``)

    Returns:
        The installed handler
    """
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(CorrelationIDFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for logger_name in HTTP_LOGGERS:
        logging.getLogger(logger_name).setLevel(http_log_level(verbose))
    return handler
