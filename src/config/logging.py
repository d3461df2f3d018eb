"""
Logging Configuration for the Sales Reports Platform

Structured logging shared by the CLI, the Prefect workflow and the API:
- Every entry carries the service name and environment
- Pipeline steps bind a run id and step name (see bind_run_context)
- Decimal amounts are rendered exactly, as text
- HTTP client chatter from extraction is kept at WARNING unless debugging
"""

import logging
import sys
import uuid
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter
from structlog.types import EventDict, Processor, WrappedLogger

from src.config.settings import Settings, get_settings

# Server loggers re-routed through our handler
SERVER_LOGGERS = ["uvicorn", "uvicorn.error", "uvicorn.access", "gunicorn.error"]

# WooCommerce paging logs one line per request at INFO
QUIET_LOGGERS: Dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}


def render_money(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Log Decimal amounts as '650.00', not Decimal('650.00') or a float"""
    for key, value in list(event_dict.items()):
        if isinstance(value, Decimal):
            event_dict[key] = str(value)
    return event_dict


def service_context(settings: Settings) -> Processor:
    """Processor stamping the service name and environment on each entry"""
    service = {"service": settings.app_name, "environment": settings.app_env}

    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in service.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_service


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def _shared_processors(settings: Settings) -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        service_context(settings),
        render_money,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for the CLI, the workflow or the API.

    Args:
        log_level: Override LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
        log_format: Override LOG_FORMAT ("json" or "text")
    """
    settings = get_settings()
    level = (log_level or settings.monitoring.log_level).upper()
    fmt = log_format or settings.monitoring.log_format
    numeric_level = getattr(logging, level, logging.INFO)

    shared_processors = _shared_processors(settings)
    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(processor=_renderer(fmt), foreign_pre_chain=shared_processors))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    for name in SERVER_LOGGERS:
        server_logger = logging.getLogger(name)
        server_logger.handlers = [handler]
        server_logger.setLevel(numeric_level)
        server_logger.propagate = False

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(
            numeric_level if numeric_level <= logging.DEBUG else max(quiet_level, numeric_level)
        )

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=fmt,
        timezone=settings.report.timezone,
    )


@contextmanager
def bind_run_context(step: str, run_id: Optional[str] = None, **context: Any) -> Iterator[str]:
    """
    Bind a pipeline run id and step name to every log entry in the block.

    Example:
        with bind_run_context("process", report_path="data/processed/sales_reports.json") as run_id:
            run_processing()

    Yields:
        The bound run id (generated when not given)
    """
    run_id = run_id or uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(run_id=run_id, step=step, **context):
        yield run_id
