"""
Structured logging setup for the Image Checker service.
Every event is rendered as one JSON line carrying the service name and the
correlation ID of the request that produced it.
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

import structlog
from structlog.types import FilteringBoundLogger

# Correlation ID of the request currently being handled
correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")

_service_name: str = "image-checker-api"


def get_correlation_id() -> str:
    """Return the correlation ID bound to the current context, if any."""
    return correlation_id_ctx.get()


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """Bind a correlation ID to the current context, generating one when missing."""
    if not correlation_id:
        correlation_id = str(uuid.uuid4())
    correlation_id_ctx.set(correlation_id)
    return correlation_id


def add_correlation_id(logger: FilteringBoundLogger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor: attach the request correlation ID."""
    correlation_id = get_correlation_id()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def add_service_name(logger: FilteringBoundLogger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor: attach the service name."""
    event_dict.setdefault("service", _service_name)
    return event_dict


def setup_logging(log_level: str = "INFO", service_name: str = "image-checker-api") -> FilteringBoundLogger:
    """
    Configure structlog and the standard library root logger.

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        service_name: Value of the ``service`` key on every event

    Returns:
        Root structlog logger
    """
    global _service_name
    _service_name = service_name

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            add_service_name,
            add_correlation_id,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    return structlog.get_logger()


def get_logger(name: Optional[str] = None) -> FilteringBoundLogger:
    """Get a structlog logger, optionally named after a module."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
