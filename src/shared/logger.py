import structlog
import logging
import sys
from typing import Any, Dict

def configure_logging(level: int = logging.INFO):
    """
    Configures structured logging for the viewer.
    Renders every event as a single JSON line on stdout.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    # httpx logs every outbound request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

def get_logger(name: str = None):
    return structlog.get_logger(name)

def bind_context(context: Dict[str, Any]):
    """
    Binds additional context to all subsequent log calls in the current context.
    Example: bind_context({"reference": "github.com/org/repo/blob/main/main.cwl"})
    """
    structlog.contextvars.bind_contextvars(**context)

def unbind_context(*keys: str):
    structlog.contextvars.unbind_contextvars(*keys)
