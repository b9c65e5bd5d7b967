"""Library-scoped structured logging.

Loggers returned by get_logger() carry their own structlog processor chain and
hand events to the stdlib ``restenvelope`` logger, so importing the envelope
schemas never touches ``structlog.configure`` or the host's logging setup.
Request-scoped context (like request_id) is merged from structlog.contextvars.

Applications that want JSON output for these events call configure_logging()
once at startup; the demo app in main.py does.
"""

import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from structlog.stdlib import BoundLogger

LOGGER_NAME = "restenvelope"
HANDLER_NAME = "restenvelope-json"


def _add_timestamp(
    _logger: object,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO 8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


class LoggingSettings(BaseSettings):
    """Logging settings from environment variables."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


def configure_logging(settings: LoggingSettings | None = None, stream: TextIO | None = None) -> None:
    """Render ``restenvelope`` events as JSON lines on ``stream`` (stdout by default).

    Only the ``restenvelope`` stdlib logger is touched. Calling it again
    replaces the handler installed by the previous call.
    """
    settings = settings or LoggingSettings()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=[
                structlog.stdlib.ExtraAdder(),
                structlog.stdlib.add_log_level,
                structlog.stdlib.add_logger_name,
                _add_timestamp,
                structlog.processors.format_exc_info,
            ],
        )
    )

    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(settings.log_level)
    logger.propagate = False


def get_logger(name: str) -> BoundLogger:
    """Get a structured logger that does not depend on global structlog config.

    Args:
        name: Logger name, typically __name__ (under ``restenvelope``)

    Example:
        logger = get_logger(__name__)
        logger.info("request_completed", status_code=200)
        # With configure_logging():
        # {"event": "request_completed", "status_code": 200, "level": "info", ...}
    """
    return structlog.wrap_logger(  # type: ignore[no-any-return]
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.render_to_log_kwargs,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )
