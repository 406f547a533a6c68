import logging

import structlog

from paydesk.core.config import settings


def configure_logging(level: str = "INFO") -> None:
    timestamper = structlog.processors.TimeStamper(fmt="iso")
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        timestamper,
        structlog.processors.add_log_level,
    ]

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.ENVIRONMENT == "development" and settings.DEBUG
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=shared_processors + [structlog.processors.format_exc_info, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
    )

    logging.basicConfig(level=level)


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger tagged with the service and the emitting module."""
    return structlog.get_logger(name).bind(
        service=settings.PROJECT_NAME,
        environment=settings.ENVIRONMENT,
        logger=name,
    )
