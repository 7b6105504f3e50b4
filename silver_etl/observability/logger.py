"""
Structured JSON logging for the silver-layer pipeline

Every module logs through a child of the ``silver_etl`` logger, which owns
the single stdout handler. Records carry the entity being loaded (when
known) so a run can be followed per entity in the JSON output.
"""
import logging
import os
import sys
import time
from contextlib import contextmanager
from typing import Iterator

from pythonjsonlogger import jsonlogger

DEFAULT_LOGGER_NAME = "silver_etl"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

# Chatty third-party loggers capped at WARNING
NOISY_LOGGERS = ("py4j", "py4j.clientserver", "psycopg.pool")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with timestamp, level, logger, module and function
    on every record.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname

        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName


def _formatter(format_type: str) -> logging.Formatter:
    if format_type == "json":
        return CustomJsonFormatter(
            fmt="%(timestamp)s %(level)s %(logger)s %(module)s %(function)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    # Text format for local runs
    return logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Attach a stdout handler to ``name``, replacing any existing one.

    Args:
        name: Logger name
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL,
            defaults to the LOG_LEVEL environment variable
        format_type: "json" or "text", defaults to the LOG_FORMAT
            environment variable

    Returns:
        Configured logger instance
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = LOG_LEVELS.get(level_name, logging.INFO)
    format_type = (format_type or os.getenv("LOG_FORMAT", "json")).lower()

    logger = logging.getLogger(name)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(_formatter(format_type))
    logger.addHandler(handler)
    logger.propagate = False

    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(max(log_level, logging.WARNING))

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger, configuring its handler on first use.

    Loggers inside the package (``silver_etl.*``) share the package
    logger's handler; any other name gets a handler of its own.
    """
    in_package = name == DEFAULT_LOGGER_NAME or name.startswith(DEFAULT_LOGGER_NAME + ".")
    owner = logging.getLogger(DEFAULT_LOGGER_NAME if in_package else name)

    if not owner.handlers:
        setup_logger(owner.name)

    return logging.getLogger(name)


class EntityLogAdapter(logging.LoggerAdapter):
    """Adds ``entity`` to the extra fields of every record."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def entity_logger(entity_name: str, logger: logging.Logger | None = None) -> EntityLogAdapter:
    """Logger bound to one entity's load."""
    return EntityLogAdapter(logger or get_logger(), {"entity": entity_name})


@contextmanager
def log_operation(
    operation_name: str,
    logger: logging.Logger | logging.LoggerAdapter | None = None,
    **extra_fields
) -> Iterator[None]:
    """
    Log start, completion (or failure) and duration of an operation.

    Exceptions are logged and re-raised.

    Usage:
        with log_operation("Silver layer load", logger=logger, entity_count=6):
            ...
    """
    logger = logger or get_logger()
    start = time.perf_counter()
    logger.info(
        f"Starting: {operation_name}",
        extra={"operation": operation_name, **extra_fields},
    )

    try:
        yield
    except Exception as e:
        logger.error(
            f"Failed: {operation_name}",
            extra={
                "operation": operation_name,
                "duration_seconds": round(time.perf_counter() - start, 3),
                "status": "error",
                "error_type": type(e).__name__,
                "error_message": str(e),
                **extra_fields,
            },
            exc_info=True,
        )
        raise

    logger.info(
        f"Completed: {operation_name}",
        extra={
            "operation": operation_name,
            "duration_seconds": round(time.perf_counter() - start, 3),
            "status": "success",
            **extra_fields,
        },
    )
