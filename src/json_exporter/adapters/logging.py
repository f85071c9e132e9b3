"""Python logging handler adapter for collector diagnostics.

This adapter bridges Python's standard library logging module to the
LogStoragePort, so extraction failures can be inspected after a scrape.
"""

import logging

from json_exporter.core.models import LogEntry
from json_exporter.core.ports import LogStoragePort

PACKAGE_LOGGER = "json_exporter"

# Levels accepted by configure_logging, keyed by their flag spelling
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

# Extra fields the collector attaches to its log calls
DIAGNOSTIC_FIELDS = (
    "path",
    "metric",
    "type",
    "value",
    "count",
    "result",
    "error",
    "error_type",
)


class DiagnosticsHandler(logging.Handler):
    """Logging handler that writes collector diagnostics to a LogStoragePort.

    The diagnostic extras of a record (``path``, ``metric``, ``error`` and
    friends) become LogEntry attributes, together with the logger name.

    Example:
        ```python
        from json_exporter import DiagnosticsHandler, InMemoryLogStorage

        storage = InMemoryLogStorage()
        logging.getLogger("json_exporter").addHandler(DiagnosticsHandler(storage))
        ```
    """

    def __init__(self, storage: LogStoragePort, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._storage = storage

    def emit(self, record: logging.LogRecord) -> None:
        attributes: dict[str, str | int | float | bool] = {"logger": record.name}
        for key in DIAGNOSTIC_FIELDS:
            value = getattr(record, key, None)
            if isinstance(value, str | int | float | bool):
                attributes[key] = value
        if record.exc_info and record.exc_info[1] is not None:
            attributes.setdefault("error", str(record.exc_info[1]))
            attributes.setdefault("error_type", type(record.exc_info[1]).__name__)

        self._storage.write(
            LogEntry(
                timestamp=record.created,
                level=record.levelname,
                message=record.getMessage(),
                attributes=attributes,
            )
        )


def configure_logging(
    level: str = "info", storage: LogStoragePort | None = None
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: One of "debug", "info", "warn" or "error".
        storage: If given, diagnostics are also written to this storage.

    Returns:
        The configured package logger.

    Raises:
        ValueError: If the level is unknown.
    """
    try:
        numeric_level = LOG_LEVELS[level.lower()]
    except KeyError:
        raise ValueError(
            f"unknown log level {level!r}, expected one of {sorted(LOG_LEVELS)}"
        ) from None
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)
    for handler in list(logger.handlers):
        if isinstance(handler, DiagnosticsHandler):
            logger.removeHandler(handler)
    if storage is not None:
        logger.addHandler(DiagnosticsHandler(storage))
    return logger
