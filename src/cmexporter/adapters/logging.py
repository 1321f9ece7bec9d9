"""Python logging handler adapter for the exporter's own log records.

Bridges the standard library logging module to LogStoragePort so recent
scrape diagnostics can be served on /logs.
"""

import logging
import sys
import traceback

from cmexporter.core.models import LogEntry
from cmexporter.core.ports import LogStoragePort

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class LogBufferHandler(logging.Handler):
    """Logging handler that writes log records to a LogStoragePort.

    Example:
        ```python
        storage = RingBufferLogStorage(max_size=1000)
        logging.getLogger("cmexporter").addHandler(LogBufferHandler(storage))
        ```
    """

    def __init__(self, storage: LogStoragePort, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._storage = storage

    def emit(self, record: logging.LogRecord) -> None:
        """Emit a log record to the storage backend."""
        attributes: dict[str, str | int | float | bool] = {
            "logger": record.name,
            "funcName": record.funcName or "",
            "lineno": record.lineno,
        }

        # Extra attributes passed via logging call
        for key, value in record.__dict__.items():
            if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                value, (str, int, float, bool)
            ):
                attributes[key] = value

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            if exc_type is not None:
                attributes["exc_type"] = exc_type.__name__
            if exc_value is not None:
                attributes["exc_message"] = str(exc_value)
            if exc_tb is not None:
                attributes["exc_traceback"] = "".join(
                    traceback.format_exception(exc_type, exc_value, exc_tb)
                )

        try:
            message = record.getMessage()
        except Exception:
            self.handleError(record)
            return

        self._storage.write(
            LogEntry(
                timestamp=record.created,
                level=record.levelname,
                message=message,
                attributes=attributes,
            )
        )


def configure_logging(
    level: str, storage: LogStoragePort | None = None
) -> logging.Logger:
    """Configure the ``cmexporter`` logger hierarchy.

    Installs a stderr stream handler and, when storage is given, a
    LogBufferHandler feeding it. Calling it again replaces the handlers.

    Args:
        level: Level name (e.g., "INFO").
        storage: Optional log storage backing the /logs endpoint.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("cmexporter")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream)
    if storage is not None:
        logger.addHandler(LogBufferHandler(storage))
    logger.propagate = False
    return logger
