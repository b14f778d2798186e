"""
Notibell Logging Service

Four file logs under ``logging.log_dir``:

- ``info.log``        general information and debug output
- ``error.log``       warnings and errors with call-site detail
- ``performance.log`` durations recorded through :func:`timer`
- ``structured.log``  one JSON object per notification event (refreshes,
  mark-all-read) for later analysis

Modules import the module-level helpers (``info``, ``error``, ``timer``...)
which forward to a global :class:`LogService`.
"""

import logging
import logging.handlers
import json
import time
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Iterator
from contextlib import contextmanager

from notibell.utils.config_service import (
    get_config_service,
    ConfigurationService,
)

LOGGER_PREFIX = "notibell"

PLAIN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
# More detail for errors
ERROR_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(funcName)s - %(message)s"
PERFORMANCE_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonEventFormatter(logging.Formatter):
    """Render a record and its ``extra_fields`` as a single JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "event": record.getMessage(),
            "module": record.module,
        }
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class LogService:
    """File-backed logging for the notification widget."""

    def __init__(self, config_service: Optional[ConfigurationService] = None):
        """Without an explicit ``config_service`` the global one is used;
        when none has been set the built-in defaults apply."""
        self.config_service = config_service or get_config_service()
        self._loggers: Dict[str, logging.Logger] = {}
        self._handlers: Dict[str, logging.Handler] = {}

        self.log_level = str(self._setting("logging.level", "INFO")).upper()
        self.log_dir = Path(self._setting("logging.log_dir", "data/logs"))
        self.rotation_mb = int(self._setting("logging.log_file_rotation_mb", 10))
        self.retention_days = int(self._setting("logging.retention_days", 30))
        self.log_dir.mkdir(parents=True, exist_ok=True)

        level = getattr(logging, self.log_level, logging.INFO)
        self._add_logger("info", self._size_rotating("info.log"), logging.Formatter(PLAIN_FORMAT, DATE_FORMAT), level)
        self._add_logger("error", self._size_rotating("error.log"), logging.Formatter(ERROR_FORMAT, DATE_FORMAT),
                         logging.WARNING)
        self._add_logger("performance", self._daily_rotating("performance.log"),
                         logging.Formatter(PERFORMANCE_FORMAT, DATE_FORMAT), logging.INFO)
        self._add_logger("structured", self._daily_rotating("structured.log"), JsonEventFormatter(), logging.INFO)

    def _setting(self, path: str, default: Any) -> Any:
        if self.config_service is None:
            return default
        return self.config_service.get(path, default=default) or default

    def _size_rotating(self, filename: str) -> logging.Handler:
        return logging.handlers.RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=self.rotation_mb * 1024 * 1024,
            backupCount=10,
            encoding="utf-8",
        )

    def _daily_rotating(self, filename: str) -> logging.Handler:
        return logging.handlers.TimedRotatingFileHandler(
            self.log_dir / filename,
            when="midnight",
            backupCount=self.retention_days,
            encoding="utf-8",
        )

    def _add_logger(self, name: str, handler: logging.Handler, formatter: logging.Formatter, level: int) -> None:
        logger = logging.getLogger(f"{LOGGER_PREFIX}.{name}")
        logger.setLevel(level)
        logger.handlers.clear()
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        self._loggers[name] = logger
        self._handlers[name] = handler

    def _log(self, name: str, level: int, message: str, exc_info=None, fields: Optional[Dict[str, Any]] = None) -> None:
        logger = self._loggers.get(name)
        if logger is not None:
            # stacklevel points the error log at the caller of the module helper
            logger.log(level, message, exc_info=exc_info, extra={"extra_fields": fields or {}}, stacklevel=4)

    def info(self, message: str, **kwargs) -> None:
        self._log("info", logging.INFO, message, fields=kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._log("info", logging.DEBUG, message, fields=kwargs)

    def warning(self, message: str, exc_info=None, **kwargs) -> None:
        self._log("error", logging.WARNING, message, exc_info=exc_info, fields=kwargs)

    def error(self, message: str, exc_info=None, **kwargs) -> None:
        self._log("error", logging.ERROR, message, exc_info=exc_info, fields=kwargs)

    def performance(self, operation: str, duration: float, metadata: Optional[Dict[str, Any]] = None) -> None:
        message = f"{operation}: {duration:.3f}s"
        if metadata:
            message += f" | {metadata}"
        self._log("performance", logging.INFO, message,
                  fields={"operation": operation, "duration": duration, "metadata": metadata or {}})

    @contextmanager
    def timer(self, operation: str, metadata: Optional[Dict[str, Any]] = None) -> Iterator[None]:
        """Record how long the ``with`` block took in performance.log"""
        start_time = time.perf_counter()
        try:
            yield
        finally:
            self.performance(operation, time.perf_counter() - start_time, metadata)

    def structured(self, event: str, data: Optional[Dict[str, Any]] = None, level: str = "INFO") -> None:
        """Append ``event`` with ``data`` as one JSON line to structured.log"""
        self._log("structured", getattr(logging, level.upper(), logging.INFO), event, fields=data)

    def close(self) -> None:
        """Detach and close all file handlers"""
        for name, handler in list(self._handlers.items()):
            self._loggers[name].removeHandler(handler)
            handler.close()
        self._handlers.clear()
        self._loggers.clear()


# Global instance
_log_service_instance: Optional[LogService] = None
_instance_lock = threading.Lock()


def get_log_service() -> LogService:
    """Get the global log service instance"""
    global _log_service_instance
    if _log_service_instance is None:
        with _instance_lock:
            if _log_service_instance is None:
                _log_service_instance = LogService()
    return _log_service_instance


def set_log_service(service: Optional[LogService]) -> None:
    """Replace the global log service instance"""
    global _log_service_instance
    with _instance_lock:
        _log_service_instance = service


# Convenience functions
def info(message: str, **kwargs):
    get_log_service().info(message, **kwargs)


def warning(message: str, exc_info=None, **kwargs):
    get_log_service().warning(message, exc_info=exc_info, **kwargs)


def error(message: str, exc_info=None, **kwargs):
    get_log_service().error(message, exc_info=exc_info, **kwargs)


def debug(message: str, **kwargs):
    get_log_service().debug(message, **kwargs)


def timer(operation: str, metadata: Optional[Dict[str, Any]] = None):
    """Timer context manager using global instance"""
    return get_log_service().timer(operation, metadata)


def structured(event: str, data: Optional[Dict[str, Any]] = None, level: str = "INFO"):
    """Log structured event using global instance"""
    get_log_service().structured(event, data, level)
