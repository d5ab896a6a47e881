"""
Structured logging for the Product Catalog Service.

Every entry carries the service name, environment, the request correlation ID and an
optional metadata dict. Output is JSON or colored console lines depending on
LOG_FORMAT; files are always written as JSON.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from app.core.config import config
from app.middleware.correlation_id import get_correlation_id

# Keys StructuredLogger attaches to each LogRecord
ENTRY_KEYS = ("timestamp", "level", "service", "environment", "correlationId", "userId", "metadata")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, built from the structured entry on the record"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {key: getattr(record, key) for key in ENTRY_KEYS if hasattr(record, key)}
        entry.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
        entry.setdefault("level", record.levelname)
        entry.setdefault("service", config.service_name)
        entry["message"] = record.getMessage()
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Colored single-line output for local development"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        when = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{color}[{when}] {record.levelname}{self.RESET}"

        correlation_id = getattr(record, "correlationId", None)
        if correlation_id:
            line += f" [{correlation_id}]"
        line += f" - {record.getMessage()}"

        event = (getattr(record, "metadata", None) or {}).get("event")
        if event:
            line += f" ({event})"
        return line


class StructuredLogger:
    """Thin wrapper over a stdlib logger that attaches the structured entry as ``extra``"""

    def __init__(self, name: Optional[str] = None):
        self.service_name = config.service_name
        self.environment = config.environment
        self._logger = logging.getLogger(name or config.service_name)
        self._configure()

    def _configure(self):
        level = getattr(logging, config.log_level.upper(), logging.INFO)
        self._logger.handlers.clear()
        self._logger.setLevel(level)
        self._logger.propagate = False

        if config.log_to_console:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(JSONFormatter() if config.log_format == "json" else ConsoleFormatter())
            self._logger.addHandler(handler)

        if config.log_to_file:
            directory = os.path.dirname(config.log_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            handler = logging.FileHandler(config.log_file_path)
            handler.setFormatter(JSONFormatter())
            self._logger.addHandler(handler)

    def _entry(
        self,
        level: int,
        correlation_id: Optional[str],
        user_id: Optional[str],
        metadata: Optional[Dict[str, Any]],
    ) -> Dict[str, Any]:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": logging.getLevelName(level),
            "service": self.service_name,
            "environment": self.environment,
            "correlationId": correlation_id or get_correlation_id(),
        }
        if user_id:
            entry["userId"] = user_id
        if metadata:
            entry["metadata"] = metadata
        return entry

    def _log(self, level: int, message: str, correlation_id=None, user_id=None, metadata=None):
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra=self._entry(level, correlation_id, user_id, metadata))

    def debug(self, message: str, correlation_id: Optional[str] = None,
              user_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
        self._log(logging.DEBUG, message, correlation_id, user_id, metadata)

    def info(self, message: str, correlation_id: Optional[str] = None,
             user_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
        self._log(logging.INFO, message, correlation_id, user_id, metadata)

    def warning(self, message: str, correlation_id: Optional[str] = None,
                user_id: Optional[str] = None, metadata: Optional[Dict[str, Any]] = None):
        self._log(logging.WARNING, message, correlation_id, user_id, metadata)

    def error(
        self,
        message: str,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
        error: Optional[Union[str, Exception]] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Error level logging; ``error`` is folded into the metadata"""
        metadata = dict(metadata or {})
        if isinstance(error, Exception):
            metadata["error"] = {"type": type(error).__name__, "message": str(error)}
        elif error:
            metadata["error"] = {"message": str(error)}
        self._log(logging.ERROR, message, correlation_id, user_id, metadata)


logger = StructuredLogger()
