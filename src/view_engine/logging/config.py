"""
Logging setup for the view engine command line.
"""
import os
import json
import logging
import logging.handlers
from pathlib import Path
from typing import List, Optional
from datetime import datetime, timezone

# Record attributes the engine attaches through ``extra=``
RENDER_FIELDS = ('view', 'location', 'helper')

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class JsonFormatter(logging.Formatter):
    """Formats each record as one JSON object, render fields included."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        for key in RENDER_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload['exception'] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class LogConfig:
    """Root logger configuration: stderr, plus an optional rotating log file."""

    def __init__(
        self,
        log_level: str = 'WARNING',
        log_file: Optional[str] = None,
        json_logging: bool = False,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3
    ):
        """
        Initialize the logging configuration.

        Args:
            log_level: Level name, unknown names fall back to WARNING
            log_file: Optional log file, rotated at ``max_bytes``
            json_logging: Emit JSON lines instead of plain text
            max_bytes: Size at which the log file rotates
            backup_count: Rotated files to keep
        """
        self.log_level = getattr(logging, log_level.upper(), logging.WARNING)
        self.log_file = log_file
        self.json_logging = json_logging
        self.max_bytes = max_bytes
        self.backup_count = backup_count

    def formatter(self) -> logging.Formatter:
        return JsonFormatter() if self.json_logging else logging.Formatter(DEFAULT_FORMAT)

    def handlers(self) -> List[logging.Handler]:
        """Build the handlers; rendered output owns stdout, so logs go to stderr."""
        handlers: List[logging.Handler] = [logging.StreamHandler()]

        if self.log_file:
            log_dir = os.path.dirname(self.log_file)
            if log_dir:
                Path(log_dir).mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=self.max_bytes,
                backupCount=self.backup_count,
                encoding='utf-8'
            ))

        formatter = self.formatter()
        for handler in handlers:
            handler.setFormatter(formatter)
            handler.setLevel(self.log_level)
        return handlers

    def configure(self) -> None:
        """Replace the root logger's handlers with this configuration's."""
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        for handler in self.handlers():
            root_logger.addHandler(handler)


def setup_logging(log_level: str = 'WARNING', log_file: Optional[str] = None, json_logging: bool = False) -> None:
    """Shortcut for configuring logging with a LogConfig."""
    LogConfig(log_level=log_level, log_file=log_file, json_logging=json_logging).configure()
