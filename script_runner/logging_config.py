"""
Logging setup for Script Runner.

Loggers returned by get_logger() accept structured fields
(``logger.info_with("Connected", endpoint=url)``); the JSON formatter merges
them into the record, the plain formatter appends them as key=value pairs.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone

ENV_PREFIX = "SCRIPT_RUNNER_LOG_"
PLAIN_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
PLAIN_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _fields(record: logging.LogRecord) -> dict:
    return getattr(record, "extra_fields", None) or {}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
            **_fields(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class FieldsFormatter(logging.Formatter):
    """Plain text formatter that appends structured fields as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = " ".join(f"{k}={v}" for k, v in _fields(record).items())
        return f"{line} {pairs}" if pairs else line


class StructuredLogger(logging.Logger):
    def log_with(self, level: int, msg: str, exc_info: bool = False, **fields):
        if self.isEnabledFor(level):
            self._log(level, msg, (), exc_info=exc_info, extra={"extra_fields": fields})

    def info_with(self, msg: str, **fields):
        self.log_with(logging.INFO, msg, **fields)

    def warning_with(self, msg: str, **fields):
        self.log_with(logging.WARNING, msg, **fields)

    def error_with(self, msg: str, exc_info: bool = False, **fields):
        self.log_with(logging.ERROR, msg, exc_info=exc_info, **fields)

    def debug_with(self, msg: str, **fields):
        self.log_with(logging.DEBUG, msg, **fields)


logging.setLoggerClass(StructuredLogger)


def setup_logging(level: str = None, json_format: bool = None, log_file: str = None) -> logging.Logger:
    """Configure the root logger from arguments, falling back to SCRIPT_RUNNER_LOG_* variables."""
    level = level or os.environ.get(ENV_PREFIX + "LEVEL", "INFO")
    if json_format is None:
        json_format = os.environ.get(ENV_PREFIX + "JSON", "0") == "1"
    log_file = log_file or os.environ.get(ENV_PREFIX + "FILE")

    formatter = JSONFormatter() if json_format else FieldsFormatter(PLAIN_FORMAT, datefmt=PLAIN_DATEFMT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # Access lines duplicate the request logging done in the handler
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> StructuredLogger:
    return logging.getLogger(name)
