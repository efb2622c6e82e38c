import json
import logging
import os
import threading
from pathlib import Path

APP_LOGGER_NAME = "hackerspace"

# JSON key -> LogRecord attribute
DEFAULT_FIELDS = {
    "timestamp": "asctime",
    "level": "levelname",
    "logger": "name",
    "module": "module",
    "function": "funcName",
    "line": "lineno",
    "message": "message",
}


class SingletonLogger:
    """
    Configures the "hackerspace" logger exactly once per process.
    """
    _instance = None
    _lock = threading.Lock()
    _logger = None

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def get_logger(self, name: str = APP_LOGGER_NAME) -> logging.Logger:
        """
        Get the application logger or one of its children.

        Child names ("hackerspace.tools") get their own logger that
        propagates into the configured application logger; any other name
        falls back to the application logger itself.
        """
        if self._logger is None:
            with self._lock:
                if self._logger is None:
                    self._logger = self._configure()
        if name.startswith(APP_LOGGER_NAME + "."):
            return logging.getLogger(name)
        return self._logger

    def _configure(self) -> logging.Logger:
        logger = logging.getLogger(APP_LOGGER_NAME)
        logger.setLevel(logging.DEBUG)
        logger.handlers.clear()

        formatter = JsonFormatter(DEFAULT_FIELDS)
        log_dir = Path(os.environ.get("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)

        # Log files are truncated at startup
        handlers = [
            (logging.FileHandler(log_dir / "hackerspace.log", mode='w', encoding='utf-8'), logging.INFO),
            (logging.FileHandler(log_dir / "errors.log", mode='w', encoding='utf-8'), logging.ERROR),
            (logging.StreamHandler(), _console_level()),
        ]
        for handler, level in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger


def _console_level() -> int:
    return getattr(logging, os.environ.get("LOG_LEVEL", "DEBUG").upper(), logging.DEBUG)


class JsonFormatter(logging.Formatter):
    """
    Render each record as one JSON object.

    Args:
        fields: Mapping of output key to LogRecord attribute; defaults to the message only
        time_format: strftime format for ``asctime``
    """

    def __init__(self, fields: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S"):
        super().__init__(datefmt=time_format)
        self.fields = fields if fields is not None else {"message": "message"}

    def usesTime(self) -> bool:
        return "asctime" in self.fields.values()

    def format(self, record) -> str:
        record.message = record.getMessage()
        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        payload = {key: getattr(record, attr) for key, attr in self.fields.items()}

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            payload["exc_info"] = record.exc_text
        if record.stack_info:
            payload["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(payload, default=str)


def get_logger(name: str = APP_LOGGER_NAME) -> logging.Logger:
    """Logger for a dotted name below "hackerspace" (e.g. "hackerspace.tools.gateway")"""
    return SingletonLogger().get_logger(name)
