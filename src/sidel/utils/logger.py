# sidel/utils/logger.py
"""
Logging utilities for sidel.

The highlighter runs on every keystroke, so handler setup and log directory
creation are deferred until a logger or file logging is actually requested.
"""

import logging
import os
import sys
import threading
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from pathlib import Path

# Lazy-loaded module references
_logging_handlers = None


def _get_logging_handlers():
    """Lazy import of logging.handlers."""
    global _logging_handlers
    if _logging_handlers is None:
        import logging.handlers as lh

        _logging_handlers = lh
    return _logging_handlers


class LogLevel:
    """Log levels for the library (lightweight enum alternative)."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


LEVEL_NAMES = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARNING": LogLevel.WARNING,
    "ERROR": LogLevel.ERROR,
    "CRITICAL": LogLevel.CRITICAL,
}


class LoggerConfig:
    """
    Configuration for the logging system.

    The log directory is only created once file logging is enabled.
    """

    def __init__(self):
        self._log_dir = None
        self.max_file_size = 5 * 1024 * 1024  # 5MB
        self.backup_count = 3
        self.log_to_file = False
        self.console_level = LogLevel.WARNING
        self.file_level = LogLevel.DEBUG

    @property
    def log_dir(self) -> "Path":
        """Get log directory, creating it if necessary."""
        if self._log_dir is None:
            from ..settings.config import get_config_paths

            self._log_dir = get_config_paths().LOG_DIR
            self._log_dir.mkdir(parents=True, exist_ok=True)
        return self._log_dir

    @property
    def main_log_file(self) -> "Path":
        return self.log_dir / "sidel.log"


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output that preserves alignment."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record):
        """
        Pads and colors the level name without letting the escape codes
        break the column alignment.
        """
        levelname = record.levelname
        padding_width = 8

        if levelname in self.COLORS:
            padding = " " * (padding_width - len(levelname))
            record.levelname = (
                f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}{padding}"
            )
        else:
            record.levelname = f"{levelname:<{padding_width}}"

        try:
            return super().format(record)
        finally:
            # Other handlers in the chain need the original level name.
            record.levelname = levelname


class ThreadSafeLogger:
    """Thread-safe logger wrapper with lazily built handlers."""

    def __init__(self, name: str, config: LoggerConfig):
        self.name = name
        self.config = config
        self._logger = logging.getLogger(name)
        self._lock = threading.Lock()
        self._setup_logger()

    def _setup_logger(self):
        """Set up handlers and formatters from the current config."""
        with self._lock:
            for handler in list(self._logger.handlers):
                self._logger.removeHandler(handler)
                handler.close()

            self._logger.propagate = False
            self._logger.setLevel(logging.DEBUG)

            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(self.config.console_level)
            console_handler.setFormatter(
                ColoredFormatter(
                    fmt="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
                    datefmt="%H:%M:%S",
                )
            )
            self._logger.addHandler(console_handler)

            if self.config.log_to_file:
                handlers_module = _get_logging_handlers()
                file_handler = handlers_module.RotatingFileHandler(
                    self.config.main_log_file,
                    maxBytes=self.config.max_file_size,
                    backupCount=self.config.backup_count,
                    encoding="utf-8",
                )
                file_handler.setLevel(self.config.file_level)
                file_handler.setFormatter(
                    logging.Formatter(
                        fmt="%(asctime)s | %(name)s | %(levelname)-8s | %(funcName)s:%(lineno)d | %(message)s",
                        datefmt="%Y-%m-%d %H:%M:%S",
                    )
                )
                self._logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs):
        self._logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self._logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._logger.warning(message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        self._logger.error(message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, exc_info: bool = True, **kwargs):
        self._logger.critical(message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        self._logger.exception(message, **kwargs)


class LoggerManager:
    """Centralized logger manager."""

    _instance: Optional["LoggerManager"] = None
    _lock = threading.RLock()

    def __new__(cls) -> "LoggerManager":
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self.config = LoggerConfig()
        self._loggers: Dict[str, ThreadSafeLogger] = {}

    def get_logger(self, name: str) -> ThreadSafeLogger:
        if name not in self._loggers:
            with self._lock:
                if name not in self._loggers:
                    self._loggers[name] = ThreadSafeLogger(name, self.config)
        return self._loggers[name]

    def reconfigure_all_loggers(self):
        """Re-applies configuration to all existing logger instances."""
        with self._lock:
            for logger in self._loggers.values():
                logger._setup_logger()

    def set_console_level(self, level: int):
        with self._lock:
            self.config.console_level = level
            self.reconfigure_all_loggers()

    def set_log_to_file_enabled(self, enabled: bool):
        with self._lock:
            if self.config.log_to_file != enabled:
                self.config.log_to_file = enabled
                self.reconfigure_all_loggers()

    def enable_debug_mode(self):
        self.set_console_level(LogLevel.DEBUG)
        os.environ["SIDEL_DEBUG"] = "1"

    def disable_debug_mode(self):
        self.set_console_level(LogLevel.WARNING)
        os.environ.pop("SIDEL_DEBUG", None)


_logger_manager = LoggerManager()


def get_logger(name: str = None) -> ThreadSafeLogger:
    """Get a logger instance."""
    if name is None:
        import inspect

        frame = inspect.currentframe()
        try:
            name = frame.f_back.f_globals.get("__name__", "sidel")
        finally:
            del frame
    return _logger_manager.get_logger(name)


def set_console_log_level(level_str: str) -> bool:
    """Set console logging level globally from a string."""
    level = LEVEL_NAMES.get(level_str.upper())
    if level is None:
        get_logger("sidel").error(f"Invalid log level string: {level_str}")
        return False
    _logger_manager.set_console_level(level)
    return True


def set_log_to_file_enabled(enabled: bool):
    """Enable or disable logging to files globally."""
    _logger_manager.set_log_to_file_enabled(enabled)


def enable_debug_mode():
    """Enable debug mode for all loggers."""
    _logger_manager.enable_debug_mode()


def disable_debug_mode():
    """Disable debug mode for all loggers."""
    _logger_manager.disable_debug_mode()


def log_error_with_context(error: Exception, context: str, logger_name: str = None):
    """Log an error with context information."""
    logger = get_logger(logger_name or "sidel")
    logger.error(f"Error in {context}: {error}", exc_info=True)
