"""
Logging setup for Robespierre.

The library itself only ever calls ``logging.getLogger(__name__)``; nothing
is printed until the embedding application configures handlers. This module
is the helper bots use to do that:

- Console output with colored level names
- Optional rotating file output (plus a separate errors-only file)
- JSON output for log aggregation
- Per-component level overrides (e.g. silencing ``websockets`` frames)

Usage:
    from Robespierre.core.logging import auto_configure, get_logger

    auto_configure("development")
    logger = get_logger(__name__)
    logger.info("Bot starting")
"""

import json
import logging
import logging.handlers
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union


class LogLevel:
    """Log level constants."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


@dataclass
class LogConfig:
    """
    Configuration for the logging system.

    Attributes:
        level: Minimum log level name
        log_dir: Directory for log files
        console_output: Whether to log to stdout
        file_output: Whether to log to rotating files
        json_output: Emit JSON lines on the console instead of colored text
        max_bytes: Size of a log file before rotation
        backup_count: Rotated files to keep
        format_string: Custom format string
        date_format: Custom date format
        component_levels: Logger name -> level name overrides
    """
    level: str = "INFO"
    log_dir: str = "./logs"
    console_output: bool = True
    file_output: bool = False
    json_output: bool = False
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    format_string: Optional[str] = None
    date_format: str = "%Y-%m-%d %H:%M:%S"
    component_levels: Dict[str, str] = field(default_factory=dict)


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name on terminals."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and sys.platform != 'win32' and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors or record.levelname not in self.COLORS:
            return super().format(record)

        # colour a copy so file handlers sharing the record see plain text
        original = record.levelname
        record.levelname = f"{self.COLORS[original]}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JsonFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'extra_data'):
            log_data.update(record.extra_data)

        return json.dumps(log_data, default=str)


def get_default_format() -> str:
    """Get the default log format string."""
    return "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_detailed_format() -> str:
    """Get a log format string that includes the call site."""
    return (
        "%(asctime)s - %(name)s - %(levelname)s - "
        "[%(filename)s:%(lineno)d - %(funcName)s] - %(message)s"
    )


def _level(name: Union[str, int]) -> int:
    if isinstance(name, int):
        return name
    return getattr(logging, name.upper())


class LoggingManager:
    """
    Process-wide owner of the root logger's handlers.

    Configuring twice replaces the handlers installed by the previous call,
    so bots can switch environments without duplicating output.
    """

    _instance: Optional['LoggingManager'] = None
    _initialized: bool = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._config: Optional[LogConfig] = None
        self._handlers: List[logging.Handler] = []
        self._initialized = True

    @property
    def config(self) -> Optional[LogConfig]:
        return self._config

    def configure(self, config: LogConfig) -> None:
        """
        Install handlers on the root logger according to ``config``.

        Args:
            config: Logging configuration
        """
        self._config = config
        level = _level(config.level)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in self._handlers:
            root_logger.removeHandler(handler)
            handler.close()
        self._handlers = []

        if config.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            if config.json_output:
                console_handler.setFormatter(JsonFormatter())
            else:
                fmt = config.format_string or get_default_format()
                console_handler.setFormatter(ColoredFormatter(fmt, config.date_format))
            self.add_handler(console_handler)

        if config.file_output:
            Path(config.log_dir).mkdir(parents=True, exist_ok=True)
            formatter = logging.Formatter(
                config.format_string or get_detailed_format(), config.date_format
            )

            file_handler = logging.handlers.RotatingFileHandler(
                os.path.join(config.log_dir, "robespierre.log"),
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            self.add_handler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                os.path.join(config.log_dir, "robespierre_errors.log"),
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(formatter)
            self.add_handler(error_handler)

        for component, component_level in config.component_levels.items():
            logging.getLogger(component).setLevel(_level(component_level))

        logging.getLogger(__name__).debug("Logging configured with level: %s", config.level)

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def set_level(self, level: Union[str, int]) -> None:
        """
        Set the level of the root logger and every managed handler.

        Args:
            level: Level name or logging constant
        """
        level = _level(level)
        logging.getLogger().setLevel(level)

        for handler in self._handlers:
            if handler.level != logging.ERROR:
                handler.setLevel(level)

    def add_handler(self, handler: logging.Handler) -> None:
        """Attach ``handler`` to the root logger and track it."""
        logging.getLogger().addHandler(handler)
        self._handlers.append(handler)

    def shutdown(self) -> None:
        """Flush and close all handlers."""
        logging.shutdown()


_logging_manager = LoggingManager()


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return _logging_manager.get_logger(name)


def configure_logging(config: LogConfig) -> None:
    _logging_manager.configure(config)


def get_logging_manager() -> LoggingManager:
    """Get the global logging manager instance."""
    return _logging_manager


def create_development_config() -> LogConfig:
    """Verbose console logging; socket frames stay quiet."""
    return LogConfig(
        level="DEBUG",
        format_string=get_detailed_format(),
        component_levels={
            "websockets": "WARNING",
            "aiohttp": "WARNING",
        }
    )


def create_production_config() -> LogConfig:
    """INFO to console and rotating files under ./logs/prod."""
    return LogConfig(
        level="INFO",
        log_dir="./logs/prod",
        file_output=True,
        max_bytes=50 * 1024 * 1024,
        backup_count=10,
        component_levels={
            "websockets": "ERROR",
            "aiohttp": "ERROR",
            "Robespierre.core.events": "INFO",
        }
    )


def create_testing_config() -> LogConfig:
    return LogConfig(
        level="DEBUG",
        format_string="%(levelname)s - %(name)s - %(message)s",
        component_levels={
            "websockets": "ERROR",
        }
    )


def auto_configure(env: Optional[str] = None) -> None:
    """
    Configure logging for a named environment.

    Args:
        env: development, production or testing (short forms accepted).
             Read from ROBESPIERRE_ENV when omitted.
    """
    if env is None:
        env = os.environ.get("ROBESPIERRE_ENV", "development")
    env = env.lower()

    factories = {
        "development": create_development_config,
        "dev": create_development_config,
        "production": create_production_config,
        "prod": create_production_config,
        "testing": create_testing_config,
        "test": create_testing_config,
    }

    configure_logging(factories.get(env, create_development_config)())
    get_logger(__name__).info("Logging auto-configured for environment: %s", env)


__all__ = [
    'LogLevel',
    'LogConfig',
    'LoggingManager',
    'ColoredFormatter',
    'JsonFormatter',
    'get_logger',
    'configure_logging',
    'get_logging_manager',
    'create_development_config',
    'create_production_config',
    'create_testing_config',
    'auto_configure',
    'get_default_format',
    'get_detailed_format',
]
