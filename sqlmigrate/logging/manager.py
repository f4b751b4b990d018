"""
Logging management for sqlmigrate.
"""

import logging
import threading
from typing import Any, ClassVar, Dict, Optional, Union

from ..config.exceptions import ConfigValidationError
from ..config.manager import VALID_LOG_LEVELS


class LogFormatter(logging.Formatter):
    """
    Log formatter with optional colors and migration context.

    Records logged with ``extra={"migration_id": ...}`` are prefixed with
    the migration identifier when ``include_context`` is set.
    """

    COLORS: ClassVar[Dict[str, str]] = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def __init__(
        self,
        format_string: Optional[str] = None,
        date_format: Optional[str] = None,
        use_colors: bool = False,
        include_context: bool = False,
        include_timestamp: bool = True
    ):
        """
        Initialize the log formatter.

        Args:
            format_string: Custom format string
            date_format: Date format string
            use_colors: Whether to use colored output
            include_context: Whether to include contextual information
            include_timestamp: Whether to include timestamp
        """
        if format_string is None:
            if include_timestamp:
                format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            else:
                format_string = "%(name)s - %(levelname)s - %(message)s"

            if include_context:
                format_string += " [%(filename)s:%(lineno)d]"

        if date_format is None:
            date_format = "%Y-%m-%d %H:%M:%S"

        super().__init__(format_string, date_format)

        self.use_colors = use_colors
        self.include_context = include_context
        self.format_string = format_string

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        if self.include_context and hasattr(record, 'migration_id'):
            # Other handlers share the record, prefix a copy
            record = logging.makeLogRecord(record.__dict__)
            record.msg = f"[Migration: {record.migration_id}] {record.msg}"

        formatted = super().format(record)

        if self.use_colors and record.levelname in self.COLORS:
            color = self.COLORS[record.levelname]
            reset = self.COLORS['RESET']
            formatted = f"{color}{formatted}{reset}"

        return formatted

    def formatException(self, ei: Any) -> str:
        """Format exception information, appending context and cause."""
        result = super().formatException(ei)

        if ei and ei[1]:
            exception = ei[1]
            if getattr(exception, 'context', None):
                result += f"\nContext: {exception.context}"

            if getattr(exception, 'cause', None):
                result += f"\nCaused by: {exception.cause}"

        return result


def _to_level(level: Union[str, int]) -> int:
    if isinstance(level, str):
        if level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"logging level must be one of: {list(VALID_LOG_LEVELS)}",
                context={"provided_level": level},
                config_key="logging.level",
            )
        return getattr(logging, level.upper())
    return level


class LoggingManager:
    """
    Configures the root logger and hands out named loggers.

    Reads the ``logging`` section of a sqlmigrate configuration dictionary.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize the logging manager.

        Args:
            config: Configuration dictionary with an optional ``logging`` section
        """
        self.config = config.get("logging", {})
        self.loggers: Dict[str, logging.Logger] = {}
        self._lock = threading.Lock()
        self._handler: Optional[logging.Handler] = None

        self._configure_root_logger()

    def _configure_root_logger(self) -> None:
        """Configure the root logger with a single console handler."""
        root_logger = logging.getLogger()
        root_logger.setLevel(_to_level(self.config.get("level", "INFO")))

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        self._handler = logging.StreamHandler()
        self._handler.setFormatter(LogFormatter(
            format_string=self.config.get("format"),
            use_colors=self.config.get("use_colors", False),
            include_context=self.config.get("include_context", False),
        ))
        root_logger.addHandler(self._handler)

    def get_logger(self, name: str, level: Union[str, int, None] = None) -> logging.Logger:
        """
        Get or create a logger.

        Args:
            name: Logger name
            level: Optional log level override

        Returns:
            Logger instance
        """
        with self._lock:
            if name not in self.loggers:
                logger = logging.getLogger(name)
                if level:
                    logger.setLevel(_to_level(level))
                self.loggers[name] = logger

            return self.loggers[name]

    def set_log_level(self, logger_name: str, level: Union[str, int]) -> None:
        """Set the log level for a logger handed out by this manager."""
        if logger_name in self.loggers:
            self.loggers[logger_name].setLevel(_to_level(level))

    def shutdown(self) -> None:
        """Detach the console handler and forget managed loggers."""
        with self._lock:
            if self._handler is not None:
                logging.getLogger().removeHandler(self._handler)
                self._handler.close()
                self._handler = None
            self.loggers.clear()


def configure_logging(log_level: str = "INFO", use_colors: bool = False) -> LoggingManager:
    """Configure application logging for migration runs."""
    return LoggingManager({"logging": {"level": log_level, "use_colors": use_colors}})


def get_logger(name: str = "sqlmigrate") -> logging.Logger:
    """Logger used by sqlmigrate unless one is injected."""
    return logging.getLogger(name)
