"""
Logging setup for the QA components and the API.

Console output goes through Rich in development and through a coloured
stream handler elsewhere; an optional rotating file receives plain or JSON
lines. Structured data travels in an `extra_fields` dict on the record,
which ContextFilter fills with per-logger context such as the component name.
"""

import json
import logging
import logging.handlers
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings, get_settings

console = Console(stderr=True)

# third-party loggers kept at WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "uvicorn.access")


class ColoredFormatter(logging.Formatter):
    """Stream formatter colouring the level name with ANSI escapes."""

    LEVEL_COLORS = {
        logging.DEBUG: "36",
        logging.INFO: "32",
        logging.WARNING: "33",
        logging.ERROR: "31",
        logging.CRITICAL: "35",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)

        levelname = record.levelname
        record.levelname = f"\033[{color}m{levelname}\033[0m"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with `extra_fields` merged in at top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
            'thread_name': record.threadName,
        }
        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        entry.update(getattr(record, 'extra_fields', None) or {})
        return json.dumps(entry, ensure_ascii=False, default=str)


class ContextFilter(logging.Filter):
    """Adds fixed context to `extra_fields`; values set on the record win."""

    def __init__(self, context: Optional[Mapping[str, Any]] = None):
        super().__init__()
        self.context = dict(context or {})

    def filter(self, record: logging.LogRecord) -> bool:
        if self.context:
            fields = getattr(record, 'extra_fields', None)
            if fields is None:
                fields = record.extra_fields = {}
            for key, value in self.context.items():
                fields.setdefault(key, value)
        return True


def _console_handler(settings: Settings, use_rich: bool) -> logging.Handler:
    if use_rich and settings.logging.rich_console and settings.is_development:
        handler = RichHandler(console=console, show_path=True, markup=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
        return handler

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColoredFormatter(settings.logging.format))
    return handler


def _file_handler(file_path: str, settings: Settings, use_json: bool) -> logging.Handler:
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        filename=file_path,
        maxBytes=settings.logging.max_file_size,
        backupCount=settings.logging.backup_count,
        encoding='utf-8'
    )
    if use_json:
        handler.setFormatter(JSONFormatter(datefmt='%Y-%m-%d %H:%M:%S'))
    else:
        handler.setFormatter(logging.Formatter(settings.logging.format))
    return handler


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    use_rich: bool = True,
    use_json: Optional[bool] = None,
    context: Optional[Dict[str, Any]] = None
) -> None:
    """Configure the root logger.

    Arguments left as None fall back to the LOG_ settings. JSON file output
    is also switched on in production.

    Args:
        level: Root log level
        log_file: Path of a rotating log file
        use_rich: Allow Rich console output (development only)
        use_json: Write JSON lines to the log file
        context: Extra fields stamped on every record the root handlers emit
    """
    settings = get_settings()
    log_level = getattr(logging, (level or settings.logging.level).upper(), logging.INFO)
    if use_json is None:
        use_json = settings.logging.json_file or settings.is_production

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handlers = [_console_handler(settings, use_rich)]
    file_path = log_file or settings.logging.file_path
    if file_path:
        handlers.append(_file_handler(file_path, settings, use_json))

    # handler filters see propagated records, logger filters do not
    context_filter = ContextFilter({'app': settings.application_name, **(context or {})})
    for handler in handlers:
        handler.setLevel(log_level)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def apply_logger_levels(levels: Mapping[str, str]) -> None:
    """Set the level of named loggers, e.g. one package per component."""
    for logger_name, level in levels.items():
        logging.getLogger(logger_name).setLevel(level.upper())


def get_logger(name: str, context: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """Get a logger, attaching a ContextFilter the first time context is given."""
    logger = logging.getLogger(name)

    if context and not any(isinstance(f, ContextFilter) for f in logger.filters):
        logger.addFilter(ContextFilter(context))

    return logger


def log_performance(logger: Optional[logging.Logger] = None) -> Callable:
    """Decorator logging how long a function took, or after how long it failed."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            func_logger = logger or logging.getLogger(func.__module__)
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                func_logger.error(f"{func.__name__} failed after {(time.time() - start_time) * 1000:.2f}ms: {e}")
                raise
            func_logger.info(f"{func.__name__} completed in {(time.time() - start_time) * 1000:.2f}ms")
            return result

        return wrapper
    return decorator


class LoggerMixin:
    """Gives a class a logger named after its module and class."""

    @property
    def logger(self) -> logging.Logger:
        if not hasattr(self, '_logger'):
            self._logger = get_logger(
                f"{self.__class__.__module__}.{self.__class__.__name__}",
                context={'class': self.__class__.__name__}
            )
        return self._logger
