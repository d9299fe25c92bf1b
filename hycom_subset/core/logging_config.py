"""
🔧 Centralized Logging Configuration
====================================
Logging setup shared by the library and the command line tool.

Features:
- Colorized console output for development
- Structured JSON logging for production / batch jobs
- Optional rotating log files
- Call tracing and timed operation contexts

Usage:
    from hycom_subset.core.logging_config import setup_logging, get_logger

    setup_logging(level="DEBUG", env="development")
    logger = get_logger(__name__)

    logger.info("Fetching subset", extra={"product": "GLBy0.08/expt_93.0"})
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Optional


# === COLOR CODES FOR TERMINAL ===
class Colors:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


LEVEL_COLORS = {
    "DEBUG": Colors.CYAN,
    "INFO": Colors.GREEN,
    "WARNING": Colors.YELLOW,
    "ERROR": Colors.RED,
    "CRITICAL": Colors.BOLD + Colors.RED,
}

# LogRecord attributes that are not user-supplied "extra" fields
_RESERVED_ATTRS = frozenset([
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'taskName',
])


# === CUSTOM FORMATTERS ===

class ColoredFormatter(logging.Formatter):
    """Colorized formatter for development console output."""

    def format(self, record: logging.LogRecord) -> str:
        level_color = LEVEL_COLORS.get(record.levelname, Colors.WHITE)
        colored_level = f"{level_color}{record.levelname:8}{Colors.RESET}"
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        location = f"{record.module}.{record.funcName}:{record.lineno}"
        return (
            f"{Colors.BLUE}{timestamp}{Colors.RESET} {colored_level} "
            f"{Colors.WHITE}{location:40}{Colors.RESET} {record.getMessage()}"
        )


class JSONFormatter(logging.Formatter):
    """JSON formatter for production/log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data)


# === SETUP FUNCTIONS ===

def setup_logging(
    level: str = "INFO",
    env: str = "development",
    log_dir: Optional[Path] = None,
    app_name: str = "hycom_subset",
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        env: Environment ("development" or "production")
        log_dir: Directory for rotating log files; console only when None
        app_name: Application name for log files
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []

    # === CONSOLE HANDLER ===
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)
    if env == "development":
        console_handler.setFormatter(ColoredFormatter())
    else:
        console_handler.setFormatter(JSONFormatter())
    root_logger.addHandler(console_handler)

    # === FILE HANDLERS (Rotating) ===
    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{app_name}_errors.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(error_handler)

    root_logger.debug(f"Logging configured: level={level}, env={env}, log_dir={log_dir}")


def setup_logging_from_env(level: Optional[str] = None) -> None:
    """
    Configure logging from HYCOM_ENV, HYCOM_LOG_LEVEL and HYCOM_LOG_DIR.

    An explicit `level` wins over HYCOM_LOG_LEVEL.
    """
    log_dir = os.getenv("HYCOM_LOG_DIR")
    setup_logging(
        level=level or os.getenv("HYCOM_LOG_LEVEL", "INFO"),
        env=os.getenv("HYCOM_ENV", "development"),
        log_dir=Path(log_dir) if log_dir else None,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


# === DECORATORS FOR DEBUGGING ===

def log_call(logger: Optional[logging.Logger] = None):
    """
    Decorator to log function calls with arguments and results at DEBUG level.

    Exceptions are logged and re-raised.

    Usage:
        @log_call(logger)
        def read_full(self, endpoint, name):
            ...
    """
    def decorator(func):
        _logger = logger or logging.getLogger(func.__module__)

        @wraps(func)
        def wrapper(*args, **kwargs):
            args_repr = [repr(a)[:50] for a in args[:3]]
            kwargs_repr = [f"{k}={repr(v)[:30]}" for k, v in list(kwargs.items())[:3]]
            signature = ", ".join(args_repr + kwargs_repr)
            _logger.debug(f"CALL {func.__name__}({signature})")

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _logger.debug(f"ERROR {func.__name__}: {type(e).__name__}: {e}")
                raise
            _logger.debug(f"RETURN {func.__name__} -> {type(result).__name__}")
            return result

        return wrapper
    return decorator


# === CONTEXT MANAGER FOR OPERATIONS ===

class LogContext:
    """
    Context manager for logging operations with timing.

    Usage:
        with LogContext(logger, "Downloading W190E240Sn5N5_20100101T0000Z.mat"):
            fetch()
    """

    def __init__(
        self,
        logger: logging.Logger,
        operation: str,
        level: int = logging.INFO,
        **context
    ):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.context = context
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.log(self.level, f"START: {self.operation}", extra=self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = (datetime.now() - self.start_time).total_seconds()

        if exc_type is None:
            self.logger.log(
                self.level,
                f"DONE: {self.operation} ({self.duration:.2f}s)",
                extra={**self.context, "duration_seconds": self.duration},
            )
        else:
            self.logger.warning(
                f"FAILED: {self.operation} ({self.duration:.2f}s) - {exc_type.__name__}: {exc_val}",
                extra={**self.context, "duration_seconds": self.duration, "error": str(exc_val)},
            )

        return False  # Don't suppress exceptions
