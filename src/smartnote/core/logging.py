"""
Logging configuration for the SmartNote core.
"""
import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from ..config import Settings, get_settings

# LogRecord attributes that are not user supplied "extra" fields
_RESERVED_ATTRS = frozenset(
    (
        'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename', 'module',
        'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName', 'created', 'msecs',
        'relativeCreated', 'thread', 'threadName', 'processName', 'process', 'taskName',
        'message', 'asctime',
    )
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info),
            }

        extra = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_ATTRS
        }
        if extra:
            log_entry['extra'] = extra

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors without mutating the shared record."""
        color = self.COLORS.get(record.levelname, '')
        original_levelname, original_name = record.levelname, record.name
        record.levelname = f"{color}{self.BOLD}{record.levelname}{self.RESET}"
        record.name = f"\033[90m{record.name}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname, record.name = original_levelname, original_name


def get_log_level(level_str: Optional[str] = None) -> int:
    """Get log level from string or settings."""
    level_str = level_str or get_settings().log_level

    levels = {
        'CRITICAL': logging.CRITICAL,
        'ERROR': logging.ERROR,
        'WARNING': logging.WARNING,
        'INFO': logging.INFO,
        'DEBUG': logging.DEBUG,
    }

    return levels.get(level_str.upper(), logging.INFO)


def build_logging_config(settings: Settings) -> Dict[str, Any]:
    """Build the dictConfig mapping for the given settings."""
    handlers: Dict[str, Dict[str, Any]] = {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'colored' if settings.debug else 'json',
            'stream': sys.stdout,
            'level': get_log_level(settings.log_level),
        },
    }
    app_handlers = ['console']

    if settings.log_dir:
        log_dir = Path(settings.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': str(log_dir / 'smartnote.log'),
            'maxBytes': 10_000_000,  # 10MB
            'backupCount': 5,
            'formatter': 'file',
            'level': 'DEBUG',
            'encoding': 'utf-8',
        }
        handlers['error_file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': str(log_dir / 'error.log'),
            'maxBytes': 10_000_000,
            'backupCount': 5,
            'formatter': 'json',
            'level': 'ERROR',
            'encoding': 'utf-8',
        }
        app_handlers += ['file', 'error_file']

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {
                '()': JSONFormatter,
            },
            'colored': {
                '()': ColoredFormatter,
                'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
            'file': {
                'format': settings.log_format,
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': handlers,
        'loggers': {
            'smartnote': {
                'handlers': app_handlers,
                'level': 'DEBUG',
                'propagate': False,
            },
            'sqlalchemy': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False,
            },
            'aiosqlite': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False,
            },
        },
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Setup logging configuration."""
    settings = settings or get_settings()
    logging.config.dictConfig(build_logging_config(settings))

    logger = get_logger('logging')
    logger.info("Logging system initialized", extra={
        'log_level': settings.log_level,
        'debug': settings.debug,
        'environment': settings.environment,
    })


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    if name == 'smartnote' or name.startswith('smartnote.'):
        return logging.getLogger(name)
    return logging.getLogger(f"smartnote.{name}")
