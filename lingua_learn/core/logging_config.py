"""
Logging Configuration Module.

Builds a ``logging.config.dictConfig`` document from the service settings:

- a console handler at the configured level
- a size-rotated ``lingua_learn.log`` under ``LOG_FILE_DIR`` that always
  records DEBUG, when file logging is enabled
- pinned levels for our own packages and noisy third-party loggers

Modules obtain loggers through :func:`get_logger` and never attach handlers
themselves.
"""

import logging
import logging.config
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

LOG_FILE_NAME = "lingua_learn.log"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"
JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

FORMATS = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

MODULE_LOG_LEVELS = {
    "lingua_learn.core": "INFO",
    "lingua_learn.core.database": "INFO",
    "lingua_learn.server": "INFO",
    "lingua_learn.server.api": "DEBUG",
    "lingua_learn.server.services": "DEBUG",
    # Third-party libraries
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "aiosqlite": "WARNING",
    "httpx": "WARNING",
    "passlib": "WARNING",
    "multipart": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


@dataclass(frozen=True)
class LoggingOptions:
    level: str = "INFO"
    fmt: str = "detailed"
    file_dir: str = "logs"
    file_enabled: bool = True
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    @property
    def file_path(self) -> Path:
        return Path(self.file_dir) / LOG_FILE_NAME


def load_options() -> LoggingOptions:
    """Read the logging options from the service settings."""
    from lingua_learn.server.core.config import settings

    return LoggingOptions(
        level=settings.log_level.upper(),
        fmt=settings.log_format,
        file_dir=settings.log_file_dir,
        file_enabled=settings.enable_file_logging,
        max_bytes=settings.log_file_max_bytes,
        backup_count=settings.log_file_backup_count,
    )


def build_config(options: LoggingOptions) -> Dict[str, Any]:
    """Translate ``options`` into a ``dictConfig`` document.

    Raises:
        ValueError: ``options.fmt`` is not one of :data:`FORMATS`.
    """
    if options.fmt not in FORMATS:
        raise ValueError(f"Unknown log format '{options.fmt}' (expected one of {', '.join(FORMATS)})")

    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": options.level,
            "formatter": "default",
        }
    }
    if options.file_enabled:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "default",
            "filename": str(options.file_path),
            "maxBytes": options.max_bytes,
            "backupCount": options.backup_count,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": FORMATS[options.fmt], "datefmt": DATE_FORMAT}},
        "handlers": handlers,
        # The root passes everything on; each handler filters by its own level
        "root": {"level": "DEBUG", "handlers": list(handlers)},
        "loggers": {name: {"level": level} for name, level in MODULE_LOG_LEVELS.items()},
    }


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: bool = True,
) -> LoggingOptions:
    """
    Configure logging for the application.

    Args:
        log_level: Override the configured level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Override the configured format (simple, detailed, json)
        enable_file: ``False`` disables the file handler even when the settings enable it

    Returns:
        The options that were applied.
    """
    options = load_options()
    options = replace(
        options,
        level=(log_level or options.level).upper(),
        fmt=log_format or options.fmt,
        file_enabled=enable_file and options.file_enabled,
    )
    if options.file_enabled:
        options.file_path.parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_config(options))
    logging.getLogger(__name__).info(
        f"Logging configured: level={options.level}, format={options.fmt}, file_logging={options.file_enabled}"
    )
    return options


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` (pass ``__name__``)."""
    return logging.getLogger(name)
