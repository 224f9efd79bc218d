"""Logging for the store, configured from ``Settings`` only.

Handlers live on the stdlib root logger (console, a rotating log file and a
rotating error file). structlog renders on top of it: JSON in production and
staging, a console renderer everywhere else.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any

import structlog

from shared.config import Settings, get_settings

_ENVIRONMENT_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "asyncio", "protean")

_MAX_BYTES = 10 * 1024 * 1024


def get_log_level(settings: Settings) -> str:
    """An explicit ``log_level`` wins; otherwise the environment decides."""
    if settings.log_level:
        return settings.log_level
    return _ENVIRONMENT_LEVELS.get(settings.environment.lower(), "INFO")


def _rotating_file(path: Path, level: str | int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_BYTES, backupCount=5, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def _install_handlers(level: str, log_dir: Path, prefix: str) -> None:
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    for handler in root.handlers:
        handler.close()
    root.handlers = [
        console,
        _rotating_file(log_dir / f"{prefix}.log", level),
        _rotating_file(log_dir / f"{prefix}_error.log", logging.ERROR),
    ]
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.getLevelName(level), logging.WARNING))


def _configure_structlog(json_output: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                ]
            ),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(settings: Settings | None = None, log_file_prefix: str = "makhana") -> str:
    """Configure stdlib handlers and structlog from settings. Returns the level used."""
    settings = settings or get_settings()
    level = get_log_level(settings)
    _install_handlers(level, Path(settings.log_dir), log_file_prefix)
    _configure_structlog(json_output=settings.is_production)
    return level


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Bind values to every log line emitted from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
