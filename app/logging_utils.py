"""Logging setup shared by the API server and the headless arena runner."""
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Client libraries that log every request at INFO; one agent turn would
# otherwise bury the game events.
QUIET_LOGGERS = ("httpx", "httpcore", "anthropic", "uvicorn.access", "fastmcp")

# {prefix}<suffix> env var -> logger subtree it controls
COMPONENT_LOGGERS = {
    "GAME_LOG_LEVEL": "app.game",  # session, engine events, manager, scheduler
    "AGENT_LOG_LEVEL": "app.agents",  # orchestrator and the model backends
}


def level_from(value: Optional[str], fallback: int) -> int:
    """Level for a name like ``"debug"``; ``fallback`` when unset or unknown."""
    if not value:
        return fallback
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else fallback


def configure_root_logger(
    *,
    service_name: str,
    env_prefix: str = "ARENA_",
    default_level: str = "INFO",
    default_log_dir: str = "logs",
) -> Optional[Path]:
    """Stream to stdout and, when a log directory is set, to a rotating file.

    Environment (each ``{prefix}`` variable falls back to the unprefixed one):

    * ``LOG_LEVEL``: root level.
    * ``LOG_DIR``: directory for ``{service_name}.log``. Empty disables the file.
    * ``LOG_MAX_BYTES`` / ``LOG_BACKUP_COUNT``: rotation, 1 MiB and 5 by default.
    * ``GAME_LOG_LEVEL`` / ``AGENT_LOG_LEVEL``: override the ``app.game`` or
      ``app.agents`` loggers, e.g. to trace agent requests at DEBUG while the
      rest of the arena stays at INFO.

    Returns the log file path, or None when logging only to stdout.
    """

    def setting(name: str, default: Optional[str] = None) -> Optional[str]:
        value = os.getenv(f"{env_prefix}{name}")
        return value if value is not None else os.getenv(name, default)

    root_level = level_from(setting("LOG_LEVEL"), level_from(default_level, logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [stream_handler]

    log_path: Optional[Path] = None
    log_dir = setting("LOG_DIR", default_log_dir)
    if log_dir:
        directory = Path(log_dir).expanduser()
        directory.mkdir(parents=True, exist_ok=True)
        log_path = directory / f"{service_name}.log"

        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=int(setting("LOG_MAX_BYTES", "1048576")),
            backupCount=int(setting("LOG_BACKUP_COUNT", "5")),
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(handlers=handlers, level=root_level, force=True)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for suffix, logger_name in COMPONENT_LOGGERS.items():
        override = setting(suffix)
        if override:
            logging.getLogger(logger_name).setLevel(level_from(override, root_level))

    return log_path
