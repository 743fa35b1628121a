"""Logging helpers for the aggstore CLI.

Console logging goes through Rich on stderr. An optional in-memory "flight
recorder" keeps recent DEBUG records and writes them to a file when a WARNING
or worse arrives. Library code only ever calls ``logging.getLogger(__name__)``;
handlers are attached here, by the entry point.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING

import alembic
import sqlalchemy
from rich.console import Console
from rich.logging import RichHandler

from aggstore import __version__

if TYPE_CHECKING:
    from logging import Logger

    from aggstore.config import StoreSettings

PROJECT_PREFIX = "aggstore"

#: Records at or above this level write the flight recorder buffer out.
FLIGHT_RECORDER_FLUSH_LEVEL = logging.WARNING

CONSOLE_FORMAT = "%(prefix)s %(message)s"
DEBUG_CONSOLE_FORMAT = "%(asctime)s %(name)s: %(message)s"
FILE_FORMAT = (
    "[%(asctime)s] [%(process)d:%(threadName)s] %(levelname)s "
    "%(name)s:%(lineno)d: %(message)s"
)


class ThirdPartyPrefixFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Tag records from non-aggstore loggers with a short ``[lib]`` prefix.

    Sets ``record.prefix`` to e.g. "[sqlalchemy]" for third-party loggers and
    to "" for aggstore's own. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        top = record.name.split(".", 1)[0]
        record.prefix = "" if top == PROJECT_PREFIX else f"[{top}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Configure a RichHandler writing to stderr.

    Args:
        level: Minimum level for console output (forced to DEBUG in debug_mode).
        debug_mode: Show timestamps, logger names, and source paths.
        color: Enable color output (mirrors click-extra's --color/--no-color).
    """
    console = Console(color_system="auto" if color else None, stderr=True)
    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    if debug_mode:
        handler.setFormatter(logging.Formatter(fmt=DEBUG_CONSOLE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path, capacity: int = 2000, flush_on_close: bool = False
) -> MemoryHandler:
    """Configure an in-memory flight recorder backed by a log file.

    The file is truncated on the first flush of each run and only created if
    something is actually written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8", delay=True)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return MemoryHandler(
        capacity=capacity,
        flushLevel=FLIGHT_RECORDER_FLUSH_LEVEL,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def log_startup(
    logger: Logger,
    *,
    level: int,
    handlers: list[logging.Handler],
    logger_levels: dict[str, int],
    settings: StoreSettings,
) -> None:
    """Log a one-line startup summary at INFO and diagnostics at DEBUG.

    The flight recorder, if any, is found among `handlers`; its file, capacity
    and flush-on-close setting are reported from the handler itself.
    """
    recorder = next((h for h in handlers if isinstance(h, MemoryHandler)), None)
    logger.info(
        "aggstore %s: console=%s, flight-recorder=%s",
        __version__,
        logging.getLevelName(level),
        "ON" if recorder is not None else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("PID: %s", os.getpid())
    logger.debug("SQLAlchemy: %s", sqlalchemy.__version__)
    logger.debug("Alembic: %s", alembic.__version__)
    logger.debug(
        "Storage adapter: %s (database URL %s)",
        settings.adapter,
        "set" if settings.db_url else "not set",
    )
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if recorder is not None:
        target = recorder.target
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            getattr(target, "baseFilename", "<none>"),
            recorder.capacity,
            recorder.flushOnClose,
        )
    logger.debug(
        "Per-logger overrides: %s",
        {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()}
        or "<none>",
    )
