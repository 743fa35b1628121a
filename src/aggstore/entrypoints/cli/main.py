"""aggstore CLI entry point.

Defines the top-level ``aggstore`` command (via Click-Extra) and registers
its subcommands:

- ``aggstore db``: forward-only schema management (upgrade/current/heads/history/status).
- ``aggstore events``: print an aggregate's event tail as JSON lines.
- ``aggstore snapshot``: print an aggregate's cached snapshot as JSON.

Examples
    $ aggstore --version
    $ aggstore db upgrade
    $ aggstore -v events 2026-10-17T09:30:00Z --after 3
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from aggstore import __version__
from aggstore.config import StoreSettings
from aggstore.logging import config_console_handler, config_flight_recorder, log_startup

from .db import db as db_group
from .helpers.log_level_parser import parse_log_level
from .store_cmds import events as events_cmd
from .store_cmds import snapshot as snapshot_cmd

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """aggstore command-line interface.

    aggstore is an event-sourced aggregate store: an append-only event log with
    optimistic concurrency on (aggregate, sequence) and a snapshot cache that
    only ever moves forward.
    """


def default_log_path() -> Path:
    """Default flight-recorder file under the user's log directory."""
    return Path(user_log_dir("aggstore", appauthor=False)) / "latest.log"


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Increase the default WARNING verbosity by one level per repetition.",
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Decrease the default WARNING verbosity by one level per repetition.",
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (extra developer diagnostics beyond -vv).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Flight recorder output file.",
    default=default_log_path,
    envvar="AGGSTORE_LOG_PATH",
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="AGGSTORE_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep the last N log records at DEBUG granularity (unaffected by -v/-q) "
        "and write them to --log-path when a WARNING/ERROR occurs, or on exit "
        "if --force-flush is set."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help="Write the flight recorder buffer to --log-path on exit regardless of level.",
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set the minimum level of specific loggers (NAME=LEVEL). Applies to both "
        "console and flight recorder. Repeatable (e.g. -L sqlalchemy=INFO) or via "
        "AGGSTORE_LOGGER_LEVELS (comma/space list)."
    ),
    default=("sqlalchemy=WARNING", "alembic=WARNING"),
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def aggstore(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """aggstore command-line interface."""

    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = [
        config_console_handler(
            level=level, debug_mode=debug, color=ctx.color is not False
        )
    ]

    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # root captures everything; handlers filter
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        level=level,
        handlers=handlers,
        logger_levels=logger_levels,
        settings=StoreSettings.from_env(),
    )

    ctx.call_on_close(logging.shutdown)


aggstore.add_command(db_group)
aggstore.add_command(events_cmd)
aggstore.add_command(snapshot_cmd)
