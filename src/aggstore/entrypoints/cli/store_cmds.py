"""Read-only inspection commands: ``aggstore events`` and ``aggstore snapshot``.

Both build a `Store` from the environment (``AGGSTORE_STORAGE_ADAPTER`` and
``AGGSTORE_DB_URL``) and print records as JSON on stdout, one object per line,
so output can be piped to ``jq``. Diagnostics go to stderr.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import click

from aggstore.bootstrap import (
    MissingDatabaseUrlError,
    UnknownStorageAdapterError,
    build_store,
)
from aggstore.config import StoreSettings
from aggstore.interfaces.errors import TransportError

from .helpers import warn

if TYPE_CHECKING:
    from aggstore.interfaces.records import Event, Snapshot
    from aggstore.service_layer.store import Store

logger = logging.getLogger(__name__)


def event_to_json(event: Event) -> dict[str, Any]:
    """Return a JSON-ready dict for `event`."""
    return {
        "aggregate_id": event.aggregate_id,
        "sequence": event.sequence,
        "timestamp": event.timestamp.isoformat(),
        "type": event.type,
        "body": event.body,
    }


def snapshot_to_json(snapshot: Snapshot) -> dict[str, Any]:
    """Return a JSON-ready dict for `snapshot`."""
    return {
        "aggregate_id": snapshot.aggregate_id,
        "sequence": snapshot.sequence,
        "body": snapshot.body,
    }


def _open_store() -> Store:
    try:
        return build_store(StoreSettings.from_env())
    except (MissingDatabaseUrlError, UnknownStorageAdapterError) as e:
        raise click.ClickException(str(e)) from e


@click.command()
@click.argument("aggregate_id")
@click.option(
    "--after",
    "after_sequence",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Only show events with a sequence greater than this.",
)
def events(aggregate_id: str, after_sequence: int) -> None:
    """Print the events of AGGREGATE_ID in sequence order."""
    store = _open_store()
    try:
        found = store.get_events(aggregate_id, after_sequence)
    except TransportError as e:
        raise click.ClickException(f"Cannot read events: {e}") from e
    logger.info("%d event(s) for %s after %s", len(found), aggregate_id, after_sequence)
    for event in found:
        click.echo(json.dumps(event_to_json(event), sort_keys=True))


@click.command()
@click.argument("aggregate_id")
@click.option(
    "--min-sequence",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Only show the snapshot if it covers at least this sequence.",
)
def snapshot(aggregate_id: str, min_sequence: int) -> None:
    """Print the cached snapshot of AGGREGATE_ID.

    Exits with status 1 when there is no snapshot fresh enough.
    """
    store = _open_store()
    try:
        found = store.get_snapshot(aggregate_id, min_sequence)
    except TransportError as e:
        raise click.ClickException(f"Cannot read snapshot: {e}") from e
    if found is None:
        warn(f"No snapshot for {aggregate_id} at or after sequence {min_sequence}.")
        raise click.exceptions.Exit(1)
    click.echo(json.dumps(snapshot_to_json(found), sort_keys=True))
