"""Fixtures and helpers for end-to-end CLI tests.

Provides a test-only `log-demo` Click command that emits log records on an
aggstore logger and a third-party logger, plus fixtures to register that
command, obtain a CliRunner, and run tests within an isolated filesystem.
"""

import logging

import click
import pytest
from click.testing import CliRunner

from aggstore.entrypoints.cli.main import aggstore

# pylint: disable=redefined-outer-name


@click.command()
def log_demo():
    """Emit one record per level on 'aggstore.demo' plus some third-party noise."""
    logger = logging.getLogger("aggstore.demo")
    logger.debug("This is a debug-level test message.")
    logger.info("This is an info-level test message.")
    logger.warning("This is a warning-level test message.")
    logger.error("This is an error-level test message.")
    logger.critical("This is a critical-level test message.")
    third_party_logger = logging.getLogger("some.thirdparty")
    third_party_logger.debug("This is a debug-level third-party test message.")
    third_party_logger.info("This is an info-level third-party test message.")
    third_party_logger.warning("This is a warning-level third-party test message.")
    logger.debug("This is a final debug-level test message.")


def _remove_command_everywhere(group, name: str) -> None:
    """Remove a command from a Click group and any Click-Extra sections."""
    group.commands.pop(name, None)
    if hasattr(group, "_default_section"):
        group._default_section.commands.pop(name, None)  # pylint: disable=protected-access
    for sec in getattr(group, "_sections", []):
        getattr(sec, "commands", {}).pop(name, None)


@pytest.fixture
def registered_log_demo():
    """Register 'log-demo' on the `aggstore` group for the duration of a test."""
    aggstore.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        _remove_command_everywhere(aggstore, "log-demo")


@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Run the test inside runner.isolated_filesystem()."""
    with runner.isolated_filesystem():
        yield
