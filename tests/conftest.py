"""Shared pytest fixtures."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator

import pytest

from jqlite import config
from jqlite.logging_config import LOGGER_NAME


FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def fixture_path(name: str) -> str:
    """Return the path of a JSON document under tests/fixtures."""
    return os.path.join(FIXTURES_DIR, name)


@pytest.fixture(autouse=True)
def reset_cli_state() -> Iterator[None]:
    """Undo logger and config default changes made by CLI runs."""
    original_defaults = dict(config.CONFIG_DEFAULTS)
    yield
    config.CONFIG_DEFAULTS.clear()
    config.CONFIG_DEFAULTS.update(original_defaults)
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
