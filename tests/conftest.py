"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Generator

import pytest

from json_exporter.adapters.logging import PACKAGE_LOGGER, DiagnosticsHandler
from json_exporter.adapters.storage.in_memory import (
    InMemoryLogStorage,
    InMemoryObservationStorage,
)

ROUND_TRIP_DOCUMENT = b'{"status":"up","items":[{"v":"3"},{"v":"bad"},{"v":"5"}]}'


@pytest.fixture
def round_trip_document() -> bytes:
    """Document with one element whose value cannot be normalized."""
    return ROUND_TRIP_DOCUMENT


@pytest.fixture
def log_storage() -> InMemoryLogStorage:
    """Fixture providing an empty log storage."""
    return InMemoryLogStorage()


@pytest.fixture
def observation_storage() -> InMemoryObservationStorage:
    """Fixture providing an empty observation storage."""
    return InMemoryObservationStorage()


@pytest.fixture
def diagnostics(
    log_storage: InMemoryLogStorage,
) -> Generator[InMemoryLogStorage, None, None]:
    """Capture package log records at DEBUG level into log_storage.

    The handler is detached and the logger level restored afterwards.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    previous_level = logger.level
    handler = DiagnosticsHandler(log_storage)
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    try:
        yield log_storage
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
