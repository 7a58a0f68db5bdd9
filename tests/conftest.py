from __future__ import annotations

import itertools
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import mongomock
import pytest

from gamedb.settings import MigrationSettings


class SharedClient:
    """
    Client factory for tests: every connect gets the same in-memory server.

    mongomock gives each new MongoClient its own store, so reconnecting (as a second
    `gamedb migrate` run does) would otherwise start from an empty database.
    """

    def __init__(self) -> None:
        self.server = mongomock.MongoClient()
        self.admin = MagicMock()
        self.connects = 0
        self.closed = 0
        self.kwargs: dict = {}

    def __call__(self, uri: str, **kwargs) -> SharedClient:
        self.connects += 1
        self.uri = uri
        self.kwargs = kwargs
        return self

    def get_default_database(self, default: str | None = None):
        return self.server.get_database(default)

    def close(self) -> None:
        self.closed += 1


@pytest.fixture()
def settings() -> MigrationSettings:
    # bcrypt's minimum cost keeps the admin step fast.
    return MigrationSettings(bcrypt_rounds=4, app_env="test")


@pytest.fixture()
def shared_client() -> SharedClient:
    return SharedClient()


@pytest.fixture()
def db(shared_client: SharedClient, settings: MigrationSettings):
    return shared_client.get_default_database(settings.default_database)


@pytest.fixture()
def clock():
    # Strictly increasing, whole seconds: ledger order by appliedAt is unambiguous.
    start = datetime(2026, 1, 1, tzinfo=UTC)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture(scope="session")
def mongo_url():
    try:
        from testcontainers.mongodb import MongoDbContainer

        container = MongoDbContainer("mongo:7")
        container.start()
    except Exception as exc:  # noqa: BLE001 - no Docker means no integration run
        pytest.skip(f"MongoDB container unavailable: {exc}")
    try:
        yield container.get_connection_url()
    finally:
        container.stop()
