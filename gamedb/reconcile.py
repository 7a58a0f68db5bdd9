from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from bson import ObjectId
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from gamedb.errors import MissingDependencyError
from gamedb.logging import logger
from gamedb.observability import SEED_RECORDS_TOTAL
from gamedb.records import SeedRecord


def now() -> datetime:
    return datetime.now(tz=UTC)


class ReconcileOutcome(str, Enum):
    INSERTED = "inserted"
    SKIPPED = "skipped"


class SeedReconciler:
    """
    Insert-if-absent writes for seed records.

    An existing document with the same natural key is never touched: players and admins
    mutate seeded records in game (an admin password change, rebalanced item stats), and
    re-running the seeder must not roll those changes back.
    """

    def __init__(self, db: Database, *, log=logger, clock: Callable[[], datetime] = now):
        self._db = db
        self._log = log
        self._clock = clock

    def reconcile(self, record: SeedRecord) -> ReconcileOutcome:
        collection = self._db[record.collection]
        key = record.natural_key()

        if self.exists(record.collection, key):
            self._log.info("seed_record_exists", kind=record.kind, collection=record.collection, key=key)
            return self._count(record, ReconcileOutcome.SKIPPED)

        try:
            collection.insert_one(record.to_document(self._clock()))
        except DuplicateKeyError:
            # Only possible when the collection has a unique index on the natural key
            # and another writer got there first.
            self._log.info("seed_record_exists", kind=record.kind, collection=record.collection, key=key, race=True)
            return self._count(record, ReconcileOutcome.SKIPPED)

        self._log.info("seed_record_created", kind=record.kind, collection=record.collection, key=key)
        return self._count(record, ReconcileOutcome.INSERTED)

    def reconcile_all(self, records: Iterable[SeedRecord]) -> dict[ReconcileOutcome, int]:
        counts = {outcome: 0 for outcome in ReconcileOutcome}
        for record in records:
            counts[self.reconcile(record)] += 1
        return counts

    def exists(self, collection: str, key: dict[str, Any]) -> bool:
        return self._db[collection].find_one(key, projection={"_id": 1}) is not None

    def resolve(self, collection: str, key: dict[str, Any]) -> ObjectId:
        doc = self._db[collection].find_one(key, projection={"_id": 1})
        if doc is None:
            raise MissingDependencyError(collection, key)
        return doc["_id"]

    def _count(self, record: SeedRecord, outcome: ReconcileOutcome) -> ReconcileOutcome:
        SEED_RECORDS_TOTAL.labels(record.collection, outcome.value).inc()
        return outcome
