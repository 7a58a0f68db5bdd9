from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from gamedb.errors import LedgerWriteError
from gamedb.logging import logger


class MigrationStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class MigrationRecord(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    applied_at: datetime = Field(alias="appliedAt")
    status: MigrationStatus
    error: str | None = None


class MigrationLedger:
    """
    Persisted log of which named migrations have run, one document per name.

    A `completed` entry is final. A `failed` entry is cleared before the step is retried and
    is otherwise overwritten in place by the next failure (upsert). The unique index on
    `name` is what keeps two accidental concurrent runners from both recording a step.
    """

    def __init__(self, db: Database, collection: str = "migrations", *, log=logger):
        self._collection = db[collection]
        self._log = log

    def ensure_initialized(self) -> None:
        try:
            self._collection.create_index([("name", ASCENDING)], unique=True)
        except PyMongoError as exc:
            raise LedgerWriteError(f"cannot initialize ledger: {exc}") from exc

    def is_applied(self, name: str) -> bool:
        try:
            doc = self._collection.find_one({"name": name, "status": MigrationStatus.COMPLETED.value})
        except PyMongoError as exc:
            raise LedgerWriteError(f"cannot read ledger entry {name!r}: {exc}") from exc
        return doc is not None

    def clear_failure(self, name: str) -> bool:
        try:
            res = self._collection.delete_one({"name": name, "status": MigrationStatus.FAILED.value})
        except PyMongoError as exc:
            raise LedgerWriteError(f"cannot clear failed entry {name!r}: {exc}") from exc
        if res.deleted_count:
            self._log.info("migration_retrying", migration=name)
        return bool(res.deleted_count)

    def record_success(self, name: str, applied_at: datetime) -> bool:
        """
        Returns False when another runner recorded this name first (duplicate key).
        That counts as "already applied", not as an error.
        """
        try:
            self._collection.insert_one(
                {"name": name, "appliedAt": applied_at, "status": MigrationStatus.COMPLETED.value}
            )
        except DuplicateKeyError:
            self._log.warning("migration_already_recorded", migration=name)
            return False
        except PyMongoError as exc:
            raise LedgerWriteError(f"cannot record success for {name!r}: {exc}") from exc
        return True

    def record_failure(self, name: str, applied_at: datetime, error_message: str) -> None:
        # Filtering on status keeps a concurrently written `completed` entry intact:
        # the upsert then collides on the unique name instead of overwriting it.
        try:
            self._collection.update_one(
                {"name": name, "status": MigrationStatus.FAILED.value},
                {"$set": {"appliedAt": applied_at, "status": MigrationStatus.FAILED.value, "error": error_message}},
                upsert=True,
            )
        except DuplicateKeyError:
            self._log.warning("migration_failure_not_recorded", migration=name, reason="completed_elsewhere")
        except PyMongoError as exc:
            raise LedgerWriteError(f"cannot record failure for {name!r}: {exc}") from exc

    def entries(self) -> list[MigrationRecord]:
        try:
            docs = list(self._collection.find({}, projection={"_id": 0}).sort("appliedAt", ASCENDING))
        except PyMongoError as exc:
            raise LedgerWriteError(f"cannot read ledger: {exc}") from exc
        return [MigrationRecord.model_validate(d) for d in docs]
