from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from gamedb.client import ClientFactory, open_database
from gamedb.errors import MigrationError, ResetRefusedError, StepExecutionError
from gamedb.ledger import MigrationLedger
from gamedb.logging import logger
from gamedb.observability import MIGRATION_STEP_LATENCY, MIGRATION_STEPS_TOTAL
from gamedb.reconcile import SeedReconciler, now
from gamedb.security import PasswordHasher, hash_password
from gamedb.settings import SETTINGS, MigrationSettings
from gamedb.steps import STEPS, MigrationStep, StepContext, validate_plan


class RunnerState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    READY = "ready"
    RUNNING = "running"
    HALTED = "halted"
    COMPLETE = "complete"


@dataclass
class RunSummary:
    applied: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def reset_database(db: Database, settings: MigrationSettings, *, log=logger) -> list[str]:
    """Drop every collection, ledger included. Development only."""
    if settings.app_env == "production":
        raise ResetRefusedError("database reset is not allowed in production")
    try:
        names = sorted(db.list_collection_names())
        for name in names:
            db.drop_collection(name)
            log.warning("collection_dropped", collection=name)
    except PyMongoError as exc:
        raise MigrationError(f"database reset failed: {exc}") from exc
    if not names:
        log.warning("reset_found_no_collections")
    return names


class MigrationRunner:
    """
    Applies the migration plan in declared order, one step at a time.

    Already-completed steps are skipped. The first failing step is recorded in the ledger
    as `failed` and halts the run: later steps are never attempted, since they may depend
    on what the failed step was supposed to create. Re-running after a fix skips the
    completed prefix and retries from the failed step.
    """

    def __init__(
        self,
        settings: MigrationSettings = SETTINGS,
        steps: Sequence[MigrationStep] = STEPS,
        *,
        hasher: PasswordHasher = hash_password,
        client_factory: ClientFactory = MongoClient,
        log=logger,
        clock: Callable[[], datetime] = now,
    ):
        self._settings = settings
        self._steps = validate_plan(steps)
        self._hasher = hasher
        self._client_factory = client_factory
        self._log = log
        self._clock = clock
        self.state = RunnerState.IDLE
        self.current_step: str | None = None

    def run(self, *, mongo_uri: str | None = None, reset: bool = False) -> RunSummary:
        if reset and self._settings.app_env == "production":
            self.state = RunnerState.HALTED
            raise ResetRefusedError("database reset is not allowed in production")

        self._transition(RunnerState.CONNECTING)
        try:
            with open_database(
                self._settings, mongo_uri=mongo_uri, client_factory=self._client_factory, log=self._log
            ) as db:
                if reset:
                    reset_database(db, self._settings, log=self._log)
                return self.run_on(db)
        except BaseException:
            # Includes KeyboardInterrupt: the run stops, but nothing is recorded as failed.
            if self.state is not RunnerState.COMPLETE:
                self._transition(RunnerState.HALTED)
            raise

    def run_on(self, db: Database) -> RunSummary:
        ledger = MigrationLedger(db, self._settings.migrations_collection, log=self._log)
        ledger.ensure_initialized()
        self._transition(RunnerState.READY)

        ctx = StepContext(
            db=db,
            reconciler=SeedReconciler(db, log=self._log, clock=self._clock),
            settings=self._settings,
            hasher=self._hasher,
            log=self._log,
        )
        summary = RunSummary()
        for step in self._steps:
            self._transition(RunnerState.RUNNING, step.name)
            if ledger.is_applied(step.name):
                self._log.info("migration_already_applied", migration=step.name)
                MIGRATION_STEPS_TOTAL.labels(step.name, "skipped").inc()
                summary.skipped.append(step.name)
                continue

            ledger.clear_failure(step.name)
            self._apply(step, ctx, ledger)
            if ledger.record_success(step.name, self._clock()):
                summary.applied.append(step.name)
                MIGRATION_STEPS_TOTAL.labels(step.name, "applied").inc()
                self._log.info("migration_applied", migration=step.name)
            else:
                summary.skipped.append(step.name)
                MIGRATION_STEPS_TOTAL.labels(step.name, "skipped").inc()

        self._transition(RunnerState.COMPLETE)
        self._log.info("migrations_completed", applied=len(summary.applied), skipped=len(summary.skipped))
        return summary

    def _apply(self, step: MigrationStep, ctx: StepContext, ledger: MigrationLedger) -> None:
        self._log.info("migration_started", migration=step.name)
        t0 = time.perf_counter()
        try:
            step.apply(ctx)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            self._transition(RunnerState.HALTED)
            MIGRATION_STEPS_TOTAL.labels(step.name, "failed").inc()
            self._log.error("migration_failed", migration=step.name, error=message, exc_info=True)
            ledger.record_failure(step.name, self._clock(), message)
            if isinstance(exc, StepExecutionError):
                exc.step = step.name
                raise
            raise StepExecutionError(message, step=step.name) from exc
        finally:
            MIGRATION_STEP_LATENCY.labels(step.name).observe((time.perf_counter() - t0) * 1000)

    def _transition(self, state: RunnerState, step: str | None = None) -> None:
        self.state = state
        if step is not None:
            self.current_step = step
        self._log.debug("runner_state", state=state.value, step=self.current_step)
