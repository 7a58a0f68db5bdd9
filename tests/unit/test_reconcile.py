from __future__ import annotations

from datetime import UTC, datetime

import pytest
import structlog

from gamedb.errors import MissingDependencyError, StepExecutionError
from gamedb.reconcile import ReconcileOutcome, SeedReconciler
from gamedb.records import Skill


def _skill(**overrides) -> Skill:
    fields = dict(name="Elsősegély", type="active", description="heal", heal=10, mana_cost=8, cooldown=8, level=1, icon="a.png")
    fields.update(overrides)
    return Skill(**fields)


def _naive(dt: datetime) -> datetime:
    return dt.replace(tzinfo=None)


def test_reconcile_inserts_when_absent(db, clock) -> None:
    reconciler = SeedReconciler(db, clock=clock)

    assert reconciler.reconcile(_skill()) is ReconcileOutcome.INSERTED

    doc = db.skills.find_one({"name": "Elsősegély"})
    assert doc["manaCost"] == 8
    assert _naive(doc["createdAt"]) == datetime(2026, 1, 1)
    assert doc["createdAt"] == doc["updatedAt"]


def test_reconcile_never_overwrites_existing_record(db, clock) -> None:
    reconciler = SeedReconciler(db, clock=clock)
    reconciler.reconcile(_skill())
    before = db.skills.find_one({"name": "Elsősegély"})

    # Same natural key, different body: the stored record wins.
    assert reconciler.reconcile(_skill(mana_cost=99, heal=50)) is ReconcileOutcome.SKIPPED

    assert db.skills.count_documents({"name": "Elsősegély"}) == 1
    assert db.skills.find_one({"name": "Elsősegély"}) == before


def test_reconcile_all_counts_outcomes(db) -> None:
    reconciler = SeedReconciler(db)
    reconciler.reconcile(_skill())

    counts = reconciler.reconcile_all([_skill(), _skill(name="Erőteljes Csapás", heal=None, damage=15)])

    assert counts == {ReconcileOutcome.INSERTED: 1, ReconcileOutcome.SKIPPED: 1}
    assert db.skills.count_documents({}) == 2


def test_reconcile_treats_lost_insert_race_as_skipped(db, monkeypatch) -> None:
    db.skills.create_index("name", unique=True)
    reconciler = SeedReconciler(db)
    reconciler.reconcile(_skill())
    # Pretend the existence check ran before the other writer's insert landed.
    monkeypatch.setattr(reconciler, "exists", lambda collection, key: False)

    assert reconciler.reconcile(_skill()) is ReconcileOutcome.SKIPPED
    assert db.skills.count_documents({}) == 1


def test_resolve_returns_id_of_referenced_record(db) -> None:
    reconciler = SeedReconciler(db)
    reconciler.reconcile(_skill())

    assert reconciler.resolve("skills", {"name": "Elsősegély"}) == db.skills.find_one({"name": "Elsősegély"})["_id"]


def test_resolve_missing_reference_raises(db) -> None:
    reconciler = SeedReconciler(db, log=structlog.get_logger())

    with pytest.raises(MissingDependencyError) as excinfo:
        reconciler.resolve("items", {"name": "Bronz Kard"})

    assert isinstance(excinfo.value, StepExecutionError)
    assert excinfo.value.collection == "items"
    assert excinfo.value.key == {"name": "Bronz Kard"}
    assert "missing dependency" in str(excinfo.value)


def test_reconcile_uses_injected_clock(db) -> None:
    fixed = datetime(2030, 5, 5, 5, 5, 5, tzinfo=UTC)
    SeedReconciler(db, clock=lambda: fixed).reconcile(_skill())

    assert _naive(db.skills.find_one()["updatedAt"]) == datetime(2030, 5, 5, 5, 5, 5)
