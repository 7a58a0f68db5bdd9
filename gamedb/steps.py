"""
Migration steps and the declared plan.

The plan is an ordered list and that order is the contract: the runner executes steps
strictly in list position. `depends_on` makes the ordering requirements explicit, and
`validate_plan` refuses a plan in which a step is declared before something it needs.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from pymongo.database import Database

from gamedb.definitions import ITEMS, MATERIALS, QUESTS, SKILLS, admin_user
from gamedb.reconcile import SeedReconciler
from gamedb.records import AdminUser, Item, Quest, QuestDefinition, Skill
from gamedb.security import PasswordHasher
from gamedb.settings import MigrationSettings


@dataclass(frozen=True)
class StepContext:
    db: Database
    reconciler: SeedReconciler
    settings: MigrationSettings
    hasher: PasswordHasher
    log: Any


@dataclass(frozen=True)
class MigrationStep:
    name: str
    apply: Callable[[StepContext], None]
    depends_on: frozenset[str] = field(default_factory=frozenset)


def validate_plan(steps: Sequence[MigrationStep]) -> tuple[MigrationStep, ...]:
    seen: set[str] = set()
    for step in steps:
        if step.name in seen:
            raise ValueError(f"duplicate migration name {step.name!r}")
        missing = step.depends_on - seen
        if missing:
            raise ValueError(f"{step.name!r} depends on {sorted(missing)}, which must be declared before it")
        seen.add(step.name)
    return tuple(steps)


def _log_counts(ctx: StepContext, collection: str, counts) -> None:
    ctx.log.info("seed_collection_reconciled", collection=collection, **{k.value: v for k, v in counts.items()})


def create_raw_materials(ctx: StepContext) -> None:
    _log_counts(ctx, "materials", ctx.reconciler.reconcile_all(MATERIALS))


def create_admin_user(ctx: StepContext) -> None:
    key = {"username": ctx.settings.admin_username}
    if ctx.reconciler.exists(AdminUser.collection, key):
        # Checked before hashing: an existing admin (and any password it has since set) is left alone.
        ctx.log.info("seed_record_exists", kind="admin_user", collection=AdminUser.collection, key=key)
        return
    hashed = ctx.hasher(ctx.settings.admin_password.get_secret_value(), ctx.settings.bcrypt_rounds)
    ctx.reconciler.reconcile(admin_user(ctx.settings, hashed))


def create_default_items(ctx: StepContext) -> None:
    _log_counts(ctx, "items", ctx.reconciler.reconcile_all(ITEMS))


def create_default_skills(ctx: StepContext) -> None:
    _log_counts(ctx, "skills", ctx.reconciler.reconcile_all(SKILLS))


def resolve_quest(reconciler: SeedReconciler, quest: QuestDefinition) -> Quest:
    # Items first, then skills. Raises MissingDependencyError before anything is written.
    item_ids = {r.item: reconciler.resolve(Item.collection, {"name": r.item}) for r in quest.reward_items}
    skill_ids = {name: reconciler.resolve(Skill.collection, {"name": name}) for name in quest.reward_skills}
    return quest.build(item_ids, skill_ids)


def create_default_quests(ctx: StepContext) -> None:
    quests = [resolve_quest(ctx.reconciler, q) for q in QUESTS]
    _log_counts(ctx, "quests", ctx.reconciler.reconcile_all(quests))


STEPS: tuple[MigrationStep, ...] = validate_plan(
    [
        MigrationStep("create-raw-materials", create_raw_materials),
        MigrationStep("create-admin-user", create_admin_user),
        MigrationStep("create-default-items", create_default_items),
        MigrationStep("create-default-skills", create_default_skills),
        MigrationStep(
            "create-default-quests",
            create_default_quests,
            depends_on=frozenset({"create-default-items", "create-default-skills"}),
        ),
    ]
)
