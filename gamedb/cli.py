from __future__ import annotations

import argparse
import sys

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from gamedb.client import ClientFactory, open_database
from gamedb.errors import MigrationError
from gamedb.ledger import MigrationLedger
from gamedb.logging import configure_logging, flush_logging, logger
from gamedb.observability import write_metrics
from gamedb.records import AdminUser, Item, Material, Quest, Skill
from gamedb.runner import MigrationRunner
from gamedb.settings import SETTINGS, MigrationSettings
from gamedb.steps import STEPS


SEED_COLLECTIONS = [Material.collection, AdminUser.collection, Item.collection, Skill.collection, Quest.collection]


def build_parser(settings: MigrationSettings = SETTINGS) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gamedb", description="Migrate and seed the RPG game database.")
    parser.add_argument("--mongo-uri", default=settings.mongo_uri, help="Defaults to $MONGO_URI.")
    parser.add_argument("--log-level", default=settings.log_level)
    sub = parser.add_subparsers(dest="command")
    # Set after add_subparsers so the sub-command defaults to migrate.
    parser.set_defaults(command="migrate", reset=False, metrics_file=None)

    migrate = sub.add_parser("migrate", help="Apply pending migrations in order (default).")
    migrate.add_argument("--reset", action="store_true", help="Drop every collection first. Refused when APP_ENV=production.")
    migrate.add_argument("--metrics-file", default=None, help="Write Prometheus textfile metrics here after the run.")
    sub.add_parser("status", help="Show the migration ledger and pending steps.")
    sub.add_parser("check", help="Show seeded document counts and the seeded materials.")
    return parser


def print_status(db: Database, settings: MigrationSettings) -> None:
    entries = {e.name: e for e in MigrationLedger(db, settings.migrations_collection).entries()}
    for step in STEPS:
        entry = entries.pop(step.name, None)
        if entry is None:
            print(f"{step.name:28} pending")
            continue
        line = f"{step.name:28} {entry.status.value:10} {entry.applied_at.isoformat()}"
        if entry.error:
            line += f"  error={entry.error}"
        print(line)
    # Steps removed from the plan keep their ledger entries; they are listed but otherwise ignored.
    for name, entry in entries.items():
        print(f"{name:28} {entry.status.value:10} {entry.applied_at.isoformat()}  (not in plan)")


def print_check(db: Database) -> None:
    try:
        for name in SEED_COLLECTIONS:
            print(f"{name:10} {db[name].count_documents({})}")
        materials = list(db[Material.collection].find({}, projection={"_id": 0}).sort("name", 1))
    except PyMongoError as exc:
        raise MigrationError(f"check failed: {exc}") from exc

    for i, mat in enumerate(materials, start=1):
        print(f"\n{i}. {mat.get('name')} ({mat.get('type')})")
        print(f"   description: {mat.get('description')}")
        print(f"   rarity: {mat.get('rarity')}  base value: {mat.get('baseValue')}  weight: {mat.get('weight')}")
        if mat.get("gatherSkill"):
            print(f"   gathered with: {mat['gatherSkill']} ({mat.get('gatherTime')}s)")
        if mat.get("stackSize"):
            print(f"   stack size: {mat['stackSize']}")


def main(
    argv: list[str] | None = None,
    *,
    settings: MigrationSettings = SETTINGS,
    client_factory: ClientFactory = MongoClient,
) -> int:
    args = build_parser(settings).parse_args(argv)
    configure_logging(args.log_level, settings.log_format)

    try:
        if args.command == "migrate":
            runner = MigrationRunner(settings, client_factory=client_factory)
            summary = runner.run(mongo_uri=args.mongo_uri, reset=args.reset)
            logger.info("run_succeeded", applied=summary.applied, skipped=summary.skipped)
        else:
            with open_database(settings, mongo_uri=args.mongo_uri, client_factory=client_factory) as db:
                if args.command == "status":
                    print_status(db, settings)
                else:
                    print_check(db)
        return 0
    except MigrationError as exc:
        logger.error("run_failed", error=str(exc), error_type=type(exc).__name__)
        return 1
    except KeyboardInterrupt:
        logger.warning("run_interrupted")
        return 1
    finally:
        if args.metrics_file:
            write_metrics(args.metrics_file)
        flush_logging()


if __name__ == "__main__":
    sys.exit(main())
