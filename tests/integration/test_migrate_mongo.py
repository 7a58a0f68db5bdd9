from __future__ import annotations

import pytest
from pymongo import MongoClient

from gamedb.cli import main
from gamedb.security import verify_password
from gamedb.settings import MigrationSettings
from gamedb.steps import STEPS


@pytest.fixture()
def it_settings(mongo_url: str, request) -> MigrationSettings:
    # One database per test on the shared container.
    return MigrationSettings(mongo_uri=mongo_url, default_database=f"rpg_it_{request.node.name}"[:60], bcrypt_rounds=4)


@pytest.fixture()
def it_db(it_settings: MigrationSettings):
    client = MongoClient(it_settings.mongo_uri)
    try:
        yield client[it_settings.default_database]
    finally:
        client.drop_database(it_settings.default_database)
        client.close()


def test_full_migration_against_mongodb(it_settings, it_db) -> None:
    assert main(["migrate"], settings=it_settings) == 0

    ledger = list(it_db.migrations.find().sort("appliedAt", 1))
    assert [d["name"] for d in ledger] == [s.name for s in STEPS]
    assert all(d["status"] == "completed" for d in ledger)
    assert it_db.materials.count_documents({}) == 5
    assert it_db.items.count_documents({}) == 4
    assert it_db.skills.count_documents({}) == 2
    assert it_db.quests.count_documents({}) == 1

    quest = it_db.quests.find_one()
    assert it_db.items.find_one({"_id": quest["rewards"]["items"][0]["itemId"]})["name"] == "Bronz Kard"
    assert it_db.skills.find_one({"_id": quest["rewards"]["skills"][0]["skillId"]})["name"] == "Elsősegély"

    admin = it_db.users.find_one({"username": "admin"})
    assert admin["password"] != "admin123"
    assert verify_password("admin123", admin["password"])


def test_rerun_is_a_no_op(it_settings, it_db) -> None:
    assert main(["migrate"], settings=it_settings) == 0
    before = {name: list(it_db[name].find().sort("_id", 1)) for name in ("materials", "items", "skills", "quests", "users")}

    assert main(["migrate"], settings=it_settings) == 0

    after = {name: list(it_db[name].find().sort("_id", 1)) for name in before}
    assert after == before
    assert it_db.migrations.count_documents({}) == len(STEPS)
    assert it_db.migrations.index_information()["name_1"]["unique"] is True


def test_unreachable_server_exits_one() -> None:
    settings = MigrationSettings(mongo_uri="mongodb://127.0.0.1:1/rpg-game", server_selection_timeout_ms=200)

    assert main(["migrate"], settings=settings) == 1
