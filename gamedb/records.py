"""
Typed seed records.

One frozen pydantic model per entity kind, tagged with a `kind` literal. Field names are
snake_case in Python and camelCase in the stored documents, which is what the game
server's models read. Validation happens when a record is constructed, so a malformed
definition fails at import time rather than halfway through a migration.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, ClassVar, Literal

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


Rarity = Literal["common", "uncommon", "rare", "epic", "legendary"]


class StrictModel(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class SeedRecord(StrictModel):
    collection: ClassVar[str]
    natural_key_field: ClassVar[str] = "name"

    kind: str

    def natural_key(self) -> dict[str, Any]:
        return {to_camel(self.natural_key_field): getattr(self, self.natural_key_field)}

    def to_document(self, now: datetime) -> dict[str, Any]:
        doc = self.model_dump(by_alias=True, exclude={"kind"}, exclude_none=True)
        doc["createdAt"] = now
        doc["updatedAt"] = now
        return doc


class Material(SeedRecord):
    collection: ClassVar[str] = "materials"

    kind: Literal["material"] = "material"
    name: str = Field(min_length=1)
    type: Literal["raw", "ore", "herb", "leather", "ingot", "gem"]
    rarity: Rarity
    description: str
    icon: str
    base_value: int = Field(ge=0)
    weight: float = Field(ge=0)
    stack_size: int = Field(ge=1)

    gather_skill: str | None = None
    gather_level: int | None = Field(default=None, ge=1)
    gather_time: int | None = Field(default=None, gt=0)

    smelt_result: str | None = None
    smelt_amount: int | None = Field(default=None, ge=1)
    smelt_time: int | None = Field(default=None, gt=0)

    craft_material: bool | None = None
    processed_from: str | None = None
    process_time: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _processing(self):
        if self.smelt_result is not None and (self.smelt_amount is None or self.smelt_time is None):
            raise ValueError("smelt_result requires smelt_amount and smelt_time")
        if self.processed_from is not None and self.process_time is None:
            raise ValueError("processed_from requires process_time")
        return self


class Item(SeedRecord):
    collection: ClassVar[str] = "items"

    kind: Literal["item"] = "item"
    name: str = Field(min_length=1)
    type: Literal["weapon", "armor", "potion", "currency", "quest"]
    rarity: Rarity
    value: int = Field(ge=0)
    weight: float = Field(ge=0)
    description: str
    icon: str
    damage: int | None = Field(default=None, ge=0)
    defense: int | None = Field(default=None, ge=0)
    effect: str | None = None

    @model_validator(mode="after")
    def _stats_match_type(self):
        if self.type == "weapon" and self.damage is None:
            raise ValueError("weapons need damage")
        if self.type == "armor" and self.defense is None:
            raise ValueError("armor needs defense")
        if self.type == "potion" and not self.effect:
            raise ValueError("potions need an effect")
        return self


class Skill(SeedRecord):
    collection: ClassVar[str] = "skills"

    kind: Literal["skill"] = "skill"
    name: str = Field(min_length=1)
    type: Literal["active", "passive"]
    description: str
    mana_cost: int = Field(ge=0)
    cooldown: int = Field(ge=0)
    level: int = Field(ge=1)
    icon: str
    damage: int | None = Field(default=None, ge=0)
    heal: int | None = Field(default=None, ge=0)


class QuestObjective(StrictModel):
    description: str
    completed: bool = False
    target: int | None = Field(default=None, ge=1)
    current: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _progress(self):
        if (self.target is None) != (self.current is None):
            raise ValueError("target and current go together")
        if self.target is not None and self.current > self.target:
            raise ValueError("current exceeds target")
        return self


class ItemReward(StrictModel):
    item_id: ObjectId
    quantity: int = Field(default=1, ge=1)


class SkillReward(StrictModel):
    skill_id: ObjectId


class QuestRewards(StrictModel):
    experience: int = Field(ge=0)
    items: list[ItemReward] = Field(default_factory=list)
    skills: list[SkillReward] = Field(default_factory=list)


class _QuestBody(StrictModel):
    title: str = Field(min_length=1)
    description: str
    objectives: list[QuestObjective] = Field(min_length=1)
    min_level: int = Field(ge=1)
    max_level: int = Field(ge=1)
    repeatable: bool = False
    npc_giver: str
    npc_turn_in: str

    @model_validator(mode="after")
    def _levels(self):
        if self.min_level > self.max_level:
            raise ValueError("min_level must not exceed max_level")
        return self


class Quest(_QuestBody, SeedRecord):
    collection: ClassVar[str] = "quests"
    natural_key_field: ClassVar[str] = "title"

    kind: Literal["quest"] = "quest"
    rewards: QuestRewards


class ItemRewardRef(StrictModel):
    item: str
    quantity: int = Field(default=1, ge=1)


class QuestDefinition(_QuestBody):
    """
    A quest as authored: rewards name items and skills by natural key.

    `build` turns it into a storable Quest once the referenced documents have been resolved
    to their ids.
    """

    experience: int = Field(ge=0)
    reward_items: list[ItemRewardRef] = Field(default_factory=list)
    reward_skills: list[str] = Field(default_factory=list)

    def build(self, item_ids: Mapping[str, ObjectId], skill_ids: Mapping[str, ObjectId]) -> Quest:
        body = self.model_dump(exclude={"experience", "reward_items", "reward_skills"})
        rewards = QuestRewards(
            experience=self.experience,
            items=[ItemReward(item_id=item_ids[r.item], quantity=r.quantity) for r in self.reward_items],
            skills=[SkillReward(skill_id=skill_ids[name]) for name in self.reward_skills],
        )
        return Quest(**body, rewards=rewards)


class NotificationSettings(StrictModel):
    email: bool = True
    push: bool = True


class UserSettings(StrictModel):
    theme: Literal["dark", "light"] = "dark"
    language: str = "hu"
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


class AdminUser(SeedRecord):
    collection: ClassVar[str] = "users"
    natural_key_field: ClassVar[str] = "username"

    kind: Literal["admin_user"] = "admin_user"
    username: str = Field(min_length=3)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+$")
    # Always a bcrypt hash.
    password: str
    role: Literal["admin"] = "admin"
    is_verified: bool = True
    settings: UserSettings = Field(default_factory=UserSettings)

    @field_validator("password")
    @classmethod
    def _hashed(cls, v: str) -> str:
        if not v.startswith(("$2a$", "$2b$", "$2y$")):
            raise ValueError("password must be a bcrypt hash, never plaintext")
        return v

    def to_document(self, now: datetime) -> dict[str, Any]:
        doc = super().to_document(now)
        doc["lastLogin"] = now
        # mongoose version key; the game server's User model expects it.
        doc["__v"] = 0
        return doc
