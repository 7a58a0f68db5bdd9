from __future__ import annotations

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class MigrationSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="forbid")

    mongo_uri: str = "mongodb://localhost:27017/rpg-game"
    # Used when the URI carries no database path (e.g. testcontainers URLs).
    default_database: str = "rpg-game"
    migrations_collection: str = "migrations"

    server_selection_timeout_ms: int = Field(default=5000, gt=0)
    socket_timeout_ms: int = Field(default=10000, gt=0)

    log_level: str = "info"
    log_format: Literal["json", "console"] = "json"
    app_env: str = "development"

    # Credential seeding
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    admin_username: str = "admin"
    admin_email: str = "admin@rpg-game.com"
    admin_password: SecretStr = SecretStr("admin123")


SETTINGS = MigrationSettings()
