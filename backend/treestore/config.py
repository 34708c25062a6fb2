"""Tree Store Settings - environment-driven configuration via pydantic-settings.

Invariants:
    - Credentials only arrive through DATABASE_URL (env or .env), never in code
    - get_settings() is cached (lru_cache): one Settings instance per process
    - tree_root_left >= 0 and cache_max_entries >= 1 are enforced at load time

Design Decisions:
    - Every setting has a default that matches the docker-compose database
    - TREE_CACHE_SEED unset means each NestedSetOptions gets a random seed, so two
      runtimes sharing one cache never read each other's subtrees
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # ─── Database ─────────────────────────────────────────────────
    database_url: str = "postgresql+asyncpg://tree:tree@db:5432/tree"
    database_pool_size: int = Field(20, ge=1)
    database_max_overflow: int = Field(10, ge=0)

    # ─── Tree ─────────────────────────────────────────────────────
    tree_root_left: int = Field(1, ge=0)
    tree_cache_seed: str | None = None
    tree_indexed_build: bool = False

    # ─── Subtree cache ────────────────────────────────────────────
    cache_max_entries: int = Field(10_000, ge=1)

    # ─── Logging ──────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("database_url", mode="before")
    @classmethod
    def use_asyncpg_driver(cls, v: str) -> str:
        """postgresql:// URLs from hosting providers need the asyncpg driver prefix."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return "postgresql+asyncpg://" + v[len("postgresql://"):]
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
