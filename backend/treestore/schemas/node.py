"""Node Schemas - pydantic models validating node payloads before persistence.

Invariants:
    - NodeCreate.name: 1-200 chars, stripped, non-empty
    - use_counter is never negative
    - NodeUpdate only carries fields the caller actually set (exclude_unset)

Design Decisions:
    - NodeCreate ignores unknown keys: copy clones carry created_at/organization_id/lft/rgt
      which the store sets itself
    - NodeUpdate forbids unknown keys: a typo in a patch must not silently no-op
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty or whitespace")
    return v


class NodeCreate(BaseModel):
    """Create payload - id optional (copy supplies pre-generated ids)."""
    model_config = ConfigDict(extra="ignore")

    id: UUID | None = None
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    parent_id: UUID | None = None
    use_counter: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return _strip_name(v)


class NodeUpdate(BaseModel):
    """Partial update payload."""
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    parent_id: UUID | None = None
    use_counter: int | None = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        return _strip_name(v) if v is not None else v
