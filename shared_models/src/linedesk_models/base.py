from datetime import datetime, timezone

from sqlalchemy import DateTime, func
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(SQLModel, table=False):
    """Abstract base for ORM models with audit timestamps."""

    # Per-model columns via sa_type + sa_column_kwargs so no Column instance
    # is shared between tables. Python-side defaults keep sub-second ordering
    # on backends whose now() has second resolution.
    created_at: datetime | None = Field(
        default_factory=_utcnow,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"server_default": func.now(), "nullable": True},
    )
    updated_at: datetime | None = Field(
        default_factory=_utcnow,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={
            "server_default": func.now(),
            "onupdate": func.now(),
            "nullable": True,
        },
    )
