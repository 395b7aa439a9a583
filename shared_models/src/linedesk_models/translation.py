from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.types import TEXT
from sqlmodel import Field

from .base import BaseModel


class TranslationGroup(BaseModel, table=True):
    """Namespace of translation entries inside a project.

    Dialog-owned groups are named ``Dialog_<dialog id>``.
    """

    __tablename__ = "translation_groups"

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    name: str = Field(index=True)
    description: Optional[str] = Field(default=None, sa_type=TEXT)


class TranslationEntry(BaseModel, table=True):
    """One translatable text unit, addressed by ``key`` within its group."""

    __tablename__ = "translation_entries"
    __table_args__ = (
        UniqueConstraint("group_id", "key", name="uq_translation_entry_key"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="translation_groups.id", index=True)
    key: str = Field(index=True)
    comment: Optional[str] = Field(default=None, sa_type=TEXT)
    # Set once the exported key was copied to downstream tooling
    copied: bool = Field(default=False)


class Translation(BaseModel, table=True):
    """Text of an entry in one language. Blank text is never stored."""

    __tablename__ = "translations"
    __table_args__ = (
        UniqueConstraint("entry_id", "language_id", name="uq_translation_lang"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    entry_id: int = Field(foreign_key="translation_entries.id", index=True)
    language_id: int = Field(foreign_key="languages.id", index=True)
    text: str = Field(sa_type=TEXT)
