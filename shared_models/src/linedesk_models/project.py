from typing import Optional

from sqlalchemy import UniqueConstraint
from sqlalchemy.types import TEXT
from sqlmodel import Field

from .base import BaseModel


class Project(BaseModel, table=True):
    """Top-level container for languages, translation groups and dialogs.

    The name takes part in every exported key, verbatim and case-sensitive.
    """

    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    description: Optional[str] = Field(default=None, sa_type=TEXT)


class ProjectLanguage(BaseModel, table=True):
    """Many-to-many link between projects and languages."""

    __tablename__ = "project_languages"
    __table_args__ = (
        UniqueConstraint("project_id", "language_id", name="uq_project_language"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    language_id: int = Field(foreign_key="languages.id", index=True)
