from typing import Optional

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.types import TEXT
from sqlmodel import Field

from .base import BaseModel
from .enums import LineType


def dialog_group_name(dialog_id: str) -> str:
    """Name of the translation group owned by a dialog."""
    return f"Dialog_{dialog_id}"


class Dialog(BaseModel, table=True):
    """Branching conversation identified by a human-chosen id."""

    __tablename__ = "dialogs"

    id: str = Field(primary_key=True)
    project_id: int = Field(foreign_key="projects.id", index=True)
    name: str
    description: Optional[str] = Field(default=None, sa_type=TEXT)
    # Logical id of the entry section
    start_section: Optional[str] = Field(default=None)


class DialogSection(BaseModel, table=True):
    """Named node of the dialog graph holding ordered lines."""

    __tablename__ = "dialog_sections"
    __table_args__ = (
        UniqueConstraint("dialog_id", "section_id", name="uq_dialog_section_id"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    dialog_id: str = Field(foreign_key="dialogs.id", index=True)
    section_id: str = Field(index=True)
    order: int = Field(default=0)


class DialogLine(BaseModel, table=True):
    """One step of a section; ``data`` holds the JSON payload of its type."""

    __tablename__ = "dialog_lines"

    id: Optional[int] = Field(default=None, primary_key=True)
    section_id: int = Field(foreign_key="dialog_sections.id", index=True)
    order: int = Field(default=0)
    type: LineType = Field(sa_type=String(), index=True)

    speaker: Optional[str] = Field(default=None)
    # Key of a TranslationEntry in the dialog's own group
    text_key: Optional[str] = Field(default=None, index=True)
    background: Optional[str] = Field(default=None)
    event_name: Optional[str] = Field(default=None)
    event_value: Optional[str] = Field(default=None)
    data: Optional[str] = Field(default=None, sa_type=TEXT)
