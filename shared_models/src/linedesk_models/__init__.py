"""Shared SQLModel models package.

Table models, enums and typed line payloads reused by the API and the
export/graph code.
"""

from .base import BaseModel
from .dialog import Dialog, DialogLine, DialogSection, dialog_group_name
from .dialog_state import LineState, SectionState
from .enums import EntryCreationPolicy, LineType
from .language import Language
from .project import Project, ProjectLanguage
from .translation import Translation, TranslationEntry, TranslationGroup

__all__ = [
    "BaseModel",
    "Project",
    "ProjectLanguage",
    "Language",
    "TranslationGroup",
    "TranslationEntry",
    "Translation",
    "Dialog",
    "DialogSection",
    "DialogLine",
    "dialog_group_name",
    "LineType",
    "EntryCreationPolicy",
    "LineState",
    "SectionState",
]
