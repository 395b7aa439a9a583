"""Request and response bodies of the HTTP API.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from linedesk_models.dialog_state import SectionState
from linedesk_models.enums import LineType


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# Languages


class LanguageWrite(ApiModel):
    code: Optional[str] = None
    name: Optional[str] = None


class LanguageRead(ApiModel):
    id: int
    code: str
    name: str


# Projects


class ProjectWrite(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None


class ProjectRead(ApiModel):
    id: int
    name: str
    description: Optional[str] = None


class GroupSummary(ApiModel):
    id: int
    name: str
    description: Optional[str] = None
    entry_count: int = 0
    # Some entry lacks text in at least one project language
    has_untranslated: bool = False


class ProjectDetail(ProjectRead):
    languages: List[LanguageRead] = Field(default_factory=list)
    groups: List[GroupSummary] = Field(default_factory=list)


class ProjectLanguageBody(ApiModel):
    language_id: Optional[int] = None


# Translation groups, entries and translations


class GroupWrite(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None


class GroupRead(ApiModel):
    id: int
    project_id: int
    name: str
    description: Optional[str] = None


class TranslationRead(ApiModel):
    id: int
    entry_id: int
    language_id: int
    text: str


class EntryCreate(ApiModel):
    key: Optional[str] = None
    comment: Optional[str] = None


class EntryUpdate(ApiModel):
    key: Optional[str] = None
    comment: Optional[str] = None
    copied: Optional[bool] = None


class EntryRead(ApiModel):
    id: int
    group_id: int
    key: str
    comment: Optional[str] = None
    copied: bool = False
    exported_key: Optional[str] = None
    translations: List[TranslationRead] = Field(default_factory=list)


class GroupDetail(GroupRead):
    entries: List[EntryRead] = Field(default_factory=list)


class TranslationWrite(ApiModel):
    language_id: Optional[int] = None
    text: Optional[str] = None


# Dialogs


class DialogCreate(ApiModel):
    id: Optional[str] = None
    project_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None


class DialogUpdate(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_section: Optional[str] = None


class DialogRead(ApiModel):
    id: str
    project_id: int
    name: str
    description: Optional[str] = None
    start_section: Optional[str] = None
    created_at: Optional[datetime] = None


class LineRead(ApiModel):
    id: int
    section_id: int
    order: int
    type: LineType
    speaker: Optional[str] = None
    text_key: Optional[str] = None
    background: Optional[str] = None
    event_name: Optional[str] = None
    event_value: Optional[str] = None
    data: Optional[str] = None


class SectionRead(ApiModel):
    id: int
    dialog_id: str
    section_id: str
    order: int
    lines: List[LineRead] = Field(default_factory=list)


class DialogDetail(DialogRead):
    sections: List[SectionRead] = Field(default_factory=list)


class SectionWrite(ApiModel):
    section_id: Optional[str] = None
    order: Optional[int] = None


class LineWrite(ApiModel):
    type: Optional[str] = None
    order: Optional[int] = None
    speaker: Optional[str] = None
    text_key: Optional[str] = None
    background: Optional[str] = None
    event_name: Optional[str] = None
    event_value: Optional[str] = None
    data: Optional[str] = None


class LineReorder(ApiModel):
    line_ids: Any = None


class LineTextWrite(ApiModel):
    language_id: Optional[int] = None
    text: Optional[str] = None


class LineTextResult(ApiModel):
    text_key: str
    entry_id: int
    created: bool
    translation: Optional[TranslationRead] = None


class GraphRequest(ApiModel):
    start_section: Optional[str] = None
    sections: List[SectionState] = Field(default_factory=list)
