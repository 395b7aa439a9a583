from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .dialog import DialogLine, DialogSection


def _type_value(value: object) -> str:
    return str(getattr(value, "value", value))


class LineState(BaseModel):
    """A line as seen by export and graph code, saved or not."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = None
    type: str
    order: int = 0
    speaker: Optional[str] = None
    text_key: Optional[str] = None
    background: Optional[str] = None
    event_name: Optional[str] = None
    event_value: Optional[str] = None
    data: Optional[str] = None

    @classmethod
    def from_row(cls, line: DialogLine) -> "LineState":
        return cls(
            id=line.id,
            type=_type_value(line.type),
            order=line.order,
            speaker=line.speaker,
            text_key=line.text_key,
            background=line.background,
            event_name=line.event_name,
            event_value=line.event_value,
            data=line.data,
        )


class SectionState(BaseModel):
    """A section with its lines in display order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[int] = None
    section_id: str
    order: int = 0
    lines: List[LineState] = Field(default_factory=list)

    @classmethod
    def from_rows(cls, section: DialogSection, lines: Sequence[DialogLine]) -> "SectionState":
        return cls(
            id=section.id,
            section_id=section.section_id,
            order=section.order,
            lines=[LineState.from_row(line) for line in lines],
        )
