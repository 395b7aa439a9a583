"""Typed views over the JSON stored in ``DialogLine.data``.

The column itself stays an opaque string; these models are the in-memory
shape of each line type. Decoding is tolerant: unknown fields are kept,
section references that are not strings decode to ``None`` and non-object
list items decode to empty items so positional numbering is preserved.
"""

import json
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, ValidationError, field_validator

from .enums import LineType


class MalformedPayloadError(ValueError):
    """Line data is not valid JSON for its declared type."""


def _section_ref(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _object_or_empty(value: Any) -> Any:
    if value is None or isinstance(value, dict):
        return value
    # A truthy non-object still marks the field as present
    return {} if value else None


def _objects_only(value: Any) -> List[Any]:
    if not isinstance(value, list):
        return []
    return [item if isinstance(item, dict) else {} for item in value]


SectionRef = Annotated[Optional[str], BeforeValidator(_section_ref)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Condition(_Payload):
    type: Any = None
    value: Any = None


class OptionItem(_Payload):
    # Translation entry key of the option label
    text: Any = None
    next_section: SectionRef = Field(default=None, alias="nextSection")
    condition: Annotated[Optional[Condition], BeforeValidator(_object_or_empty)] = None


class OptionsPayload(_Payload):
    options: List[OptionItem] = Field(default_factory=list)

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_items(cls, value: Any) -> List[Any]:
        return _objects_only(value)


class NextSectionPayload(_Payload):
    next_section: SectionRef = Field(default=None, alias="nextSection")


class SimpleSwitchPayload(_Payload):
    """Shape written by the editor: one condition, one jump target."""

    condition: Annotated[Optional[Condition], BeforeValidator(_object_or_empty)] = None
    next_section: SectionRef = Field(default=None, alias="nextSection")


class SwitchCase(_Payload):
    next_section: SectionRef = Field(default=None, alias="nextSection")
    value: Any = None


class CaseListSwitchPayload(_Payload):
    """Legacy shape: a list of cases plus an optional default target."""

    cases: List[SwitchCase] = Field(default_factory=list)
    default: SectionRef = None

    @field_validator("cases", mode="before")
    @classmethod
    def _coerce_cases(cls, value: Any) -> List[Any]:
        return _objects_only(value)


SwitchPayload = Union[SimpleSwitchPayload, CaseListSwitchPayload]


class DialogPayload(_Payload):
    speaker: Optional[str] = None
    text_key: Optional[str] = Field(default=None, alias="textKey")


class EventPayload(_Payload):
    name: Optional[str] = None
    value: Optional[str] = None


class BackgroundPayload(_Payload):
    path: Optional[str] = None


LinePayload = Union[
    DialogPayload,
    OptionsPayload,
    EventPayload,
    BackgroundPayload,
    SimpleSwitchPayload,
    CaseListSwitchPayload,
    NextSectionPayload,
]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_line_data(data: Optional[str]) -> Any:
    """Parse the raw ``data`` column, raising MalformedPayloadError on bad JSON.

    ``NaN`` and the infinities are rejected so that anything decoded here
    can be written back out as strict JSON.
    """
    if data is None:
        raise MalformedPayloadError("line has no data")
    try:
        return json.loads(data, parse_constant=_reject_constant)
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError(str(exc)) from exc


def with_option_text(data: Optional[str], index: int, key: str) -> str:
    """Return ``data`` with option ``index`` pointing at translation ``key``.

    Only ``text`` is touched; every other field of the stored JSON is kept
    as it was, including empty strings and nulls. A bare option list stays
    a bare list.
    """
    decoded = decode_line_data(data)
    options = decoded if isinstance(decoded, list) else decoded.get("options") if isinstance(decoded, dict) else None
    if not isinstance(options, list) or not 0 <= index < len(options):
        raise MalformedPayloadError(f"no option at index {index}")
    if isinstance(options[index], dict):
        options[index]["text"] = key
    else:
        options[index] = {"text": key}
    return json.dumps(decoded, ensure_ascii=False)


def _validate(model: type, value: Any) -> Any:
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        raise MalformedPayloadError(str(exc)) from exc


def decode_next_section(data: Optional[str]) -> NextSectionPayload:
    decoded = decode_line_data(data)
    if not isinstance(decoded, dict):
        return NextSectionPayload()
    return _validate(NextSectionPayload, decoded)


def decode_options(data: Optional[str]) -> OptionsPayload:
    decoded = decode_line_data(data)
    # Early rows stored the bare option list
    if isinstance(decoded, list):
        decoded = {"options": decoded}
    if not isinstance(decoded, dict):
        return OptionsPayload()
    return _validate(OptionsPayload, decoded)


def decode_switch(data: Optional[str]) -> List[SwitchPayload]:
    """Return every switch shape present in ``data``.

    Both shapes may coexist in one legacy row, so the result can hold a
    simple payload, a case-list payload, both or neither.
    """
    decoded = decode_line_data(data)
    if not isinstance(decoded, dict):
        return []
    variants: List[SwitchPayload] = []
    if "nextSection" in decoded or "condition" in decoded:
        variants.append(_validate(SimpleSwitchPayload, decoded))
    if "cases" in decoded or "default" in decoded:
        variants.append(_validate(CaseListSwitchPayload, decoded))
    return variants


def column_payload(line: Any) -> Optional[LinePayload]:
    """Typed payload for line types whose content lives in dedicated columns."""
    line_type = getattr(line, "type", None)
    if line_type == LineType.DIALOG:
        return DialogPayload(speaker=line.speaker, text_key=line.text_key)
    if line_type == LineType.EVENT:
        return EventPayload(name=line.event_name, value=line.event_value)
    if line_type == LineType.SHOW_BACKGROUND:
        return BackgroundPayload(path=line.background)
    return None
