"""
Section-to-section flow graph of a dialog.

Nodes are sections; links are the jumps their lines can take. The graph is
rebuilt from scratch for every request, from persisted rows or from unsaved
editor state, and never fails on bad line data: unparseable payloads and
references to unknown sections simply produce no links.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from linedesk_models.dialog_state import LineState, SectionState
from linedesk_models.enums import LineType
from linedesk_models.payloads import (
    CaseListSwitchPayload,
    DialogPayload,
    MalformedPayloadError,
    SimpleSwitchPayload,
    column_payload,
    decode_next_section,
    decode_options,
    decode_switch,
)

logger = logging.getLogger(__name__)

ARROW = "→"


@dataclass
class GraphLine:
    id: Optional[int]
    type: str
    order: int
    label: str
    speaker: Optional[str] = None
    text_key: Optional[str] = None
    data: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "speaker": self.speaker,
            "textKey": self.text_key,
            "order": self.order,
            "data": self.data,
            "label": self.label,
        }


@dataclass
class GraphNode:
    id: str
    label: str
    is_start: bool
    lines: List[GraphLine] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "isStart": self.is_start,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass(frozen=True)
class GraphLink:
    source: str
    target: str
    label: Optional[str] = None
    # Line the jump starts from; anchors the link inside the source node
    source_line_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"source": self.source, "target": self.target}
        if self.label is not None:
            body["label"] = self.label
        if self.source_line_id is not None:
            body["sourceLineId"] = self.source_line_id
        return body


@dataclass
class DialogGraph:
    nodes: List[GraphNode] = field(default_factory=list)
    links: List[GraphLink] = field(default_factory=list)

    def node(self, node_id: str) -> Optional[GraphNode]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


def _display(value: Any) -> str:
    if value is None:
        return "?"
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _switch_targets(data: str) -> List[Tuple[Optional[str], str]]:
    targets: List[Tuple[Optional[str], str]] = []
    for variant in decode_switch(data):
        if isinstance(variant, SimpleSwitchPayload) and variant.next_section:
            if variant.condition is not None:
                label = f"if {_display(variant.condition.type)}"
            else:
                label = "switch"
            targets.append((variant.next_section, label))
        elif isinstance(variant, CaseListSwitchPayload):
            for case in variant.cases:
                targets.append((case.next_section, f"case: {_display(case.value)}"))
            if variant.default:
                targets.append((variant.default, "default"))
    return targets


def line_targets(line: LineState) -> List[Tuple[Optional[str], Optional[str]]]:
    """
    Jump targets of one line as (section id, link label) pairs.

    Targets are not checked against known sections here. Malformed data
    yields no targets, except for ``nextSection`` lines where non-JSON data
    is read as a literal section id.
    """
    if not line.data:
        return []
    if line.type == LineType.NEXT_SECTION:
        try:
            payload = decode_next_section(line.data)
        except MalformedPayloadError:
            # Hand-edited rows hold the bare section id
            return [(line.data.strip() or None, None)]
        return [(payload.next_section, None)]
    try:
        if line.type == LineType.OPTIONS:
            options = decode_options(line.data).options
            return [(option.next_section, f"option {index}") for index, option in enumerate(options, start=1)]
        if line.type == LineType.SWITCH:
            return _switch_targets(line.data)
    except MalformedPayloadError:
        logger.debug("Skipping malformed line data", extra={"line_id": line.id, "line_type": line.type})
    return []


def describe_line(line: LineState) -> str:
    """Short summary of a line for the node body."""
    payload = column_payload(line)
    if isinstance(payload, DialogPayload):
        speaker = f"{payload.speaker}: " if payload.speaker else ""
        text = f"[{payload.text_key}]" if payload.text_key else ""
        return f"{speaker}{text}"

    if line.data and line.type in (LineType.NEXT_SECTION, LineType.SWITCH, LineType.OPTIONS):
        targets = [target for target, _ in line_targets(line) if target]
        if line.type == LineType.NEXT_SECTION:
            return f"{ARROW} {targets[0] if targets else line.data.strip()}"
        if line.type == LineType.SWITCH and targets:
            labels = [
                f"default: {target}" if label == "default" else target
                for target, label in line_targets(line)
                if target
            ]
            return f"switch {ARROW} {', '.join(labels)}"
        if line.type == LineType.OPTIONS and targets:
            return f"options {ARROW} {', '.join(targets)}"
    return line.type


def _unique_sections(sections: Iterable[SectionState]) -> List[SectionState]:
    seen: Set[str] = set()
    unique: List[SectionState] = []
    for section in sections:
        if section.section_id in seen:
            logger.debug("Duplicate section id ignored", extra={"section_id": section.section_id})
            continue
        seen.add(section.section_id)
        unique.append(section)
    return unique


def extract_graph(sections: Sequence[SectionState], start_section_id: Optional[str]) -> DialogGraph:
    graph = DialogGraph()
    ordered = _unique_sections(sections)
    known = {section.section_id for section in ordered}

    for section in ordered:
        graph.nodes.append(
            GraphNode(
                id=section.section_id,
                label=section.section_id,
                is_start=section.section_id == start_section_id,
                lines=[
                    GraphLine(
                        id=line.id,
                        type=line.type,
                        order=line.order,
                        label=describe_line(line),
                        speaker=line.speaker,
                        text_key=line.text_key,
                        data=line.data,
                    )
                    for line in section.lines
                ],
            )
        )

    for section in ordered:
        for line in section.lines:
            for target, label in line_targets(line):
                if target is None or target not in known:
                    continue
                graph.links.append(
                    GraphLink(
                        source=section.section_id,
                        target=target,
                        label=label,
                        source_line_id=line.id,
                    )
                )
    return graph
