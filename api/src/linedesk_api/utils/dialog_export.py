from __future__ import annotations

import io
import json
import logging
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from linedesk_models import dialog_group_name
from linedesk_models.dialog_state import LineState, SectionState
from linedesk_models.payloads import MalformedPayloadError, decode_line_data

from .exported_keys import build_exported_key

logger = logging.getLogger(__name__)


@dataclass
class DialogExportSource:
    """Everything needed to export one dialog, already loaded and ordered."""

    dialog_id: str
    start_section: Optional[str]
    sections: Sequence[SectionState]
    # None when the dialog's group row does not exist yet
    group_name: Optional[str] = None


def _resolve_options(options: List[Any], project_name: str, group_name: str) -> List[Any]:
    resolved: List[Any] = []
    for option in options:
        if isinstance(option, dict) and option.get("text"):
            option = {**option, "text": build_exported_key(project_name, group_name, option["text"])}
        resolved.append(option)
    return resolved


def export_line(line: LineState, project_name: str, group_name: str) -> Dict[str, Any]:
    """
    Build the exported object of a single line.

    Column fields are emitted only when truthy. JSON ``data`` is merged into
    the object after option texts are resolved; data that is not a JSON
    object is kept verbatim under ``data``.
    """
    out: Dict[str, Any] = {"type": line.type}
    if line.speaker:
        out["speaker"] = line.speaker
    if line.text_key:
        out["text"] = build_exported_key(project_name, group_name, line.text_key)
    if line.background:
        out["background"] = line.background
    if line.event_name:
        out["name"] = line.event_name
    if line.event_value:
        out["value"] = line.event_value

    if line.data:
        try:
            parsed = decode_line_data(line.data)
        except MalformedPayloadError:
            parsed = None
        if isinstance(parsed, dict):
            if isinstance(parsed.get("options"), list):
                parsed["options"] = _resolve_options(parsed["options"], project_name, group_name)
            out.update(parsed)
        else:
            logger.debug("Line data kept raw", extra={"line_id": line.id, "line_type": line.type})
            out["data"] = line.data
    return out


def export_dialog(project_name: str, source: DialogExportSource) -> Dict[str, Any]:
    group_name = source.group_name or dialog_group_name(source.dialog_id)
    return {
        "startSection": source.start_section or "",
        "sections": [
            {
                "id": section.section_id,
                "lines": [export_line(line, project_name, group_name) for line in section.lines],
            }
            for section in source.sections
        ],
    }


def render_dialog_json(document: Dict[str, Any]) -> str:
    return json.dumps(document, ensure_ascii=False, indent=2)


def dialog_filename(dialog_id: str) -> str:
    return f"{dialog_id}.json"


def zip_filename(project_name: str, now: Optional[datetime] = None) -> str:
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"{project_name}_dialogs_{moment.strftime('%Y-%m-%dT%H-%M-%S')}.zip"


def export_project_dialogs_zip(
    project_name: str,
    sources: Sequence[DialogExportSource],
    now: Optional[datetime] = None,
) -> Tuple[str, bytes]:
    """Pack every dialog export of a project into one archive.

    ``sources`` must already be in creation order. Returns (filename, bytes).
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for source in sources:
            document = export_dialog(project_name, source)
            archive.writestr(dialog_filename(source.dialog_id), render_dialog_json(document).encode("utf-8"))
    logger.info("Dialogs archived", extra={"project_name": project_name, "count": len(sources)})
    return zip_filename(project_name, now), buffer.getvalue()
