from typing import List, Optional

from fastapi import Depends, HTTPException, status
from sqlmodel import Session, select

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import (
    delete_lines,
    ensure_dialog_group,
    entry_creation_policy,
    generate_line_key,
    get_dialog_or_404,
    get_line_or_404,
    get_section_or_404,
    section_lines,
)
from linedesk_api.persistence.translations import ensure_entry
from linedesk_api.routers.dialogs import router, logger
from linedesk_api.schemas import LineRead, LineReorder, LineWrite
from linedesk_models import Dialog, DialogLine, EntryCreationPolicy, LineType

AUTO_ENTRY_COMMENT = "Auto-generated for dialog line"


def _parse_type(value: Optional[str]) -> LineType:
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="type required")
    try:
        return LineType(value)
    except ValueError:
        logger.warning("Unknown line type", extra={"line_type": value})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown line type: {value}") from None


def _attach_entry(session: Session, dialog: Dialog, key: str, comment: Optional[str] = None) -> None:
    group = ensure_dialog_group(session, dialog)
    ensure_entry(session, group.id, key, comment)


@router.get("/{dialog_id}/sections/{section_pk}/lines", response_model=List[LineRead])
def list_lines(
    dialog_id: str,
    section_pk: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> List[LineRead]:
    section = get_section_or_404(session, dialog_id, section_pk)
    lines = section_lines(session, [section.id]).get(section.id, [])
    return [LineRead.model_validate(line) for line in lines]


@router.post(
    "/{dialog_id}/sections/{section_pk}/lines",
    response_model=LineRead,
    status_code=status.HTTP_201_CREATED,
)
def create_line(
    dialog_id: str,
    section_pk: int,
    body: LineWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> LineRead:
    dialog = get_dialog_or_404(session, dialog_id)
    section = get_section_or_404(session, dialog_id, section_pk)
    line_type = _parse_type(body.type)

    text_key = body.text_key or None
    if text_key:
        _attach_entry(session, dialog, text_key)
    elif line_type == LineType.DIALOG and entry_creation_policy() == EntryCreationPolicy.EAGER:
        text_key = generate_line_key()
        _attach_entry(session, dialog, text_key, AUTO_ENTRY_COMMENT)

    line = DialogLine(
        section_id=section.id,
        type=line_type.value,
        order=body.order or 0,
        speaker=body.speaker or None,
        text_key=text_key,
        background=body.background or None,
        event_name=body.event_name or None,
        event_value=body.event_value or None,
        data=body.data or None,
    )
    session.add(line)
    session.commit()
    session.refresh(line)
    logger.info(
        "Line created",
        extra={"dialog_id": dialog_id, "section_pk": section.id, "line_id": line.id, "line_type": line_type.value},
    )
    return LineRead.model_validate(line)


@router.patch("/{dialog_id}/sections/{section_pk}/lines/reorder", status_code=status.HTTP_204_NO_CONTENT)
def reorder_lines(
    dialog_id: str,
    section_pk: int,
    body: LineReorder,
    session: Session = Depends(get_session),  # noqa: B008
) -> None:
    section = get_section_or_404(session, dialog_id, section_pk)
    if not isinstance(body.line_ids, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="lineIds must be an array")
    lines = {
        line.id: line for line in session.exec(select(DialogLine).where(DialogLine.section_id == section.id)).all()
    }
    unknown = [line_id for line_id in body.line_ids if line_id not in lines]
    if unknown:
        logger.warning("Reorder names unknown lines", extra={"section_pk": section.id, "line_ids": unknown})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="lineIds must belong to the section")
    for index, line_id in enumerate(body.line_ids):
        lines[line_id].order = index
        session.add(lines[line_id])
    session.commit()
    logger.info("Lines reordered", extra={"section_pk": section.id, "count": len(body.line_ids)})
    return None


@router.patch("/{dialog_id}/sections/{section_pk}/lines/{line_id}", response_model=LineRead)
def update_line(
    dialog_id: str,
    section_pk: int,
    line_id: int,
    body: LineWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> LineRead:
    dialog = get_dialog_or_404(session, dialog_id)
    section = get_section_or_404(session, dialog_id, section_pk)
    line = get_line_or_404(session, section, line_id)
    sent = body.model_fields_set

    if body.type:
        line.type = _parse_type(body.type).value
    if body.order is not None:
        line.order = body.order
    if "text_key" in sent:
        line.text_key = body.text_key or None
        if line.text_key:
            _attach_entry(session, dialog, line.text_key)
    for name in ("speaker", "background", "event_name", "event_value", "data"):
        if name in sent:
            setattr(line, name, getattr(body, name) or None)

    session.add(line)
    session.commit()
    session.refresh(line)
    logger.info("Line updated", extra={"line_id": line.id, "fields": sorted(sent)})
    return LineRead.model_validate(line)


@router.delete("/{dialog_id}/sections/{section_pk}/lines/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_line(
    dialog_id: str,
    section_pk: int,
    line_id: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> None:
    dialog = get_dialog_or_404(session, dialog_id)
    section = get_section_or_404(session, dialog_id, section_pk)
    line = get_line_or_404(session, section, line_id)
    delete_lines(session, dialog, [line])
    session.commit()
    logger.info("Line deleted", extra={"dialog_id": dialog_id, "line_id": line_id})
    return None
