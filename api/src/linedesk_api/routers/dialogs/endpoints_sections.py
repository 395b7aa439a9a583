from typing import List

from fastapi import Depends, HTTPException, status
from sqlmodel import Session

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import (
    delete_section_cascade,
    find_section,
    get_dialog_or_404,
    get_section_or_404,
    section_lines,
)
from linedesk_api.routers.dialogs import router, logger
from linedesk_api.routers.dialogs.views import section_read, section_reads
from linedesk_api.schemas import SectionRead, SectionWrite
from linedesk_models import DialogSection


def _ensure_unique_section(session: Session, dialog_id: str, section_id: str) -> None:
    if find_section(session, dialog_id, section_id) is not None:
        logger.warning("Section id conflict", extra={"dialog_id": dialog_id, "section_id": section_id})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Section with this ID already exists")


@router.get("/{dialog_id}/sections", response_model=List[SectionRead])
def list_sections(dialog_id: str, session: Session = Depends(get_session)) -> List[SectionRead]:  # noqa: B008
    get_dialog_or_404(session, dialog_id)
    return section_reads(session, dialog_id)


@router.post("/{dialog_id}/sections", response_model=SectionRead, status_code=status.HTTP_201_CREATED)
def create_section(
    dialog_id: str,
    body: SectionWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> SectionRead:
    get_dialog_or_404(session, dialog_id)
    if not body.section_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="sectionId required")
    _ensure_unique_section(session, dialog_id, body.section_id)
    section = DialogSection(dialog_id=dialog_id, section_id=body.section_id, order=body.order or 0)
    session.add(section)
    session.commit()
    session.refresh(section)
    logger.info("Section created", extra={"dialog_id": dialog_id, "section_id": section.section_id})
    return section_read(section, [])


@router.patch("/{dialog_id}/sections/{section_pk}", response_model=SectionRead)
def update_section(
    dialog_id: str,
    section_pk: int,
    body: SectionWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> SectionRead:
    dialog = get_dialog_or_404(session, dialog_id)
    section = get_section_or_404(session, dialog_id, section_pk)
    if body.section_id and body.section_id != section.section_id:
        _ensure_unique_section(session, dialog_id, body.section_id)
        if dialog.start_section == section.section_id:
            dialog.start_section = body.section_id
            session.add(dialog)
        section.section_id = body.section_id
    if body.order is not None:
        section.order = body.order
    session.add(section)
    session.commit()
    session.refresh(section)
    logger.info("Section updated", extra={"dialog_id": dialog_id, "section_pk": section.id})
    return section_read(section, section_lines(session, [section.id]).get(section.id, []))


@router.delete("/{dialog_id}/sections/{section_pk}", status_code=status.HTTP_204_NO_CONTENT)
def delete_section(
    dialog_id: str,
    section_pk: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> None:
    dialog = get_dialog_or_404(session, dialog_id)
    section = get_section_or_404(session, dialog_id, section_pk)
    delete_section_cascade(session, dialog, section)
    session.commit()
    logger.info("Section deleted", extra={"dialog_id": dialog_id, "section_pk": section_pk})
    return None
