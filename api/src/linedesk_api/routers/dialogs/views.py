from typing import List, Sequence

from sqlmodel import Session

from linedesk_api.persistence.dialogs import load_sections, section_lines
from linedesk_api.schemas import DialogDetail, DialogRead, LineRead, SectionRead
from linedesk_models import Dialog, DialogLine, DialogSection


def section_read(section: DialogSection, lines: Sequence[DialogLine]) -> SectionRead:
    return SectionRead(
        id=section.id,
        dialog_id=section.dialog_id,
        section_id=section.section_id,
        order=section.order,
        lines=[LineRead.model_validate(line) for line in lines],
    )


def section_reads(session: Session, dialog_id: str) -> List[SectionRead]:
    sections = load_sections(session, dialog_id)
    lines = section_lines(session, [s.id for s in sections])
    return [section_read(section, lines.get(section.id, [])) for section in sections]


def dialog_detail(session: Session, dialog: Dialog) -> DialogDetail:
    summary = DialogRead.model_validate(dialog)
    return DialogDetail(**summary.model_dump(), sections=section_reads(session, dialog.id))
