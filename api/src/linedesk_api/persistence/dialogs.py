"""Dialog rows and the unit of work that keeps them consistent with their
translation group.

Every dialog owns one ``TranslationGroup`` named ``Dialog_<id>``. Line keys
point at entries of that group, so creating or deleting dialogs, sections
and lines also touches entries. Nothing here commits; routers commit once
per request.
"""

import logging
import os
import secrets
import string
import time
import uuid
from typing import Dict, Iterable, List, Optional, Sequence, Set

from fastapi import HTTPException, status
from sqlalchemy import delete
from sqlmodel import Session, select

from linedesk_api.persistence.translations import delete_entries_by_key, delete_group_cascade
from linedesk_api.utils.dialog_export import DialogExportSource
from linedesk_models import (
    Dialog,
    DialogLine,
    DialogSection,
    EntryCreationPolicy,
    LineType,
    SectionState,
    TranslationGroup,
    dialog_group_name,
)
from linedesk_models.payloads import MalformedPayloadError, decode_options

logger = logging.getLogger(__name__)

DEFAULT_SECTION_ID = "start"
_BASE36 = string.digits + string.ascii_lowercase


def entry_creation_policy() -> EntryCreationPolicy:
    raw = os.getenv("ENTRY_CREATION_POLICY", EntryCreationPolicy.LAZY.value).strip().lower()
    try:
        return EntryCreationPolicy(raw)
    except ValueError:
        logger.warning("Unknown entry creation policy, using lazy", extra={"value": raw})
        return EntryCreationPolicy.LAZY


def generate_line_key() -> str:
    """Key for entries created together with their dialog line."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"dialog_line_{int(time.time() * 1000)}_{suffix}"


def generate_text_key() -> str:
    """Key for entries created on first text write."""
    return str(uuid.uuid4())


def get_dialog_or_404(session: Session, dialog_id: str) -> Dialog:
    dialog = session.get(Dialog, dialog_id)
    if dialog is None:
        logger.warning("Dialog not found", extra={"dialog_id": dialog_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dialog not found")
    return dialog


def get_section_or_404(session: Session, dialog_id: str, section_pk: int) -> DialogSection:
    section = session.get(DialogSection, section_pk)
    if section is None or section.dialog_id != dialog_id:
        logger.warning("Section not found", extra={"dialog_id": dialog_id, "section_pk": section_pk})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Section not found")
    return section


def get_line_or_404(session: Session, section: DialogSection, line_id: int) -> DialogLine:
    line = session.get(DialogLine, line_id)
    if line is None or line.section_id != section.id:
        logger.warning("Line not found", extra={"section_pk": section.id, "line_id": line_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Line not found")
    return line


def find_section(session: Session, dialog_id: str, section_id: str) -> Optional[DialogSection]:
    return session.exec(
        select(DialogSection).where(
            DialogSection.dialog_id == dialog_id,
            DialogSection.section_id == section_id,
        )
    ).first()


def get_dialog_group(session: Session, dialog: Dialog) -> Optional[TranslationGroup]:
    return session.exec(
        select(TranslationGroup).where(
            TranslationGroup.project_id == dialog.project_id,
            TranslationGroup.name == dialog_group_name(dialog.id),
        )
    ).first()


def ensure_dialog_group(session: Session, dialog: Dialog) -> TranslationGroup:
    group = get_dialog_group(session, dialog)
    if group is None:
        group = TranslationGroup(
            project_id=dialog.project_id,
            name=dialog_group_name(dialog.id),
            description=f"Translations for dialog {dialog.name}",
        )
        session.add(group)
        session.flush()
        logger.info("Dialog group created", extra={"dialog_id": dialog.id, "group_id": group.id})
    return group


def create_dialog(
    session: Session,
    dialog_id: str,
    project_id: int,
    name: str,
    description: Optional[str] = None,
) -> Dialog:
    """Dialog, its translation group and its default section."""
    dialog = Dialog(
        id=dialog_id,
        project_id=project_id,
        name=name,
        description=description,
        start_section=DEFAULT_SECTION_ID,
    )
    session.add(dialog)
    # A group left behind by an earlier dialog with the same id is reused
    ensure_dialog_group(session, dialog)
    session.add(DialogSection(dialog_id=dialog_id, section_id=DEFAULT_SECTION_ID, order=0))
    session.flush()
    return dialog


def load_sections(session: Session, dialog_id: str) -> List[DialogSection]:
    return list(
        session.exec(
            select(DialogSection)
            .where(DialogSection.dialog_id == dialog_id)
            .order_by(DialogSection.order, DialogSection.id)
        ).all()
    )


def section_lines(session: Session, section_pks: Sequence[int]) -> Dict[int, List[DialogLine]]:
    """Lines per section primary key, in display order."""
    by_section: Dict[int, List[DialogLine]] = {pk: [] for pk in section_pks}
    if not section_pks:
        return by_section
    rows = session.exec(
        select(DialogLine)
        .where(DialogLine.section_id.in_(list(section_pks)))
        .order_by(DialogLine.order, DialogLine.id)
    ).all()
    for line in rows:
        by_section.setdefault(line.section_id, []).append(line)
    return by_section


def load_section_states(session: Session, dialog_id: str) -> List[SectionState]:
    sections = load_sections(session, dialog_id)
    lines = section_lines(session, [s.id for s in sections])
    return [SectionState.from_rows(section, lines.get(section.id, [])) for section in sections]


def line_text_keys(line: DialogLine) -> Set[str]:
    """Entry keys a line refers to: its own key plus option label keys."""
    keys: Set[str] = set()
    if line.text_key:
        keys.add(line.text_key)
    if line.type == LineType.OPTIONS and line.data:
        try:
            options = decode_options(line.data).options
        except MalformedPayloadError:
            options = []
        keys.update(option.text for option in options if isinstance(option.text, str) and option.text)
    return keys


def delete_lines(session: Session, dialog: Dialog, lines: Iterable[DialogLine]) -> None:
    lines = list(lines)
    if not lines:
        return
    keys: Set[str] = set()
    for line in lines:
        keys |= line_text_keys(line)
    group = get_dialog_group(session, dialog)
    if group is not None and keys:
        removed = delete_entries_by_key(session, group.id, keys)
        logger.debug("Line entries removed", extra={"dialog_id": dialog.id, "count": removed})
    session.exec(delete(DialogLine).where(DialogLine.id.in_([line.id for line in lines])))


def delete_section_cascade(session: Session, dialog: Dialog, section: DialogSection) -> None:
    lines = session.exec(select(DialogLine).where(DialogLine.section_id == section.id)).all()
    delete_lines(session, dialog, lines)
    if dialog.start_section == section.section_id:
        dialog.start_section = None
        session.add(dialog)
    session.delete(section)


def delete_dialog_cascade(session: Session, dialog: Dialog) -> None:
    """Lines, their entries, sections, the dialog and then its whole group."""
    sections = load_sections(session, dialog.id)
    lines = section_lines(session, [s.id for s in sections])
    delete_lines(session, dialog, [line for rows in lines.values() for line in rows])
    if sections:
        session.exec(delete(DialogSection).where(DialogSection.dialog_id == dialog.id))
    group = get_dialog_group(session, dialog)
    session.delete(dialog)
    if group is not None:
        delete_group_cascade(session, group)
    session.flush()
    logger.info("Dialog removed", extra={"dialog_id": dialog.id, "sections": len(sections)})


def export_source(session: Session, dialog: Dialog) -> DialogExportSource:
    group = get_dialog_group(session, dialog)
    return DialogExportSource(
        dialog_id=dialog.id,
        start_section=dialog.start_section,
        sections=load_section_states(session, dialog.id),
        group_name=group.name if group is not None else None,
    )
