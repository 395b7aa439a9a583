"""Text writes addressed by line instead of by translation entry.

The editor edits line text directly. The entry behind a line (or behind one
option of an options line) is created on the first non-blank write and its
key stored on the line, so lines never point at entries that were not asked
for.
"""

from typing import Optional, Tuple

from fastapi import Depends, HTTPException, Response, status
from sqlmodel import Session

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import (
    ensure_dialog_group,
    entry_creation_policy,
    generate_line_key,
    generate_text_key,
    get_dialog_or_404,
    get_line_or_404,
    get_section_or_404,
)
from linedesk_api.persistence.translations import ensure_entry, find_entry, is_blank, upsert_translation
from linedesk_api.routers.dialogs import router, logger
from linedesk_api.schemas import LineTextResult, LineTextWrite, TranslationRead
from linedesk_models import Dialog, DialogLine, EntryCreationPolicy, Language, LineType
from linedesk_models.payloads import MalformedPayloadError, decode_options, with_option_text


def _new_key() -> str:
    if entry_creation_policy() == EntryCreationPolicy.EAGER:
        return generate_line_key()
    return generate_text_key()


def _load_line(session: Session, dialog_id: str, section_pk: int, line_id: int) -> Tuple[Dialog, DialogLine]:
    dialog = get_dialog_or_404(session, dialog_id)
    section = get_section_or_404(session, dialog_id, section_pk)
    return dialog, get_line_or_404(session, section, line_id)


def _require_language(session: Session, body: LineTextWrite) -> int:
    if not body.language_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="languageId required")
    if session.get(Language, body.language_id) is None:
        logger.warning("Language not found", extra={"language_id": body.language_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Language not found")
    return body.language_id


def _write_text(
    session: Session,
    dialog: Dialog,
    key: Optional[str],
    language_id: int,
    text: Optional[str],
) -> Optional[Tuple[str, int, bool, Optional[TranslationRead]]]:
    """Store ``text`` under ``key``, creating the entry when there is none yet.

    Returns None when the text is blank and there is no entry to clear.
    """
    group = ensure_dialog_group(session, dialog)
    existing = find_entry(session, group.id, key) if key else None
    if existing is None and is_blank(text):
        return None
    created = existing is None
    entry = existing or ensure_entry(session, group.id, key or _new_key())
    stored = upsert_translation(session, entry.id, language_id, text)
    session.flush()
    translation = TranslationRead.model_validate(stored) if stored is not None else None
    return entry.key, entry.id, created, translation


@router.put("/{dialog_id}/sections/{section_pk}/lines/{line_id}/text", response_model=LineTextResult)
def write_line_text(
    dialog_id: str,
    section_pk: int,
    line_id: int,
    body: LineTextWrite,
    session: Session = Depends(get_session),  # noqa: B008
):
    dialog, line = _load_line(session, dialog_id, section_pk, line_id)
    if line.type != LineType.DIALOG:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Line has no text")
    language_id = _require_language(session, body)

    written = _write_text(session, dialog, line.text_key, language_id, body.text)
    if written is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    key, entry_id, created, translation = written
    if line.text_key != key:
        line.text_key = key
        session.add(line)
    session.commit()
    logger.info(
        "Line text written",
        extra={"line_id": line.id, "entry_id": entry_id, "entry_created": created, "language_id": language_id},
    )
    return LineTextResult(text_key=key, entry_id=entry_id, created=created, translation=translation)


@router.put(
    "/{dialog_id}/sections/{section_pk}/lines/{line_id}/options/{index}/text",
    response_model=LineTextResult,
)
def write_option_text(
    dialog_id: str,
    section_pk: int,
    line_id: int,
    index: int,
    body: LineTextWrite,
    session: Session = Depends(get_session),  # noqa: B008
):
    dialog, line = _load_line(session, dialog_id, section_pk, line_id)
    if line.type != LineType.OPTIONS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Line has no options")
    try:
        payload = decode_options(line.data or '{"options": []}')
    except MalformedPayloadError:
        logger.warning("Options data is not JSON", extra={"line_id": line.id})
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Line data is not valid options JSON") from None
    if index < 0 or index >= len(payload.options):
        logger.warning("Option not found", extra={"line_id": line.id, "index": index})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Option not found")
    language_id = _require_language(session, body)

    option = payload.options[index]
    current = option.text if isinstance(option.text, str) and option.text else None
    written = _write_text(session, dialog, current, language_id, body.text)
    if written is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    key, entry_id, created, translation = written
    if current != key:
        line.data = with_option_text(line.data or '{"options": []}', index, key)
        session.add(line)
    session.commit()
    logger.info(
        "Option text written",
        extra={"line_id": line.id, "index": index, "entry_id": entry_id, "entry_created": created},
    )
    return LineTextResult(text_key=key, entry_id=entry_id, created=created, translation=translation)
