from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import delete
from sqlmodel import Session, select

from linedesk_models import Translation, TranslationEntry, TranslationGroup


def is_blank(text: Optional[str]) -> bool:
    return text is None or not text.strip()


def upsert_translation(
    session: Session,
    entry_id: int,
    language_id: int,
    text: Optional[str],
) -> Optional[Translation]:
    """Write one translation; blank text removes the row instead of storing it.

    Returns the stored row, or None when nothing is stored afterwards.
    The caller commits.
    """
    existing = session.exec(
        select(Translation).where(
            Translation.entry_id == entry_id,
            Translation.language_id == language_id,
        )
    ).first()
    if is_blank(text):
        if existing is not None:
            session.delete(existing)
        return None
    if existing is None:
        existing = Translation(entry_id=entry_id, language_id=language_id, text=text)
    else:
        existing.text = text
    session.add(existing)
    return existing


def find_entry(session: Session, group_id: int, key: str) -> Optional[TranslationEntry]:
    return session.exec(
        select(TranslationEntry).where(
            TranslationEntry.group_id == group_id,
            TranslationEntry.key == key,
        )
    ).first()


def ensure_entry(session: Session, group_id: int, key: str, comment: Optional[str] = None) -> TranslationEntry:
    entry = find_entry(session, group_id, key)
    if entry is None:
        entry = TranslationEntry(group_id=group_id, key=key, comment=comment)
        session.add(entry)
        session.flush()
    return entry


def delete_entries(session: Session, entry_ids: Sequence[int]) -> None:
    ids = [i for i in entry_ids if i is not None]
    if not ids:
        return
    session.exec(delete(Translation).where(Translation.entry_id.in_(ids)))
    session.exec(delete(TranslationEntry).where(TranslationEntry.id.in_(ids)))


def delete_entries_by_key(session: Session, group_id: int, keys: Iterable[str]) -> int:
    wanted = sorted({k for k in keys if k})
    if not wanted:
        return 0
    ids = session.exec(
        select(TranslationEntry.id).where(
            TranslationEntry.group_id == group_id,
            TranslationEntry.key.in_(wanted),
        )
    ).all()
    delete_entries(session, list(ids))
    return len(ids)


def delete_group_cascade(session: Session, group: TranslationGroup) -> None:
    ids = session.exec(select(TranslationEntry.id).where(TranslationEntry.group_id == group.id)).all()
    delete_entries(session, list(ids))
    session.delete(group)


def group_entries(session: Session, group_ids: Sequence[int]) -> Dict[int, List[TranslationEntry]]:
    """Entries per group id, in stored order."""
    by_group: Dict[int, List[TranslationEntry]] = {gid: [] for gid in group_ids}
    if not group_ids:
        return by_group
    rows = session.exec(
        select(TranslationEntry)
        .where(TranslationEntry.group_id.in_(list(group_ids)))
        .order_by(TranslationEntry.id)
    ).all()
    for entry in rows:
        by_group.setdefault(entry.group_id, []).append(entry)
    return by_group


def entry_translations(session: Session, entry_ids: Sequence[int]) -> Dict[int, List[Translation]]:
    by_entry: Dict[int, List[Translation]] = {eid: [] for eid in entry_ids}
    if not entry_ids:
        return by_entry
    rows = session.exec(
        select(Translation)
        .where(Translation.entry_id.in_(list(entry_ids)))
        .order_by(Translation.id)
    ).all()
    for tr in rows:
        by_entry.setdefault(tr.entry_id, []).append(tr)
    return by_entry
