from typing import Dict, List, Optional

from fastapi import Depends, HTTPException, Response, status
from sqlmodel import Session, select

from linedesk_api.db import get_session
from linedesk_api.persistence.projects import get_project_or_404
from linedesk_api.persistence.translations import (
    delete_entries,
    delete_group_cascade,
    entry_translations,
    find_entry,
    group_entries,
    upsert_translation,
)
from linedesk_api.routers.projects import router, logger
from linedesk_api.schemas import (
    EntryCreate,
    EntryRead,
    EntryUpdate,
    GroupDetail,
    GroupRead,
    GroupWrite,
    TranslationRead,
    TranslationWrite,
)
from linedesk_api.utils.exported_keys import build_exported_key
from linedesk_models import (
    Dialog,
    Language,
    Project,
    Translation,
    TranslationEntry,
    TranslationGroup,
    dialog_group_name,
)


def _get_group_or_404(session: Session, project_id: int, group_id: int) -> TranslationGroup:
    group = session.get(TranslationGroup, group_id)
    if group is None or group.project_id != project_id:
        logger.warning("Group not found", extra={"project_id": project_id, "group_id": group_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return group


def _get_entry_or_404(session: Session, group: TranslationGroup, entry_id: int) -> TranslationEntry:
    entry = session.get(TranslationEntry, entry_id)
    if entry is None or entry.group_id != group.id:
        logger.warning("Entry not found", extra={"group_id": group.id, "entry_id": entry_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return entry


def _owning_dialog(session: Session, group: TranslationGroup) -> Optional[Dialog]:
    if not group.name.startswith("Dialog_"):
        return None
    dialogs = session.exec(select(Dialog).where(Dialog.project_id == group.project_id)).all()
    return next((d for d in dialogs if dialog_group_name(d.id) == group.name), None)


def _entry_read(
    project: Project,
    group: TranslationGroup,
    entry: TranslationEntry,
    translations: List[Translation],
) -> EntryRead:
    return EntryRead(
        id=entry.id,
        group_id=entry.group_id,
        key=entry.key,
        comment=entry.comment,
        copied=entry.copied,
        exported_key=build_exported_key(project.name, group.name, entry.key),
        translations=[TranslationRead.model_validate(t) for t in translations],
    )


def _group_entry_reads(session: Session, project: Project, group: TranslationGroup) -> List[EntryRead]:
    entries = group_entries(session, [group.id]).get(group.id, [])
    translations: Dict[int, List[Translation]] = entry_translations(session, [e.id for e in entries])
    return [_entry_read(project, group, e, translations.get(e.id, [])) for e in entries]


def _ensure_unique_key(session: Session, group_id: int, key: str, entry_id: Optional[int] = None) -> None:
    existing = find_entry(session, group_id, key)
    if existing is not None and existing.id != entry_id:
        logger.warning("Entry key conflict", extra={"group_id": group_id, "key": key})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Entry with this key already exists")


@router.get("/{project_id}/groups", response_model=List[GroupRead])
def list_groups(project_id: int, session: Session = Depends(get_session)) -> List[GroupRead]:  # noqa: B008
    get_project_or_404(session, project_id)
    groups = session.exec(
        select(TranslationGroup).where(TranslationGroup.project_id == project_id).order_by(TranslationGroup.id)
    ).all()
    return [GroupRead.model_validate(g) for g in groups]


@router.post("/{project_id}/groups", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
def create_group(
    project_id: int,
    body: GroupWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> GroupRead:
    get_project_or_404(session, project_id)
    if not body.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name required")
    group = TranslationGroup(project_id=project_id, name=body.name, description=body.description)
    session.add(group)
    session.commit()
    session.refresh(group)
    logger.info("Group created", extra={"project_id": project_id, "group_id": group.id})
    return GroupRead.model_validate(group)


@router.get("/{project_id}/groups/{group_id}", response_model=GroupDetail)
def get_group(
    project_id: int,
    group_id: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> GroupDetail:
    project = get_project_or_404(session, project_id)
    group = _get_group_or_404(session, project_id, group_id)
    return GroupDetail(
        id=group.id,
        project_id=group.project_id,
        name=group.name,
        description=group.description,
        entries=_group_entry_reads(session, project, group),
    )


@router.patch("/{project_id}/groups/{group_id}", response_model=GroupRead)
def update_group(
    project_id: int,
    group_id: int,
    body: GroupWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> GroupRead:
    group = _get_group_or_404(session, project_id, group_id)
    if not body.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name required")
    if body.name != group.name and _owning_dialog(session, group) is not None:
        # Dialog groups are found by name
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Dialog groups cannot be renamed")
    group.name = body.name
    group.description = body.description
    session.add(group)
    session.commit()
    session.refresh(group)
    logger.info("Group updated", extra={"group_id": group.id})
    return GroupRead.model_validate(group)


@router.delete("/{project_id}/groups/{group_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_group(
    project_id: int,
    group_id: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> None:
    group = _get_group_or_404(session, project_id, group_id)
    dialog = _owning_dialog(session, group)
    if dialog is not None:
        logger.warning("Refusing to delete dialog group", extra={"group_id": group_id, "dialog_id": dialog.id})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Group belongs to a dialog")
    delete_group_cascade(session, group)
    session.commit()
    logger.info("Group deleted", extra={"group_id": group_id})
    return None


@router.get("/{project_id}/groups/{group_id}/entries", response_model=List[EntryRead])
def list_entries(
    project_id: int,
    group_id: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> List[EntryRead]:
    project = get_project_or_404(session, project_id)
    group = _get_group_or_404(session, project_id, group_id)
    return _group_entry_reads(session, project, group)


@router.post("/{project_id}/groups/{group_id}/entries", response_model=EntryRead, status_code=status.HTTP_201_CREATED)
def create_entry(
    project_id: int,
    group_id: int,
    body: EntryCreate,
    session: Session = Depends(get_session),  # noqa: B008
) -> EntryRead:
    project = get_project_or_404(session, project_id)
    group = _get_group_or_404(session, project_id, group_id)
    if not body.key:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="key required")
    _ensure_unique_key(session, group.id, body.key)
    entry = TranslationEntry(group_id=group.id, key=body.key, comment=body.comment)
    session.add(entry)
    session.commit()
    session.refresh(entry)
    logger.info("Entry created", extra={"group_id": group.id, "entry_id": entry.id})
    return _entry_read(project, group, entry, [])


@router.patch("/{project_id}/groups/{group_id}/entries/{entry_id}", response_model=EntryRead)
def update_entry(
    project_id: int,
    group_id: int,
    entry_id: int,
    body: EntryUpdate,
    session: Session = Depends(get_session),  # noqa: B008
) -> EntryRead:
    project = get_project_or_404(session, project_id)
    group = _get_group_or_404(session, project_id, group_id)
    entry = _get_entry_or_404(session, group, entry_id)
    sent = body.model_fields_set
    if not sent:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="nothing to update")

    if "key" in sent:
        if not body.key:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="key required")
        if body.key != entry.key:
            _ensure_unique_key(session, group.id, body.key, entry.id)
            entry.key = body.key
            # A renamed key has not been copied anywhere yet
            entry.copied = False
    if "comment" in sent:
        entry.comment = body.comment
    if "copied" in sent:
        entry.copied = bool(body.copied)

    session.add(entry)
    session.commit()
    session.refresh(entry)
    logger.info("Entry updated", extra={"entry_id": entry.id, "fields": sorted(sent)})
    translations = entry_translations(session, [entry.id]).get(entry.id, [])
    return _entry_read(project, group, entry, translations)


@router.delete("/{project_id}/groups/{group_id}/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    project_id: int,
    group_id: int,
    entry_id: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> None:
    group = _get_group_or_404(session, project_id, group_id)
    entry = _get_entry_or_404(session, group, entry_id)
    delete_entries(session, [entry.id])
    session.commit()
    logger.info("Entry deleted", extra={"entry_id": entry_id})
    return None


@router.post(
    "/{project_id}/groups/{group_id}/entries/{entry_id}/translations",
    response_model=TranslationRead,
    responses={201: {"model": TranslationRead}, 204: {"description": "Blank text, nothing stored"}},
)
def write_translation(
    project_id: int,
    group_id: int,
    entry_id: int,
    body: TranslationWrite,
    response: Response,
    session: Session = Depends(get_session),  # noqa: B008
):
    group = _get_group_or_404(session, project_id, group_id)
    entry = _get_entry_or_404(session, group, entry_id)
    if not body.language_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="languageId required")
    if session.get(Language, body.language_id) is None:
        logger.warning("Language not found", extra={"language_id": body.language_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Language not found")

    existed = session.exec(
        select(Translation.id).where(
            Translation.entry_id == entry.id,
            Translation.language_id == body.language_id,
        )
    ).first()
    stored = upsert_translation(session, entry.id, body.language_id, body.text)
    session.commit()
    if stored is None:
        logger.info("Translation cleared", extra={"entry_id": entry.id, "language_id": body.language_id})
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    session.refresh(stored)
    response.status_code = status.HTTP_200_OK if existed is not None else status.HTTP_201_CREATED
    logger.info("Translation saved", extra={"entry_id": entry.id, "language_id": body.language_id})
    return TranslationRead.model_validate(stored)
