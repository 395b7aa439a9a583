from typing import List

from fastapi import Depends, HTTPException, Response, status
from sqlmodel import Session, select

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import export_source
from linedesk_api.persistence.projects import get_project_or_404, project_languages
from linedesk_api.persistence.translations import entry_translations, group_entries
from linedesk_api.routers.projects import router, logger
from linedesk_api.utils.csv_export import CsvEntry, CsvGroup, CsvLanguage, csv_filename, export_project_csv
from linedesk_api.utils.dialog_export import export_project_dialogs_zip
from linedesk_api.utils.downloads import content_disposition
from linedesk_models import Dialog, DialogSection, TranslationGroup


@router.get("/{project_id}/export")
def export_csv(project_id: int, session: Session = Depends(get_session)) -> Response:  # noqa: B008
    project = get_project_or_404(session, project_id)
    languages = [CsvLanguage(id=lang.id, code=lang.code) for lang in project_languages(session, project_id)]
    groups = session.exec(
        select(TranslationGroup).where(TranslationGroup.project_id == project_id).order_by(TranslationGroup.id)
    ).all()
    entries_by_group = group_entries(session, [g.id for g in groups])
    translations = entry_translations(
        session, [e.id for entries in entries_by_group.values() for e in entries]
    )
    csv_groups = [
        CsvGroup(
            name=group.name,
            entries=[
                CsvEntry(key=entry.key, texts={t.language_id: t.text for t in translations.get(entry.id, [])})
                for entry in entries_by_group.get(group.id, [])
            ],
        )
        for group in groups
    ]
    body = export_project_csv(project.name, languages, csv_groups)
    logger.info(
        "Project CSV exported",
        extra={"project_id": project_id, "languages": len(languages), "groups": len(csv_groups)},
    )
    return Response(
        content=body.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": content_disposition(csv_filename(project.name))},
    )


@router.get("/{project_id}/dialogs/export")
def export_dialogs_zip(project_id: int, session: Session = Depends(get_session)) -> Response:  # noqa: B008
    project = get_project_or_404(session, project_id)
    dialogs = session.exec(
        select(Dialog).where(Dialog.project_id == project_id).order_by(Dialog.created_at, Dialog.id)
    ).all()
    if not dialogs:
        logger.warning("No dialogs to export", extra={"project_id": project_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No dialogs found")
    filename, payload = export_project_dialogs_zip(project.name, [export_source(session, d) for d in dialogs])
    return Response(
        content=payload,
        media_type="application/zip",
        headers={"Content-Disposition": content_disposition(filename)},
    )


@router.get("/{project_id}/dialog-sections", response_model=List[str])
def list_dialog_sections(project_id: int, session: Session = Depends(get_session)) -> List[str]:  # noqa: B008
    get_project_or_404(session, project_id)
    section_ids = session.exec(
        select(DialogSection.section_id)
        .join(Dialog, Dialog.id == DialogSection.dialog_id)
        .where(Dialog.project_id == project_id)
    ).all()
    return sorted(set(section_ids))
