from typing import List

from fastapi import Depends, HTTPException, status
from sqlalchemy import delete
from sqlmodel import Session, select

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import delete_dialog_cascade
from linedesk_api.persistence.projects import get_project_or_404, project_languages
from linedesk_api.persistence.translations import delete_group_cascade, entry_translations, group_entries
from linedesk_api.routers.projects import router, logger
from linedesk_api.schemas import (
    GroupSummary,
    LanguageRead,
    ProjectDetail,
    ProjectLanguageBody,
    ProjectRead,
    ProjectWrite,
)
from linedesk_models import Dialog, Language, Project, ProjectLanguage, TranslationGroup


def _require_name(body: ProjectWrite) -> str:
    if not body.name or not body.name.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
    return body.name


def _group_summaries(session: Session, project_id: int, language_ids: List[int]) -> List[GroupSummary]:
    groups = session.exec(
        select(TranslationGroup).where(TranslationGroup.project_id == project_id).order_by(TranslationGroup.id)
    ).all()
    entries_by_group = group_entries(session, [g.id for g in groups])
    all_entries = [e for entries in entries_by_group.values() for e in entries]
    translations = entry_translations(session, [e.id for e in all_entries])
    wanted = set(language_ids)

    summaries: List[GroupSummary] = []
    for group in groups:
        entries = entries_by_group.get(group.id, [])
        has_untranslated = any(
            not wanted <= {t.language_id for t in translations.get(e.id, [])} for e in entries
        )
        summaries.append(
            GroupSummary(
                id=group.id,
                name=group.name,
                description=group.description,
                entry_count=len(entries),
                has_untranslated=has_untranslated,
            )
        )
    return summaries


@router.get("", response_model=List[ProjectRead])
def list_projects(session: Session = Depends(get_session)) -> List[ProjectRead]:  # noqa: B008
    projects = session.exec(select(Project).order_by(Project.id)).all()
    logger.info("Projects listed", extra={"count": len(projects)})
    return [ProjectRead.model_validate(p) for p in projects]


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(body: ProjectWrite, session: Session = Depends(get_session)) -> ProjectRead:  # noqa: B008
    project = Project(name=_require_name(body), description=body.description)
    session.add(project)
    session.commit()
    session.refresh(project)
    logger.info("Project created", extra={"project_id": project.id})
    return ProjectRead.model_validate(project)


@router.get("/{project_id}", response_model=ProjectDetail)
def get_project(project_id: int, session: Session = Depends(get_session)) -> ProjectDetail:  # noqa: B008
    project = get_project_or_404(session, project_id)
    languages = project_languages(session, project_id)
    detail = ProjectDetail(
        id=project.id,
        name=project.name,
        description=project.description,
        languages=[LanguageRead.model_validate(lang) for lang in languages],
        groups=_group_summaries(session, project_id, [lang.id for lang in languages]),
    )
    logger.info("Project fetched", extra={"project_id": project_id})
    return detail


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    body: ProjectWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> ProjectRead:
    project = get_project_or_404(session, project_id)
    sent = body.model_fields_set
    if "name" in sent:
        project.name = _require_name(body)
    if "description" in sent:
        project.description = body.description
    session.add(project)
    session.commit()
    session.refresh(project)
    logger.info("Project updated", extra={"project_id": project.id})
    return ProjectRead.model_validate(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(project_id: int, session: Session = Depends(get_session)) -> None:  # noqa: B008
    project = get_project_or_404(session, project_id)
    for dialog in session.exec(select(Dialog).where(Dialog.project_id == project_id)).all():
        delete_dialog_cascade(session, dialog)
    for group in session.exec(select(TranslationGroup).where(TranslationGroup.project_id == project_id)).all():
        delete_group_cascade(session, group)
    session.exec(delete(ProjectLanguage).where(ProjectLanguage.project_id == project_id))
    session.delete(project)
    session.commit()
    logger.info("Project deleted", extra={"project_id": project_id})
    return None


@router.get("/{project_id}/languages", response_model=List[LanguageRead])
def list_project_languages(project_id: int, session: Session = Depends(get_session)) -> List[LanguageRead]:  # noqa: B008
    get_project_or_404(session, project_id)
    return [LanguageRead.model_validate(lang) for lang in project_languages(session, project_id)]


@router.post("/{project_id}/languages", status_code=status.HTTP_204_NO_CONTENT)
def attach_language(
    project_id: int,
    body: ProjectLanguageBody,
    session: Session = Depends(get_session),  # noqa: B008
) -> None:
    get_project_or_404(session, project_id)
    if not body.language_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="languageId required")
    if session.get(Language, body.language_id) is None:
        logger.warning("Language not found", extra={"language_id": body.language_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Language not found")
    existing = session.exec(
        select(ProjectLanguage).where(
            ProjectLanguage.project_id == project_id,
            ProjectLanguage.language_id == body.language_id,
        )
    ).first()
    if existing is None:
        session.add(ProjectLanguage(project_id=project_id, language_id=body.language_id))
        session.commit()
    logger.info("Project language attached", extra={"project_id": project_id, "language_id": body.language_id})
    return None


@router.delete("/{project_id}/languages/{language_id}", status_code=status.HTTP_204_NO_CONTENT)
def detach_language(
    project_id: int,
    language_id: int,
    session: Session = Depends(get_session),  # noqa: B008
) -> None:
    link = session.exec(
        select(ProjectLanguage).where(
            ProjectLanguage.project_id == project_id,
            ProjectLanguage.language_id == language_id,
        )
    ).first()
    if link is None:
        logger.warning(
            "Project language not found",
            extra={"project_id": project_id, "language_id": language_id},
        )
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project language not found")
    # Only the association goes; the language stays for other projects
    session.delete(link)
    session.commit()
    logger.info("Project language detached", extra={"project_id": project_id, "language_id": language_id})
    return None
