import logging
from typing import List

from fastapi import HTTPException, status
from sqlmodel import Session, select

from linedesk_models import Language, Project, ProjectLanguage

logger = logging.getLogger(__name__)


def get_project_or_404(session: Session, project_id: int) -> Project:
    project = session.get(Project, project_id)
    if project is None:
        logger.warning("Project not found", extra={"project_id": project_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return project


def project_languages(session: Session, project_id: int) -> List[Language]:
    """Languages attached to a project, ordered by code."""
    return list(
        session.exec(
            select(Language)
            .join(ProjectLanguage, ProjectLanguage.language_id == Language.id)
            .where(ProjectLanguage.project_id == project_id)
            .order_by(Language.code)
        ).all()
    )
