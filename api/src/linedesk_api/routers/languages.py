import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete
from sqlmodel import Session, select

from linedesk_api.db import get_session
from linedesk_api.schemas import LanguageRead, LanguageWrite
from linedesk_models import Language, ProjectLanguage, Translation

router = APIRouter(prefix="/languages", tags=["languages"])
logger = logging.getLogger(__name__)


def _require_fields(body: LanguageWrite) -> None:
    if not body.code or not body.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="code and name required")


def _ensure_unique_code(session: Session, code: str, language_id: Optional[int] = None) -> None:
    existing = session.exec(select(Language).where(Language.code == code)).first()
    if existing is not None and existing.id != language_id:
        logger.warning("Language code conflict", extra={"code": code})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Language code already exists")


def _get_language_or_404(session: Session, language_id: int) -> Language:
    language = session.get(Language, language_id)
    if language is None:
        logger.warning("Language not found", extra={"language_id": language_id})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Language not found")
    return language


@router.get("", response_model=List[LanguageRead])
def list_languages(session: Session = Depends(get_session)) -> List[LanguageRead]:  # noqa: B008
    languages = session.exec(select(Language).order_by(Language.code)).all()
    logger.info("Languages listed", extra={"count": len(languages)})
    return [LanguageRead.model_validate(lang) for lang in languages]


@router.post("", response_model=LanguageRead, status_code=status.HTTP_201_CREATED)
def create_language(body: LanguageWrite, session: Session = Depends(get_session)) -> LanguageRead:  # noqa: B008
    _require_fields(body)
    _ensure_unique_code(session, body.code)
    language = Language(code=body.code, name=body.name)
    session.add(language)
    session.commit()
    session.refresh(language)
    logger.info("Language created", extra={"language_id": language.id, "code": language.code})
    return LanguageRead.model_validate(language)


@router.patch("/{language_id}", response_model=LanguageRead)
def update_language(
    language_id: int,
    body: LanguageWrite,
    session: Session = Depends(get_session),  # noqa: B008
) -> LanguageRead:
    language = _get_language_or_404(session, language_id)
    _require_fields(body)
    _ensure_unique_code(session, body.code, language_id)
    language.code = body.code
    language.name = body.name
    session.add(language)
    session.commit()
    session.refresh(language)
    logger.info("Language updated", extra={"language_id": language.id})
    return LanguageRead.model_validate(language)


@router.delete("/{language_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_language(language_id: int, session: Session = Depends(get_session)) -> None:  # noqa: B008
    language = _get_language_or_404(session, language_id)
    session.exec(delete(Translation).where(Translation.language_id == language_id))
    session.exec(delete(ProjectLanguage).where(ProjectLanguage.language_id == language_id))
    session.delete(language)
    session.commit()
    logger.info("Language deleted", extra={"language_id": language_id})
    return None
