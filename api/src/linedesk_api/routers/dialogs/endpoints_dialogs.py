from typing import List, Optional

from fastapi import Depends, HTTPException, Query, status
from sqlmodel import Session, select

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import create_dialog, delete_dialog_cascade, find_section, get_dialog_or_404
from linedesk_api.persistence.projects import get_project_or_404
from linedesk_api.routers.dialogs import router, logger
from linedesk_api.routers.dialogs.views import dialog_detail
from linedesk_api.schemas import DialogCreate, DialogDetail, DialogRead, DialogUpdate
from linedesk_models import Dialog


@router.get("", response_model=List[DialogRead])
def list_dialogs(
    project_id: Optional[int] = Query(default=None, alias="projectId"),  # noqa: B008
    session: Session = Depends(get_session),  # noqa: B008
) -> List[DialogRead]:
    if project_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="projectId required")
    dialogs = session.exec(
        select(Dialog).where(Dialog.project_id == project_id).order_by(Dialog.created_at, Dialog.id)
    ).all()
    logger.info("Dialogs listed", extra={"project_id": project_id, "count": len(dialogs)})
    return [DialogRead.model_validate(d) for d in dialogs]


@router.post("", response_model=DialogRead, status_code=status.HTTP_201_CREATED)
def create_dialog_endpoint(body: DialogCreate, session: Session = Depends(get_session)) -> DialogRead:  # noqa: B008
    if not body.id or not body.project_id or not body.name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="id, projectId and name required")
    get_project_or_404(session, body.project_id)
    if session.get(Dialog, body.id) is not None:
        logger.warning("Dialog id conflict", extra={"dialog_id": body.id})
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Dialog with this ID already exists")

    dialog = create_dialog(session, body.id, body.project_id, body.name, body.description)
    session.commit()
    session.refresh(dialog)
    logger.info("Dialog created", extra={"dialog_id": dialog.id, "project_id": dialog.project_id})
    return DialogRead.model_validate(dialog)


@router.get("/{dialog_id}", response_model=DialogDetail)
def get_dialog(dialog_id: str, session: Session = Depends(get_session)) -> DialogDetail:  # noqa: B008
    dialog = get_dialog_or_404(session, dialog_id)
    return dialog_detail(session, dialog)


@router.patch("/{dialog_id}", response_model=DialogRead)
def update_dialog(
    dialog_id: str,
    body: DialogUpdate,
    session: Session = Depends(get_session),  # noqa: B008
) -> DialogRead:
    dialog = get_dialog_or_404(session, dialog_id)
    sent = body.model_fields_set
    if body.name:
        dialog.name = body.name
    if "description" in sent:
        dialog.description = body.description
    if "start_section" in sent:
        if body.start_section and find_section(session, dialog.id, body.start_section) is None:
            logger.warning(
                "Start section not found",
                extra={"dialog_id": dialog.id, "section_id": body.start_section},
            )
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown start section")
        dialog.start_section = body.start_section or None
    session.add(dialog)
    session.commit()
    session.refresh(dialog)
    logger.info("Dialog updated", extra={"dialog_id": dialog.id, "fields": sorted(sent)})
    return DialogRead.model_validate(dialog)


@router.delete("/{dialog_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_dialog(dialog_id: str, session: Session = Depends(get_session)) -> None:  # noqa: B008
    dialog = get_dialog_or_404(session, dialog_id)
    delete_dialog_cascade(session, dialog)
    session.commit()
    logger.info("Dialog deleted", extra={"dialog_id": dialog_id})
    return None
