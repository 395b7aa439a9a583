from fastapi import Depends, Response
from sqlmodel import Session

from linedesk_api.db import get_session
from linedesk_api.persistence.dialogs import export_source, get_dialog_or_404
from linedesk_api.persistence.projects import get_project_or_404
from linedesk_api.routers.dialogs import router, logger
from linedesk_api.utils.dialog_export import dialog_filename, export_dialog, render_dialog_json
from linedesk_api.utils.downloads import content_disposition


@router.get("/{dialog_id}/export")
def export_dialog_json(dialog_id: str, session: Session = Depends(get_session)) -> Response:  # noqa: B008
    dialog = get_dialog_or_404(session, dialog_id)
    project = get_project_or_404(session, dialog.project_id)
    document = export_dialog(project.name, export_source(session, dialog))
    logger.info("Dialog exported", extra={"dialog_id": dialog.id, "sections": len(document["sections"])})
    return Response(
        content=render_dialog_json(document).encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": content_disposition(dialog_filename(dialog.id))},
    )
