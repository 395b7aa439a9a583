"""SQLAdmin panel over the raw tables, gated by ADMIN_ENABLED.

Every ``/admin`` request needs ``Authorization: Bearer <ADMIN_TOKEN>``.
Dialog tables are read-only here; dialog rows and their translation group
must change together, which only the API does.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqladmin import Admin, ModelView
from starlette.middleware.base import BaseHTTPMiddleware

from linedesk_api.db import engine
from linedesk_models import (
    Dialog,
    DialogLine,
    DialogSection,
    Language,
    Project,
    Translation,
    TranslationEntry,
    TranslationGroup,
)

logger = logging.getLogger(__name__)

ADMIN_PATH = "/admin"


def admin_enabled() -> bool:
    return os.getenv("ADMIN_ENABLED", "false").lower() in {"1", "true", "yes"}


def _admin_token_auth(authorization: Optional[str] = None) -> None:
    required = os.getenv("ADMIN_TOKEN")
    if not required:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin is not configured")
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing Bearer token")
    token = authorization.split(" ", 1)[1]
    if token != required:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


class AdminTokenMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        path = request.url.path
        if path == ADMIN_PATH or path.startswith(ADMIN_PATH + "/"):
            try:
                _admin_token_auth(request.headers.get("Authorization"))
            except HTTPException as exc:
                logger.warning("Admin access denied", extra={"path": path, "status_code": exc.status_code})
                return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)
        return await call_next(request)


class ReadOnlyModelView(ModelView):
    can_create = False
    can_edit = False
    can_delete = False


class LanguageAdmin(ModelView, model=Language):
    name = "Language"
    column_list = [Language.id, Language.code, Language.name]
    column_default_sort = [(Language.code, False)]


class ProjectAdmin(ModelView, model=Project):
    name = "Project"
    can_delete = False
    column_list = [Project.id, Project.name, Project.description]


class TranslationGroupAdmin(ReadOnlyModelView, model=TranslationGroup):
    name = "Translation group"
    column_list = [TranslationGroup.id, TranslationGroup.project_id, TranslationGroup.name]


class TranslationEntryAdmin(ModelView, model=TranslationEntry):
    name = "Translation entry"
    can_create = False
    can_delete = False
    column_list = [TranslationEntry.id, TranslationEntry.group_id, TranslationEntry.key, TranslationEntry.copied]
    column_searchable_list = [TranslationEntry.key]
    form_excluded_columns = [TranslationEntry.id, TranslationEntry.group_id, TranslationEntry.key]


class TranslationAdmin(ReadOnlyModelView, model=Translation):
    name = "Translation"
    column_list = [Translation.id, Translation.entry_id, Translation.language_id, Translation.text]


class DialogAdmin(ReadOnlyModelView, model=Dialog):
    name = "Dialog"
    column_list = [Dialog.id, Dialog.project_id, Dialog.name, Dialog.start_section]


class DialogSectionAdmin(ReadOnlyModelView, model=DialogSection):
    name = "Dialog section"
    column_list = [DialogSection.id, DialogSection.dialog_id, DialogSection.section_id, DialogSection.order]


class DialogLineAdmin(ReadOnlyModelView, model=DialogLine):
    name = "Dialog line"
    column_list = [DialogLine.id, DialogLine.section_id, DialogLine.order, DialogLine.type, DialogLine.text_key]


def setup_admin(app: FastAPI) -> Optional[Admin]:
    if not admin_enabled():
        return None
    app.add_middleware(AdminTokenMiddleware)
    admin = Admin(app=app, engine=engine, base_url=ADMIN_PATH, title="linedesk admin")
    for view in (
        LanguageAdmin,
        ProjectAdmin,
        TranslationGroupAdmin,
        TranslationEntryAdmin,
        TranslationAdmin,
        DialogAdmin,
        DialogSectionAdmin,
        DialogLineAdmin,
    ):
        admin.add_view(view)
    logger.info("Admin panel enabled", extra={"path": ADMIN_PATH})
    return admin
