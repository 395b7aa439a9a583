import logging
from fastapi import APIRouter


router = APIRouter(prefix="/dialogs", tags=["dialogs"])
logger = logging.getLogger(__name__)


# Import submodules to register routes on the shared router
# POST /dialogs/graph goes before the dynamic /{dialog_id} routes
from . import endpoints_graph  # noqa: F401
from . import endpoints_dialogs  # noqa: F401
from . import endpoints_sections  # noqa: F401
# lines/reorder is registered before lines/{line_id} inside endpoints_lines
from . import endpoints_lines  # noqa: F401
from . import endpoints_text  # noqa: F401
from . import endpoints_export  # noqa: F401

__all__ = ["router"]
