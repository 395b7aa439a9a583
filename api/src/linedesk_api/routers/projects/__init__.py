import logging
from fastapi import APIRouter


router = APIRouter(prefix="/projects", tags=["projects"])
logger = logging.getLogger(__name__)


# Import submodules to register routes on the shared router
# Export and static sub-paths go before the dynamic group/entry routes
from . import endpoints_export  # noqa: F401
from . import endpoints_projects  # noqa: F401
from . import endpoints_groups  # noqa: F401

__all__ = ["router"]
