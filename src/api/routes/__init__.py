"""API routers."""

from src.api.routes.profiles import router as profiles_router
from src.api.routes.results import router as results_router
from src.api.routes.uploads import router as uploads_router

__all__ = ["profiles_router", "results_router", "uploads_router"]
