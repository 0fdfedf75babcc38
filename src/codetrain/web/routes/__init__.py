"""Route handlers for Web API."""

from codetrain.web.routes.health import router as health_router
from codetrain.web.routes.auth import router as auth_router
from codetrain.web.routes.modules import router as modules_router
from codetrain.web.routes.progress import router as progress_router
from codetrain.web.routes.frontend import router as frontend_router

__all__ = [
    "health_router",
    "auth_router",
    "modules_router",
    "progress_router",
    "frontend_router",
]
