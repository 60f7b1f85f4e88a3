"""API routers."""

from member_api.api.auth import router as auth_router
from member_api.api.health import router as health_router
from member_api.api.members import router as members_router
from member_api.api.products import router as products_router

__all__ = [
    "auth_router",
    "health_router",
    "members_router",
    "products_router",
]
