"""API routers."""

from app.routers.auth import router as auth_router
from app.routers.courses import router as courses_router

__all__ = ["auth_router", "courses_router"]
