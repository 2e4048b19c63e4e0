"""Master API router — includes all sub-routers."""

from fastapi import APIRouter

from .routes.auth import router as auth_router
from .routes.catalogs import router as catalogs_router
from .routes.favorites import router as favorites_router
from .routes.files import router as files_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(catalogs_router)
api_router.include_router(files_router)
api_router.include_router(favorites_router)
