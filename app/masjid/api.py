from fastapi import APIRouter

from app.masjid.routers.datasets import router as datasets_router
from app.masjid.routers.health import router as health_router
from app.masjid.routers.ops import router as ops_router
from app.masjid.routers.views import router as views_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(datasets_router, tags=["datasets"])
api_router.include_router(views_router, tags=["views"])
api_router.include_router(ops_router, tags=["ops"])
