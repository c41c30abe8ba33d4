from fastapi import FastAPI

from app.masjid.api import api_router
from app.masjid.core.config import settings
from app.masjid.core.errors import setup_exception_handlers
from app.masjid.core.logging import configure_logging
from app.masjid.db.store import get_store
from app.masjid.middleware.observability import ObservabilityMiddleware
from app.masjid.middleware.trace import TraceIdMiddleware


def create_app() -> FastAPI:
    configure_logging()
    get_store()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(TraceIdMiddleware)
    app.add_middleware(ObservabilityMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
