from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.api import router as api_router
from .api.errors import register_error_handlers
from .core.config import Settings, get_settings
from .core.logging_setup import setup_logging
from .db.session import create_db_engine, init_db

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Refuse to boot without a store and a signing secret
        settings.check_required()
        setup_logging(settings.LOG_LEVEL, sql_echo=settings.SQL_ECHO)

        # The one connection the process holds until shutdown
        app.state.engine = create_db_engine(settings.DATABASE_URL, echo=settings.SQL_ECHO)
        init_db(app.state.engine)
        logger.info("%s started", settings.SERVICE_NAME)
        yield
        app.state.engine.dispose()
        logger.info("%s stopped", settings.SERVICE_NAME)

    app = FastAPI(
        title="Task Manager API",
        description="Personal task management with user and admin surfaces",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/")
    def read_root():
        return {"ok": True, "service": settings.SERVICE_NAME}

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app


app = create_app()
