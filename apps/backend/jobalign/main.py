import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import analysis_router, health_check
from .core import settings, setup_logging
from .services import AnalysisService, ShareStore, build_share_store

logger = logging.getLogger(__name__)


def create_app(
    analysis_service: Optional[AnalysisService] = None,
    share_store: Optional[ShareStore] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Tests pass their own service and store; otherwise they are built from
    settings when the app starts.
    """
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.analysis_service = analysis_service or AnalysisService()
        app.state.share_store = share_store or build_share_store(
            settings.SHARE_STORE, settings.SHARE_STORE_PATH
        )
        logger.info(
            f"{settings.PROJECT_NAME} ready: provider={settings.LLM_PROVIDER}, "
            f"model={settings.LL_MODEL}, api_key={'set' if settings.LLM_API_KEY else 'missing'}, "
            f"share_store={settings.SHARE_STORE}"
        )
        yield
        logger.info(f"{settings.PROJECT_NAME} shutting down")

    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(health_check)
    app.include_router(analysis_router)
    return app


app = create_app()
