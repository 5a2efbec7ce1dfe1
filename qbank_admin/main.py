"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from qbank_admin.api.auth import router as auth_router
from qbank_admin.api.hierarchy import router as hierarchy_router
from qbank_admin.api.modules import router as modules_router
from qbank_admin.api.questions import router as questions_router
from qbank_admin.api.quiz import router as quiz_router
from qbank_admin.api.subjects import router as subjects_router
from qbank_admin.api.submodules import router as submodules_router
from qbank_admin.core.config import Settings, get_settings
from qbank_admin.core.database import Store
from qbank_admin.middleware.session_gate import SessionGateMiddleware

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager: the store lives exactly as long as the app.
        """
        logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
        app.state.store = store or Store(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
        if not app.state.store.configured:
            logger.warning("DATABASE_URL is not set; list endpoints will serve empty pages")
        elif settings.AUTO_CREATE_SCHEMA:
            app.state.store.create_all()
            logger.info("Database schema ensured")

        yield

        logger.info("Shutting down...")
        app.state.store.dispose()
        logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Last added runs first: CORS must wrap the gate so rejections carry CORS headers
    app.add_middleware(SessionGateMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Handle HTTP exceptions."""
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and parameters are client errors (400)."""
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Validation error", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions."""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
        message = str(exc) if settings.DEBUG else "An internal error occurred"
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": message})

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok", "version": settings.APP_VERSION, "environment": settings.ENVIRONMENT}

    prefix = settings.API_PREFIX
    app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(subjects_router, prefix=f"{prefix}/subjects", tags=["subjects"])
    app.include_router(modules_router, prefix=f"{prefix}/modules", tags=["modules"])
    app.include_router(submodules_router, prefix=f"{prefix}/submodules", tags=["submodules"])
    app.include_router(questions_router, prefix=f"{prefix}/questions", tags=["questions"])
    app.include_router(hierarchy_router, prefix=prefix, tags=["hierarchy"])
    app.include_router(quiz_router, prefix=f"{prefix}/quiz", tags=["quiz"])
    return app


app = create_app()
