"""FastAPI application entrypoint. No business logic; only wiring, lifecycle and error envelopes."""

from dotenv import load_dotenv

load_dotenv()

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from designhub.api.v1 import router as v1_router
from designhub.core.config import Settings, get_settings
from designhub.core.database import Database
from designhub.core.errors import ServiceError
from designhub.services.storage import build_storage_client

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Render every error as {"error": message}; internal details only outside production."""

    def _error_body(message: str, detail: object = None) -> dict:
        body: dict = {"error": message}
        if detail is not None and not settings.is_production:
            body["details"] = detail
        return body

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
        detail = None
        if exc.status_code >= 500:
            detail = str(exc.cause) if exc.cause else None
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message, detail),
            headers=headers,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "Request validation failed",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error",
            extra={"path": request.url.path, "method": request.method},
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("Internal server error", str(exc)),
        )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application. The database and storage clients are created when the
    app starts and disposed when it stops; handlers reach them through app.state.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = Database(settings.DATABASE_URL, echo=settings.DEBUG)
        if settings.DB_CREATE_ALL:
            database.create_all()
        app.state.database = database
        app.state.storage = build_storage_client(settings)
        logger.info("Application started", extra={"environment": settings.APP_ENV})
        try:
            yield
        finally:
            database.dispose()

    app = FastAPI(
        title="DesignHub API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or (["*"] if settings.APP_ENV == "dev" else []),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app, settings)
    app.include_router(v1_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "DesignHub API"}

    return app


app = create_app()
