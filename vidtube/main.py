"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from vidtube.api.v1 import router as v1_router
from vidtube.api.v1.responses import validation_error_handler
from vidtube.core.config import Settings, get_settings
from vidtube.core.database import Database
from vidtube.core.logging_config import configure_logging
from vidtube.services.media_storage import MediaStorage


def create_app(
    settings: Settings | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the application. The database engine and the object-storage HTTP
    client live for the lifespan of the app and are reachable on ``app.state``.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        database = Database(settings.DATABASE_URL, echo=settings.DEBUG)
        if settings.AUTO_CREATE_TABLES:
            await database.create_all()
        client = httpx.AsyncClient(transport=http_transport)
        app.state.database = database
        app.state.http_client = client
        app.state.media = MediaStorage(settings, client)
        try:
            yield
        finally:
            await client.aclose()
            await database.dispose()

    app = FastAPI(
        title="VidTube API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "VidTube API"}

    return app


app = create_app()
