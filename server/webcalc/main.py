from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from webcalc.api.routes import calc, calculations
from webcalc.core.config import get_settings
from webcalc.core.exceptions import register_exception_handlers
from webcalc.core.logging import configure_logging
from webcalc.core.middleware import RequestContextMiddleware
from webcalc.db.session import init_db


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    if get_settings().auto_create_schema:
        init_db()
    yield


def create_app() -> FastAPI:
    """
    Application factory for the calculator web API.
    Routes are attached in their respective modules and imported here.
    """

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.api_title,
        description="Records arithmetic calculations and serves their history.",
        version=settings.api_version,
        lifespan=lifespan,
    )

    cors_origins = settings.resolved_cors_origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(calc.router)
    app.include_router(calculations.router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
