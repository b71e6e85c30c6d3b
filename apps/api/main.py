"""Home Library FastAPI application.

Run with:
    uvicorn apps.api.main:create_app --factory --reload

Standalone entrypoint (HOST/PORT settings, overridable with --host/--port):
    python -m apps.api.main
"""

from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from homelib.db.migrate import run_migrations
from homelib.db.session import create_db_engine, ensure_database_dir, make_session_factory

from .core.config import Settings, get_settings
from .core.covers import CoverLookup
from .core.errors import register_exception_handlers
from .core.logging_config import configure_logging
from .routers import books, journals, labels, lists, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.RUN_MIGRATIONS:
        run_migrations(app.state.engine)
    logger.info("CORS origins: %s", settings.CORS_ORIGINS)
    logger.info("Cover lookup %s", "enabled" if app.state.cover_lookup else "disabled")
    yield
    app.state.engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    database_url = settings.database_url
    ensure_database_dir(database_url)
    engine = create_db_engine(database_url)

    app = FastAPI(title="Home Library API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.cover_lookup = (
        CoverLookup(settings.COVER_API_URL, settings.COVER_API_TIMEOUT_SECONDS)
        if settings.COVER_LOOKUP_ENABLED
        else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(books.router)
    app.include_router(journals.router)
    app.include_router(labels.tags_router)
    app.include_router(labels.genres_router)
    app.include_router(users.router)
    app.include_router(lists.router)

    @app.get("/health")
    def health_check():
        return {"status": "healthy", "message": "Home Library API is running"}

    return app


def parse_args(argv: list[str] | None = None, settings: Settings | None = None) -> argparse.Namespace:
    settings = settings or get_settings()
    parser = argparse.ArgumentParser(description="Serve the Home Library API.")
    parser.add_argument("--host", default=settings.HOST, help="Bind address (default: HOST setting)")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Bind port (default: PORT setting)")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes")
    return parser.parse_args(argv)


def main() -> None:
    import uvicorn

    args = parse_args()
    uvicorn.run(
        "apps.api.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
