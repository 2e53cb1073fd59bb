"""FlowQuest: FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowquest import __version__
from flowquest.config import Settings, get_settings
from flowquest.database import Store
from flowquest.errors import register_exception_handlers
from flowquest.middleware import rate_limit
from flowquest.routers import activities, agents, chat, course_packages, db, reports, sessions, units
from flowquest.services.ai_client import ai_provider_name

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = Store(settings.DATABASE_URL)
        app.state.store = store
        if settings.DB_INIT_ON_STARTUP:
            store.initialize()

        provider = ai_provider_name(settings)
        if provider == "none":
            logger.warning("Chat provider not configured: set ANTHROPIC_API_KEY in backend/.env and restart")
        else:
            logger.info("Chat provider: %s", provider)

        try:
            yield
        finally:
            store.close()

    app = FastAPI(
        title="FlowQuest",
        description="Learning-activity tracking backend.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Rate limiting
    rate_limit.configure(settings)
    app.state.limiter = rate_limit.limiter
    register_exception_handlers(app)

    # CORS origins from env (comma-separated)
    cors_origins = [o.strip() for o in settings.ALLOWED_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(activities.router)
    app.include_router(agents.router)
    app.include_router(course_packages.router)
    app.include_router(units.router)
    app.include_router(reports.router)
    app.include_router(sessions.router)
    app.include_router(chat.router)
    app.include_router(db.router)

    @app.get("/")
    def root():
        return {
            "name": "FlowQuest API",
            "version": __version__,
            "docs": "/docs",
            "chat_provider": ai_provider_name(settings),
        }

    @app.get("/health")
    @app.get("/api/health")
    def health():
        return {"status": "ok", "chat_provider": ai_provider_name(settings)}

    return app


app = create_app()
