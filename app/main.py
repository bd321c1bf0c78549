"""Trade Journal: FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from app.api import auth, trades
from app.config import Settings, settings as default_settings
from app.database import make_engine, make_session_factory
from app.services.identity import IdentityService
from app.services.journal.feed import ChangeFeed, make_change_feed
from app.services.journal.store import TradeStore

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(
    config: Settings | None = None,
    *,
    session_factory=None,
    feed: ChangeFeed | None = None,
) -> FastAPI:
    """Build the API with explicitly injected configuration.

    ``session_factory`` and ``feed`` override the ones derived from ``config``.
    """
    config = config or default_settings

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    engine = None
    if session_factory is None:
        engine = make_engine(config.database_url)
        session_factory = make_session_factory(engine)
    feed = feed or make_change_feed(config.redis_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: verify DB connection. Shutdown: close feed and dispose engine."""
        if engine is not None:
            try:
                async with engine.begin() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Database connected successfully")
            except Exception as e:
                logger.error("Database connection failed: %s", e)
                raise
        yield
        await feed.aclose()
        if engine is not None:
            await engine.dispose()
            logger.info("Database engine disposed")

    app = FastAPI(
        title="Trade Journal",
        description="Personal trading journal with live per-user sync",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.identities = IdentityService(session_factory)
    app.state.store = TradeStore(session_factory, feed, config.app_id)

    # CORS: restrict in production, allow localhost in development
    allowed_origins = (
        ["http://localhost:8000", "http://localhost:3000"]
        if config.app_env == "development"
        else config.allowed_hosts.split(",")
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-API-Key"],
    )

    app.include_router(auth.router)
    app.include_router(trades.router)

    @app.get("/api")
    async def api_root():
        return {
            "name": "Trade Journal",
            "version": VERSION,
            "status": "running",
            "app_id": config.app_id,
        }

    @app.get("/api/health")
    async def health_check():
        """System health status."""
        return {"status": "ok"}

    return app


app = create_app()
