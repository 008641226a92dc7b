from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from aqui.api.v1 import admin, auth, jobs, live, vendors
from aqui.core.config import settings
from aqui.core.errors import install_error_handlers
from aqui.core.realtime import live_event_broker

settings.validate_runtime()
logging.basicConfig(level=settings.log_level)

logger = logging.getLogger(__name__)


def run_migrations() -> None:
    try:
        from alembic import command
        from alembic.config import Config

        command.upgrade(Config("alembic.ini"), "head")
        logger.info("Database migrations completed")
    except Exception as e:
        logger.warning("Migration error (may be OK if already up to date): %s", e)


def run_seed() -> None:
    try:
        from aqui.db.seed import seed

        seed()
        logger.info("Database seeded")
    except Exception as e:
        logger.warning("Seed error (may be OK if already seeded): %s", e)


if settings.run_migrations:
    run_migrations()
if settings.seed_on_startup:
    run_seed()


@asynccontextmanager
async def lifespan(app: FastAPI):
    live_event_broker.configure(queue_size=settings.live_event_queue_size)
    live_event_broker.set_loop(asyncio.get_running_loop())
    scheduler = None
    if settings.sweeper_enabled:
        from aqui.jobs.scheduler import build_scheduler

        scheduler = build_scheduler(settings.sweeper_interval_seconds)
        scheduler.start()
    app.state.scheduler = scheduler
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    live_event_broker.set_loop(None)


app = FastAPI(title="Aqui", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    same_site="lax",
    https_only=settings.session_cookie_secure,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
install_error_handlers(app)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(vendors.router, prefix="/api/v1")
app.include_router(live.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(jobs.router, prefix="/api/v1")


@app.get("/healthz")
def health_check():
    """Health check endpoint for load balancers."""
    return {"status": "ok"}
