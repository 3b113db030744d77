# app/qr_attendance/main.py
from fastapi import FastAPI
from contextlib import asynccontextmanager
import httpx
import redis.asyncio as redis
from apscheduler.schedulers.asyncio import AsyncIOScheduler as Scheduler
import logging

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from fastapi.middleware.cors import CORSMiddleware

from .config.config import settings
from .logging.logging_config import setup_logging
from .api import auth, users, settings as settings_api, sync, attendance, classes
from .db.redis_client import RedisClient
from .services.session_state import SessionState
from .tasks.cron import scheduled_sync_task
from .api.utilities.limiter import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Creates the shared clients and the session state, restores the previous
    session when a user and secret key were persisted, and starts the optional
    periodic sync.
    """
    setup_logging()
    logger.info("Station starting...")

    redis_pool = redis.ConnectionPool.from_url(settings.APPLICATION_REDIS_URL, decode_responses=True)
    http_client = httpx.AsyncClient(timeout=settings.SYNC_REQUEST_TIMEOUT_SECONDS)
    session_state = SessionState()

    app.state.redis_pool = redis_pool
    app.state.http_client = http_client
    app.state.session_state = session_state
    app.state.scheduler = None

    redis_client = RedisClient(pool=redis_pool)
    try:
        # Same check the scheduled job does: sync only for a restored login with a key.
        if await scheduled_sync_task(session_state, redis_client, http_client):
            logger.info("Previous session restored and roster synced.")
    except redis.RedisError as e:
        logger.error(f"Could not restore the previous session: {e}")

    if settings.AUTO_SYNC_INTERVAL_MINUTES > 0:
        scheduler = Scheduler()
        scheduler.add_job(
            scheduled_sync_task,
            "interval",
            minutes=settings.AUTO_SYNC_INTERVAL_MINUTES,
            args=[session_state, redis_client, http_client],
            id="roster_sync",
        )
        scheduler.start()
        app.state.scheduler = scheduler
        logger.info(f"Roster sync scheduled every {settings.AUTO_SYNC_INTERVAL_MINUTES} minutes.")

    yield

    logger.info("Station shutting down...")
    if app.state.scheduler:
        app.state.scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped.")
    await http_client.aclose()
    await redis_pool.disconnect()
    logger.info("Redis connection pool closed.")


app = FastAPI(
    title="QR Attendance Station API",
    description="QR attendance scanning, roster sync and teacher attendance for a school station.",
    version=settings.APP_VERSION,
    lifespan=lifespan
)
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(settings_api.router, prefix="/api/v1")
app.include_router(sync.router, prefix="/api/v1")
app.include_router(attendance.router, prefix="/api/v1")
app.include_router(classes.router, prefix="/api/v1")

@app.get("/health", tags=["System"])
def health_check():
    """Liveness probe."""
    return {"status": "ok", "message": "QR Attendance Station API is running."}
