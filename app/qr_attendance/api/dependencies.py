#app/qr_attendance/api/dependencies.py
from fastapi import Request, Depends, HTTPException, status
import httpx
import redis.asyncio as redis

from ..db.redis_client import RedisClient
from ..modules.sync_client import SyncApiClient
from ..services.session_state import SessionState
from ..services.scan_service import ScanService
from ..services.errors import SecretKeyMissingError
from ..services.sync_service import SyncService, make_sync_client
from ..services.teacher_attendance_service import TeacherAttendanceService
from ..services.class_service import ClassService
from ..services.user_service import UserService


def get_redis_pool(request: Request) -> redis.ConnectionPool:
    """
    Returns the Redis connection pool created at startup.
    """
    return request.app.state.redis_pool

def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Returns the shared httpx client used for every call to the school server.
    """
    return request.app.state.http_client

def get_session_state(request: Request) -> SessionState:
    """
    Returns the station's in-memory session (roster, index and ledgers).
    """
    return request.app.state.session_state


def get_redis_client(redis_pool: redis.ConnectionPool = Depends(get_redis_pool)) -> RedisClient:
    return RedisClient(pool=redis_pool)


async def get_sync_client(
    redis_client: RedisClient = Depends(get_redis_client),
    http_client: httpx.AsyncClient = Depends(get_http_client)
) -> SyncApiClient:
    """
    Builds a client for the school server with the stored secret key.
    Requests that need the server fail with 400 until a key has been saved.
    """
    try:
        return make_sync_client(await redis_client.get_secret_key(), http_client)
    except SecretKeyMissingError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def get_scan_service(
    state: SessionState = Depends(get_session_state),
    sync_client: SyncApiClient = Depends(get_sync_client)
) -> ScanService:
    return ScanService(state=state, sync_client=sync_client)

def get_sync_service(state: SessionState = Depends(get_session_state)) -> SyncService:
    return SyncService(state=state)

def get_teacher_attendance_service(state: SessionState = Depends(get_session_state)) -> TeacherAttendanceService:
    return TeacherAttendanceService(state=state)

def get_class_service(state: SessionState = Depends(get_session_state)) -> ClassService:
    return ClassService(state=state)

def get_user_service(redis_client: RedisClient = Depends(get_redis_client)) -> UserService:
    return UserService(redis_client=redis_client)
