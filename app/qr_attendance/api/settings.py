import logging
from fastapi import APIRouter, Depends, Request
import httpx

from .schemas.sync import SecretKeyRequest, SettingsResponse, SyncStatusResponse
from ..config.config import settings as app_settings
from ..db.redis_client import RedisClient
from ..models.user_models import User
from ..modules.sync_client import SyncApiClient, SyncApiError
from ..services.session_state import SessionState
from ..services.sync_service import SyncService
from .auth import get_current_user
from .dependencies import get_redis_client, get_http_client, get_session_state, get_sync_service
from .sync import build_sync_status
from .utilities.errors import sync_error_to_http
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsResponse, summary="Station settings")
@limiter.limit("60/minute")
async def get_settings(request: Request, user: User = Depends(get_current_user), redis_client: RedisClient = Depends(get_redis_client)):
    secret_key = await redis_client.get_secret_key()
    return SettingsResponse(
        has_secret_key=bool(secret_key),
        app_version=app_settings.APP_VERSION,
        teacher_scan_upload_mode=app_settings.TEACHER_SCAN_UPLOAD_MODE,
    )


@router.put("/secret-key", response_model=SyncStatusResponse, summary="Save the secret key and sync")
@limiter.limit("10/minute")
async def save_secret_key(
    request: Request,
    key_request: SecretKeyRequest,
    user: User = Depends(get_current_user),
    redis_client: RedisClient = Depends(get_redis_client),
    http_client: httpx.AsyncClient = Depends(get_http_client),
    state: SessionState = Depends(get_session_state),
    service: SyncService = Depends(get_sync_service)
):
    """
    Stores the key and immediately syncs with it. The key stays saved when the
    sync fails so it can be retried from the sync endpoint.
    """
    secret_key = key_request.secret_key.strip()
    await redis_client.save_secret_key(secret_key)
    logger.info(f"Secret key updated by '{user.email}'.")

    try:
        await service.sync(SyncApiClient(secret_key=secret_key, http_client=http_client))
    except SyncApiError as e:
        raise sync_error_to_http(e)
    return build_sync_status(state)
