import logging
import httpx

from ..db.redis_client import RedisClient
from ..modules.sync_client import SyncApiClient, SyncApiError
from ..services.session_state import SessionState
from ..services.sync_service import SyncService

logger = logging.getLogger(__name__)


async def scheduled_sync_task(state: SessionState, redis_client: RedisClient, http_client: httpx.AsyncClient) -> bool:
    """
    Periodic roster refresh. Runs only while a user is logged in and a secret
    key is stored; a failed sync is logged and recorded for the sync banner.

    Returns True when a sync was performed successfully.
    """
    if await redis_client.get_current_user() is None:
        logger.debug("Scheduled sync skipped, nobody is logged in.")
        return False

    secret_key = await redis_client.get_secret_key()
    if not secret_key:
        logger.info("Scheduled sync skipped, no secret key stored.")
        return False

    logger.info("Running scheduled_sync_task...")
    try:
        await SyncService(state).sync(SyncApiClient(secret_key=secret_key, http_client=http_client))
    except SyncApiError as e:
        logger.error(f"Scheduled sync failed: {e}")
        return False
    return True
