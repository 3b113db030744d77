import httpx
import logging
from datetime import datetime, timezone
from typing import Optional

from ..models.roster_models import SyncData
from ..modules.sync_client import SyncApiClient, SyncApiError
from .errors import SecretKeyMissingError
from .session_state import SessionState

logger = logging.getLogger(__name__)


def make_sync_client(secret_key: Optional[str], http_client: httpx.AsyncClient) -> SyncApiClient:
    """Client for the school server, or SecretKeyMissingError when no key is stored."""
    if not secret_key:
        raise SecretKeyMissingError()
    return SyncApiClient(secret_key=secret_key, http_client=http_client)


class SyncService:
    """
    Refreshes the local roster from the school server.
    A sync is all-or-nothing: either students, teachers, classes and the
    index are all replaced, or none of them is touched.
    """

    def __init__(self, state: SessionState):
        self.state = state

    async def sync(self, sync_client: SyncApiClient) -> SyncData:
        """
        Fetches the full roster and replaces the local copy.
        SyncApiError subclasses propagate to the caller after the banner
        message has been recorded on the session state.
        """
        async with self.state.mutation_lock:
            try:
                data = await sync_client.fetch_all_data()
            except SyncApiError as e:
                self.state.last_sync_error = (
                    f"Failed to sync with the school server: {str(e).rstrip('.')}. "
                    "Please check your Secret Key and network connection."
                )
                logger.error(f"Roster sync failed, keeping the previous roster: {e}")
                raise

            self.state.replace_roster(data.students, data.teachers, data.classes)
            self.state.last_synced_at = datetime.now(timezone.utc)
            self.state.last_sync_error = None

        logger.info(
            f"Roster synced: {len(data.students)} students, {len(data.teachers)} teachers, "
            f"{len(data.classes)} classes."
        )
        return data
