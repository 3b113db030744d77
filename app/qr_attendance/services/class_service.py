import logging
from typing import Any, List

from ..models.roster_models import AddClassPayload, ClassData
from ..modules.sync_client import SyncApiClient, SyncApiError
from .session_state import SessionState

logger = logging.getLogger(__name__)


class ClassService:
    """
    Class CRUD against the school server. After every change the local class
    list is replaced with the server's current list.
    """

    def __init__(self, state: SessionState):
        self.state = state

    async def refresh_classes(self, sync_client: SyncApiClient) -> List[ClassData]:
        async with self.state.mutation_lock:
            classes = await sync_client.get_classes()
            self.state.classes = classes
        logger.info(f"Class list refreshed, {len(classes)} classes.")
        return classes

    async def _refresh_after_change(self, sync_client: SyncApiClient) -> None:
        # The change already happened on the server; a failed refresh only leaves the local list stale.
        try:
            await self.refresh_classes(sync_client)
        except SyncApiError as e:
            logger.warning(f"Class list refresh after a change failed, local list is stale: {e}")

    async def add_class(self, sync_client: SyncApiClient, payload: AddClassPayload) -> Any:
        result = await sync_client.add_class(payload)
        await self._refresh_after_change(sync_client)
        return result

    async def delete_class(self, sync_client: SyncApiClient, class_id: str) -> Any:
        result = await sync_client.delete_class(class_id)
        await self._refresh_after_change(sync_client)
        return result
