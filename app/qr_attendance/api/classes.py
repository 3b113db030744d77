import logging
from fastapi import APIRouter, Depends, Response, Request, status
from typing import List

from ..models.roster_models import AddClassPayload, ClassData
from ..models.user_models import User
from ..modules.sync_client import SyncApiClient, SyncApiError
from ..services.class_service import ClassService
from .auth import get_current_user
from .dependencies import get_sync_client, get_class_service
from .utilities.errors import sync_error_to_http
from .utilities.limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["Classes"])


@router.get("", response_model=List[ClassData], summary="Classes on the school server")
@limiter.limit("60/minute")
async def list_classes(request: Request, user: User = Depends(get_current_user), sync_client: SyncApiClient = Depends(get_sync_client), service: ClassService = Depends(get_class_service)):
    try:
        return await service.refresh_classes(sync_client)
    except SyncApiError as e:
        raise sync_error_to_http(e)

@router.post("", response_model=List[ClassData], status_code=status.HTTP_201_CREATED, summary="Create a class and return the refreshed list")
@limiter.limit("10/minute")
async def add_class(request: Request, payload: AddClassPayload, user: User = Depends(get_current_user), sync_client: SyncApiClient = Depends(get_sync_client), service: ClassService = Depends(get_class_service)):
    try:
        await service.add_class(sync_client, payload)
    except SyncApiError as e:
        logger.warning(f"Creating class '{payload.class_name}' failed: {e}")
        raise sync_error_to_http(e)
    return service.state.classes

@router.delete("/{class_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a class")
@limiter.limit("10/minute")
async def delete_class(request: Request, class_id: str, user: User = Depends(get_current_user), sync_client: SyncApiClient = Depends(get_sync_client), service: ClassService = Depends(get_class_service)):
    try:
        await service.delete_class(sync_client, class_id)
    except SyncApiError as e:
        logger.warning(f"Deleting class '{class_id}' failed: {e}")
        raise sync_error_to_http(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
