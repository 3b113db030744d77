from fastapi import APIRouter, Depends, Request
from typing import List

from .schemas.sync import SyncStatusResponse, GroupedStudentsResponse
from ..models.roster_models import Student, Teacher
from ..models.user_models import User
from ..modules.class_names import group_students_by_class
from ..modules.sync_client import SyncApiClient, SyncApiError
from ..services.session_state import SessionState
from ..services.sync_service import SyncService
from .auth import get_current_user
from .dependencies import get_session_state, get_sync_client, get_sync_service
from .utilities.errors import sync_error_to_http
from .utilities.limiter import limiter

router = APIRouter(tags=["Sync & Roster"])


def build_sync_status(state: SessionState) -> SyncStatusResponse:
    return SyncStatusResponse(
        last_synced_at=state.last_synced_at,
        last_sync_error=state.last_sync_error,
        student_count=state.roster_index.student_count,
        teacher_count=state.roster_index.teacher_count,
        class_count=len(state.classes),
    )


@router.post("/sync", response_model=SyncStatusResponse, summary="Refresh the roster from the school server")
@limiter.limit("10/minute")
async def run_sync(
    request: Request,
    user: User = Depends(get_current_user),
    state: SessionState = Depends(get_session_state),
    sync_client: SyncApiClient = Depends(get_sync_client),
    service: SyncService = Depends(get_sync_service)
):
    try:
        await service.sync(sync_client)
    except SyncApiError as e:
        raise sync_error_to_http(e)
    return build_sync_status(state)

@router.get("/sync/status", response_model=SyncStatusResponse, summary="Result of the last sync")
@limiter.limit("120/minute")
async def sync_status(request: Request, user: User = Depends(get_current_user), state: SessionState = Depends(get_session_state)):
    return build_sync_status(state)


@router.get("/roster/students", response_model=List[Student], summary="Synced students")
@limiter.limit("60/minute")
async def list_students(request: Request, user: User = Depends(get_current_user), state: SessionState = Depends(get_session_state)):
    return state.students

@router.get("/roster/students/grouped", response_model=GroupedStudentsResponse, summary="Synced students grouped by class")
@limiter.limit("60/minute")
async def list_students_grouped(request: Request, user: User = Depends(get_current_user), state: SessionState = Depends(get_session_state)):
    return GroupedStudentsResponse(groups=group_students_by_class(state.students))

@router.get("/roster/teachers", response_model=List[Teacher], summary="Synced teachers")
@limiter.limit("60/minute")
async def list_teachers(request: Request, user: User = Depends(get_current_user), state: SessionState = Depends(get_session_state)):
    return state.teachers
