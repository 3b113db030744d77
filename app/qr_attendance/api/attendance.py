from fastapi import APIRouter, Depends, HTTPException, status, Request
from typing import List

from ..models.attendance_models import ScanOutcome, StudentAttendanceRecord, TeacherAttendanceRecord, TeacherStatusEntry
from ..models.user_models import User
from ..modules.sync_client import SyncApiClient
from ..services.errors import (
    ServiceError,
    InvalidScanFormatError,
    DuplicateScanError,
    PersonNotFoundError,
    UploadFailedError,
    SubmissionError,
)
from ..services.scan_service import ScanService
from ..services.session_state import SessionState
from ..services.teacher_attendance_service import TeacherAttendanceService
from .schemas.attendance import (
    ScanRequest,
    TeacherGridRow,
    TeacherEntryUpdateRequest,
    TeacherSubmitRequest,
    TeacherSubmitResponse,
)
from .auth import get_current_user
from .dependencies import get_session_state, get_scan_service, get_sync_client, get_teacher_attendance_service
from .utilities.errors import upstream_failure_to_http
from .utilities.limiter import limiter

router = APIRouter(prefix="/attendance", tags=["Attendance"])


# === SCANNING ===

@router.post("/scan", response_model=ScanOutcome, summary="Process one decoded QR code")
@limiter.limit("300/minute")
async def scan(request: Request, scan_request: ScanRequest, user: User = Depends(get_current_user), service: ScanService = Depends(get_scan_service)):
    try:
        return await service.process_scan(scan_request.decoded_text)
    except InvalidScanFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PersonNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DuplicateScanError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except UploadFailedError as e:
        raise upstream_failure_to_http(e)

@router.get("/students", response_model=List[StudentAttendanceRecord], summary="Students marked present this session, newest first")
@limiter.limit("120/minute")
async def list_student_attendance(request: Request, user: User = Depends(get_current_user), state: SessionState = Depends(get_session_state)):
    return state.student_ledger.records


# === MANUAL TEACHER ATTENDANCE ===

@router.get("/teachers", response_model=List[TeacherGridRow], summary="Teacher attendance grid")
@limiter.limit("120/minute")
async def get_teacher_grid(request: Request, user: User = Depends(get_current_user), service: TeacherAttendanceService = Depends(get_teacher_attendance_service)):
    return [
        TeacherGridRow(teacher_id=teacher.id, teacher_name=teacher.name, status=entry.status, comment=entry.comment)
        for teacher, entry in service.get_grid()
    ]

@router.get("/teachers/scan-log", response_model=List[TeacherAttendanceRecord], summary="Teachers scanned this session, newest first")
@limiter.limit("120/minute")
async def get_teacher_scan_log(request: Request, user: User = Depends(get_current_user), service: TeacherAttendanceService = Depends(get_teacher_attendance_service)):
    return service.get_scan_log()

@router.patch("/teachers/{teacher_id}", response_model=TeacherStatusEntry, summary="Change a teacher's status or comment")
@limiter.limit("300/minute")
async def update_teacher_entry(request: Request, teacher_id: str, update_request: TeacherEntryUpdateRequest, user: User = Depends(get_current_user), service: TeacherAttendanceService = Depends(get_teacher_attendance_service)):
    try:
        return await service.update_entry(teacher_id, status=update_request.status, comment=update_request.comment)
    except PersonNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

@router.post("/teachers/submit", response_model=TeacherSubmitResponse, summary="Submit the teacher grid to the school server")
@limiter.limit("10/minute")
async def submit_teacher_attendance(
    request: Request,
    submit_request: TeacherSubmitRequest,
    user: User = Depends(get_current_user),
    sync_client: SyncApiClient = Depends(get_sync_client),
    service: TeacherAttendanceService = Depends(get_teacher_attendance_service)
):
    try:
        records = await service.submit(sync_client, attendance_date=submit_request.date)
    except SubmissionError as e:
        raise upstream_failure_to_http(e)
    except ServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return TeacherSubmitResponse(submitted=len(records), records=records)
