import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..config.config import settings
from ..models.attendance_models import (
    AttendanceStatus,
    PersonType,
    ScanEvent,
    ScanOutcome,
    StudentAttendanceRecord,
    TeacherAttendanceRecord,
)
from ..modules.qr_payload import parse_scan_payload, InvalidScanPayloadError
from ..modules.sync_client import SyncApiClient, SyncApiError
from .errors import (
    InvalidScanFormatError,
    DuplicateScanError,
    PersonNotFoundError,
    UploadFailedError,
)
from .session_state import SessionState

logger = logging.getLogger(__name__)


def scan_comment(local_time: datetime) -> str:
    """'Scanned at 8:30:00 AM', hour without a leading zero."""
    return f"Scanned at {local_time.strftime('%I:%M:%S %p').lstrip('0')}"


class TeacherScanUploadMode(str, Enum):
    # Teacher scans only update local state; the grid is submitted later.
    DEFERRED = "deferred"
    # Teacher scans are written to the server before local state changes.
    IMMEDIATE = "immediate"


class ScanService:
    """
    Turns decoded QR text into attendance: validates the payload against the
    roster, applies the duplicate rules and updates the ledgers.
    """

    def __init__(self, state: SessionState, sync_client: SyncApiClient, teacher_upload_mode: Optional[str] = None):
        self.state = state
        self.sync_client = sync_client
        self.teacher_upload_mode = TeacherScanUploadMode(teacher_upload_mode or settings.TEACHER_SCAN_UPLOAD_MODE)

    async def process_scan(self, decoded_text: str, now: Optional[datetime] = None) -> ScanOutcome:
        """
        Processes one scan and reports the outcome.

        Raises:
            InvalidScanFormatError: The text is not a valid payload.
            DuplicateScanError: The person was already marked in this session.
            PersonNotFoundError: The ID is not in the current roster.
            UploadFailedError: The server rejected or never received the record.
        """
        try:
            event = parse_scan_payload(decoded_text)
        except InvalidScanPayloadError as e:
            raise InvalidScanFormatError(str(e)) from e

        now = now or datetime.now(timezone.utc)
        async with self.state.mutation_lock:
            if event.type == PersonType.TEACHER:
                return await self._process_teacher_scan(event, now)
            return await self._process_student_scan(event, now)

    async def _process_student_scan(self, event: ScanEvent, now: datetime) -> ScanOutcome:
        # Students: duplicate check first, then roster membership.
        if self.state.student_ledger.contains(event.id):
            logger.info(f"Student '{event.id}' scanned again, already marked present.")
            raise DuplicateScanError(f"Already marked present: {event.name} ({event.id})")

        student = self.state.roster_index.find_student(event.id)
        if student is None:
            logger.warning(f"Scanned student '{event.id}' is not in the current roster.")
            raise PersonNotFoundError(event.id, f"Student with ID {event.id} not found. Please sync data first.")

        record = StudentAttendanceRecord(id=event.id, name=event.name, timestamp=now)
        try:
            await self.sync_client.upload_student_attendance([record])
        except SyncApiError as e:
            logger.error(f"Uploading attendance for student '{event.id}' failed: {e}")
            raise UploadFailedError(f"Failed to upload attendance: {e}") from e

        self.state.student_ledger.append(record)
        logger.info(f"Student '{event.id}' marked present.")
        return ScanOutcome(person_type=PersonType.STUDENT, student_record=record, student=student)

    async def _process_teacher_scan(self, event: ScanEvent, now: datetime) -> ScanOutcome:
        # Teachers: roster membership first, then duplicate check.
        teacher = self.state.roster_index.find_teacher(event.id)
        if teacher is None:
            logger.warning(f"Scanned teacher '{event.id}' is not in the current roster.")
            raise PersonNotFoundError(event.id, f"Teacher with ID {event.id} not found. Please sync data first.")

        if self.state.teacher_scan_ledger.contains(event.id):
            logger.info(f"Teacher '{event.id}' scanned again, already marked present.")
            raise DuplicateScanError(f"Already marked present: {event.name} ({event.id})")

        local_time = now.astimezone()
        record = TeacherAttendanceRecord(
            teacher_id=event.id,
            teacher_name=event.name,
            date=local_time.date().isoformat(),
            status=AttendanceStatus.PRESENT,
            comment=scan_comment(local_time),
        )

        if self.teacher_upload_mode == TeacherScanUploadMode.IMMEDIATE:
            try:
                await self.sync_client.upload_teacher_attendance([record])
            except SyncApiError as e:
                logger.error(f"Uploading attendance for teacher '{event.id}' failed: {e}")
                raise UploadFailedError(f"Failed to upload attendance: {e}") from e

        self.state.teacher_status.upsert(record.teacher_id, record.status, record.comment)
        self.state.teacher_scan_ledger.append(record)
        logger.info(f"Teacher '{event.id}' marked present ({self.teacher_upload_mode.value}).")
        return ScanOutcome(person_type=PersonType.TEACHER, teacher_record=record, teacher=teacher)
