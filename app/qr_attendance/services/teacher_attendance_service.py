import logging
from datetime import date as date_type
from typing import List, Optional, Tuple

from ..models.attendance_models import AttendanceStatus, TeacherAttendanceRecord, TeacherStatusEntry
from ..models.roster_models import Teacher
from ..modules.sync_client import SyncApiClient, SyncApiError
from .errors import PersonNotFoundError, ServiceError, SubmissionError
from .session_state import SessionState

logger = logging.getLogger(__name__)


class TeacherAttendanceService:
    """
    Manual end-of-day teacher attendance: the editable grid and its bulk
    submission to the school server.
    """

    def __init__(self, state: SessionState):
        self.state = state

    def get_grid(self) -> List[Tuple[Teacher, TeacherStatusEntry]]:
        """Every roster teacher with the current draft entry, defaults filled in."""
        status_map = self.state.teacher_status
        return [(teacher, status_map.get_or_default(teacher.id)) for teacher in self.state.teachers]

    def get_scan_log(self) -> List[TeacherAttendanceRecord]:
        return self.state.teacher_scan_ledger.records

    async def update_entry(self, teacher_id: str, status: Optional[AttendanceStatus] = None, comment: Optional[str] = None) -> TeacherStatusEntry:
        """Changes a teacher's status and/or comment, leaving the other field as it was."""
        async with self.state.mutation_lock:
            if self.state.roster_index.find_teacher(teacher_id) is None:
                raise PersonNotFoundError(teacher_id, f"Teacher with ID {teacher_id} not found. Please sync data first.")

            status_map = self.state.teacher_status
            current = status_map.get_or_default(teacher_id)
            entry = status_map.upsert(
                teacher_id,
                status if status is not None else current.status,
                comment if comment is not None else current.comment,
            )
        logger.info(f"Teacher '{teacher_id}' attendance set to {entry.status.value}.")
        return entry

    async def submit(self, sync_client: SyncApiClient, attendance_date: Optional[date_type] = None) -> List[TeacherAttendanceRecord]:
        """
        Submits one record per roster teacher for the given date (today by default).
        The draft is kept after submission so it can be corrected and resubmitted.
        """
        attendance_date = attendance_date or date_type.today()
        async with self.state.mutation_lock:
            if not self.state.teachers:
                raise ServiceError("No teacher data to submit. Please sync data first.")

            records = self.state.teacher_status.to_submission_list(self.state.teachers, attendance_date.isoformat())
            try:
                await sync_client.upload_teacher_attendance(records)
            except SyncApiError as e:
                logger.error(f"Teacher attendance submission for {attendance_date} failed: {e}")
                raise SubmissionError(f"Submission failed: {e}") from e

        logger.info(f"Submitted attendance for {len(records)} teachers on {attendance_date}.")
        return records
