from collections import deque
from typing import Deque, Dict, Iterator, List, Optional

from ..models.attendance_models import (
    AttendanceStatus,
    StudentAttendanceRecord,
    TeacherAttendanceRecord,
    TeacherStatusEntry,
)
from ..models.roster_models import Teacher


class StudentAttendanceLedger:
    """
    Confirmed student scans of the current session, newest first.

    The ledger does not deduplicate; callers check `contains` before `append`.
    """

    def __init__(self):
        self._records: Deque[StudentAttendanceRecord] = deque()

    def append(self, record: StudentAttendanceRecord) -> None:
        self._records.appendleft(record)

    def contains(self, student_id: str) -> bool:
        return any(record.id == student_id for record in self._records)

    def clear(self) -> None:
        self._records.clear()

    @property
    def records(self) -> List[StudentAttendanceRecord]:
        return list(self._records)

    def __iter__(self) -> Iterator[StudentAttendanceRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)


class TeacherScanLedger:
    """Audit trail of teacher QR scans, newest first. Not used for submission."""

    def __init__(self):
        self._records: Deque[TeacherAttendanceRecord] = deque()

    def append(self, record: TeacherAttendanceRecord) -> None:
        self._records.appendleft(record)

    def contains(self, teacher_id: str) -> bool:
        return any(record.teacher_id == teacher_id for record in self._records)

    def clear(self) -> None:
        self._records.clear()

    @property
    def records(self) -> List[TeacherAttendanceRecord]:
        return list(self._records)

    def __iter__(self) -> Iterator[TeacherAttendanceRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)


class TeacherStatusMap:
    """
    Current draft of the manual teacher attendance grid.

    A teacher without an explicit entry counts as Present with an empty comment.
    """
    DEFAULT_STATUS = AttendanceStatus.PRESENT
    DEFAULT_COMMENT = ""

    def __init__(self):
        self._entries: Dict[str, TeacherStatusEntry] = {}

    def upsert(self, teacher_id: str, status: AttendanceStatus, comment: str) -> TeacherStatusEntry:
        entry = TeacherStatusEntry(status=status, comment=comment)
        self._entries[teacher_id] = entry
        return entry

    def set_status(self, teacher_id: str, status: AttendanceStatus) -> TeacherStatusEntry:
        return self.upsert(teacher_id, status, self.get_or_default(teacher_id).comment)

    def set_comment(self, teacher_id: str, comment: str) -> TeacherStatusEntry:
        return self.upsert(teacher_id, self.get_or_default(teacher_id).status, comment)

    def get(self, teacher_id: str) -> Optional[TeacherStatusEntry]:
        return self._entries.get(teacher_id)

    def get_or_default(self, teacher_id: str) -> TeacherStatusEntry:
        entry = self._entries.get(teacher_id)
        if entry is None:
            return TeacherStatusEntry(status=self.DEFAULT_STATUS, comment=self.DEFAULT_COMMENT)
        return entry

    def to_submission_list(self, all_teachers: List[Teacher], date: str) -> List[TeacherAttendanceRecord]:
        """
        Projects the whole roster into submission records, in roster order.
        Every teacher appears exactly once, untouched ones with the default.
        """
        records = []
        for teacher in all_teachers:
            entry = self.get_or_default(teacher.id)
            records.append(TeacherAttendanceRecord(
                teacher_id=teacher.id,
                teacher_name=teacher.name,
                date=date,
                status=entry.status,
                comment=entry.comment,
            ))
        return records

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
