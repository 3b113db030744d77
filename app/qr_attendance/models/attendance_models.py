# app/qr_attendance/models/attendance_models.py

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum
from typing import Optional

from .roster_models import Student, Teacher


class AttendanceStatus(str, Enum):
    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HALF_DAY = "Half Day"


class PersonType(str, Enum):
    STUDENT = "student"
    TEACHER = "teacher"


class ScanEvent(BaseModel):
    """A decoded QR payload. Only lives for the duration of one scan."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    type: PersonType = PersonType.STUDENT


class StudentAttendanceRecord(BaseModel):
    """One confirmed student scan in the current session."""
    id: str
    name: str
    timestamp: datetime = Field(..., description="Wall-clock capture time of the scan (UTC).")


class TeacherStatusEntry(BaseModel):
    """Current draft of one teacher's manual attendance."""
    status: AttendanceStatus = AttendanceStatus.PRESENT
    comment: str = ""


class TeacherAttendanceRecord(BaseModel):
    """
    A teacher attendance row. Used both as a scan-log entry and as an item of
    the bulk submission, so it serialises with the plugin's field names.
    """
    model_config = ConfigDict(populate_by_name=True)

    teacher_id: str = Field(..., alias="teacherId")
    teacher_name: str = Field("", alias="teacherName")
    date: str = Field(..., description="ISO date, YYYY-MM-DD")
    status: AttendanceStatus
    comment: str = ""


class ScanOutcome(BaseModel):
    """Result of a successful scan, including the roster entry for the welcome screen."""
    person_type: PersonType
    student_record: Optional[StudentAttendanceRecord] = None
    teacher_record: Optional[TeacherAttendanceRecord] = None
    student: Optional[Student] = None
    teacher: Optional[Teacher] = None
