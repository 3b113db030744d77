from pydantic import BaseModel, Field
import datetime as dt
from typing import List, Optional

from ...models.attendance_models import AttendanceStatus, TeacherAttendanceRecord


class ScanRequest(BaseModel):
    """Request model carrying the text decoded from a QR code."""
    decoded_text: str = Field(..., max_length=4296, description="Raw text produced by the QR decoder.")


class TeacherGridRow(BaseModel):
    """One row of the manual teacher attendance grid."""
    teacher_id: str
    teacher_name: str
    status: AttendanceStatus
    comment: str


class TeacherEntryUpdateRequest(BaseModel):
    status: Optional[AttendanceStatus] = None
    comment: Optional[str] = Field(None, max_length=500)


class TeacherSubmitRequest(BaseModel):
    date: Optional[dt.date] = Field(None, description="Attendance date, today when omitted.")


class TeacherSubmitResponse(BaseModel):
    submitted: int
    records: List[TeacherAttendanceRecord]
