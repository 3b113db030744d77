import asyncio
import pytest
import pytest_asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from app.qr_attendance.models.attendance_models import AttendanceStatus, PersonType
from app.qr_attendance.models.roster_models import Student, SyncData, Teacher
from app.qr_attendance.modules.sync_client import SyncNetworkError, SyncServerError
from app.qr_attendance.services.errors import (
    InvalidScanFormatError,
    DuplicateScanError,
    PersonNotFoundError,
    UploadFailedError,
)
from app.qr_attendance.services.scan_service import ScanService, scan_comment
from app.qr_attendance.services.session_state import SessionState
from app.qr_attendance.services.sync_service import SyncService

STUDENT_QR = '{"id":"S1","name":"Asha"}'
TEACHER_QR = '{"id":"T1","name":"Dana","type":"teacher"}'
SCAN_TIME = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)

# --- Fixtures ---

@pytest.fixture
def state() -> SessionState:
    """A session with one student and one teacher synced."""
    session = SessionState()
    session.replace_roster(
        [Student(student_id="S1", student_name="Asha Rao", class_name="8=>A=>SCIENCE")],
        [Teacher(id="T1", name="Dana Cole")],
        [],
    )
    return session

@pytest_asyncio.fixture
async def service_instance(state):
    mock_sync_client = AsyncMock()
    service = ScanService(state=state, sync_client=mock_sync_client, teacher_upload_mode="deferred")
    return service, mock_sync_client

# --- Test Scenarios ---

@pytest.mark.asyncio
class TestStudentScans:

    async def test_student_scan_without_type_is_recorded(self, service_instance, state):
        service, mock_sync_client = service_instance

        outcome = await service.process_scan(STUDENT_QR, now=SCAN_TIME)

        assert outcome.person_type == PersonType.STUDENT
        assert outcome.student.student_name == "Asha Rao"
        assert outcome.student_record.id == "S1"
        assert outcome.student_record.name == "Asha"
        assert outcome.student_record.timestamp == SCAN_TIME
        assert len(state.student_ledger) == 1
        mock_sync_client.upload_student_attendance.assert_awaited_once()
        uploaded = mock_sync_client.upload_student_attendance.call_args[0][0]
        assert [r.id for r in uploaded] == ["S1"]

    async def test_second_scan_is_a_duplicate(self, service_instance, state):
        service, mock_sync_client = service_instance
        await service.process_scan(STUDENT_QR)

        with pytest.raises(DuplicateScanError, match=r"Already marked present: Asha \(S1\)"):
            await service.process_scan(STUDENT_QR)

        assert len(state.student_ledger) == 1
        assert mock_sync_client.upload_student_attendance.await_count == 1

    async def test_unknown_student_is_not_found(self, service_instance, state):
        service, mock_sync_client = service_instance

        with pytest.raises(PersonNotFoundError, match="Student with ID S9 not found. Please sync data first."):
            await service.process_scan('{"id":"S9","name":"Ghost"}')

        assert len(state.student_ledger) == 0
        mock_sync_client.upload_student_attendance.assert_not_awaited()

    async def test_empty_roster_reports_not_found(self, service_instance, state):
        service, _ = service_instance
        state.replace_roster([], [], [])

        with pytest.raises(PersonNotFoundError):
            await service.process_scan(STUDENT_QR)

    async def test_invalid_text_changes_nothing(self, service_instance, state):
        service, mock_sync_client = service_instance

        with pytest.raises(InvalidScanFormatError, match="Invalid QR code format."):
            await service.process_scan("not json")

        assert len(state.student_ledger) == 0
        assert len(state.teacher_scan_ledger) == 0
        assert len(state.teacher_status) == 0
        mock_sync_client.upload_student_attendance.assert_not_awaited()

    async def test_failed_upload_leaves_ledger_unchanged(self, service_instance, state):
        service, mock_sync_client = service_instance
        mock_sync_client.upload_student_attendance.side_effect = SyncServerError("Database unavailable", status_code=500)

        with pytest.raises(UploadFailedError, match="Failed to upload attendance: Database unavailable"):
            await service.process_scan(STUDENT_QR)

        assert len(state.student_ledger) == 0

        # Once the server is back the same card can be scanned again.
        mock_sync_client.upload_student_attendance.side_effect = None
        await service.process_scan(STUDENT_QR)
        assert len(state.student_ledger) == 1

    async def test_duplicate_is_reported_even_after_student_left_roster(self, service_instance, state):
        """Duplicate check runs before the roster lookup for students."""
        service, _ = service_instance
        await service.process_scan(STUDENT_QR)
        state.replace_roster([], state.teachers, [])

        with pytest.raises(DuplicateScanError):
            await service.process_scan(STUDENT_QR)


@pytest.mark.asyncio
class TestTeacherScans:

    async def test_teacher_scan_updates_status_and_scan_log(self, service_instance, state):
        service, mock_sync_client = service_instance

        outcome = await service.process_scan(TEACHER_QR, now=SCAN_TIME)

        assert outcome.person_type == PersonType.TEACHER
        assert outcome.teacher.name == "Dana Cole"
        record = outcome.teacher_record
        assert record.teacher_id == "T1"
        assert record.status == AttendanceStatus.PRESENT
        assert record.date == SCAN_TIME.astimezone().date().isoformat()
        assert record.comment.startswith("Scanned at ")

        assert state.teacher_status.get("T1").status == AttendanceStatus.PRESENT
        assert state.teacher_status.get("T1").comment == record.comment
        assert len(state.teacher_scan_ledger) == 1
        # deferred mode: nothing goes to the server on scan
        mock_sync_client.upload_teacher_attendance.assert_not_awaited()
        assert len(state.student_ledger) == 0

    async def test_second_teacher_scan_is_a_duplicate(self, service_instance, state):
        service, _ = service_instance
        await service.process_scan(TEACHER_QR)

        with pytest.raises(DuplicateScanError, match=r"Already marked present: Dana \(T1\)"):
            await service.process_scan(TEACHER_QR)

        assert len(state.teacher_scan_ledger) == 1

    async def test_not_found_is_reported_before_duplicate_for_teachers(self, service_instance, state):
        """A teacher dropped by a re-sync is reported as not found even if already scanned."""
        service, _ = service_instance
        await service.process_scan(TEACHER_QR)
        state.replace_roster(state.students, [], [])

        with pytest.raises(PersonNotFoundError, match="Teacher with ID T1 not found. Please sync data first."):
            await service.process_scan(TEACHER_QR)

    async def test_teacher_scan_overwrites_manual_entry(self, service_instance, state):
        service, _ = service_instance
        state.teacher_status.upsert("T1", AttendanceStatus.ABSENT, "called in sick")

        await service.process_scan(TEACHER_QR)

        assert state.teacher_status.get("T1").status == AttendanceStatus.PRESENT

    async def test_immediate_mode_uploads_before_recording(self, state):
        mock_sync_client = AsyncMock()
        service = ScanService(state=state, sync_client=mock_sync_client, teacher_upload_mode="immediate")

        await service.process_scan(TEACHER_QR)

        mock_sync_client.upload_teacher_attendance.assert_awaited_once()
        assert len(state.teacher_scan_ledger) == 1

    async def test_immediate_mode_failure_leaves_state_unchanged(self, state):
        mock_sync_client = AsyncMock()
        mock_sync_client.upload_teacher_attendance.side_effect = SyncNetworkError("Could not reach the school server: ConnectError")
        service = ScanService(state=state, sync_client=mock_sync_client, teacher_upload_mode="immediate")

        with pytest.raises(UploadFailedError) as exc_info:
            await service.process_scan(TEACHER_QR)

        assert isinstance(exc_info.value.__cause__, SyncNetworkError)
        assert len(state.teacher_scan_ledger) == 0
        assert state.teacher_status.get("T1") is None


def test_scan_comment_has_no_leading_zero():
    assert scan_comment(datetime(2024, 5, 1, 8, 30, 0)) == "Scanned at 8:30:00 AM"
    assert scan_comment(datetime(2024, 5, 1, 12, 5, 9)) == "Scanned at 12:05:09 PM"
    assert scan_comment(datetime(2024, 5, 1, 22, 0, 0)) == "Scanned at 10:00:00 PM"


@pytest.mark.asyncio
class TestScanDuringSync:

    async def test_scan_waits_for_sync_and_uses_new_roster(self, state):
        """A scan arriving mid-sync is checked against the roster the sync installs."""
        release = asyncio.Event()
        mock_sync_client = AsyncMock()

        async def slow_fetch():
            await release.wait()
            return SyncData(students=[Student(student_id="S2", student_name="Ben Ito")], teachers=state.teachers)

        mock_sync_client.fetch_all_data.side_effect = slow_fetch
        service = ScanService(state=state, sync_client=mock_sync_client, teacher_upload_mode="deferred")

        sync_task = asyncio.create_task(SyncService(state).sync(mock_sync_client))
        await asyncio.sleep(0)
        assert state.mutation_lock.locked()

        scan_task = asyncio.create_task(service.process_scan('{"id":"S2","name":"Ben"}'))
        await asyncio.sleep(0)
        assert not scan_task.done()
        assert state.roster_index.find_student("S2") is None

        release.set()
        _, outcome = await asyncio.gather(sync_task, scan_task)

        assert outcome.student.student_id == "S2"
        assert [r.id for r in state.student_ledger] == ["S2"]
        assert state.roster_index.find_student("S1") is None
