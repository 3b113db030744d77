import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from ..models.roster_models import Student, Teacher, ClassData
from ..modules.roster_index import RosterIndex, rebuild_index
from .ledgers import StudentAttendanceLedger, TeacherScanLedger, TeacherStatusMap

logger = logging.getLogger(__name__)


class SessionState:
    """
    Everything the station holds in memory for the logged-in session: the
    synced roster, its index, both ledgers and the teacher status map.

    One instance lives on app.state and is handed to the services. Every
    mutation that can interleave with a network call runs under
    `mutation_lock`, so a scan arriving during a sync waits for the new index.
    """

    def __init__(self):
        self.students: List[Student] = []
        self.teachers: List[Teacher] = []
        self.classes: List[ClassData] = []
        self.roster_index: RosterIndex = rebuild_index([], [])

        self.student_ledger = StudentAttendanceLedger()
        self.teacher_scan_ledger = TeacherScanLedger()
        self.teacher_status = TeacherStatusMap()

        self.last_synced_at: Optional[datetime] = None
        self.last_sync_error: Optional[str] = None

        self.mutation_lock = asyncio.Lock()

    def replace_roster(self, students: List[Student], teachers: List[Teacher], classes: List[ClassData]) -> None:
        """Swaps in a complete roster. The index is rebuilt before anything is assigned."""
        new_index = rebuild_index(students, teachers)
        self.students = list(students)
        self.teachers = list(teachers)
        self.classes = list(classes)
        self.roster_index = new_index

    def clear(self) -> None:
        """Forgets the roster and every ledger. Used on logout."""
        self.replace_roster([], [], [])
        self.student_ledger.clear()
        self.teacher_scan_ledger.clear()
        self.teacher_status.clear()
        self.last_synced_at = None
        self.last_sync_error = None
        logger.info("Session state cleared.")
