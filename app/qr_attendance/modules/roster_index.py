# app/qr_attendance/modules/roster_index.py

from typing import Dict, Iterable, Optional

from ..models.roster_models import Student, Teacher


class RosterIndex:
    """
    ID lookups over the last successfully synced roster.
    Never updated in place; a new index is built for every sync.
    """

    def __init__(self, students: Dict[str, Student], teachers: Dict[str, Teacher]):
        self._students = students
        self._teachers = teachers

    def find_student(self, student_id: str) -> Optional[Student]:
        return self._students.get(student_id)

    def find_teacher(self, teacher_id: str) -> Optional[Teacher]:
        return self._teachers.get(teacher_id)

    @property
    def student_count(self) -> int:
        return len(self._students)

    @property
    def teacher_count(self) -> int:
        return len(self._teachers)


def rebuild_index(students: Iterable[Student], teachers: Iterable[Teacher]) -> RosterIndex:
    """
    Builds the student and teacher lookups from the roster lists.

    Args:
        students: Students from the latest sync.
        teachers: Teachers from the latest sync.

    Returns:
        A fresh RosterIndex. When an ID appears more than once the last
        occurrence wins.
    """
    student_map = {student.student_id: student for student in students}
    teacher_map = {teacher.id: teacher for teacher in teachers}
    return RosterIndex(student_map, teacher_map)
