# app/qr_attendance/modules/class_names.py

from typing import Dict, List, Optional

from ..models.roster_models import Student


def format_class_name(class_name: Optional[str]) -> str:
    """
    Turns the plugin's 'CLASS=>SECTION=>SUBJECT' reference into a readable label.

    '8=>A=>SOCIAL SCIENCE-089' -> 'Class 8-A: SOCIAL SCIENCE-089'
    '8=>SOCIAL SCIENCE'        -> 'Class 8: SOCIAL SCIENCE'
    Anything else is returned unchanged; empty or 'null' becomes 'N/A'.
    """
    if not class_name or class_name.lower() == "null":
        return "N/A"

    parts = [part.strip() for part in class_name.split("=>")]

    if len(parts) >= 3 and parts[0] and parts[1]:
        return f"Class {parts[0]}-{parts[1]}: {' '.join(parts[2:])}"

    if len(parts) == 2 and parts[0]:
        return f"Class {parts[0]}: {parts[1]}"

    return class_name


def has_usable_class(student: Student) -> bool:
    return bool(student.class_name and student.class_name.strip() and student.class_name.lower() != "null")


def group_students_by_class(students: List[Student]) -> Dict[str, List[Student]]:
    """
    Groups students under their formatted class label, sorted by label.
    Students without a usable class are left out.
    """
    groups: Dict[str, List[Student]] = {}
    for student in students:
        if not has_usable_class(student):
            continue
        groups.setdefault(format_class_name(student.class_name), []).append(student)
    return dict(sorted(groups.items()))
