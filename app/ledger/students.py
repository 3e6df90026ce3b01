"""Student roster commands: enrol, edit, remove, and per-student fee selection."""

import logging
from typing import Any, Dict

import pydantic

from app.core.exceptions import NotFoundError, ValidationError

from .models import LedgerState, Student

logger = logging.getLogger(__name__)


def _replace_student(state: LedgerState, student: Student) -> LedgerState:
    students = [student if s.id == student.id else s for s in state.students]
    return state.model_copy(update={"students": students})


def add_student(state: LedgerState, student: Student) -> LedgerState:
    if not student.id.strip() or not student.name.strip():
        raise ValidationError("Student id and name are required")
    if state.find_student(student.id) is not None:
        raise ValidationError(f"Student {student.id} already exists")
    if student.grade not in state.settings.grades:
        raise ValidationError(f"Unknown grade {student.grade}")
    logger.info("Enrolled student %s in %s", student.id, student.grade)
    return state.model_copy(update={"students": [*state.students, student]})


def update_student(state: LedgerState, student_id: str, changes: Dict[str, Any]) -> LedgerState:
    """Apply field changes to a student. The id cannot be changed."""
    current = state.find_student(student_id)
    if current is None:
        raise NotFoundError(f"Student {student_id} not found")
    if "grade" in changes and changes["grade"] not in state.settings.grades:
        raise ValidationError(f"Unknown grade {changes['grade']}")
    if "name" in changes and not isinstance(changes["name"], str):
        raise ValidationError("Student name must be text")
    if "name" in changes and not changes["name"].strip():
        raise ValidationError("Student name is required")
    data = current.model_dump()
    data.update({k: v for k, v in changes.items() if k != "id"})
    try:
        updated = Student.model_validate(data)
    except pydantic.ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise ValidationError(f"Invalid student fields: {fields or 'unknown'}")
    return _replace_student(state, updated)


def remove_student(state: LedgerState, student_id: str) -> LedgerState:
    """Drop a student from the roster. Their payments stay in the ledger."""
    if state.find_student(student_id) is None:
        raise NotFoundError(f"Student {student_id} not found")
    logger.info("Removed student %s from the roster", student_id)
    return state.model_copy(update={"students": [s for s in state.students if s.id != student_id]})


def toggle_fee_selection(state: LedgerState, student_id: str, key: str) -> LedgerState:
    """Flip one fee item in or out of the student's selection."""
    student = state.find_student(student_id)
    if student is None:
        raise NotFoundError(f"Student {student_id} not found")
    current = student.fee_keys
    selected = [k for k in current if k != key] if key in current else [*current, key]
    return _replace_student(state, student.model_copy(update={"selected_fees": selected}))
