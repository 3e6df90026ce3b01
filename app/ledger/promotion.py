"""Grade promotion with arrears carry."""

import logging
from typing import Tuple

from app.core.exceptions import NoFurtherGradeError, NotFoundError

from .engine import get_student_financials
from .models import LedgerState, Student

logger = logging.getLogger(__name__)


def next_grade(grades: list, grade: str) -> str:
    if grade not in grades:
        raise NotFoundError(f"Grade {grade} is not in the grade sequence")
    index = grades.index(grade)
    if index == len(grades) - 1:
        raise NoFurtherGradeError("No further grade to promote to")
    return grades[index + 1]


def promote(state: LedgerState, student_id: str) -> Tuple[LedgerState, Student]:
    """Move a student to the next grade, carrying their current balance as arrears.

    The balance is computed against the outgoing grade and already includes
    any earlier arrears, so it replaces previous_arrears rather than adding
    to it. The fee selection is kept as is.
    """
    student = state.find_student(student_id)
    if student is None:
        raise NotFoundError(f"Student {student_id} not found")
    target = next_grade(state.settings.grades, student.grade)
    balance = get_student_financials(student, state.payments, state.settings).balance

    promoted = student.model_copy(update={"grade": target, "previous_arrears": balance})
    students = [promoted if s.id == student.id else s for s in state.students]
    logger.info("Promoted student %s from %s to %s, arrears %s", student.id, student.grade, target, balance)
    return state.model_copy(update={"students": students}), promoted
