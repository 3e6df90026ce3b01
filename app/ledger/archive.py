"""Year-end archive: snapshot the outgoing year and open the next one."""

import copy
import logging
from datetime import datetime, timezone
from typing import Optional

from app.core.enums import ArrearsPolicy
from app.core.exceptions import ValidationError

from .engine import get_student_financials
from .models import ZERO, LedgerState, YearArchive

logger = logging.getLogger(__name__)


def archive_year(
    state: LedgerState,
    next_academic_year: str,
    arrears_policy: ArrearsPolicy = ArrearsPolicy.CARRY,
    archived_at: Optional[datetime] = None,
) -> LedgerState:
    """Move the active year's payments and assessments into a read-only archive.

    Students and the fee catalog stay in place. What happens to each
    student's previous_arrears depends on `arrears_policy`: CARRY keeps it,
    RECOMPUTE replaces it with the balance from the outgoing ledger, ZERO
    clears it.
    """
    outgoing = state.settings.academic_year
    next_academic_year = (next_academic_year or "").strip()
    if not next_academic_year:
        raise ValidationError("Next academic year is required")
    if next_academic_year == outgoing:
        raise ValidationError(f"Academic year {outgoing} is already active")
    if outgoing in state.archives:
        raise ValidationError(f"Academic year {outgoing} has already been archived")

    financials = {
        s.id: get_student_financials(s, state.payments, state.settings)
        for s in state.students
    }
    snapshot = YearArchive(
        academic_year=outgoing,
        archived_at=archived_at or datetime.now(timezone.utc),
        students=[s.model_copy(deep=True) for s in state.students],
        payments=[p.model_copy(deep=True) for p in state.payments],
        assessments=copy.deepcopy(state.assessments),
        fee_structures=[f.model_copy(deep=True) for f in state.settings.fee_structures],
        financials=financials,
    )

    policy = ArrearsPolicy(arrears_policy)
    if policy == ArrearsPolicy.RECOMPUTE:
        students = [s.model_copy(update={"previous_arrears": financials[s.id].balance}) for s in state.students]
    elif policy == ArrearsPolicy.ZERO:
        students = [s.model_copy(update={"previous_arrears": ZERO}) for s in state.students]
    else:
        students = list(state.students)

    logger.info(
        "Archived academic year %s (%d payments), next year %s, arrears policy %s",
        outgoing, len(state.payments), next_academic_year, policy.value,
        extra={"academic_year": outgoing},
    )
    return state.model_copy(
        update={
            "settings": state.settings.model_copy(update={"academic_year": next_academic_year}),
            "students": students,
            "payments": [],
            "assessments": [],
            "archives": {**state.archives, outgoing: snapshot},
        }
    )
