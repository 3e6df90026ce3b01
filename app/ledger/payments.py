"""Payment ledger mutations: record and void. Each returns a new LedgerState."""

import logging
import random
from datetime import date
from typing import Any, Mapping, Optional, Set, Tuple

from app.core.enums import Term
from app.core.exceptions import NotFoundError, ValidationError

from .engine import build_receipt, get_student_financials
from .models import ZERO, LedgerState, Payment, Receipt, to_amount

logger = logging.getLogger(__name__)

RECEIPT_DIGITS = 4
RANDOM_ATTEMPTS = 32


def allocate_receipt_no(taken: Set[str], prefix: str = "RCP-", rng: Optional[random.Random] = None) -> str:
    """Receipt number not present in `taken`.

    Random draws first; when those keep colliding the number space is scanned,
    and widened by one digit once it is exhausted.
    """
    rng = rng or random.Random()
    width = RECEIPT_DIGITS
    while True:
        space = 10 ** width
        for _ in range(RANDOM_ATTEMPTS):
            candidate = f"{prefix}{rng.randrange(space):0{width}d}"
            if candidate not in taken:
                return candidate
        for n in range(space):
            candidate = f"{prefix}{n:0{width}d}"
            if candidate not in taken:
                return candidate
        width += 1


def record_payment(
    state: LedgerState,
    student_id: str,
    term: Optional[Term],
    item_amounts: Mapping[str, Any],
    paid_on: Optional[date] = None,
    receipt_prefix: str = "RCP-",
    rng: Optional[random.Random] = None,
) -> Tuple[LedgerState, Receipt]:
    """Append an itemized payment and return the new state with its receipt.

    Non-positive or non-numeric item values are dropped, so the stored
    amount always equals the sum of the stored items. A missing term falls
    back to the school's current term.
    """
    if term is None:
        term = state.settings.current_term
    try:
        term = Term(term)
    except ValueError:
        raise ValidationError(f"Unknown term {term}")

    student = state.find_student(student_id)
    if student is None:
        raise NotFoundError(f"Student {student_id} not found")

    items = {}
    for key, raw in item_amounts.items():
        value = to_amount(raw)
        if value > ZERO:
            items[str(key)] = value
    if not items:
        raise ValidationError("No payment amount entered")

    seq = state.payment_seq + 1
    # Imported documents can carry ids ahead of their sequence
    taken_ids = {p.id for p in state.payments}
    while f"PAY-{seq:06d}" in taken_ids:
        seq += 1
    payment = Payment(
        id=f"PAY-{seq:06d}",
        student_id=student.id,
        amount=sum(items.values(), ZERO),
        items=items,
        term=term,
        paid_on=paid_on or date.today(),
        receipt_no=allocate_receipt_no({p.receipt_no for p in state.payments}, receipt_prefix, rng),
        grade_at_payment=student.grade,
        academic_year=state.settings.academic_year,
    )
    new_state = state.model_copy(update={"payments": [*state.payments, payment], "payment_seq": seq})

    financials = get_student_financials(student, new_state.payments, new_state.settings)
    receipt = build_receipt(new_state, student, payment, financials.balance, new_state.payments_for(student.id))
    logger.info(
        "Recorded payment %s (%s) for student %s: %s",
        payment.id, payment.receipt_no, student.id, payment.amount,
    )
    return new_state, receipt


def void_payment(state: LedgerState, payment_id: str) -> LedgerState:
    """Remove a payment outright. Other payments are left exactly as recorded."""
    if state.find_payment(payment_id) is None:
        raise NotFoundError(f"Payment {payment_id} not found")
    remaining = [p for p in state.payments if p.id != payment_id]
    logger.info("Voided payment %s", payment_id)
    return state.model_copy(update={"payments": remaining})
