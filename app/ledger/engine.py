"""Ledger computation: dues, payments and balances derived from catalog, selection and history.

All functions here are pure. They read the records they are given and never
mutate them, so repeated calls with the same inputs return equal results.
"""

from decimal import Decimal
from typing import Iterable, List, Optional

from app.core.enums import FinanceFilter
from app.core.exceptions import NotFoundError

from .models import (
    ARREARS_KEY,
    ZERO,
    ItemBalance,
    LedgerState,
    Payment,
    Receipt,
    SchoolSettings,
    Student,
    StudentFinancials,
    to_amount,
)


def _sum(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def get_total_due(student: Student, settings: SchoolSettings) -> Decimal:
    """previous_arrears plus the student's selected items priced at the current grade.

    A grade with no fee structure contributes nothing; only arrears remain.
    """
    total = to_amount(student.previous_arrears)
    structure = settings.structure_for(student.grade)
    if structure is None:
        return total
    return total + _sum(structure.amount(key) for key in student.fee_keys)


def get_total_paid(student_id: str, payments: Iterable[Payment]) -> Decimal:
    return _sum(to_amount(p.amount) for p in payments if p.student_id == student_id)


def get_student_financials(
    student: Student,
    payments: Iterable[Payment],
    settings: SchoolSettings,
) -> StudentFinancials:
    """Total due, total paid and balance for one student. Negative balance is a credit."""
    total_due = get_total_due(student, settings)
    total_paid = get_total_paid(student.id, payments)
    return StudentFinancials(total_due=total_due, total_paid=total_paid, balance=total_due - total_paid)


def get_item_breakdown(
    student: Student,
    payments: Iterable[Payment],
    settings: SchoolSettings,
) -> List[ItemBalance]:
    """Per fee-item due/paid/balance lines for a student.

    Selected items come first in selection order, then anything paid toward
    an item that is not (or no longer) selected, then the arrears line.
    """
    own = [p for p in payments if p.student_id == student.id]
    structure = settings.structure_for(student.grade)

    keys = list(student.fee_keys)
    for payment in own:
        for key in payment.items:
            if key != ARREARS_KEY and key not in keys:
                keys.append(key)

    lines: List[ItemBalance] = []
    for key in keys:
        due = structure.amount(key) if structure is not None and key in student.fee_keys else ZERO
        paid = _sum(p.paid_toward(key) for p in own)
        item = settings.describe(key)
        lines.append(
            ItemBalance(key=key, label=item.label, category=item.category, due=due, paid=paid, balance=due - paid)
        )

    arrears = to_amount(student.previous_arrears)
    arrears_paid = _sum(p.paid_toward(ARREARS_KEY) for p in own)
    if arrears != ZERO or arrears_paid != ZERO:
        item = settings.describe(ARREARS_KEY)
        lines.append(
            ItemBalance(
                key=ARREARS_KEY,
                label=item.label,
                category=item.category,
                due=arrears,
                paid=arrears_paid,
                balance=arrears - arrears_paid,
            )
        )
    return lines


def build_receipt(
    state: LedgerState,
    student: Student,
    payment: Payment,
    balance: Decimal,
    history: List[Payment],
) -> Receipt:
    structure = state.settings.structure_for(student.grade)
    return Receipt(
        payment=payment,
        student_id=student.id,
        student_name=student.name,
        grade=student.grade,
        academic_year=state.settings.academic_year,
        currency=state.settings.currency,
        balance=balance,
        structure=dict(structure.fees) if structure is not None else {},
        history=history,
    )


def view_receipt_as_of(state: LedgerState, payment_id: str) -> Receipt:
    """Receipt for a past payment with the balance as it stood right after it.

    Sums the student's payments up to and including the target, in ledger
    order, and subtracts from the live total due.
    """
    payment = state.find_payment(payment_id)
    if payment is None:
        raise NotFoundError(f"Payment {payment_id} not found")
    student = state.find_student(payment.student_id)
    if student is None:
        raise NotFoundError(f"Student {payment.student_id} not found")

    history: List[Payment] = []
    for p in state.payments_for(student.id):
        history.append(p)
        if p.id == payment_id:
            break
    paid_until_now = get_total_paid(student.id, history)
    balance = get_total_due(student, state.settings) - paid_until_now
    return build_receipt(state, student, payment, balance, history)


def matches_finance_filter(financials: StudentFinancials, finance: FinanceFilter) -> bool:
    if finance == FinanceFilter.FULL:
        return financials.balance <= ZERO and financials.total_due > ZERO
    if finance == FinanceFilter.HALF:
        return financials.total_paid >= financials.total_due / 2 and financials.balance > ZERO
    if finance == FinanceFilter.ARREARS:
        return financials.balance > ZERO
    return True


def filter_students(
    students: Iterable[Student],
    payments: Iterable[Payment],
    settings: SchoolSettings,
    grade: Optional[str] = None,
    finance: FinanceFilter = FinanceFilter.ALL,
) -> List[Student]:
    """Students in `grade` (all grades when None) whose standing matches `finance`."""
    payments = list(payments)
    selected = []
    for student in students:
        if grade is not None and student.grade != grade:
            continue
        if finance != FinanceFilter.ALL:
            financials = get_student_financials(student, payments, settings)
            if not matches_finance_filter(financials, finance):
                continue
        selected.append(student)
    return selected
