"""In-memory ledger store: holds the current state and applies commands to it.

Each command runs a reducer against the current state and swaps the result
in only once the reducer has returned, so a failed command leaves the store
exactly as it was.
"""

import random
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional

from app.core.enums import ArrearsPolicy, FeeCategory, FinanceFilter, Term
from app.core.exceptions import NotFoundError

from . import archive, catalog, engine, payments, promotion, students
from .models import FeeItem, ItemBalance, LedgerState, Receipt, Student, StudentFinancials


class LedgerStore:
    def __init__(
        self,
        state: Optional[LedgerState] = None,
        receipt_prefix: str = "RCP-",
        rng: Optional[random.Random] = None,
    ) -> None:
        self._state = state if state is not None else LedgerState()
        self.receipt_prefix = receipt_prefix
        self._rng = rng or random.Random()

    @property
    def state(self) -> LedgerState:
        return self._state

    def _apply(self, reducer: Callable[..., LedgerState], *args: Any, **kwargs: Any) -> LedgerState:
        self._state = reducer(self._state, *args, **kwargs)
        return self._state

    def get_student(self, student_id: str) -> Student:
        student = self._state.find_student(student_id)
        if student is None:
            raise NotFoundError(f"Student {student_id} not found")
        return student

    # --- Reads ---
    def financials(self, student_id: str) -> StudentFinancials:
        return engine.get_student_financials(self.get_student(student_id), self._state.payments, self._state.settings)

    def item_breakdown(self, student_id: str) -> List[ItemBalance]:
        return engine.get_item_breakdown(self.get_student(student_id), self._state.payments, self._state.settings)

    def receipt(self, payment_id: str) -> Receipt:
        return engine.view_receipt_as_of(self._state, payment_id)

    def filter_students(
        self,
        grade: Optional[str] = None,
        finance: FinanceFilter = FinanceFilter.ALL,
    ) -> List[Student]:
        return engine.filter_students(
            self._state.students, self._state.payments, self._state.settings, grade=grade, finance=finance
        )

    def fee_items(self) -> List[FeeItem]:
        return catalog.list_fee_items(self._state.settings)

    # --- Payment ledger ---
    def record_payment(
        self,
        student_id: str,
        term: Optional[Term],
        item_amounts: Mapping[str, Any],
        paid_on: Optional[date] = None,
    ) -> Receipt:
        new_state, receipt = payments.record_payment(
            self._state,
            student_id,
            term,
            item_amounts,
            paid_on=paid_on,
            receipt_prefix=self.receipt_prefix,
            rng=self._rng,
        )
        self._state = new_state
        return receipt

    def void_payment(self, payment_id: str) -> None:
        self._apply(payments.void_payment, payment_id)

    # --- Catalog ---
    def add_fee_item(
        self,
        key: str,
        label: str,
        default_amount: Any = 0,
        category: FeeCategory = FeeCategory.OPTIONAL,
    ) -> None:
        self._apply(catalog.add_fee_item, key, label, default_amount, category)

    def delete_fee_item(self, key: str) -> None:
        self._apply(catalog.delete_fee_item, key)

    def update_fee_amount(self, grade: str, key: str, amount: Any) -> None:
        self._apply(catalog.update_fee_amount, grade, key, amount)

    def add_grade(self, grade: str) -> None:
        self._apply(catalog.add_grade, grade)

    def remove_grade(self, grade: str) -> None:
        self._apply(catalog.remove_grade, grade)

    # --- Roster ---
    def add_student(self, student: Student) -> Student:
        self._apply(students.add_student, student)
        return self.get_student(student.id)

    def remove_student(self, student_id: str) -> None:
        self._apply(students.remove_student, student_id)

    def update_student(self, student_id: str, changes: Dict[str, Any]) -> Student:
        self._apply(students.update_student, student_id, changes)
        return self.get_student(student_id)

    def toggle_fee_selection(self, student_id: str, key: str) -> Student:
        self._apply(students.toggle_fee_selection, student_id, key)
        return self.get_student(student_id)

    def promote(self, student_id: str) -> Student:
        new_state, promoted = promotion.promote(self._state, student_id)
        self._state = new_state
        return promoted

    # --- Year end ---
    def archive_year(
        self,
        next_academic_year: str,
        arrears_policy: ArrearsPolicy = ArrearsPolicy.CARRY,
    ) -> LedgerState:
        return self._apply(archive.archive_year, next_academic_year, arrears_policy)
