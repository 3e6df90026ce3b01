"""Unit tests for ledger computation: financials, item breakdown, filters, point-in-time receipts."""

from decimal import Decimal

import pytest

from app.core.enums import FeeCategory, FinanceFilter, Term
from app.core.exceptions import NotFoundError
from app.ledger.engine import (
    filter_students,
    get_item_breakdown,
    get_student_financials,
    view_receipt_as_of,
)
from app.ledger.models import LedgerState, Payment, Student
from app.ledger.payments import record_payment, void_payment


def _payment(pid: str, student_id: str, items: dict, receipt_no: str = None) -> Payment:
    items = {k: Decimal(str(v)) for k, v in items.items()}
    return Payment(
        id=pid,
        student_id=student_id,
        amount=sum(items.values(), Decimal("0")),
        items=items,
        term=Term.T1,
        receipt_no=receipt_no or f"RCP-{pid}",
    )


def test_total_due_from_selected_fees(ledger_state: LedgerState) -> None:
    student = ledger_state.find_student("S1")
    f = get_student_financials(student, [], ledger_state.settings)
    assert f.total_due == Decimal("3000")
    assert f.total_paid == Decimal("0")
    assert f.balance == Decimal("3000")


def test_partial_payment_scenario(ledger_state: LedgerState) -> None:
    state, _ = record_payment(ledger_state, "S1", Term.T1, {"t1": 500})
    f = get_student_financials(state.find_student("S1"), state.payments, state.settings)
    assert f.total_paid == Decimal("500")
    assert f.balance == Decimal("2500")


def test_missing_selection_defaults_to_term_tuition(ledger_state: LedgerState) -> None:
    for selected in (None, []):
        student = Student(id="S2", name="Brian", grade="G1", selected_fees=selected)
        f = get_student_financials(student, [], ledger_state.settings)
        assert f.total_due == Decimal("3000")


def test_selected_key_missing_from_structure_counts_zero(ledger_state: LedgerState) -> None:
    student = Student(id="S2", name="Brian", grade="G1", selected_fees=["t1", "boarding"])
    f = get_student_financials(student, [], ledger_state.settings)
    assert f.total_due == Decimal("1000")


def test_grade_without_structure_owes_only_arrears(ledger_state: LedgerState) -> None:
    student = Student(id="S9", name="Chidi", grade="G9", previous_arrears=750)
    payments = [_payment("P1", "S9", {"previousArrears": 200})]
    f = get_student_financials(student, payments, ledger_state.settings)
    assert f.total_due == Decimal("750")
    assert f.balance == Decimal("750") - f.total_paid == Decimal("550")


def test_non_numeric_arrears_treated_as_zero(ledger_state: LedgerState) -> None:
    student = Student.model_validate(
        {"id": "S3", "name": "Dana", "grade": "G1", "previousArrears": "n/a"}
    )
    assert student.previous_arrears == Decimal("0")
    f = get_student_financials(student, [], ledger_state.settings)
    assert f.total_due == Decimal("3000")


def test_only_matching_student_payments_counted(ledger_state: LedgerState) -> None:
    payments = [
        _payment("P1", "S1", {"t1": 300}),
        _payment("P2", "OTHER", {"t1": 900}),
        _payment("P3", "S1", {"t2": 200}),
    ]
    f = get_student_financials(ledger_state.find_student("S1"), payments, ledger_state.settings)
    assert f.total_paid == Decimal("500")


def test_overpayment_gives_negative_balance(ledger_state: LedgerState) -> None:
    payments = [_payment("P1", "S1", {"t1": 3200})]
    f = get_student_financials(ledger_state.find_student("S1"), payments, ledger_state.settings)
    assert f.balance == Decimal("-200")


def test_financials_idempotent_and_inputs_untouched(ledger_state: LedgerState) -> None:
    payments = [_payment("P1", "S1", {"t1": 300})]
    before = ledger_state.model_dump()
    student = ledger_state.find_student("S1")
    first = get_student_financials(student, payments, ledger_state.settings)
    second = get_student_financials(student, payments, ledger_state.settings)
    assert first == second
    assert ledger_state.model_dump() == before


def test_item_breakdown(ledger_state: LedgerState) -> None:
    student = ledger_state.find_student("S1").model_copy(update={"previous_arrears": Decimal("250")})
    payments = [
        _payment("P1", "S1", {"t1": 600, "previousArrears": 250}),
        _payment("P2", "S1", {"t1": 400, "uniform": 80}),
    ]
    lines = {line.key: line for line in get_item_breakdown(student, payments, ledger_state.settings)}

    assert lines["t1"].due == Decimal("1000")
    assert lines["t1"].paid == Decimal("1000")
    assert lines["t1"].balance == Decimal("0")
    assert lines["t2"].paid == Decimal("0")
    assert lines["t1"].category == FeeCategory.TUITION
    # Paid but not selected
    assert lines["uniform"].due == Decimal("0")
    assert lines["uniform"].balance == Decimal("-80")
    assert lines["previousArrears"].due == Decimal("250")
    assert lines["previousArrears"].balance == Decimal("0")


def test_breakdown_omits_arrears_line_when_nothing_owed(ledger_state: LedgerState) -> None:
    lines = get_item_breakdown(ledger_state.find_student("S1"), [], ledger_state.settings)
    assert [line.key for line in lines] == ["t1", "t2", "t3"]


def test_breakdown_labels_unknown_keys(ledger_state: LedgerState) -> None:
    payments = [_payment("P1", "S1", {"bookFund": 50})]
    lines = get_item_breakdown(ledger_state.find_student("S1"), payments, ledger_state.settings)
    extra = lines[-1]
    assert extra.key == "bookFund"
    assert extra.label == "Book Fund"
    assert extra.category == FeeCategory.MISC


def test_receipt_as_of_ignores_later_payments(ledger_state: LedgerState) -> None:
    state, first = record_payment(ledger_state, "S1", Term.T1, {"t1": 500})
    state, second = record_payment(state, "S1", Term.T2, {"t2": 700})
    state, _ = record_payment(state, "S1", Term.T3, {"t3": 300})

    receipt = view_receipt_as_of(state, second.payment.id)
    assert receipt.balance == Decimal("1800")
    assert [p.id for p in receipt.history] == [first.payment.id, second.payment.id]

    state = void_payment(state, first.payment.id)
    receipt = view_receipt_as_of(state, second.payment.id)
    assert receipt.balance == Decimal("2300")
    assert [p.id for p in receipt.history] == [second.payment.id]


def test_receipt_as_of_unknown_payment(ledger_state: LedgerState) -> None:
    with pytest.raises(NotFoundError):
        view_receipt_as_of(ledger_state, "PAY-404")


def test_finance_filters(ledger_state: LedgerState) -> None:
    students = [
        Student(id="FULL", name="Full", grade="G1"),
        Student(id="HALF", name="Half", grade="G1"),
        Student(id="OWE", name="Owes", grade="G1"),
        Student(id="G2", name="Second", grade="G2"),
    ]
    payments = [
        _payment("P1", "FULL", {"t1": 3000}),
        _payment("P2", "HALF", {"t1": 1500}),
        _payment("P3", "OWE", {"t1": 100}),
    ]
    settings = ledger_state.settings

    def ids(**kw):
        return [s.id for s in filter_students(students, payments, settings, **kw)]

    assert ids() == ["FULL", "HALF", "OWE", "G2"]
    assert ids(grade="G2") == ["G2"]
    assert ids(finance=FinanceFilter.FULL) == ["FULL"]
    assert ids(finance=FinanceFilter.HALF) == ["HALF"]
    assert ids(finance=FinanceFilter.ARREARS) == ["HALF", "OWE", "G2"]
    assert ids(grade="G1", finance=FinanceFilter.ARREARS) == ["HALF", "OWE"]
