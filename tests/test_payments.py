"""Tests for recording and voiding payments, receipts and receipt-number allocation."""

import random
from datetime import date
from decimal import Decimal

import pytest

from app.core.enums import Term
from app.core.exceptions import NotFoundError, ValidationError
from app.ledger.engine import get_student_financials
from app.ledger.models import LedgerState
from app.ledger.payments import allocate_receipt_no, record_payment, void_payment
from app.ledger.store import LedgerStore


def test_record_payment_builds_receipt(ledger_state: LedgerState) -> None:
    state, receipt = record_payment(
        ledger_state, "S1", Term.T2, {"t1": "500", "t2": 250}, paid_on=date(2025, 2, 3)
    )
    payment = receipt.payment
    assert payment.id == "PAY-000001"
    assert payment.amount == Decimal("750")
    assert payment.term == Term.T2
    assert payment.paid_on == date(2025, 2, 3)
    assert payment.grade_at_payment == "G1"
    assert payment.academic_year == "2024/2025"
    assert payment.receipt_no.startswith("RCP-")
    assert receipt.balance == Decimal("2250")
    assert receipt.student_name == "Amina Otieno"
    assert receipt.structure["t1"] == Decimal("1000")
    assert [p.id for p in receipt.history] == [payment.id]
    assert state.payments == [payment]
    # Input state untouched
    assert ledger_state.payments == []


def test_amount_equals_sum_of_items_and_drops_non_positive(ledger_state: LedgerState) -> None:
    state, receipt = record_payment(
        ledger_state, "S1", Term.T1, {"t1": 400, "t2": 0, "t3": -50, "lunch": None, "trip": "abc", "previousArrears": 60}
    )
    payment = receipt.payment
    assert payment.items == {"t1": Decimal("400"), "previousArrears": Decimal("60")}
    assert payment.amount == sum(payment.items.values())
    for p in state.payments:
        assert p.amount == sum(p.items.values())


@pytest.mark.parametrize("items", [{}, {"t1": 0}, {"t1": -10, "t2": None}, {"t1": "x"}])
def test_zero_payment_rejected(ledger_state: LedgerState, items: dict) -> None:
    store = LedgerStore(ledger_state)
    with pytest.raises(ValidationError):
        store.record_payment("S1", Term.T1, items)
    assert len(store.state.payments) == 0
    assert store.state.payment_seq == 0


def test_record_payment_unknown_student(store: LedgerStore) -> None:
    with pytest.raises(NotFoundError):
        store.record_payment("NOPE", Term.T1, {"t1": 100})


def test_history_includes_earlier_payments(store: LedgerStore) -> None:
    first = store.record_payment("S1", Term.T1, {"t1": 100})
    second = store.record_payment("S1", Term.T1, {"t1": 200})
    assert [p.id for p in second.history] == [first.payment.id, second.payment.id]
    assert second.balance == Decimal("2700")


def test_payment_ids_increase(store: LedgerStore) -> None:
    ids = [store.record_payment("S1", Term.T1, {"t1": 10}).payment.id for _ in range(3)]
    assert ids == ["PAY-000001", "PAY-000002", "PAY-000003"]


def test_void_round_trip_restores_totals(store: LedgerStore) -> None:
    store.record_payment("S1", Term.T1, {"t1": 300})
    before = store.financials("S1")
    receipt = store.record_payment("S1", Term.T1, {"t2": 450, "lunch": 50})
    assert store.financials("S1").total_paid == before.total_paid + Decimal("500")

    store.void_payment(receipt.payment.id)
    after = store.financials("S1")
    assert after == before


def test_void_leaves_other_payments_unchanged(store: LedgerStore) -> None:
    a = store.record_payment("S1", Term.T1, {"t1": 100}).payment
    b = store.record_payment("S1", Term.T1, {"t1": 200}).payment
    c = store.record_payment("S1", Term.T1, {"t1": 300}).payment
    store.update_student("S1", {"grade": "G2"})

    store.void_payment(b.id)
    assert store.state.payments == [a, c]
    assert all(p.grade_at_payment == "G1" for p in store.state.payments)


def test_void_unknown_payment(store: LedgerStore) -> None:
    store.record_payment("S1", Term.T1, {"t1": 100})
    before = store.state
    with pytest.raises(NotFoundError):
        store.void_payment("PAY-999999")
    assert store.state is before


def test_void_with_pure_reducer(ledger_state: LedgerState) -> None:
    state, receipt = record_payment(ledger_state, "S1", Term.T1, {"t1": 500})
    voided = void_payment(state, receipt.payment.id)
    assert voided.payments == []
    f = get_student_financials(voided.find_student("S1"), voided.payments, voided.settings)
    assert f.balance == Decimal("3000")


def test_receipt_numbers_unique_in_active_ledger(store: LedgerStore) -> None:
    for _ in range(50):
        store.record_payment("S1", Term.T1, {"t1": 1})
    numbers = [p.receipt_no for p in store.state.payments]
    assert len(set(numbers)) == len(numbers)


def test_allocate_receipt_no_avoids_collisions() -> None:
    taken = {f"RCP-{n:04d}" for n in range(10_000) if n != 4321}
    assert allocate_receipt_no(taken, rng=random.Random(1)) == "RCP-4321"


def test_allocate_receipt_no_widens_when_exhausted() -> None:
    taken = {f"RCP-{n:04d}" for n in range(10_000)}
    number = allocate_receipt_no(taken, rng=random.Random(1))
    assert number not in taken
    assert len(number) == len("RCP-") + 5


def test_allocate_receipt_no_custom_prefix() -> None:
    assert allocate_receipt_no(set(), prefix="R/", rng=random.Random(3)).startswith("R/")


def test_unknown_term_rejected(ledger_state: LedgerState) -> None:
    with pytest.raises(ValidationError):
        record_payment(ledger_state, "S1", "T4", {"t1": 10})


def test_missing_term_uses_current_term(ledger_state: LedgerState) -> None:
    settings = ledger_state.settings.model_copy(update={"current_term": Term.T3})
    state = ledger_state.model_copy(update={"settings": settings})
    _, receipt = record_payment(state, "S1", None, {"t3": 100})
    assert receipt.payment.term == Term.T3


def test_payment_id_skips_ids_already_in_ledger(ledger_state: LedgerState) -> None:
    state, _ = record_payment(ledger_state, "S1", Term.T1, {"t1": 100})
    state, _ = record_payment(state, "S1", Term.T1, {"t1": 100})
    # Sequence left behind the stored ids, as in a hand-edited backup
    stale = state.model_copy(update={"payment_seq": 0})

    stale, third = record_payment(stale, "S1", Term.T1, {"t1": 100})
    assert third.payment.id == "PAY-000003"
    assert stale.payment_seq == 3
    ids = [p.id for p in stale.payments]
    assert len(set(ids)) == len(ids)
