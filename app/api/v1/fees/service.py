"""Fees service: payments, voids, receipts and student financials over the stored ledger."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ledger_service import read_store, run_command
from app.ledger.models import Receipt

from .schemas import (
    ItemBalanceResponse,
    PaymentCreate,
    PaymentResponse,
    ReceiptResponse,
    StudentFinancialsResponse,
)


def _receipt_to_response(receipt: Receipt) -> ReceiptResponse:
    return ReceiptResponse.model_validate(receipt, from_attributes=True)


async def record_payment(db: AsyncSession, payload: PaymentCreate) -> ReceiptResponse:
    receipt = await run_command(
        db,
        lambda store: store.record_payment(
            payload.student_id, payload.term, payload.items, paid_on=payload.paid_on
        ),
    )
    return _receipt_to_response(receipt)


async def void_payment(db: AsyncSession, payment_id: str) -> None:
    await run_command(db, lambda store: store.void_payment(payment_id))


async def list_payments(db: AsyncSession, student_id: Optional[str] = None) -> List[PaymentResponse]:
    store = await read_store(db)
    rows = store.state.payments
    if student_id is not None:
        rows = store.state.payments_for(student_id)
    return [PaymentResponse.model_validate(p, from_attributes=True) for p in rows]


async def get_receipt(db: AsyncSession, payment_id: str) -> ReceiptResponse:
    store = await read_store(db)
    return _receipt_to_response(store.receipt(payment_id))


async def get_student_financials(db: AsyncSession, student_id: str) -> StudentFinancialsResponse:
    store = await read_store(db)
    f = store.financials(student_id)
    return StudentFinancialsResponse(
        student_id=student_id,
        total_due=f.total_due,
        total_paid=f.total_paid,
        balance=f.balance,
    )


async def get_item_breakdown(db: AsyncSession, student_id: str) -> List[ItemBalanceResponse]:
    store = await read_store(db)
    return [ItemBalanceResponse.model_validate(i, from_attributes=True) for i in store.item_breakdown(student_id)]
