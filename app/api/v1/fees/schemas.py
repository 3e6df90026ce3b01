"""Fees schemas: payments, receipts, student financials."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from app.core.enums import FeeCategory, Term


# --- Payment ---
class PaymentCreate(BaseModel):
    student_id: str
    term: Optional[Term] = Field(None, description="defaults to the school's current term")
    items: Dict[str, Optional[Decimal]] = Field(
        ..., description="fee-item key -> amount paid; use 'previousArrears' for arrears"
    )
    paid_on: Optional[date] = None


class PaymentResponse(BaseModel):
    id: str
    student_id: str
    amount: Decimal
    items: Dict[str, Decimal]
    term: Term
    paid_on: Union[date, str, None] = None
    receipt_no: str
    grade_at_payment: Optional[str] = None
    academic_year: Optional[str] = None

    class Config:
        from_attributes = True


class ReceiptResponse(BaseModel):
    payment: PaymentResponse
    student_id: str
    student_name: str
    grade: str
    academic_year: str
    currency: str
    balance: Decimal
    structure: Dict[str, Decimal]
    history: List[PaymentResponse]

    class Config:
        from_attributes = True


# --- Financials ---
class StudentFinancialsResponse(BaseModel):
    student_id: str
    total_due: Decimal
    total_paid: Decimal
    balance: Decimal


class ItemBalanceResponse(BaseModel):
    key: str
    label: str
    category: FeeCategory
    due: Decimal
    paid: Decimal
    balance: Decimal

    class Config:
        from_attributes = True
