"""Student roster schemas."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.enums import StudentCategory


class StudentCreate(BaseModel):
    id: str = Field(..., max_length=50)
    name: str = Field(..., max_length=200)
    grade: str
    selected_fees: Optional[List[str]] = None
    previous_arrears: Decimal = Field(Decimal("0"), ge=0)
    category: StudentCategory = StudentCategory.NORMAL


class StudentUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=200)
    grade: Optional[str] = None
    selected_fees: Optional[List[str]] = None
    previous_arrears: Optional[Decimal] = Field(None, ge=0)
    category: Optional[StudentCategory] = None


class StudentResponse(BaseModel):
    id: str
    name: str
    grade: str
    selected_fees: Optional[List[str]] = None
    fee_keys: List[str]
    previous_arrears: Decimal
    category: StudentCategory
    total_due: Decimal
    total_paid: Decimal
    balance: Decimal
