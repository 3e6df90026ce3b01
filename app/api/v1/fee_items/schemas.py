"""Fee item and grade structure schemas."""

from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, Field

from app.core.enums import FeeCategory


class FeeItemCreate(BaseModel):
    key: str = Field(..., max_length=50, description="lowercase letters, digits, underscores")
    label: str = Field(..., max_length=100)
    category: FeeCategory = FeeCategory.OPTIONAL
    default_amount: Decimal = Decimal("0")


class FeeItemResponse(BaseModel):
    key: str
    label: str
    category: FeeCategory

    class Config:
        from_attributes = True


class FeeAmountUpdate(BaseModel):
    amount: Decimal


class GradeCreate(BaseModel):
    grade: str = Field(..., max_length=50)


class FeeStructureResponse(BaseModel):
    grade: str
    fees: Dict[str, Decimal]
    total: Decimal

    class Config:
        from_attributes = True


class CatalogResponse(BaseModel):
    grades: List[str]
    items: List[FeeItemResponse]
    structures: List[FeeStructureResponse]
