from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.enums import ArrearsPolicy
from app.api.v1.fees.schemas import PaymentResponse


class ArchiveYearRequest(BaseModel):
    next_academic_year: str = Field(..., max_length=20, description="e.g. 2025/2026")
    arrears_policy: Optional[ArrearsPolicy] = Field(
        None, description="carry, recompute or zero; defaults to ARCHIVE_ARREARS_POLICY"
    )


class AcademicYearResponse(BaseModel):
    academic_year: str
    archived_years: List[str]
    active_payments: int


class ArchivedFinancials(BaseModel):
    total_due: Decimal
    total_paid: Decimal
    balance: Decimal

    class Config:
        from_attributes = True


class YearArchiveSummary(BaseModel):
    academic_year: str
    archived_at: datetime
    students: int
    payments: int
    total_paid: Decimal


class YearArchiveResponse(BaseModel):
    academic_year: str
    archived_at: datetime
    payments: List[PaymentResponse]
    financials: Dict[str, ArchivedFinancials]
