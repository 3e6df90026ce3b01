"""Ledger records: fee catalog, structures, students, payments, derived views and archives.

Attributes are snake_case; camelCase aliases keep backup documents with the
browser-era field names (studentId, selectedFees, previousArrears, ...) loadable.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.core.enums import FeeCategory, StudentCategory, Term
from app.core.exceptions import ValidationError

ZERO = Decimal("0")
DEFAULT_FEE_KEYS = ("t1", "t2", "t3")
ARREARS_KEY = "previousArrears"
FEE_KEY_PATTERN = re.compile(r"^[a-z0-9_]+$")
# Keys of a flat fee-structure record that are not fee items
STRUCTURE_RESERVED_KEYS = ("grade", "id")


def to_amount(val: Any) -> Decimal:
    """Lenient coercion: None, blanks and non-numeric values become 0."""
    if val is None or isinstance(val, bool):
        return ZERO
    if isinstance(val, Decimal):
        return val if val.is_finite() else ZERO
    try:
        amount = Decimal(str(val).strip())
    except (InvalidOperation, ValueError):
        return ZERO
    return amount if amount.is_finite() else ZERO


def parse_amount(val: Any, field: str = "amount") -> Decimal:
    """Strict coercion for administrative input; rejects non-numeric values."""
    if val is None or isinstance(val, bool):
        raise ValidationError(f"{field} must be a number")
    try:
        amount = val if isinstance(val, Decimal) else Decimal(str(val).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return amount


def humanize_fee_key(key: str) -> str:
    """'bookFund' -> 'Book Fund', 'exam_fee' -> 'Exam Fee'."""
    spaced = re.sub(r"([A-Z])", r" \1", key).replace("_", " ").strip()
    return " ".join(word[:1].upper() + word[1:] for word in spaced.split())


class LedgerModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


# --- Catalog ---
class FeeItem(LedgerModel):
    key: str
    label: str
    category: FeeCategory = FeeCategory.MISC


DEFAULT_FEE_ITEMS: List[FeeItem] = [
    FeeItem(key="admission", label="Admission Fee", category=FeeCategory.TUITION),
    FeeItem(key="t1", label="Term 1 Tuition", category=FeeCategory.TUITION),
    FeeItem(key="t2", label="Term 2 Tuition", category=FeeCategory.TUITION),
    FeeItem(key="t3", label="Term 3 Tuition", category=FeeCategory.TUITION),
    FeeItem(key="diary", label="School Diary", category=FeeCategory.MANDATORY),
    FeeItem(key="development", label="Development Fee", category=FeeCategory.MANDATORY),
    FeeItem(key="book_fund", label="Book Fund", category=FeeCategory.MANDATORY),
    FeeItem(key="caution", label="Caution Money", category=FeeCategory.MANDATORY),
    FeeItem(key="student_card", label="Student ID Card", category=FeeCategory.MANDATORY),
    FeeItem(key="assessment_fee", label="Examination Fee", category=FeeCategory.MANDATORY),
    FeeItem(key="boarding", label="Boarding Fee", category=FeeCategory.OPTIONAL),
    FeeItem(key="breakfast", label="Breakfast", category=FeeCategory.OPTIONAL),
    FeeItem(key="lunch", label="Lunch", category=FeeCategory.OPTIONAL),
    FeeItem(key="trip", label="Educational Trip", category=FeeCategory.OPTIONAL),
    FeeItem(key="uniform", label="Uniform", category=FeeCategory.OPTIONAL),
    FeeItem(key="remedial", label="Remedial Classes", category=FeeCategory.OPTIONAL),
    FeeItem(key="project_fee", label="Project Fee", category=FeeCategory.OPTIONAL),
]


class FeeStructure(LedgerModel):
    """Price list for one grade. Also accepts the flat `{"grade": ..., "t1": 1000}` record shape."""

    grade: str
    fees: Dict[str, Decimal] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fold_flat_record(cls, data: Any) -> Any:
        if isinstance(data, dict) and "fees" not in data:
            fees = {k: v for k, v in data.items() if k not in STRUCTURE_RESERVED_KEYS}
            return {"grade": data.get("grade"), "fees": fees}
        return data

    @field_validator("fees", mode="before")
    @classmethod
    def _coerce_fees(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(k): to_amount(amount) for k, amount in v.items()}
        return v

    def amount(self, key: str) -> Decimal:
        return self.fees.get(key, ZERO)

    def to_record(self) -> Dict[str, Any]:
        """Flat record with string amounts, as found in backup documents."""
        return {"grade": self.grade, **{k: str(v) for k, v in self.fees.items()}}


# --- Roster and ledger ---
class Student(LedgerModel):
    id: str
    name: str
    grade: str
    selected_fees: Optional[List[str]] = None
    previous_arrears: Decimal = ZERO
    category: StudentCategory = StudentCategory.NORMAL

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"

    @field_validator("previous_arrears", mode="before")
    @classmethod
    def _coerce_arrears(cls, v: Any) -> Decimal:
        return to_amount(v)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, v: Any) -> Any:
        if v is None or v not in {c.value for c in StudentCategory}:
            return StudentCategory.NORMAL
        return v

    @property
    def fee_keys(self) -> List[str]:
        """Applicable fee-item keys; the three term tuitions when nothing is selected."""
        keys = self.selected_fees or list(DEFAULT_FEE_KEYS)
        return list(dict.fromkeys(keys))


class Payment(LedgerModel):
    id: str
    student_id: str
    amount: Decimal
    items: Dict[str, Decimal] = Field(default_factory=dict)
    term: Term = Term.T1
    # Locale strings from older backups are kept verbatim
    paid_on: Union[date, str, None] = Field(None, alias="date", union_mode="left_to_right")
    receipt_no: str
    grade_at_payment: Optional[str] = None
    academic_year: Optional[str] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v: Any) -> Decimal:
        return to_amount(v)

    @field_validator("items", mode="before")
    @classmethod
    def _coerce_items(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(k): to_amount(amount) for k, amount in v.items()}
        return v

    def paid_toward(self, key: str) -> Decimal:
        return self.items.get(key, ZERO)


# --- Settings and whole-state document ---
class SchoolSettings(LedgerModel):
    academic_year: str = "2024/2025"
    currency: str = "KES"
    current_term: Term = Term.T1
    grades: List[str] = Field(default_factory=list)
    fee_structures: List[FeeStructure] = Field(default_factory=list)
    fee_items: List[FeeItem] = Field(default_factory=lambda: [i.model_copy() for i in DEFAULT_FEE_ITEMS])

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"

    def structure_for(self, grade: str) -> Optional[FeeStructure]:
        for structure in self.fee_structures:
            if structure.grade == grade:
                return structure
        return None

    def fee_item(self, key: str) -> Optional[FeeItem]:
        for item in self.fee_items:
            if item.key == key:
                return item
        return None

    def known_fee_keys(self) -> List[str]:
        """Catalog keys plus any key present in a grade structure, catalog order first."""
        keys = [item.key for item in self.fee_items]
        for structure in self.fee_structures:
            keys.extend(structure.fees.keys())
        return list(dict.fromkeys(keys))

    def describe(self, key: str) -> FeeItem:
        """Catalog entry for key, or a misc entry labelled from the key itself."""
        item = self.fee_item(key)
        if item is not None:
            return item
        if key == ARREARS_KEY:
            return FeeItem(key=key, label="Arrears Brought Forward", category=FeeCategory.MISC)
        return FeeItem(key=key, label=humanize_fee_key(key), category=FeeCategory.MISC)


class StudentFinancials(LedgerModel):
    total_due: Decimal
    total_paid: Decimal
    balance: Decimal


class YearArchive(LedgerModel):
    """Read-only snapshot of one academic year's transactional history."""

    academic_year: str
    archived_at: datetime
    students: List[Student] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)
    assessments: List[Dict[str, Any]] = Field(default_factory=list)
    fee_structures: List[FeeStructure] = Field(default_factory=list)
    financials: Dict[str, StudentFinancials] = Field(default_factory=dict)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class LedgerState(LedgerModel):
    """The whole dataset. Unrelated top-level sections of a backup are preserved as extras."""

    settings: SchoolSettings = Field(default_factory=SchoolSettings)
    students: List[Student] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)
    assessments: List[Dict[str, Any]] = Field(default_factory=list)
    archives: Dict[str, YearArchive] = Field(default_factory=dict)
    payment_seq: int = 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        extra = "allow"

    def find_student(self, student_id: str) -> Optional[Student]:
        for student in self.students:
            if student.id == student_id:
                return student
        return None

    def find_payment(self, payment_id: str) -> Optional[Payment]:
        for payment in self.payments:
            if payment.id == payment_id:
                return payment
        return None

    def payments_for(self, student_id: str) -> List[Payment]:
        """Student's payments in ledger order."""
        return [p for p in self.payments if p.student_id == student_id]


# --- Derived views ---
class ItemBalance(LedgerModel):
    key: str
    label: str
    category: FeeCategory
    due: Decimal
    paid: Decimal
    balance: Decimal


class Receipt(LedgerModel):
    payment: Payment
    student_id: str
    student_name: str
    grade: str
    academic_year: str
    currency: str
    balance: Decimal
    structure: Dict[str, Decimal] = Field(default_factory=dict)
    history: List[Payment] = Field(default_factory=list)
