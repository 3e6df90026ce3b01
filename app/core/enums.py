from enum import Enum


class FeeCategory(str, Enum):
    TUITION = "tuition"
    MANDATORY = "mandatory"
    OPTIONAL = "optional"
    MISC = "misc"

    @property
    def sort_order(self) -> int:
        return _CATEGORY_ORDER[self]


_CATEGORY_ORDER = {
    FeeCategory.TUITION: 1,
    FeeCategory.MANDATORY: 2,
    FeeCategory.OPTIONAL: 3,
    FeeCategory.MISC: 4,
}


class StudentCategory(str, Enum):
    NORMAL = "Normal"
    STAFF = "Staff"
    SPONSORED = "Sponsored"


class Term(str, Enum):
    T1 = "T1"
    T2 = "T2"
    T3 = "T3"


class FinanceFilter(str, Enum):
    ALL = "ALL"
    FULL = "FULL"
    HALF = "HALF"
    ARREARS = "ARREARS"


class ArrearsPolicy(str, Enum):
    """How previous_arrears crosses an academic-year archive boundary."""

    CARRY = "carry"
    RECOMPUTE = "recompute"
    ZERO = "zero"
