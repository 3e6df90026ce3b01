"""Fee catalog: fee items and per-grade structures. Changes apply to every grade at once."""

import logging
from typing import Any, List

from app.core.enums import FeeCategory
from app.core.exceptions import NotFoundError, ValidationError

from .models import FEE_KEY_PATTERN, ZERO, FeeItem, FeeStructure, LedgerState, SchoolSettings, parse_amount

logger = logging.getLogger(__name__)


def _with_settings(state: LedgerState, **changes: Any) -> LedgerState:
    return state.model_copy(update={"settings": state.settings.model_copy(update=changes)})


def list_fee_items(settings: SchoolSettings) -> List[FeeItem]:
    """Every known fee item, catalogued or only present in a structure, by category then label."""
    items = [settings.describe(key) for key in settings.known_fee_keys()]
    return sorted(items, key=lambda i: (FeeCategory(i.category).sort_order, i.label.lower()))


def add_fee_item(
    state: LedgerState,
    key: str,
    label: str,
    default_amount: Any = 0,
    category: FeeCategory = FeeCategory.OPTIONAL,
) -> LedgerState:
    key = (key or "").strip()
    label = (label or "").strip()
    if not key or not label:
        raise ValidationError("Fee item key and label are required")
    if not FEE_KEY_PATTERN.match(key):
        raise ValidationError("Fee key must be lowercase letters, numbers, or underscores only")
    if key in state.settings.known_fee_keys():
        raise ValidationError(f"Fee key '{key}' already exists")
    amount = parse_amount(default_amount, "default_amount")

    structures = [
        s.model_copy(update={"fees": {**s.fees, key: amount}})
        for s in state.settings.fee_structures
    ]
    items = [*state.settings.fee_items, FeeItem(key=key, label=label, category=FeeCategory(category))]
    logger.info("Added fee item %s to %d grade structures", key, len(structures))
    return _with_settings(state, fee_structures=structures, fee_items=items)


def delete_fee_item(state: LedgerState, key: str) -> LedgerState:
    """Drop a fee item from the catalog and every structure.

    Recorded payments keep their item breakdown, and student selections that
    name the key are left as they are; the key simply prices at zero.
    """
    if key not in state.settings.known_fee_keys():
        raise NotFoundError(f"Fee item '{key}' not found")
    structures = [
        s.model_copy(update={"fees": {k: v for k, v in s.fees.items() if k != key}})
        for s in state.settings.fee_structures
    ]
    items = [item for item in state.settings.fee_items if item.key != key]
    logger.info("Deleted fee item %s", key)
    return _with_settings(state, fee_structures=structures, fee_items=items)


def update_fee_amount(state: LedgerState, grade: str, key: str, amount: Any) -> LedgerState:
    """Set one grade's price for one item. Negative amounts are accepted as credits."""
    if state.settings.structure_for(grade) is None:
        raise NotFoundError(f"No fee structure for grade {grade}")
    if key not in state.settings.known_fee_keys():
        raise NotFoundError(f"Fee item '{key}' not found")
    value = parse_amount(amount)
    structures = [
        s.model_copy(update={"fees": {**s.fees, key: value}}) if s.grade == grade else s
        for s in state.settings.fee_structures
    ]
    logger.info("Set %s fee %s to %s", grade, key, value)
    return _with_settings(state, fee_structures=structures)


def add_grade(state: LedgerState, grade: str) -> LedgerState:
    """Append a grade to the promotion sequence with a structure pricing every known item at 0."""
    grade = (grade or "").strip()
    if not grade:
        raise ValidationError("Grade name is required")
    if grade in state.settings.grades or state.settings.structure_for(grade) is not None:
        raise ValidationError(f"Grade {grade} already exists")
    keys = state.settings.known_fee_keys()
    structure = FeeStructure(grade=grade, fees={k: ZERO for k in keys})
    logger.info("Added grade %s", grade)
    return _with_settings(
        state,
        grades=[*state.settings.grades, grade],
        fee_structures=[*state.settings.fee_structures, structure],
    )


def remove_grade(state: LedgerState, grade: str) -> LedgerState:
    if grade not in state.settings.grades and state.settings.structure_for(grade) is None:
        raise NotFoundError(f"Grade {grade} not found")
    if any(s.grade == grade for s in state.students):
        raise ValidationError(f"Grade {grade} still has enrolled students")
    logger.info("Removed grade %s", grade)
    return _with_settings(
        state,
        grades=[g for g in state.settings.grades if g != grade],
        fee_structures=[s for s in state.settings.fee_structures if s.grade != grade],
    )
