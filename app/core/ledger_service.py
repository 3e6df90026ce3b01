"""Load/save of the ledger state and serialized command execution."""

import asyncio
import logging
from typing import Callable, Optional, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ServiceError
from app.core.models import LedgerDocument
from app.ledger.models import ZERO, FeeStructure, LedgerState, SchoolSettings
from app.ledger.store import LedgerStore

logger = logging.getLogger(__name__)

DOCUMENT_ID = 1
T = TypeVar("T")

# One writer at a time: load, apply, save never interleave between requests
_write_lock = asyncio.Lock()


def default_state() -> LedgerState:
    """Fresh dataset from configuration: every grade priced at 0 for every default item."""
    school = SchoolSettings(
        academic_year=settings.default_academic_year,
        currency=settings.currency,
        grades=settings.grade_sequence,
    )
    keys = [item.key for item in school.fee_items]
    school.fee_structures = [
        FeeStructure(grade=grade, fees={k: ZERO for k in keys}) for grade in school.grades
    ]
    return LedgerState(settings=school)


async def _get_document(db: AsyncSession) -> Optional[LedgerDocument]:
    return await db.get(LedgerDocument, DOCUMENT_ID)


async def load_state(db: AsyncSession) -> LedgerState:
    doc = await _get_document(db)
    if doc is None:
        return default_state()
    return LedgerState.model_validate(doc.payload)


async def save_state(db: AsyncSession, state: LedgerState) -> None:
    payload = state.model_dump(mode="json", by_alias=True)
    doc = await _get_document(db)
    if doc is None:
        doc = LedgerDocument(id=DOCUMENT_ID, academic_year=state.settings.academic_year, payload=payload)
        db.add(doc)
    else:
        doc.academic_year = state.settings.academic_year
        doc.payload = payload
    await db.commit()


async def read_store(db: AsyncSession) -> LedgerStore:
    return LedgerStore(await load_state(db), receipt_prefix=settings.receipt_prefix)


async def run_command(db: AsyncSession, command: Callable[[LedgerStore], T]) -> T:
    """Apply `command` to the stored state and persist the result.

    Nothing is written when the command raises.
    """
    async with _write_lock:
        store = await read_store(db)
        try:
            result = command(store)
        except ServiceError as e:
            logger.warning("Ledger command rejected: %s", e.message)
            raise
        await save_state(db, store.state)
        return result
