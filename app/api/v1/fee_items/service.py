"""Fee item service: catalog listing and grade-wide catalog changes."""

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ledger_service import read_store, run_command
from app.ledger.models import ZERO, FeeStructure
from app.ledger.store import LedgerStore

from .schemas import (
    CatalogResponse,
    FeeAmountUpdate,
    FeeItemCreate,
    FeeItemResponse,
    FeeStructureResponse,
    GradeCreate,
)


def _structure_to_response(fs: FeeStructure) -> FeeStructureResponse:
    return FeeStructureResponse(grade=fs.grade, fees=dict(fs.fees), total=sum(fs.fees.values(), ZERO))


def _catalog(store: LedgerStore) -> CatalogResponse:
    return CatalogResponse(
        grades=list(store.state.settings.grades),
        items=[FeeItemResponse.model_validate(i, from_attributes=True) for i in store.fee_items()],
        structures=[_structure_to_response(fs) for fs in store.state.settings.fee_structures],
    )


async def get_catalog(db: AsyncSession) -> CatalogResponse:
    return _catalog(await read_store(db))


async def list_fee_items(db: AsyncSession) -> List[FeeItemResponse]:
    store = await read_store(db)
    return [FeeItemResponse.model_validate(i, from_attributes=True) for i in store.fee_items()]


async def add_fee_item(db: AsyncSession, payload: FeeItemCreate) -> CatalogResponse:
    def command(store: LedgerStore) -> CatalogResponse:
        store.add_fee_item(payload.key, payload.label, payload.default_amount, payload.category)
        return _catalog(store)

    return await run_command(db, command)


async def delete_fee_item(db: AsyncSession, key: str) -> None:
    await run_command(db, lambda store: store.delete_fee_item(key))


async def update_fee_amount(db: AsyncSession, grade: str, key: str, payload: FeeAmountUpdate) -> FeeStructureResponse:
    def command(store: LedgerStore) -> FeeStructureResponse:
        store.update_fee_amount(grade, key, payload.amount)
        return _structure_to_response(store.state.settings.structure_for(grade))

    return await run_command(db, command)


async def add_grade(db: AsyncSession, payload: GradeCreate) -> FeeStructureResponse:
    def command(store: LedgerStore) -> FeeStructureResponse:
        store.add_grade(payload.grade)
        return _structure_to_response(store.state.settings.structure_for(payload.grade.strip()))

    return await run_command(db, command)


async def remove_grade(db: AsyncSession, grade: str) -> None:
    await run_command(db, lambda store: store.remove_grade(grade))
