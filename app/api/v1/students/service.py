"""Student service: roster listing with finance filters, enrolment, fee selection, promotion."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import FinanceFilter
from app.core.ledger_service import read_store, run_command
from app.ledger.models import Student
from app.ledger.store import LedgerStore

from .schemas import StudentCreate, StudentResponse, StudentUpdate


def _to_response(store: LedgerStore, student: Student) -> StudentResponse:
    f = store.financials(student.id)
    return StudentResponse(
        id=student.id,
        name=student.name,
        grade=student.grade,
        selected_fees=student.selected_fees,
        fee_keys=student.fee_keys,
        previous_arrears=student.previous_arrears,
        category=student.category,
        total_due=f.total_due,
        total_paid=f.total_paid,
        balance=f.balance,
    )


async def list_students(
    db: AsyncSession,
    grade: Optional[str] = None,
    finance: FinanceFilter = FinanceFilter.ALL,
) -> List[StudentResponse]:
    store = await read_store(db)
    return [_to_response(store, s) for s in store.filter_students(grade=grade, finance=finance)]


async def get_student(db: AsyncSession, student_id: str) -> StudentResponse:
    store = await read_store(db)
    return _to_response(store, store.get_student(student_id))


async def create_student(db: AsyncSession, payload: StudentCreate) -> StudentResponse:
    def command(store: LedgerStore) -> StudentResponse:
        student = store.add_student(Student.model_validate(payload.model_dump()))
        return _to_response(store, student)

    return await run_command(db, command)


async def update_student(db: AsyncSession, student_id: str, payload: StudentUpdate) -> StudentResponse:
    def command(store: LedgerStore) -> StudentResponse:
        student = store.update_student(student_id, payload.model_dump(exclude_unset=True))
        return _to_response(store, student)

    return await run_command(db, command)


async def remove_student(db: AsyncSession, student_id: str) -> None:
    await run_command(db, lambda store: store.remove_student(student_id))


async def toggle_fee(db: AsyncSession, student_id: str, key: str) -> StudentResponse:
    def command(store: LedgerStore) -> StudentResponse:
        return _to_response(store, store.toggle_fee_selection(student_id, key))

    return await run_command(db, command)


async def promote_student(db: AsyncSession, student_id: str) -> StudentResponse:
    def command(store: LedgerStore) -> StudentResponse:
        return _to_response(store, store.promote(student_id))

    return await run_command(db, command)
