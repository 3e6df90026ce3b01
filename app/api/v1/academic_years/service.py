"""Academic year service: current year, year-end archive and archive lookups."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.fees.schemas import PaymentResponse
from app.core.config import settings
from app.core.enums import ArrearsPolicy
from app.core.exceptions import NotFoundError
from app.core.ledger_service import read_store, run_command
from app.ledger.models import ZERO, LedgerState, YearArchive
from app.ledger.store import LedgerStore

from .schemas import (
    AcademicYearResponse,
    ArchivedFinancials,
    ArchiveYearRequest,
    YearArchiveResponse,
    YearArchiveSummary,
)


def _to_response(state: LedgerState) -> AcademicYearResponse:
    return AcademicYearResponse(
        academic_year=state.settings.academic_year,
        archived_years=sorted(state.archives),
        active_payments=len(state.payments),
    )


def _summary(archive: YearArchive) -> YearArchiveSummary:
    return YearArchiveSummary(
        academic_year=archive.academic_year,
        archived_at=archive.archived_at,
        students=len(archive.students),
        payments=len(archive.payments),
        total_paid=sum((p.amount for p in archive.payments), ZERO),
    )


async def get_current_academic_year(db: AsyncSession) -> AcademicYearResponse:
    return _to_response((await read_store(db)).state)


async def archive_year(db: AsyncSession, payload: ArchiveYearRequest) -> AcademicYearResponse:
    policy: Optional[ArrearsPolicy] = payload.arrears_policy
    if policy is None:
        policy = ArrearsPolicy(settings.archive_arrears_policy)

    def command(store: LedgerStore) -> AcademicYearResponse:
        return _to_response(store.archive_year(payload.next_academic_year, policy))

    return await run_command(db, command)


async def list_archives(db: AsyncSession) -> List[YearArchiveSummary]:
    store = await read_store(db)
    return [_summary(store.state.archives[year]) for year in sorted(store.state.archives)]


async def get_archive(db: AsyncSession, academic_year: str) -> YearArchiveResponse:
    store = await read_store(db)
    archive = store.state.archives.get(academic_year)
    if archive is None:
        raise NotFoundError(f"No archive for academic year {academic_year}")
    return YearArchiveResponse(
        academic_year=archive.academic_year,
        archived_at=archive.archived_at,
        payments=[PaymentResponse.model_validate(p, from_attributes=True) for p in archive.payments],
        financials={
            sid: ArchivedFinancials.model_validate(f, from_attributes=True)
            for sid, f in archive.financials.items()
        },
    )
