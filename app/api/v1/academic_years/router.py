from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import AcademicYearResponse, ArchiveYearRequest, YearArchiveResponse, YearArchiveSummary
from . import service

router = APIRouter(prefix="/api/v1/academic-years", tags=["academic-years"])


@router.get("/current", response_model=AcademicYearResponse)
async def get_current_academic_year(db: AsyncSession = Depends(get_db)) -> AcademicYearResponse:
    return await service.get_current_academic_year(db)


@router.post("/archive", response_model=AcademicYearResponse)
async def archive_year(
    payload: ArchiveYearRequest,
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    """Archive the active year's payments and assessments, then open `next_academic_year`."""
    try:
        return await service.archive_year(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/archives", response_model=List[YearArchiveSummary])
async def list_archives(db: AsyncSession = Depends(get_db)) -> List[YearArchiveSummary]:
    return await service.list_archives(db)


# Year labels such as 2024/2025 contain a slash
@router.get("/archives/{academic_year:path}", response_model=YearArchiveResponse)
async def get_archive(
    academic_year: str,
    db: AsyncSession = Depends(get_db),
) -> YearArchiveResponse:
    try:
        return await service.get_archive(db, academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
