"""Fee items router: catalog, per-grade amounts, grades."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    CatalogResponse,
    FeeAmountUpdate,
    FeeItemCreate,
    FeeItemResponse,
    FeeStructureResponse,
    GradeCreate,
)
from . import service

router = APIRouter(prefix="/api/v1/fee-items", tags=["fee-items"])


@router.get("", response_model=List[FeeItemResponse])
async def list_fee_items(db: AsyncSession = Depends(get_db)) -> List[FeeItemResponse]:
    return await service.list_fee_items(db)


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog(db: AsyncSession = Depends(get_db)) -> CatalogResponse:
    return await service.get_catalog(db)


@router.post("", response_model=CatalogResponse, status_code=status.HTTP_201_CREATED)
async def add_fee_item(
    payload: FeeItemCreate,
    db: AsyncSession = Depends(get_db),
) -> CatalogResponse:
    try:
        return await service.add_fee_item(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{key}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_fee_item(
    key: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        await service.delete_fee_item(db, key)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Grade structures ---
@router.put("/structures/{grade}/{key}", response_model=FeeStructureResponse)
async def update_fee_amount(
    grade: str,
    key: str,
    payload: FeeAmountUpdate,
    db: AsyncSession = Depends(get_db),
) -> FeeStructureResponse:
    try:
        return await service.update_fee_amount(db, grade, key, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/grades", response_model=FeeStructureResponse, status_code=status.HTTP_201_CREATED)
async def add_grade(
    payload: GradeCreate,
    db: AsyncSession = Depends(get_db),
) -> FeeStructureResponse:
    try:
        return await service.add_grade(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/grades/{grade}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_grade(
    grade: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        await service.remove_grade(db, grade)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
