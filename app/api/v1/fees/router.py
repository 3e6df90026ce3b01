"""Fees router: record/void payments, receipts, student financials and item breakdown."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    ItemBalanceResponse,
    PaymentCreate,
    PaymentResponse,
    ReceiptResponse,
    StudentFinancialsResponse,
)
from . import service

router = APIRouter(prefix="/api/v1/fees", tags=["fees"])


# --- Payments ---
@router.post(
    "/payments",
    response_model=ReceiptResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> ReceiptResponse:
    try:
        return await service.record_payment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/payments", response_model=List[PaymentResponse])
async def list_payments(
    student_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[PaymentResponse]:
    return await service.list_payments(db, student_id=student_id)


@router.delete("/payments/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def void_payment(
    payment_id: str,
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        await service.void_payment(db, payment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/payments/{payment_id}/receipt", response_model=ReceiptResponse)
async def get_receipt(
    payment_id: str,
    db: AsyncSession = Depends(get_db),
) -> ReceiptResponse:
    try:
        return await service.get_receipt(db, payment_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Student financials ---
@router.get("/students/{student_id}/financials", response_model=StudentFinancialsResponse)
async def get_student_financials(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> StudentFinancialsResponse:
    try:
        return await service.get_student_financials(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/students/{student_id}/breakdown", response_model=List[ItemBalanceResponse])
async def get_item_breakdown(
    student_id: str,
    db: AsyncSession = Depends(get_db),
) -> List[ItemBalanceResponse]:
    try:
        return await service.get_item_breakdown(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
