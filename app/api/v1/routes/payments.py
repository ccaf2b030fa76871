"""Payment API routes."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import CurrentUser
from app.models.payment import PaymentMethod, PaymentStatus
from app.schemas.common import DataResponse, ListResponse, MessageResponse, page_meta
from app.schemas.payment import (
    ClassPaymentsData,
    PaymentCreate,
    PaymentResponse,
    PaymentStatistics,
    PaymentUpdate,
    StudentPaymentsData,
)
from app.services import class_model as class_service
from app.services import payment as payment_service
from app.services import student as student_service

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.get("", response_model=ListResponse[PaymentResponse])
async def list_payments(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    student_id: int | None = None,
    class_id: int | None = None,
    payment_method: PaymentMethod | None = None,
    status: PaymentStatus | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    search: str | None = Query(None, description="Reference number contains"),
):
    """List payments with optional filters."""
    payments, total = await payment_service.get_payments(
        db,
        page=page,
        per_page=per_page,
        student_id=student_id,
        class_id=class_id,
        payment_method=payment_method,
        status=status,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    return {"data": payments, "meta": page_meta(total, page, per_page)}


@router.post(
    "",
    response_model=DataResponse[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_payment(
    payment_data: PaymentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Record a payment."""
    payment = await payment_service.create_payment(db, payment_data)
    return {"data": payment, "message": "Payment created successfully"}


@router.get("/statistics", response_model=DataResponse[PaymentStatistics])
async def get_payment_statistics(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    start_date: date | None = None,
    end_date: date | None = None,
):
    """Payment counts, method breakdown and recent monthly revenue."""
    statistics = await payment_service.get_payment_statistics(db, start_date, end_date)
    return {"data": statistics}


@router.get("/student/{student_id}", response_model=DataResponse[StudentPaymentsData])
async def get_student_payments(
    student_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Payment history of a student with paid and pending totals."""
    student = await student_service.get_student_or_404(db, student_id)
    return {"data": await payment_service.get_student_payments(db, student)}


@router.get("/class/{class_id}", response_model=DataResponse[ClassPaymentsData])
async def get_class_payments(
    class_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Payments of a class with its collection rate."""
    school_class = await class_service.get_class_or_404(db, class_id)
    return {"data": await payment_service.get_class_payments(db, school_class)}


@router.get("/{payment_id}", response_model=DataResponse[PaymentResponse])
async def get_payment(
    payment_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Get a payment by ID."""
    payment = await payment_service.get_payment_or_404(db, payment_id)
    return {"data": payment}


@router.api_route(
    "/{payment_id}",
    methods=["PUT", "PATCH"],
    response_model=DataResponse[PaymentResponse],
)
async def update_payment(
    payment_id: int,
    payment_data: PaymentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Update a payment."""
    payment = await payment_service.get_payment_or_404(db, payment_id)
    payment = await payment_service.update_payment(db, payment, payment_data)
    return {"data": payment, "message": "Payment updated successfully"}


@router.delete("/{payment_id}", response_model=MessageResponse)
async def delete_payment(
    payment_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Delete a payment."""
    payment = await payment_service.get_payment_or_404(db, payment_id)
    await payment_service.delete_payment(db, payment)
    return {"message": "Payment deleted successfully"}
