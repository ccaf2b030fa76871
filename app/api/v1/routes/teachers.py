"""Teacher API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import CurrentUser
from app.models.teacher import TeacherStatus
from app.schemas.common import DataResponse, ListResponse, MessageResponse, page_meta
from app.schemas.teacher import (
    TeacherCreate,
    TeacherPaymentCreate,
    TeacherPaymentResponse,
    TeacherResponse,
    TeacherStatisticsData,
    TeacherUpdate,
)
from app.services import teacher as teacher_service

router = APIRouter(prefix="/teachers", tags=["Teachers"])


@router.get("", response_model=ListResponse[TeacherResponse])
async def list_teachers(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    search: str | None = None,
    subject_id: int | None = None,
    status: TeacherStatus | None = None,
):
    """List teachers with optional search and filters."""
    teachers, total = await teacher_service.get_teachers(
        db,
        page=page,
        per_page=per_page,
        search=search,
        subject_id=subject_id,
        status=status,
    )
    return {"data": teachers, "meta": page_meta(total, page, per_page)}


@router.post(
    "",
    response_model=DataResponse[TeacherResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_teacher(
    teacher_data: TeacherCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Create a new teacher."""
    teacher = await teacher_service.create_teacher(db, teacher_data)
    return {"data": teacher, "message": "Teacher created successfully"}


@router.get("/{teacher_id}", response_model=DataResponse[TeacherResponse])
async def get_teacher(
    teacher_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Get a teacher by ID."""
    teacher = await teacher_service.get_teacher_or_404(db, teacher_id)
    return {"data": teacher}


@router.api_route(
    "/{teacher_id}",
    methods=["PUT", "PATCH"],
    response_model=DataResponse[TeacherResponse],
)
async def update_teacher(
    teacher_id: int,
    teacher_data: TeacherUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Update a teacher."""
    teacher = await teacher_service.get_teacher_or_404(db, teacher_id)
    teacher = await teacher_service.update_teacher(db, teacher, teacher_data)
    return {"data": teacher, "message": "Teacher updated successfully"}


@router.delete("/{teacher_id}", response_model=MessageResponse)
async def delete_teacher(
    teacher_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Delete a teacher that no longer runs any class."""
    teacher = await teacher_service.get_teacher_or_404(db, teacher_id)
    await teacher_service.delete_teacher(db, teacher)
    return {"message": "Teacher deleted successfully"}


@router.get("/{teacher_id}/statistics", response_model=DataResponse[TeacherStatisticsData])
async def get_teacher_statistics(
    teacher_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Class, student and salary figures for a teacher."""
    teacher = await teacher_service.get_teacher_or_404(db, teacher_id)
    statistics = await teacher_service.get_teacher_statistics(db, teacher)
    return {"data": {"teacher": teacher, "statistics": statistics}}


@router.get("/{teacher_id}/payments", response_model=DataResponse[list[TeacherPaymentResponse]])
async def list_teacher_payments(
    teacher_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Salary payments made to a teacher."""
    teacher = await teacher_service.get_teacher_or_404(db, teacher_id)
    payments = await teacher_service.get_teacher_payments(db, teacher)
    return {"data": payments}


@router.post(
    "/{teacher_id}/payments",
    response_model=DataResponse[TeacherPaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_teacher_payment(
    teacher_id: int,
    payment_data: TeacherPaymentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Record a monthly salary payment."""
    teacher = await teacher_service.get_teacher_or_404(db, teacher_id)
    payment = await teacher_service.create_teacher_payment(db, teacher, payment_data)
    return {"data": payment, "message": "Teacher payment recorded successfully"}
