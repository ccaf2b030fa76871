"""Student API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import Today
from app.core.database import get_db
from app.core.deps import CurrentUser
from app.schemas.common import DataResponse, last_page
from app.schemas.payment import StudentPaymentsData
from app.schemas.student import (
    StudentCreate,
    StudentListResponse,
    StudentResponse,
    StudentUpdate,
)
from app.schemas.student_detail import StudentClassesData, StudentDetail
from app.services import payment as payment_service
from app.services import student as student_service

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("", response_model=StudentListResponse)
async def list_students(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    today: Today,
    page: int = Query(1, ge=1),
    limit: int = Query(30, ge=1, le=100),
    search: str | None = None,
    grade: int | None = Query(None, ge=7, le=12),
    sort: str | None = Query(
        None,
        description="first_name, last_name, grade_level or joined_date; prefix with - for descending",
    ),
):
    """List students with their payment status for the current month."""
    students, total = await student_service.get_students(
        db, page=page, per_page=limit, search=search, grade=grade, sort=sort
    )
    items = await student_service.get_student_list_items(db, students, today)
    return {
        "data": items,
        "meta": {
            "current_page": page,
            "total_pages": last_page(total, limit),
            "total_count": total,
            "per_page": limit,
        },
    }


@router.post(
    "",
    response_model=DataResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    student_data: StudentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Create a new student."""
    student = await student_service.create_student(db, student_data)
    return {"data": student, "message": "Student created successfully"}


@router.get("/{student_id}", response_model=DataResponse[StudentDetail])
async def get_student(
    student_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    today: Today,
):
    """Get a student with classes, payments and payment status."""
    student = await student_service.get_student_or_404(db, student_id, detail=True)
    return {"data": student_service.student_detail(student, today)}


@router.api_route(
    "/{student_id}",
    methods=["PUT", "PATCH"],
    response_model=DataResponse[StudentResponse],
)
async def update_student(
    student_id: int,
    student_data: StudentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Update a student."""
    student = await student_service.get_student_or_404(db, student_id)
    student = await student_service.update_student(db, student, student_data)
    return {"data": student, "message": "Student updated successfully"}


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    student_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Delete a student together with memberships and payments."""
    student = await student_service.get_student_or_404(db, student_id)
    await student_service.delete_student(db, student)


@router.get("/{student_id}/payments", response_model=DataResponse[StudentPaymentsData])
async def get_student_payments(
    student_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Payment history of a student."""
    student = await student_service.get_student_or_404(db, student_id)
    return {"data": await payment_service.get_student_payments(db, student)}


@router.get("/{student_id}/classes", response_model=DataResponse[StudentClassesData])
async def get_student_classes(
    student_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Classes a student attends."""
    student = await student_service.get_student_or_404(db, student_id, detail=True)
    return {"data": student_service.student_classes(student)}
