"""Class API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import CurrentUser
from app.models.class_model import ClassStatus
from app.schemas.class_model import (
    ClassCreate,
    ClassResponse,
    ClassStatisticsData,
    ClassUpdate,
    EnrollmentRequest,
)
from app.schemas.common import DataResponse, ListResponse, MessageResponse, page_meta
from app.services import class_model as class_service

router = APIRouter(prefix="/classes", tags=["Classes"])


@router.get("", response_model=ListResponse[ClassResponse])
async def list_classes(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    subject_id: int | None = None,
    teacher_id: int | None = None,
    grade_level: int | None = Query(None, ge=7, le=12),
    status: ClassStatus | None = None,
    search: str | None = None,
):
    """List classes with optional filters."""
    classes, total = await class_service.get_classes(
        db,
        page=page,
        per_page=per_page,
        subject_id=subject_id,
        teacher_id=teacher_id,
        grade_level=grade_level,
        status=status,
        search=search,
    )
    return {"data": classes, "meta": page_meta(total, page, per_page)}


@router.post(
    "",
    response_model=DataResponse[ClassResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_class(
    class_data: ClassCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Create a new class."""
    school_class = await class_service.create_class(db, class_data)
    return {"data": school_class, "message": "Class created successfully"}


@router.get("/{class_id}", response_model=DataResponse[ClassResponse])
async def get_class(
    class_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Get a class with its subject, teacher and students."""
    school_class = await class_service.get_class_or_404(db, class_id)
    return {"data": school_class}


@router.api_route(
    "/{class_id}",
    methods=["PUT", "PATCH"],
    response_model=DataResponse[ClassResponse],
)
async def update_class(
    class_id: int,
    class_data: ClassUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Update a class."""
    school_class = await class_service.get_class_or_404(db, class_id)
    school_class = await class_service.update_class(db, school_class, class_data)
    return {"data": school_class, "message": "Class updated successfully"}


@router.delete("/{class_id}", response_model=MessageResponse)
async def delete_class(
    class_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Delete a class that has no enrolled students."""
    school_class = await class_service.get_class_or_404(db, class_id)
    await class_service.delete_class(db, school_class)
    return {"message": "Class deleted successfully"}


@router.post("/{class_id}/students", response_model=DataResponse[ClassResponse])
async def add_student(
    class_id: int,
    enrollment: EnrollmentRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Enroll a student in a class."""
    await class_service.get_class_or_404(db, class_id)
    school_class = await class_service.enroll_student(db, class_id, enrollment.student_id)
    return {"data": school_class, "message": "Student added to class successfully"}


@router.delete("/{class_id}/students", response_model=DataResponse[ClassResponse])
async def remove_student(
    class_id: int,
    enrollment: EnrollmentRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Remove a student from a class."""
    school_class = await class_service.get_class_or_404(db, class_id)
    school_class = await class_service.remove_student(db, school_class, enrollment.student_id)
    return {"data": school_class, "message": "Student removed from class successfully"}


@router.get("/{class_id}/statistics", response_model=DataResponse[ClassStatisticsData])
async def get_class_statistics(
    class_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Seat usage and attendance for a class."""
    school_class = await class_service.get_class_or_404(db, class_id)
    return {
        "data": {
            "class_": school_class,
            "statistics": class_service.get_class_statistics(school_class),
        }
    }
