"""Subject API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import CurrentUser
from app.models.subject import SubjectStatus
from app.schemas.common import DataResponse, ListResponse, MessageResponse, page_meta
from app.schemas.subject import (
    SubjectCreate,
    SubjectResponse,
    SubjectStatisticsData,
    SubjectUpdate,
)
from app.schemas.validators import GradeLevel
from app.services import subject as subject_service

router = APIRouter(prefix="/subjects", tags=["Subjects"])


@router.get("", response_model=ListResponse[SubjectResponse])
async def list_subjects(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=100),
    search: str | None = None,
    grade_level: int | None = Query(None, ge=7, le=12),
    status: SubjectStatus | None = None,
):
    """List subjects with optional search and filters."""
    subjects, total = await subject_service.get_subjects(
        db,
        page=page,
        per_page=per_page,
        search=search,
        grade_level=grade_level,
        status=status,
    )
    return {"data": subjects, "meta": page_meta(total, page, per_page)}


@router.post(
    "",
    response_model=DataResponse[SubjectResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_subject(
    subject_data: SubjectCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Create a new subject."""
    subject = await subject_service.create_subject(db, subject_data)
    return {"data": subject, "message": "Subject created successfully"}


@router.get("/grade/{grade}", response_model=DataResponse[list[SubjectResponse]])
async def list_subjects_by_grade(
    grade: GradeLevel,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Active subjects offered for a grade."""
    subjects = await subject_service.get_subjects_by_grade(db, grade)
    return {"data": subjects}


@router.get("/{subject_id}", response_model=DataResponse[SubjectResponse])
async def get_subject(
    subject_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Get a subject by ID."""
    subject = await subject_service.get_subject_or_404(db, subject_id)
    return {"data": subject}


@router.api_route(
    "/{subject_id}",
    methods=["PUT", "PATCH"],
    response_model=DataResponse[SubjectResponse],
)
async def update_subject(
    subject_id: int,
    subject_data: SubjectUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Update a subject."""
    subject = await subject_service.get_subject_or_404(db, subject_id)
    subject = await subject_service.update_subject(db, subject, subject_data)
    return {"data": subject, "message": "Subject updated successfully"}


@router.delete("/{subject_id}", response_model=MessageResponse)
async def delete_subject(
    subject_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Delete a subject that is not assigned to any class."""
    subject = await subject_service.get_subject_or_404(db, subject_id)
    await subject_service.delete_subject(db, subject)
    return {"message": "Subject deleted successfully"}


@router.get("/{subject_id}/statistics", response_model=DataResponse[SubjectStatisticsData])
async def get_subject_statistics(
    subject_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
):
    """Class, teacher and student counts for a subject."""
    subject = await subject_service.get_subject_or_404(db, subject_id)
    statistics = await subject_service.get_subject_statistics(db, subject)
    return {"data": {"subject": subject, "statistics": statistics}}
