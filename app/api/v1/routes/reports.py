"""Report API routes."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.deps import CurrentUser
from app.core.errors import ValidationFailed
from app.schemas.common import DataResponse
from app.schemas.report import (
    AttendanceReport,
    ClassPerformanceReport,
    EnrollmentReport,
    FinancialSummary,
    TeacherPerformanceReport,
)
from app.services import report as report_service

router = APIRouter(prefix="/reports", tags=["Reports"])


# ============== Helper Functions ==============


class ReportPeriodQuery:
    """Required ``start_date``/``end_date`` query pair, end not before start."""

    def __init__(
        self,
        start_date: date = Query(..., description="Start date"),
        end_date: date = Query(..., description="End date"),
    ):
        if end_date < start_date:
            raise ValidationFailed(
                {"end_date": ["The end date must be a date after or equal to start date"]}
            )
        self.start_date = start_date
        self.end_date = end_date


Period = Annotated[ReportPeriodQuery, Depends()]


# ============== Endpoints ==============


@router.get("/financial-summary", response_model=DataResponse[FinancialSummary])
async def get_financial_summary(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    period: Period,
):
    """Completed revenue in the period by payment method, class and month."""
    report = await report_service.get_financial_summary(db, period.start_date, period.end_date)
    return {"data": report}


@router.get("/student-enrollment", response_model=DataResponse[EnrollmentReport])
async def get_student_enrollment(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    period: Period,
):
    """Student totals, new registrations and grade/status breakdowns."""
    report = await report_service.get_enrollment_report(db, period.start_date, period.end_date)
    return {"data": report}


@router.get("/class-performance", response_model=DataResponse[ClassPerformanceReport])
async def get_class_performance(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    period: Period,
):
    """Class totals, breakdowns and capacity utilization."""
    report = await report_service.get_class_performance_report(
        db, period.start_date, period.end_date
    )
    return {"data": report}


@router.get("/teacher-performance", response_model=DataResponse[TeacherPerformanceReport])
async def get_teacher_performance(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    period: Period,
):
    """Teacher totals and the teachers who opened the most classes."""
    report = await report_service.get_teacher_performance_report(
        db, period.start_date, period.end_date
    )
    return {"data": report}


@router.get("/attendance", response_model=DataResponse[AttendanceReport])
async def get_attendance(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: CurrentUser,
    period: Period,
):
    """Attendance buckets, per-grade averages and students with poor attendance."""
    report = await report_service.get_attendance_report(db, period.start_date, period.end_date)
    return {"data": report}
