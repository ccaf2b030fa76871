"""Report service - fetches rows for a period and hands them to the aggregation layer."""

from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import guarded
from app.models.associations import class_student, teacher_subject
from app.models.class_model import ClassModel
from app.models.payment import Payment, PaymentStatus
from app.models.student import Student
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.services import aggregation
from app.services.class_model import get_class_names


def _created_between(column, start_date: date, end_date: date):
    """``created_at`` falls on a day in [start_date, end_date]."""
    return (
        column >= datetime.combine(start_date, time.min, tzinfo=timezone.utc),
        column < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


def _period(start_date: date, end_date: date) -> dict:
    return {"start_date": start_date, "end_date": end_date}


async def get_financial_summary(db: AsyncSession, start_date: date, end_date: date) -> dict:
    """Completed revenue in the period by method, class and month."""
    async with guarded(db, "REPORT_ERROR", "Failed to generate financial report"):
        result = await db.execute(
            select(
                Payment.amount,
                Payment.status,
                Payment.payment_method,
                Payment.payment_date,
                Payment.class_id,
            ).where(
                Payment.status == PaymentStatus.COMPLETED,
                Payment.payment_date >= start_date,
                Payment.payment_date <= end_date,
            )
        )
        payments = result.all()
        class_names = await get_class_names(db, {p.class_id for p in payments})

    summary = aggregation.financial_summary(payments, start_date, end_date, class_names)
    return {"period": _period(start_date, end_date), **summary}


async def get_enrollment_report(db: AsyncSession, start_date: date, end_date: date) -> dict:
    """Student totals, new registrations and grade/status breakdowns."""
    async with guarded(db, "REPORT_ERROR", "Failed to generate student enrollment report"):
        result = await db.execute(select(Student.grade_level, Student.status, Student.created_at))
        students = result.all()
        new_result = await db.execute(
            select(Student.created_at).where(*_created_between(Student.created_at, start_date, end_date))
        )
        new_dates = list(new_result.scalars().all())

    return {
        "period": _period(start_date, end_date),
        "total_students": len(students),
        "new_students": len(new_dates),
        "students_by_grade": aggregation.count_by((s.grade_level for s in students), "grade_level"),
        "students_by_status": aggregation.count_by((s.status for s in students), "status"),
        "enrollment_trend": aggregation.monthly_counts(new_dates),
    }


async def get_class_performance_report(
    db: AsyncSession, start_date: date, end_date: date
) -> dict:
    """Class totals, status and subject breakdowns and the fullest classes."""
    async with guarded(db, "REPORT_ERROR", "Failed to generate class performance report"):
        enrolled = (
            select(func.count())
            .select_from(class_student)
            .where(class_student.c.class_id == ClassModel.id)
            .correlate(ClassModel)
            .scalar_subquery()
        )
        result = await db.execute(
            select(
                ClassModel.id,
                ClassModel.name,
                ClassModel.max_students,
                ClassModel.status,
                ClassModel.subject_id,
                Subject.name_en.label("subject_name"),
                enrolled.label("current_students"),
            ).join(Subject, Subject.id == ClassModel.subject_id)
        )
        classes = result.all()
        new_classes = await db.scalar(
            select(func.count(ClassModel.id)).where(
                *_created_between(ClassModel.created_at, start_date, end_date)
            )
        )

    return {
        "period": _period(start_date, end_date),
        "total_classes": len(classes),
        "new_classes": new_classes or 0,
        "classes_by_status": aggregation.count_by((c.status for c in classes), "status"),
        "classes_by_subject": aggregation.subject_distribution(classes, count_key="count"),
        "capacity_utilization": aggregation.capacity_utilization(classes),
    }


async def get_teacher_performance_report(
    db: AsyncSession, start_date: date, end_date: date
) -> dict:
    """Teacher totals and the teachers who opened the most classes in the period."""
    async with guarded(db, "REPORT_ERROR", "Failed to generate teacher performance report"):
        result = await db.execute(
            select(Teacher).options(selectinload(Teacher.subjects)).order_by(Teacher.id)
        )
        teachers = list(result.scalars().all())

        counts_result = await db.execute(
            select(ClassModel.teacher_id, func.count(ClassModel.id))
            .where(*_created_between(ClassModel.created_at, start_date, end_date))
            .group_by(ClassModel.teacher_id)
        )
        class_counts = dict(counts_result.all())

        links_result = await db.execute(
            select(teacher_subject.c.subject_id, Subject.name_en.label("subject_name")).join(
                Subject, Subject.id == teacher_subject.c.subject_id
            )
        )
        links = links_result.all()
        new_teachers = await db.scalar(
            select(func.count(Teacher.id)).where(
                *_created_between(Teacher.created_at, start_date, end_date)
            )
        )

    loads = [
        aggregation.TeacherLoad(
            id=teacher.id,
            first_name=teacher.first_name,
            last_name=teacher.last_name,
            classes_count=class_counts.get(teacher.id, 0),
            subjects=[subject.name_en for subject in teacher.subjects],
        )
        for teacher in teachers
    ]
    return {
        "period": _period(start_date, end_date),
        "total_teachers": len(teachers),
        "new_teachers": new_teachers or 0,
        "teachers_by_status": aggregation.count_by((t.status for t in teachers), "status"),
        "top_teachers": aggregation.top_teachers(loads),
        "teacher_subject_distribution": aggregation.subject_distribution(links),
    }


async def get_attendance_report(db: AsyncSession, start_date: date, end_date: date) -> dict:
    """Attendance buckets, per-grade averages and the students falling behind."""
    async with guarded(db, "REPORT_ERROR", "Failed to generate attendance report"):
        result = await db.execute(
            select(
                Student.id,
                Student.first_name,
                Student.last_name,
                Student.grade_level,
                Student.attendance_rate,
            )
        )
        students = result.all()

    return {
        "period": _period(start_date, end_date),
        "overall_attendance": aggregation.attendance_summary(
            s.attendance_rate for s in students
        ),
        "attendance_by_grade": aggregation.attendance_by_grade(students),
        "poor_attendance_students": aggregation.poor_attendance_students(students),
    }
