"""Student service layer."""

from collections import defaultdict
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError, guarded
from app.models.associations import class_student, student_subject
from app.models.payment import Payment, PaymentStatus
from app.models.student import Student
from app.models.subject import Subject
from app.schemas.student import StudentCreate, StudentResponse, StudentUpdate
from app.services import aggregation, policies
from app.services.associations import detach_all, ensure_targets_exist, sync_links
from app.services.pagination import contains, paginate

NULLABLE_FIELDS = frozenset({"notes"})

SORTABLE_FIELDS = {
    "first_name": Student.first_name,
    "last_name": Student.last_name,
    "grade_level": Student.grade_level,
    "joined_date": Student.joined_date,
}


def sort_clause(sort: str | None):
    """Translate ``field`` / ``-field`` into an ORDER BY; newest first otherwise."""
    if sort:
        descending = sort.startswith("-")
        column = SORTABLE_FIELDS.get(sort.lstrip("-"))
        if column is not None:
            return (column.desc() if descending else column.asc(), Student.id)
    return (Student.created_at.desc(), Student.id.desc())


async def get_student_by_id(
    db: AsyncSession, student_id: int, detail: bool = False
) -> Student | None:
    """Get a student with subjects (and classes/payments for ``detail``) loaded."""
    options = [selectinload(Student.subjects)]
    if detail:
        options += [selectinload(Student.classes), selectinload(Student.payments)]
    result = await db.execute(
        select(Student)
        .options(*options)
        .where(Student.id == student_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_student_or_404(
    db: AsyncSession, student_id: int, detail: bool = False
) -> Student:
    student = await get_student_by_id(db, student_id, detail=detail)
    if not student:
        raise NotFoundError("STUDENT_NOT_FOUND", "Student not found")
    return student


async def get_students(
    db: AsyncSession,
    page: int = 1,
    per_page: int = 30,
    search: str | None = None,
    grade: int | None = None,
    sort: str | None = None,
) -> tuple[list[Student], int]:
    """Get students with optional search, grade filter and sorting."""
    query = select(Student).options(selectinload(Student.subjects))

    if search:
        query = query.where(
            or_(
                contains(Student.first_name, search),
                contains(Student.last_name, search),
                contains(Student.phone, search),
            )
        )
    if grade is not None:
        query = query.where(Student.grade_level == grade)

    query = query.order_by(*sort_clause(sort))
    return await paginate(db, query, page, per_page)


async def get_month_payments(
    db: AsyncSession, student_ids: list[int], today: date
) -> dict[int, list[Payment]]:
    """Completed payments billed for ``today``'s month, grouped by student."""
    grouped: dict[int, list[Payment]] = defaultdict(list)
    if not student_ids:
        return grouped
    result = await db.execute(
        select(Payment).where(
            Payment.student_id.in_(student_ids),
            Payment.status == PaymentStatus.COMPLETED,
            Payment.year == today.year,
            Payment.month == today.month,
        )
    )
    for payment in result.scalars().all():
        grouped[payment.student_id].append(payment)
    return grouped


def payment_overview(student: Student, payments: list, today: date) -> dict:
    """Subject payment counts and status of a student for ``today``'s month."""
    subject_ids = [subject.id for subject in student.subjects]
    total = len(subject_ids)
    paid = aggregation.count_paid_subjects(subject_ids, payments, today)
    return {
        "payment_status": aggregation.payment_status(total, paid),
        "total_subjects": total,
        "paid_subjects": paid,
        "unpaid_subjects": total - paid,
    }


def list_item(student: Student, payments: list, today: date) -> dict:
    """Student fields merged with its payment overview."""
    return {
        **StudentResponse.model_validate(student).model_dump(),
        **payment_overview(student, payments, today),
    }


async def get_student_list_items(
    db: AsyncSession, students: list[Student], today: date
) -> list[dict]:
    payments = await get_month_payments(db, [s.id for s in students], today)
    return [list_item(student, payments[student.id], today) for student in students]


def student_detail(student: Student, today: date) -> dict:
    """Detail view: list fields plus classes, payments and monthly totals.

    ``student`` must be loaded with ``detail=True``.
    """
    payments = sorted(student.payments, key=lambda p: (p.payment_date, p.id), reverse=True)
    return {
        **list_item(student, student.payments, today),
        "classes": student.classes,
        "payments": payments,
        "monthly_payments": aggregation.monthly_payments(student.payments),
    }


async def phone_taken(db: AsyncSession, phone: str, exclude_id: int | None = None) -> bool:
    query = select(Student.id).where(Student.phone == phone)
    if exclude_id is not None:
        query = query.where(Student.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def create_student(db: AsyncSession, student_data: StudentCreate) -> Student:
    """Create a student and link its subjects in one transaction."""
    policies.ensure_unique(await phone_taken(db, student_data.phone), "DUPLICATE_PHONE", "phone")
    if student_data.subjects:
        await ensure_targets_exist(db, Subject.id, student_data.subjects, "subjects")

    async with guarded(db, "CREATE_ERROR", "Failed to create student"):
        student = Student(**student_data.model_dump(exclude={"subjects"}))
        db.add(student)
        await db.flush()
        if student_data.subjects:
            await sync_links(
                db,
                student_subject.c.student_id,
                student.id,
                student_subject.c.subject_id,
                student_data.subjects,
            )
        await db.commit()
    return await get_student_by_id(db, student.id)


async def update_student(
    db: AsyncSession, student: Student, student_data: StudentUpdate
) -> Student:
    """Update a student; ``subjects``, when given, replaces the subject set."""
    update_data = student_data.model_dump(exclude_unset=True)
    policies.ensure_required_present(update_data, NULLABLE_FIELDS)
    subject_ids = update_data.pop("subjects", None)

    if update_data.get("phone"):
        policies.ensure_unique(
            await phone_taken(db, update_data["phone"], exclude_id=student.id),
            "DUPLICATE_PHONE",
            "phone",
        )
    if subject_ids is not None:
        await ensure_targets_exist(db, Subject.id, subject_ids, "subjects")

    async with guarded(db, "UPDATE_ERROR", "Failed to update student"):
        for field, value in update_data.items():
            setattr(student, field, value)
        if subject_ids is not None:
            await sync_links(
                db,
                student_subject.c.student_id,
                student.id,
                student_subject.c.subject_id,
                subject_ids,
            )
        await db.commit()
    return await get_student_by_id(db, student.id)


async def delete_student(db: AsyncSession, student: Student) -> None:
    """Delete a student with its memberships and payments."""
    async with guarded(db, "DELETE_ERROR", "Failed to delete student"):
        await detach_all(db, student_subject.c.student_id, student.id)
        await detach_all(db, class_student.c.student_id, student.id)
        await db.execute(delete(Payment).where(Payment.student_id == student.id))
        await db.delete(student)
        await db.commit()


def student_classes(student: Student) -> dict:
    """Classes a student attends and their combined monthly fee.

    ``student`` must be loaded with ``detail=True``.
    """
    classes = student.classes
    total = sum((aggregation.to_decimal(c.monthly_fee) for c in classes), Decimal("0"))
    return {"student": student, "classes": classes, "total_monthly_fees": total}
