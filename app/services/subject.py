"""Subject service layer."""

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, guarded
from app.models.associations import class_student, student_subject, teacher_subject
from app.models.class_model import ClassModel, ClassStatus
from app.models.payment import Payment
from app.models.subject import Subject, SubjectStatus
from app.schemas.subject import SubjectCreate, SubjectUpdate
from app.services import policies
from app.services.associations import detach_all
from app.services.pagination import contains, paginate

NULLABLE_FIELDS = frozenset({"description_en", "description_ar", "fee_amount"})


async def get_subject_by_id(db: AsyncSession, subject_id: int) -> Subject | None:
    """Get a subject by ID."""
    result = await db.execute(select(Subject).where(Subject.id == subject_id))
    return result.scalar_one_or_none()


async def get_subject_or_404(db: AsyncSession, subject_id: int) -> Subject:
    subject = await get_subject_by_id(db, subject_id)
    if not subject:
        raise NotFoundError("SUBJECT_NOT_FOUND", "Subject not found")
    return subject


async def get_subjects(
    db: AsyncSession,
    page: int = 1,
    per_page: int = 15,
    search: str | None = None,
    grade_level: int | None = None,
    status: SubjectStatus | None = None,
) -> tuple[list[Subject], int]:
    """Get subjects with optional filters, ordered by English name."""
    query = select(Subject)

    if search:
        query = query.where(
            or_(
                contains(Subject.name_en, search),
                contains(Subject.name_ar, search),
                contains(Subject.code, search),
            )
        )
    if grade_level is not None:
        query = query.where(Subject.grade_level == grade_level)
    if status:
        query = query.where(Subject.status == status)

    query = query.order_by(Subject.name_en, Subject.id)
    return await paginate(db, query, page, per_page)


async def get_subjects_by_grade(db: AsyncSession, grade_level: int) -> list[Subject]:
    """Active subjects offered for a grade."""
    result = await db.execute(
        select(Subject)
        .where(Subject.grade_level == grade_level, Subject.status == SubjectStatus.ACTIVE)
        .order_by(Subject.name_en, Subject.id)
    )
    return list(result.scalars().all())


async def code_taken(db: AsyncSession, code: str, exclude_id: int | None = None) -> bool:
    query = select(Subject.id).where(Subject.code == code)
    if exclude_id is not None:
        query = query.where(Subject.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def create_subject(db: AsyncSession, subject_data: SubjectCreate) -> Subject:
    """Create a new subject."""
    policies.ensure_unique(await code_taken(db, subject_data.code), "DUPLICATE_CODE", "code")

    async with guarded(db, "CREATE_ERROR", "Failed to create subject"):
        subject = Subject(**subject_data.model_dump())
        db.add(subject)
        await db.commit()
        await db.refresh(subject)
    return subject


async def update_subject(
    db: AsyncSession, subject: Subject, subject_data: SubjectUpdate
) -> Subject:
    """Update a subject."""
    update_data = subject_data.model_dump(exclude_unset=True)
    policies.ensure_required_present(update_data, NULLABLE_FIELDS)
    if update_data.get("code"):
        policies.ensure_unique(
            await code_taken(db, update_data["code"], exclude_id=subject.id),
            "DUPLICATE_CODE",
            "code",
        )

    async with guarded(db, "UPDATE_ERROR", "Failed to update subject"):
        for field, value in update_data.items():
            setattr(subject, field, value)
        await db.commit()
        await db.refresh(subject)
    return subject


async def delete_subject(db: AsyncSession, subject: Subject) -> None:
    """Delete a subject that no class refers to; its payments keep no subject."""
    class_count = await db.scalar(
        select(func.count(ClassModel.id)).where(ClassModel.subject_id == subject.id)
    )
    policies.ensure_subject_deletable(class_count or 0)

    async with guarded(db, "DELETE_ERROR", "Failed to delete subject"):
        await detach_all(db, student_subject.c.subject_id, subject.id)
        await detach_all(db, teacher_subject.c.subject_id, subject.id)
        await db.execute(
            update(Payment).where(Payment.subject_id == subject.id).values(subject_id=None)
        )
        await db.delete(subject)
        await db.commit()


async def get_subject_statistics(db: AsyncSession, subject: Subject) -> dict:
    """Class, teacher and student counts for a subject."""
    total_classes = await db.scalar(
        select(func.count(ClassModel.id)).where(ClassModel.subject_id == subject.id)
    )
    active_classes = await db.scalar(
        select(func.count(ClassModel.id)).where(
            ClassModel.subject_id == subject.id,
            ClassModel.status == ClassStatus.ACTIVE,
        )
    )
    total_teachers = await db.scalar(
        select(func.count())
        .select_from(teacher_subject)
        .where(teacher_subject.c.subject_id == subject.id)
    )
    # Enrollments summed across the subject's classes
    total_students = await db.scalar(
        select(func.count())
        .select_from(class_student)
        .join(ClassModel, ClassModel.id == class_student.c.class_id)
        .where(ClassModel.subject_id == subject.id)
    )
    return {
        "total_classes": total_classes or 0,
        "active_classes": active_classes or 0,
        "total_teachers": total_teachers or 0,
        "total_students": total_students or 0,
    }
