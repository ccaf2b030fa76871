"""Teacher service layer."""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError, guarded
from app.models.associations import class_student, teacher_subject
from app.models.class_model import ClassModel, ClassStatus
from app.models.subject import Subject
from app.models.teacher import Teacher, TeacherPayment, TeacherStatus
from app.schemas.teacher import TeacherCreate, TeacherPaymentCreate, TeacherUpdate
from app.services import policies
from app.services.associations import detach_all, ensure_targets_exist, sync_links
from app.services.pagination import contains, paginate

NULLABLE_FIELDS = frozenset({"address", "monthly_percentage"})


async def get_teacher_by_id(db: AsyncSession, teacher_id: int) -> Teacher | None:
    """Get a teacher with subjects loaded."""
    result = await db.execute(
        select(Teacher)
        .options(selectinload(Teacher.subjects))
        .where(Teacher.id == teacher_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_teacher_or_404(db: AsyncSession, teacher_id: int) -> Teacher:
    teacher = await get_teacher_by_id(db, teacher_id)
    if not teacher:
        raise NotFoundError("TEACHER_NOT_FOUND", "Teacher not found")
    return teacher


async def get_teachers(
    db: AsyncSession,
    page: int = 1,
    per_page: int = 15,
    search: str | None = None,
    subject_id: int | None = None,
    status: TeacherStatus | None = None,
) -> tuple[list[Teacher], int]:
    """Get teachers with optional filters, newest first."""
    query = select(Teacher).options(selectinload(Teacher.subjects))

    if search:
        query = query.where(
            or_(
                contains(Teacher.first_name, search),
                contains(Teacher.last_name, search),
                contains(Teacher.email, search),
                contains(Teacher.phone, search),
            )
        )
    if subject_id is not None:
        query = query.where(
            Teacher.id.in_(
                select(teacher_subject.c.teacher_id).where(
                    teacher_subject.c.subject_id == subject_id
                )
            )
        )
    if status:
        query = query.where(Teacher.status == status)

    query = query.order_by(Teacher.created_at.desc(), Teacher.id.desc())
    return await paginate(db, query, page, per_page)


async def email_taken(db: AsyncSession, email: str, exclude_id: int | None = None) -> bool:
    query = select(Teacher.id).where(Teacher.email == email)
    if exclude_id is not None:
        query = query.where(Teacher.id != exclude_id)
    result = await db.execute(query)
    return result.first() is not None


async def create_teacher(db: AsyncSession, teacher_data: TeacherCreate) -> Teacher:
    """Create a teacher and link its subjects in one transaction."""
    policies.ensure_unique(await email_taken(db, teacher_data.email), "DUPLICATE_EMAIL", "email")
    await ensure_targets_exist(db, Subject.id, teacher_data.subjects, "subjects")

    async with guarded(db, "CREATE_ERROR", "Failed to create teacher"):
        teacher = Teacher(**teacher_data.model_dump(exclude={"subjects"}))
        db.add(teacher)
        await db.flush()
        await sync_links(
            db,
            teacher_subject.c.teacher_id,
            teacher.id,
            teacher_subject.c.subject_id,
            teacher_data.subjects,
        )
        await db.commit()
    return await get_teacher_by_id(db, teacher.id)


async def update_teacher(
    db: AsyncSession, teacher: Teacher, teacher_data: TeacherUpdate
) -> Teacher:
    """Update a teacher; ``subjects``, when given, replaces the subject set."""
    update_data = teacher_data.model_dump(exclude_unset=True)
    policies.ensure_required_present(update_data, NULLABLE_FIELDS)
    subject_ids = update_data.pop("subjects", None)

    if update_data.get("email"):
        policies.ensure_unique(
            await email_taken(db, update_data["email"], exclude_id=teacher.id),
            "DUPLICATE_EMAIL",
            "email",
        )
    if subject_ids is not None:
        await ensure_targets_exist(db, Subject.id, subject_ids, "subjects")

    async with guarded(db, "UPDATE_ERROR", "Failed to update teacher"):
        for field, value in update_data.items():
            setattr(teacher, field, value)
        if subject_ids is not None:
            await sync_links(
                db,
                teacher_subject.c.teacher_id,
                teacher.id,
                teacher_subject.c.subject_id,
                subject_ids,
            )
        await db.commit()
    return await get_teacher_by_id(db, teacher.id)


async def delete_teacher(db: AsyncSession, teacher: Teacher) -> None:
    """Delete a teacher with no classes, along with its subject links and payments."""
    class_count = await db.scalar(
        select(func.count(ClassModel.id)).where(ClassModel.teacher_id == teacher.id)
    )
    policies.ensure_teacher_deletable(class_count or 0)

    async with guarded(db, "DELETE_ERROR", "Failed to delete teacher"):
        await detach_all(db, teacher_subject.c.teacher_id, teacher.id)
        await detach_all(db, TeacherPayment.__table__.c.teacher_id, teacher.id)
        await db.delete(teacher)
        await db.commit()


async def get_teacher_statistics(db: AsyncSession, teacher: Teacher) -> dict:
    """Class and student counts plus salary paid to date."""
    total_classes = await db.scalar(
        select(func.count(ClassModel.id)).where(ClassModel.teacher_id == teacher.id)
    )
    active_classes = await db.scalar(
        select(func.count(ClassModel.id)).where(
            ClassModel.teacher_id == teacher.id,
            ClassModel.status == ClassStatus.ACTIVE,
        )
    )
    total_students = await db.scalar(
        select(func.count())
        .select_from(class_student)
        .join(ClassModel, ClassModel.id == class_student.c.class_id)
        .where(ClassModel.teacher_id == teacher.id)
    )
    total_paid = await db.scalar(
        select(func.coalesce(func.sum(TeacherPayment.amount), 0)).where(
            TeacherPayment.teacher_id == teacher.id
        )
    )
    return {
        "total_classes": total_classes or 0,
        "active_classes": active_classes or 0,
        "total_students": total_students or 0,
        "total_paid": total_paid or 0,
    }


# ============== Teacher Payments ==============


async def get_teacher_payments(db: AsyncSession, teacher: Teacher) -> list[TeacherPayment]:
    """Salary payments of a teacher, latest period first."""
    result = await db.execute(
        select(TeacherPayment)
        .where(TeacherPayment.teacher_id == teacher.id)
        .order_by(TeacherPayment.year.desc(), TeacherPayment.month.desc())
    )
    return list(result.scalars().all())


async def create_teacher_payment(
    db: AsyncSession, teacher: Teacher, payment_data: TeacherPaymentCreate
) -> TeacherPayment:
    """Record one salary payment per teacher and month."""
    result = await db.execute(
        select(TeacherPayment.id).where(
            TeacherPayment.teacher_id == teacher.id,
            TeacherPayment.month == payment_data.month,
            TeacherPayment.year == payment_data.year,
        )
    )
    policies.ensure_teacher_payment_absent(result.first() is not None)

    async with guarded(db, "CREATE_ERROR", "Failed to create teacher payment"):
        payment = TeacherPayment(teacher_id=teacher.id, **payment_data.model_dump())
        db.add(payment)
        await db.commit()
        await db.refresh(payment)
    return payment
