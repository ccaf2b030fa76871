"""Class service layer: CRUD, enrollment and per-class statistics."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError, guarded
from app.models.associations import class_student
from app.models.class_model import ClassModel, ClassStatus
from app.models.payment import Payment
from app.models.student import Student
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.schemas.class_model import ClassCreate, ClassUpdate
from app.services import aggregation, policies
from app.services.associations import attach_link, detach_link, ensure_targets_exist, link_exists
from app.services.pagination import contains, paginate

CLASS_RELATIONS = (
    selectinload(ClassModel.subject),
    selectinload(ClassModel.teacher),
    selectinload(ClassModel.students),
)


async def get_class_by_id(db: AsyncSession, class_id: int) -> ClassModel | None:
    """Get a class with subject, teacher and students loaded."""
    result = await db.execute(
        select(ClassModel)
        .options(*CLASS_RELATIONS)
        .where(ClassModel.id == class_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_class_or_404(db: AsyncSession, class_id: int) -> ClassModel:
    school_class = await get_class_by_id(db, class_id)
    if not school_class:
        raise NotFoundError("CLASS_NOT_FOUND", "Class not found")
    return school_class


async def get_classes(
    db: AsyncSession,
    page: int = 1,
    per_page: int = 15,
    subject_id: int | None = None,
    teacher_id: int | None = None,
    grade_level: int | None = None,
    status: ClassStatus | None = None,
    search: str | None = None,
) -> tuple[list[ClassModel], int]:
    """Get classes with optional filters, newest first."""
    query = select(ClassModel).options(*CLASS_RELATIONS)

    if subject_id is not None:
        query = query.where(ClassModel.subject_id == subject_id)
    if teacher_id is not None:
        query = query.where(ClassModel.teacher_id == teacher_id)
    if grade_level is not None:
        query = query.where(ClassModel.grade_level == grade_level)
    if status:
        query = query.where(ClassModel.status == status)
    if search:
        query = query.where(contains(ClassModel.name, search))

    query = query.order_by(ClassModel.created_at.desc(), ClassModel.id.desc())
    return await paginate(db, query, page, per_page)


async def count_enrolled(db: AsyncSession, class_id: int) -> int:
    result = await db.scalar(
        select(func.count()).select_from(class_student).where(class_student.c.class_id == class_id)
    )
    return result or 0


async def _check_references(db: AsyncSession, subject_id: int | None, teacher_id: int | None) -> None:
    if subject_id is not None:
        await ensure_targets_exist(db, Subject.id, [subject_id], "subject_id")
    if teacher_id is not None:
        await ensure_targets_exist(db, Teacher.id, [teacher_id], "teacher_id")


async def create_class(db: AsyncSession, class_data: ClassCreate) -> ClassModel:
    """Create a new class."""
    await _check_references(db, class_data.subject_id, class_data.teacher_id)
    policies.ensure_valid_schedule(class_data.start_time, class_data.end_time)

    async with guarded(db, "CREATE_ERROR", "Failed to create class"):
        data = class_data.model_dump()
        data["schedule_days"] = [day.value for day in class_data.schedule_days]
        school_class = ClassModel(**data)
        db.add(school_class)
        await db.commit()
    return await get_class_by_id(db, school_class.id)


async def update_class(
    db: AsyncSession, school_class: ClassModel, class_data: ClassUpdate
) -> ClassModel:
    """Update a class; the resulting schedule must still end after it starts."""
    update_data = class_data.model_dump(exclude_unset=True)
    policies.ensure_required_present(update_data)
    await _check_references(db, update_data.get("subject_id"), update_data.get("teacher_id"))
    if "start_time" in update_data or "end_time" in update_data:
        policies.ensure_valid_schedule(
            update_data.get("start_time") or school_class.start_time,
            update_data.get("end_time") or school_class.end_time,
        )
    if update_data.get("schedule_days") is not None:
        update_data["schedule_days"] = [
            aggregation.enum_value(day) for day in update_data["schedule_days"]
        ]

    async with guarded(db, "UPDATE_ERROR", "Failed to update class"):
        for field, value in update_data.items():
            setattr(school_class, field, value)
        await db.commit()
    return await get_class_by_id(db, school_class.id)


async def delete_class(db: AsyncSession, school_class: ClassModel) -> None:
    """Delete a class with no enrolled students and no payments."""
    payment_count = await db.scalar(
        select(func.count()).select_from(Payment).where(Payment.class_id == school_class.id)
    )
    policies.ensure_class_deletable(await count_enrolled(db, school_class.id), payment_count)

    async with guarded(db, "DELETE_ERROR", "Failed to delete class"):
        await db.delete(school_class)
        await db.commit()


async def enroll_student(db: AsyncSession, class_id: int, student_id: int) -> ClassModel:
    """Add a student to a class.

    The class row is locked for the duration of the check-then-attach so
    two concurrent enrollments cannot both take the last seat.
    """
    await ensure_targets_exist(db, Student.id, [student_id], "student_id")

    async with guarded(db, "ENROLLMENT_ERROR", "Failed to add student to class"):
        result = await db.execute(
            select(ClassModel).where(ClassModel.id == class_id).with_for_update()
        )
        school_class = result.scalar_one_or_none()
        if not school_class:
            raise NotFoundError("CLASS_NOT_FOUND", "Class not found")

        already_enrolled = await link_exists(
            db, class_student.c.class_id, class_id, class_student.c.student_id, student_id
        )
        policies.ensure_can_enroll(
            already_enrolled, await count_enrolled(db, class_id), school_class.max_students
        )
        await attach_link(
            db, class_student.c.class_id, class_id, class_student.c.student_id, student_id
        )
        await db.commit()
    return await get_class_by_id(db, class_id)


async def remove_student(db: AsyncSession, school_class: ClassModel, student_id: int) -> ClassModel:
    """Remove a student from a class; removing a non-member is a no-op."""
    await ensure_targets_exist(db, Student.id, [student_id], "student_id")

    async with guarded(db, "REMOVAL_ERROR", "Failed to remove student from class"):
        await detach_link(
            db, class_student.c.class_id, school_class.id, class_student.c.student_id, student_id
        )
        await db.commit()
    return await get_class_by_id(db, school_class.id)


def get_class_statistics(school_class: ClassModel) -> dict:
    """Seat usage and attendance of a class loaded with its students."""
    return aggregation.class_statistics(
        len(school_class.students),
        school_class.max_students,
        [student.attendance_rate for student in school_class.students],
    )


async def get_class_names(db: AsyncSession, class_ids: set[int | None]) -> dict[int, str]:
    ids = [class_id for class_id in class_ids if class_id is not None]
    if not ids:
        return {}
    result = await db.execute(select(ClassModel.id, ClassModel.name).where(ClassModel.id.in_(ids)))
    return dict(result.all())

