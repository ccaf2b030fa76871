"""Business rules shared by every handler that can trip them.

Each check is a plain function over values the caller already fetched and
raises ``BusinessRuleError`` (or ``ValidationFailed``) before any write.
"""

from datetime import time

from app.core.errors import BusinessRuleError, ValidationFailed


def ensure_class_deletable(enrolled_count: int, payment_count: int = 0) -> None:
    """A class with enrolled students or recorded payments cannot be deleted."""
    if enrolled_count > 0:
        raise BusinessRuleError(
            "CLASS_HAS_STUDENTS",
            "Cannot delete class that has enrolled students",
        )
    if payment_count > 0:
        raise BusinessRuleError(
            "CLASS_HAS_PAYMENTS",
            "Cannot delete class that has recorded payments",
        )


def ensure_subject_deletable(class_count: int) -> None:
    """A subject assigned to any class cannot be deleted."""
    if class_count > 0:
        raise BusinessRuleError(
            "SUBJECT_IN_USE",
            "Cannot delete subject that is assigned to classes",
        )


def ensure_teacher_deletable(class_count: int) -> None:
    """A teacher still running classes cannot be deleted."""
    if class_count > 0:
        raise BusinessRuleError(
            "TEACHER_HAS_CLASSES",
            "Cannot delete teacher that is assigned to classes",
        )


def ensure_can_enroll(already_enrolled: bool, enrolled_count: int, max_students: int) -> None:
    """Reject duplicate enrollment first, then enrollment into a full class."""
    if already_enrolled:
        raise BusinessRuleError(
            "STUDENT_ALREADY_ENROLLED",
            "Student is already enrolled in this class",
        )
    if enrolled_count >= max_students:
        raise BusinessRuleError(
            "CLASS_FULL",
            "Class has reached maximum capacity",
        )


def ensure_valid_schedule(start_time: time, end_time: time) -> None:
    if end_time <= start_time:
        raise ValidationFailed({"end_time": ["End time must be after start time"]})


def ensure_unique(exists: bool, code: str, field: str) -> None:
    """Raise ``code`` when a value that must be unique is already taken."""
    if exists:
        raise BusinessRuleError(
            code,
            f"The {field.replace('_', ' ')} has already been taken",
            {field: [f"The {field.replace('_', ' ')} has already been taken"]},
        )


def ensure_teacher_payment_absent(exists: bool) -> None:
    """A teacher is paid at most once per month."""
    if exists:
        raise BusinessRuleError(
            "TEACHER_PAYMENT_EXISTS",
            "Teacher has already been paid for this month",
        )


def ensure_required_present(update_data: dict, nullable: frozenset[str] = frozenset()) -> None:
    """Reject explicit nulls sent for fields that must always hold a value."""
    missing = sorted(
        field for field, value in update_data.items() if value is None and field not in nullable
    )
    if missing:
        raise ValidationFailed(
            {field: [f"The {field.replace('_', ' ')} field is required"] for field in missing}
        )
