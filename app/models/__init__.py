# Database models

from app.models.associations import class_student, student_subject, teacher_subject
from app.models.user import User
from app.models.subject import Subject, SubjectStatus
from app.models.teacher import Teacher, TeacherPayment, TeacherStatus
from app.models.student import Student, StudentStatus
from app.models.class_model import ClassModel, ClassStatus, WeekDay
from app.models.payment import Payment, PaymentMethod, PaymentStatus

__all__ = [
    "class_student",
    "student_subject",
    "teacher_subject",
    "User",
    "Subject",
    "SubjectStatus",
    "Teacher",
    "TeacherPayment",
    "TeacherStatus",
    "Student",
    "StudentStatus",
    "ClassModel",
    "ClassStatus",
    "WeekDay",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
]
