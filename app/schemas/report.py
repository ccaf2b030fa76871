"""Report schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.payment import MethodTotal, MonthTotal


class ReportPeriod(BaseModel):
    """Date range a report covers."""

    start_date: date
    end_date: date


# ============== Financial Summary ==============


class ClassRevenue(BaseModel):
    class_id: int | None
    class_name: str | None
    total: Decimal


class FinancialSummary(BaseModel):
    """Completed-payment revenue for a period."""

    period: ReportPeriod
    total_revenue: Decimal
    revenue_by_method: list[MethodTotal]
    revenue_by_class: list[ClassRevenue]
    monthly_trend: list[MonthTotal] = Field(description="Ascending by (year, month)")


# ============== Student Enrollment ==============


class GradeCount(BaseModel):
    grade_level: int
    count: int


class StatusCount(BaseModel):
    status: str
    count: int


class MonthCount(BaseModel):
    year: int
    month: int
    count: int


class EnrollmentReport(BaseModel):
    period: ReportPeriod
    total_students: int
    new_students: int
    students_by_grade: list[GradeCount]
    students_by_status: list[StatusCount]
    enrollment_trend: list[MonthCount]


# ============== Class Performance ==============


class SubjectClassCount(BaseModel):
    subject_id: int
    subject_name: str | None
    count: int


class CapacityUtilization(BaseModel):
    id: int
    name: str
    max_students: int
    current_students: int
    utilization_rate: Decimal


class ClassPerformanceReport(BaseModel):
    period: ReportPeriod
    total_classes: int
    new_classes: int
    classes_by_status: list[StatusCount]
    classes_by_subject: list[SubjectClassCount]
    capacity_utilization: list[CapacityUtilization]


# ============== Teacher Performance ==============


class TopTeacher(BaseModel):
    id: int
    first_name: str
    last_name: str
    classes_count: int
    subjects: list[str]


class SubjectTeacherCount(BaseModel):
    subject_id: int
    subject_name: str
    teacher_count: int


class TeacherPerformanceReport(BaseModel):
    period: ReportPeriod
    total_teachers: int
    new_teachers: int
    teachers_by_status: list[StatusCount]
    top_teachers: list[TopTeacher]
    teacher_subject_distribution: list[SubjectTeacherCount]


# ============== Attendance ==============


class OverallAttendance(BaseModel):
    average_attendance: Decimal
    total_students: int
    good_attendance: int
    average_attendance_count: int
    poor_attendance: int


class GradeAttendance(BaseModel):
    grade_level: int
    average_attendance: Decimal
    student_count: int


class PoorAttendanceStudent(BaseModel):
    id: int
    first_name: str
    last_name: str
    grade_level: int
    attendance_rate: Decimal


class AttendanceReport(BaseModel):
    period: ReportPeriod
    overall_attendance: OverallAttendance
    attendance_by_grade: list[GradeAttendance]
    poor_attendance_students: list[PoorAttendanceStudent]
