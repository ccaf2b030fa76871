"""Tests for report endpoints."""

from datetime import date, datetime
from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.core.errors import ServerError, guarded
from app.models import teacher_subject
from tests.conftest import (
    auth_header,
    make_class,
    make_payment,
    make_student,
    make_subject,
    make_teacher,
)

FIRST_QUARTER = {"start_date": "2024-01-01", "end_date": "2024-03-31"}


class TestReportPeriod:
    """Tests for the shared period parameters."""

    @pytest.mark.parametrize(
        "path",
        [
            "financial-summary",
            "student-enrollment",
            "class-performance",
            "teacher-performance",
            "attendance",
        ],
    )
    async def test_end_before_start(self, client: AsyncClient, admin_token: str, path: str):
        response = await client.get(
            f"/api/v1/reports/{path}",
            params={"start_date": "2024-03-31", "end_date": "2024-01-01"},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert "end_date" in error["details"]

    async def test_missing_dates(self, client: AsyncClient, admin_token: str):
        response = await client.get(
            "/api/v1/reports/financial-summary", headers=auth_header(admin_token)
        )

        assert response.status_code == 422
        details = response.json()["error"]["details"]
        assert "start_date" in details
        assert "end_date" in details

    async def test_single_day_period(self, client: AsyncClient, admin_token: str):
        response = await client.get(
            "/api/v1/reports/attendance",
            params={"start_date": "2024-03-15", "end_date": "2024-03-15"},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        assert response.json()["data"]["period"] == {
            "start_date": "2024-03-15",
            "end_date": "2024-03-15",
        }


class TestFinancialSummary:
    """Tests for the financial summary report."""

    async def test_first_quarter(
        self, client: AsyncClient, admin_token: str, db, student, school_class
    ):
        await make_payment(
            db, student, school_class, amount=Decimal("100.00"),
            payment_date=date(2024, 1, 10), month=1,
        )
        await make_payment(
            db, student, school_class, amount=Decimal("200.00"),
            payment_date=date(2024, 2, 10), month=2, status="pending",
        )
        await make_payment(
            db, student, school_class, amount=Decimal("300.00"),
            payment_date=date(2024, 3, 10), payment_method="bank_transfer",
        )
        await make_payment(
            db, student, school_class, amount=Decimal("999.00"),
            payment_date=date(2024, 4, 1), month=4,
        )

        response = await client.get(
            "/api/v1/reports/financial-summary",
            params=FIRST_QUARTER,
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert Decimal(data["total_revenue"]) == Decimal("400.00")
        assert [
            (row["year"], row["month"], Decimal(row["total"])) for row in data["monthly_trend"]
        ] == [(2024, 1, Decimal("100.00")), (2024, 3, Decimal("300.00"))]
        assert [row["payment_method"] for row in data["revenue_by_method"]] == [
            "bank_transfer",
            "cash",
        ]
        assert data["revenue_by_class"][0]["class_id"] == school_class.id
        assert data["revenue_by_class"][0]["class_name"] == school_class.name
        assert Decimal(data["revenue_by_class"][0]["total"]) == Decimal("400.00")

    async def test_empty_period(self, client: AsyncClient, admin_token: str):
        response = await client.get(
            "/api/v1/reports/financial-summary",
            params=FIRST_QUARTER,
            headers=auth_header(admin_token),
        )

        data = response.json()["data"]
        assert Decimal(data["total_revenue"]) == 0
        assert data["revenue_by_method"] == []
        assert data["monthly_trend"] == []


class TestEnrollmentReport:
    """Tests for the student enrollment report."""

    async def test_enrollment(self, client: AsyncClient, admin_token: str, db):
        await make_student(db, grade_level=9, created_at=datetime(2024, 1, 20, 10, 0))
        await make_student(db, grade_level=9, created_at=datetime(2024, 3, 31, 18, 0))
        await make_student(
            db, grade_level=12, status="inactive", created_at=datetime(2023, 11, 2, 9, 0)
        )

        response = await client.get(
            "/api/v1/reports/student-enrollment",
            params=FIRST_QUARTER,
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_students"] == 3
        assert data["new_students"] == 2
        assert data["students_by_grade"] == [
            {"grade_level": 9, "count": 2},
            {"grade_level": 12, "count": 1},
        ]
        assert data["students_by_status"] == [
            {"status": "active", "count": 2},
            {"status": "inactive", "count": 1},
        ]
        assert data["enrollment_trend"] == [
            {"year": 2024, "month": 1, "count": 1},
            {"year": 2024, "month": 3, "count": 1},
        ]


class TestClassPerformanceReport:
    """Tests for the class performance report."""

    async def test_class_performance(
        self, client: AsyncClient, admin_token: str, db, subject, teacher
    ):
        students = [await make_student(db) for _ in range(3)]
        full = await make_class(
            db, subject, teacher, students=students[:2], max_students=2,
            created_at=datetime(2024, 2, 1, 9, 0),
        )
        half = await make_class(
            db, subject, teacher, students=students[2:], max_students=2,
            created_at=datetime(2023, 9, 1, 9, 0),
        )
        await make_class(db, subject, teacher, status="inactive", created_at=datetime(2023, 9, 1))

        response = await client.get(
            "/api/v1/reports/class-performance",
            params=FIRST_QUARTER,
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_classes"] == 3
        assert data["new_classes"] == 1
        assert data["classes_by_status"] == [
            {"status": "active", "count": 2},
            {"status": "inactive", "count": 1},
        ]
        assert data["classes_by_subject"] == [
            {"subject_id": subject.id, "subject_name": subject.name_en, "count": 3}
        ]
        utilization = data["capacity_utilization"]
        assert [row["id"] for row in utilization] == [full.id, half.id]
        assert Decimal(utilization[0]["utilization_rate"]) == Decimal("100.00")
        assert Decimal(utilization[1]["utilization_rate"]) == Decimal("50.00")


class TestTeacherPerformanceReport:
    """Tests for the teacher performance report."""

    async def test_teacher_performance(self, client: AsyncClient, admin_token: str, db):
        subject = await make_subject(db, name_en="Physics")
        busy = await make_teacher(db, created_at=datetime(2024, 1, 5, 8, 0))
        idle = await make_teacher(db, created_at=datetime(2022, 6, 1, 8, 0))
        await db.execute(teacher_subject.insert().values(teacher_id=busy.id, subject_id=subject.id))
        await db.commit()
        for _ in range(2):
            await make_class(db, subject, busy, created_at=datetime(2024, 2, 1, 9, 0))
        await make_class(db, subject, idle, created_at=datetime(2023, 2, 1, 9, 0))

        response = await client.get(
            "/api/v1/reports/teacher-performance",
            params=FIRST_QUARTER,
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_teachers"] == 2
        assert data["new_teachers"] == 1
        assert data["teachers_by_status"] == [{"status": "active", "count": 2}]
        top = data["top_teachers"]
        assert [(row["id"], row["classes_count"]) for row in top] == [(busy.id, 2), (idle.id, 0)]
        assert top[0]["subjects"] == ["Physics"]
        assert data["teacher_subject_distribution"] == [
            {"subject_id": subject.id, "subject_name": "Physics", "teacher_count": 1}
        ]


class TestAttendanceReport:
    """Tests for the attendance report."""

    async def test_attendance(self, client: AsyncClient, admin_token: str, db):
        await make_student(db, grade_level=10, attendance_rate=Decimal("95.00"))
        await make_student(db, grade_level=10, attendance_rate=Decimal("65.00"))
        poor = await make_student(db, grade_level=11, attendance_rate=Decimal("40.00"))

        response = await client.get(
            "/api/v1/reports/attendance",
            params=FIRST_QUARTER,
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        overall = data["overall_attendance"]
        assert Decimal(overall["average_attendance"]) == Decimal("66.67")
        assert overall["total_students"] == 3
        assert overall["good_attendance"] == 1
        assert overall["average_attendance_count"] == 1
        assert overall["poor_attendance"] == 1
        assert [
            (row["grade_level"], Decimal(row["average_attendance"]), row["student_count"])
            for row in data["attendance_by_grade"]
        ] == [(10, Decimal("80.00"), 2), (11, Decimal("40.00"), 1)]
        assert [row["id"] for row in data["poor_attendance_students"]] == [poor.id]


class TestReportGuard:
    """Tests for how report failures are reported."""

    async def test_query_failure_becomes_report_error(self, db):
        with pytest.raises(ServerError) as exc:
            async with guarded(db, "REPORT_ERROR", "Failed to generate financial report"):
                raise RuntimeError("connection lost")

        assert exc.value.code == "REPORT_ERROR"
        assert exc.value.message == "Failed to generate financial report"
        assert exc.value.status_code == 500
