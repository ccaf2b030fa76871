"""Tests for subject endpoints."""

from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy import select

from app.models import Payment, teacher_subject
from tests.conftest import (
    auth_header,
    make_class,
    make_payment,
    make_student,
    make_subject,
    make_teacher,
)


def subject_payload(**overrides) -> dict:
    return {
        "name_en": "Chemistry",
        "name_ar": "كيمياء",
        "code": "CHEM-11",
        "grade_level": 11,
        "hours_per_week": 3,
        "price_per_hour": "12.00",
        **overrides,
    }


class TestCreateSubject:
    """Tests for creating subjects."""

    async def test_create_subject(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            "/api/v1/subjects",
            json=subject_payload(fee_amount="40.00"),
            headers=auth_header(admin_token),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Subject created successfully"
        assert body["data"]["code"] == "CHEM-11"
        assert body["data"]["name_ar"] == "كيمياء"
        assert body["data"]["status"] == "active"
        assert Decimal(body["data"]["fee_amount"]) == Decimal("40.00")

    async def test_create_duplicate_code(self, client: AsyncClient, admin_token: str, subject):
        response = await client.post(
            "/api/v1/subjects",
            json=subject_payload(code=subject.code),
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "DUPLICATE_CODE"
        assert "code" in error["details"]

    async def test_create_invalid_grade(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            "/api/v1/subjects",
            json=subject_payload(grade_level=6, hours_per_week=0),
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        details = response.json()["error"]["details"]
        assert "grade_level" in details
        assert "hours_per_week" in details


class TestListSubjects:
    """Tests for listing subjects."""

    async def test_list_filters(self, client: AsyncClient, admin_token: str, db):
        await make_subject(db, name_en="Biology", grade_level=9)
        await make_subject(db, name_en="Arabic Literature", grade_level=9, code="ARB-9")
        await make_subject(db, name_en="Geometry", grade_level=12)

        response = await client.get(
            "/api/v1/subjects",
            params={"grade_level": 9},
            headers=auth_header(admin_token),
        )
        body = response.json()
        assert [s["name_en"] for s in body["data"]] == ["Arabic Literature", "Biology"]
        assert body["meta"]["total"] == 2

        response = await client.get(
            "/api/v1/subjects",
            params={"search": "arb"},
            headers=auth_header(admin_token),
        )
        assert [s["code"] for s in response.json()["data"]] == ["ARB-9"]

    async def test_by_grade_returns_active_only(self, client: AsyncClient, admin_token: str, db):
        active = await make_subject(db, grade_level=8)
        await make_subject(db, grade_level=8, status="inactive")
        await make_subject(db, grade_level=7)

        response = await client.get("/api/v1/subjects/grade/8", headers=auth_header(admin_token))

        assert response.status_code == 200
        assert [s["id"] for s in response.json()["data"]] == [active.id]

    async def test_by_grade_invalid(self, client: AsyncClient, admin_token: str):
        response = await client.get("/api/v1/subjects/grade/5", headers=auth_header(admin_token))

        assert response.status_code == 422

    async def test_get_not_found(self, client: AsyncClient, admin_token: str):
        response = await client.get("/api/v1/subjects/9999", headers=auth_header(admin_token))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SUBJECT_NOT_FOUND"


class TestUpdateSubject:
    """Tests for updating subjects."""

    async def test_patch_subject(self, client: AsyncClient, admin_token: str, subject):
        response = await client.patch(
            f"/api/v1/subjects/{subject.id}",
            json={"hours_per_week": 6, "status": "inactive"},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["hours_per_week"] == 6
        assert data["status"] == "inactive"
        assert data["code"] == subject.code

    async def test_update_to_taken_code(self, client: AsyncClient, admin_token: str, db):
        first = await make_subject(db)
        second = await make_subject(db)

        response = await client.put(
            f"/api/v1/subjects/{second.id}",
            json={"code": first.code},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DUPLICATE_CODE"

    async def test_null_hours_rejected(self, client: AsyncClient, admin_token: str, subject):
        response = await client.put(
            f"/api/v1/subjects/{subject.id}",
            json={"hours_per_week": None},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"] == {
            "hours_per_week": ["The hours per week field is required"]
        }


class TestDeleteSubject:
    """Tests for deleting subjects."""

    async def test_delete_subject_in_use(
        self, client: AsyncClient, admin_token: str, school_class
    ):
        response = await client.delete(
            f"/api/v1/subjects/{school_class.subject_id}", headers=auth_header(admin_token)
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "SUBJECT_IN_USE"

    async def test_delete_subject(self, client: AsyncClient, admin_token: str, db, teacher):
        subject = await make_subject(db)
        subject_id = subject.id
        await make_student(db, subjects=[subject])
        await db.execute(
            teacher_subject.insert().values(teacher_id=teacher.id, subject_id=subject_id)
        )
        await db.commit()

        response = await client.delete(
            f"/api/v1/subjects/{subject_id}", headers=auth_header(admin_token)
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Subject deleted successfully"}

        response = await client.get(
            f"/api/v1/teachers/{teacher.id}", headers=auth_header(admin_token)
        )
        assert response.json()["data"]["subjects"] == []

    async def test_delete_keeps_payments(self, client: AsyncClient, admin_token: str, db, teacher):
        used = await make_subject(db)
        dropped = await make_subject(db)
        student = await make_student(db)
        school_class = await make_class(db, used, teacher, students=[student])
        payment = await make_payment(db, student, school_class, subject_id=dropped.id)

        response = await client.delete(
            f"/api/v1/subjects/{dropped.id}", headers=auth_header(admin_token)
        )

        assert response.status_code == 200
        subject_id = await db.scalar(select(Payment.subject_id).where(Payment.id == payment.id))
        assert subject_id is None


class TestSubjectStatistics:
    """Tests for subject statistics."""

    async def test_statistics(self, client: AsyncClient, admin_token: str, db, subject):
        teacher = await make_teacher(db)
        await db.execute(
            teacher_subject.insert().values(teacher_id=teacher.id, subject_id=subject.id)
        )
        await db.commit()
        students = [await make_student(db) for _ in range(3)]
        await make_class(db, subject, teacher, students=students)
        await make_class(db, subject, teacher, students=students[:1], status="inactive")

        response = await client.get(
            f"/api/v1/subjects/{subject.id}/statistics", headers=auth_header(admin_token)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["subject"]["id"] == subject.id
        assert data["statistics"] == {
            "total_classes": 2,
            "active_classes": 1,
            "total_teachers": 1,
            "total_students": 4,
        }
