"""Tests for teacher endpoints."""

from datetime import date
from decimal import Decimal

from httpx import AsyncClient
from sqlalchemy import func, select

from app.models import TeacherPayment, teacher_subject
from tests.conftest import auth_header, make_class, make_student, make_subject, make_teacher


def teacher_payload(**overrides) -> dict:
    return {
        "first_name": "Khaled",
        "last_name": "Nasser",
        "email": "khaled@example.com",
        "phone": "+962795551234",
        "qualification": "BSc Physics",
        "experience_years": 3,
        "hourly_rate": "12.50",
        **overrides,
    }


class TestCreateTeacher:
    """Tests for creating teachers."""

    async def test_create_teacher(self, client: AsyncClient, admin_token: str, subject):
        response = await client.post(
            "/api/v1/teachers",
            json=teacher_payload(subjects=[subject.id], monthly_percentage="20.00"),
            headers=auth_header(admin_token),
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["email"] == "khaled@example.com"
        assert data["status"] == "active"
        assert Decimal(data["hourly_rate"]) == Decimal("12.50")
        assert [s["id"] for s in data["subjects"]] == [subject.id]

    async def test_create_duplicate_email(self, client: AsyncClient, admin_token: str, teacher):
        response = await client.post(
            "/api/v1/teachers",
            json=teacher_payload(email=teacher.email),
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DUPLICATE_EMAIL"

    async def test_create_invalid_email(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            "/api/v1/teachers",
            json=teacher_payload(email="not-an-email"),
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        assert "email" in response.json()["error"]["details"]

    async def test_create_unknown_subject(self, client: AsyncClient, admin_token: str):
        response = await client.post(
            "/api/v1/teachers",
            json=teacher_payload(subjects=[12345]),
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestListTeachers:
    """Tests for listing teachers."""

    async def test_list_with_meta(self, client: AsyncClient, admin_token: str, db):
        for _ in range(3):
            await make_teacher(db)

        response = await client.get(
            "/api/v1/teachers",
            params={"per_page": 2},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["meta"] == {"current_page": 1, "last_page": 2, "per_page": 2, "total": 3}

    async def test_filter_by_subject_and_search(self, client: AsyncClient, admin_token: str, db):
        subject = await make_subject(db)
        teaching = await make_teacher(db, first_name="Huda")
        await make_teacher(db, first_name="Bilal")
        await db.execute(
            teacher_subject.insert().values(teacher_id=teaching.id, subject_id=subject.id)
        )
        await db.commit()

        response = await client.get(
            "/api/v1/teachers",
            params={"subject_id": subject.id},
            headers=auth_header(admin_token),
        )
        assert [t["id"] for t in response.json()["data"]] == [teaching.id]

        response = await client.get(
            "/api/v1/teachers",
            params={"search": "bil"},
            headers=auth_header(admin_token),
        )
        assert [t["first_name"] for t in response.json()["data"]] == ["Bilal"]

    async def test_filter_by_status(self, client: AsyncClient, admin_token: str, db):
        await make_teacher(db)
        inactive = await make_teacher(db, status="inactive")

        response = await client.get(
            "/api/v1/teachers",
            params={"status": "inactive"},
            headers=auth_header(admin_token),
        )

        assert [t["id"] for t in response.json()["data"]] == [inactive.id]


class TestUpdateTeacher:
    """Tests for updating teachers."""

    async def test_update_subjects(self, client: AsyncClient, admin_token: str, db, teacher):
        first = await make_subject(db)
        second = await make_subject(db)

        response = await client.put(
            f"/api/v1/teachers/{teacher.id}",
            json={"subjects": [first.id, second.id], "experience_years": 7},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["experience_years"] == 7
        assert sorted(s["id"] for s in data["subjects"]) == sorted([first.id, second.id])

    async def test_update_to_taken_email(self, client: AsyncClient, admin_token: str, db):
        first = await make_teacher(db)
        second = await make_teacher(db)

        response = await client.patch(
            f"/api/v1/teachers/{second.id}",
            json={"email": first.email},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "DUPLICATE_EMAIL"

    async def test_get_teacher_not_found(self, client: AsyncClient, admin_token: str):
        response = await client.get("/api/v1/teachers/9999", headers=auth_header(admin_token))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TEACHER_NOT_FOUND"

    async def test_null_fields_rejected(self, client: AsyncClient, admin_token: str, teacher):
        response = await client.patch(
            f"/api/v1/teachers/{teacher.id}",
            json={"email": None, "subjects": None},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        details = response.json()["error"]["details"]
        assert set(details) == {"email", "subjects"}

    async def test_clear_nullable_fields(self, client: AsyncClient, admin_token: str, teacher):
        response = await client.patch(
            f"/api/v1/teachers/{teacher.id}",
            json={"address": None, "monthly_percentage": None},
            headers=auth_header(admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["address"] is None
        assert data["monthly_percentage"] is None


class TestDeleteTeacher:
    """Tests for deleting teachers."""

    async def test_delete_teacher_with_classes(
        self, client: AsyncClient, admin_token: str, school_class
    ):
        response = await client.delete(
            f"/api/v1/teachers/{school_class.teacher_id}", headers=auth_header(admin_token)
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "TEACHER_HAS_CLASSES"

        response = await client.get(
            f"/api/v1/teachers/{school_class.teacher_id}", headers=auth_header(admin_token)
        )
        assert response.status_code == 200

    async def test_delete_teacher(self, client: AsyncClient, admin_token: str, db, subject):
        teacher = await make_teacher(db)
        teacher_id = teacher.id
        await db.execute(
            teacher_subject.insert().values(teacher_id=teacher_id, subject_id=subject.id)
        )
        db.add(
            TeacherPayment(
                teacher_id=teacher_id,
                amount=Decimal("400.00"),
                month=2,
                year=2024,
                payment_date=date(2024, 2, 28),
            )
        )
        await db.commit()

        response = await client.delete(
            f"/api/v1/teachers/{teacher_id}", headers=auth_header(admin_token)
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Teacher deleted successfully"}
        assert await db.scalar(
            select(func.count())
            .select_from(TeacherPayment)
            .where(TeacherPayment.teacher_id == teacher_id)
        ) == 0
        assert await db.scalar(
            select(func.count())
            .select_from(teacher_subject)
            .where(teacher_subject.c.teacher_id == teacher_id)
        ) == 0


class TestTeacherStatistics:
    """Tests for teacher statistics."""

    async def test_statistics(self, client: AsyncClient, admin_token: str, db, teacher, subject):
        students = [await make_student(db) for _ in range(3)]
        await make_class(db, subject, teacher, students=students[:2])
        await make_class(db, subject, teacher, students=students[2:], status="completed")

        response = await client.get(
            f"/api/v1/teachers/{teacher.id}/statistics", headers=auth_header(admin_token)
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["teacher"]["id"] == teacher.id
        stats = data["statistics"]
        assert stats["total_classes"] == 2
        assert stats["active_classes"] == 1
        assert stats["total_students"] == 3
        assert Decimal(stats["total_paid"]) == 0


class TestTeacherPayments:
    """Tests for teacher salary payments."""

    async def test_record_and_list_payments(self, client: AsyncClient, admin_token: str, teacher):
        for month in (1, 2):
            response = await client.post(
                f"/api/v1/teachers/{teacher.id}/payments",
                json={
                    "amount": "350.00",
                    "month": month,
                    "year": 2024,
                    "payment_date": f"2024-0{month}-28",
                },
                headers=auth_header(admin_token),
            )
            assert response.status_code == 201

        response = await client.get(
            f"/api/v1/teachers/{teacher.id}/payments", headers=auth_header(admin_token)
        )

        assert response.status_code == 200
        assert [p["month"] for p in response.json()["data"]] == [2, 1]

        response = await client.get(
            f"/api/v1/teachers/{teacher.id}/statistics", headers=auth_header(admin_token)
        )
        assert Decimal(response.json()["data"]["statistics"]["total_paid"]) == Decimal("700.00")

    async def test_second_payment_same_month(self, client: AsyncClient, admin_token: str, teacher):
        payload = {"amount": "350.00", "month": 3, "year": 2024, "payment_date": "2024-03-30"}
        await client.post(
            f"/api/v1/teachers/{teacher.id}/payments",
            json=payload,
            headers=auth_header(admin_token),
        )

        response = await client.post(
            f"/api/v1/teachers/{teacher.id}/payments",
            json=payload,
            headers=auth_header(admin_token),
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "TEACHER_PAYMENT_EXISTS"
