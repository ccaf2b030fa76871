"""Test configuration and fixtures."""

import os
from collections.abc import AsyncGenerator
from datetime import date, time
from decimal import Decimal
from itertools import count

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from app.core.clock import get_today
from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.models import (
    ClassModel,
    Payment,
    Student,
    Subject,
    Teacher,
    User,
    class_student,
    student_subject,
)
from main import app

# In-memory SQLite by default; point TEST_DATABASE_URL at a Postgres test
# database to run the suite against the production dialect.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")

# Reference date every dashboard/report/payment-status test is pinned to
TODAY = date(2024, 3, 15)

ADMIN_PHONE = "+962791111111"
ADMIN_PASSWORD = "password123"

if TEST_DATABASE_URL.startswith("sqlite"):
    # One shared connection so every session sees the same in-memory database
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
else:
    test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)

test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    """Override database dependency for tests."""
    async with test_session_maker() as session:
        yield session


def override_get_today() -> date:
    return TODAY


@pytest_asyncio.fixture(scope="function")
async def setup_database() -> AsyncGenerator[None, None]:
    """Create test database tables before each test that needs it."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = override_get_today

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_today, None)


@pytest_asyncio.fixture
async def db(setup_database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get database session for tests."""
    async with test_session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(setup_database: None) -> AsyncGenerator[AsyncClient, None]:
    """Get async HTTP client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_user(db: AsyncSession) -> User:
    """Create an admin user for tests."""
    user = User(
        phone_number=ADMIN_PHONE,
        password_hash=get_password_hash(ADMIN_PASSWORD),
        first_name="Admin",
        last_name="User",
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_token(client: AsyncClient, admin_user: User) -> str:
    """Get auth token for the admin user."""
    response = await client.post(
        "/api/v1/auth/login",
        json={"phone_number": ADMIN_PHONE, "password": ADMIN_PASSWORD},
    )
    return response.json()["access_token"]


def auth_header(token: str) -> dict[str, str]:
    """Create authorization header."""
    return {"Authorization": f"Bearer {token}"}


# ============== Factories ==============

_sequence = count(1)


async def make_subject(db: AsyncSession, **overrides) -> Subject:
    n = next(_sequence)
    data = {
        "name_en": f"Mathematics {n}",
        "name_ar": f"رياضيات {n}",
        "code": f"MATH-{n}",
        "grade_level": 10,
        "hours_per_week": 4,
        "price_per_hour": Decimal("10.00"),
        **overrides,
    }
    subject = Subject(**data)
    db.add(subject)
    await db.commit()
    await db.refresh(subject)
    return subject


async def make_teacher(db: AsyncSession, **overrides) -> Teacher:
    n = next(_sequence)
    data = {
        "first_name": "Omar",
        "last_name": f"Teacher{n}",
        "email": f"teacher{n}@example.com",
        "phone": f"+96279000{n:04d}",
        "qualification": "MSc Mathematics",
        "experience_years": 5,
        "hourly_rate": Decimal("15.00"),
        **overrides,
    }
    teacher = Teacher(**data)
    db.add(teacher)
    await db.commit()
    await db.refresh(teacher)
    return teacher


async def make_student(db: AsyncSession, subjects: list[Subject] = (), **overrides) -> Student:
    n = next(_sequence)
    data = {
        "first_name": "Lina",
        "last_name": f"Student{n}",
        "phone": f"+96277000{n:04d}",
        "grade_level": 10,
        "joined_date": date(2024, 1, 10),
        "attendance_rate": Decimal("90.00"),
        **overrides,
    }
    student = Student(**data)
    db.add(student)
    await db.flush()
    for subject in subjects:
        await db.execute(
            insert(student_subject).values(student_id=student.id, subject_id=subject.id)
        )
    await db.commit()
    await db.refresh(student)
    return student


async def make_class(
    db: AsyncSession,
    subject: Subject,
    teacher: Teacher,
    students: list[Student] = (),
    **overrides,
) -> ClassModel:
    n = next(_sequence)
    data = {
        "name": f"Math 10-{n}",
        "subject_id": subject.id,
        "teacher_id": teacher.id,
        "grade_level": 10,
        "schedule_days": ["sunday", "tuesday"],
        "start_time": time(16, 0),
        "end_time": time(17, 30),
        "max_students": 20,
        "monthly_fee": Decimal("50.00"),
        **overrides,
    }
    school_class = ClassModel(**data)
    db.add(school_class)
    await db.flush()
    for student in students:
        await db.execute(
            insert(class_student).values(class_id=school_class.id, student_id=student.id)
        )
    await db.commit()
    await db.refresh(school_class)
    return school_class


async def make_payment(
    db: AsyncSession,
    student: Student,
    school_class: ClassModel,
    **overrides,
) -> Payment:
    n = next(_sequence)
    data = {
        "student_id": student.id,
        "class_id": school_class.id,
        "subject_id": school_class.subject_id,
        "amount": Decimal("50.00"),
        "payment_method": "cash",
        "payment_date": TODAY,
        "month": TODAY.month,
        "year": TODAY.year,
        "status": "completed",
        "reference_number": f"REF-{n}",
        **overrides,
    }
    payment = Payment(**data)
    db.add(payment)
    await db.commit()
    await db.refresh(payment)
    return payment


@pytest_asyncio.fixture
async def subject(db: AsyncSession) -> Subject:
    """Create a test subject."""
    return await make_subject(db)


@pytest_asyncio.fixture
async def teacher(db: AsyncSession) -> Teacher:
    """Create a test teacher."""
    return await make_teacher(db)


@pytest_asyncio.fixture
async def student(db: AsyncSession) -> Student:
    """Create a test student."""
    return await make_student(db)


@pytest_asyncio.fixture
async def school_class(db: AsyncSession, subject: Subject, teacher: Teacher) -> ClassModel:
    """Create a test class."""
    return await make_class(db, subject, teacher)
