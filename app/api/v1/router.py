"""API v1 router aggregating all route modules."""

from fastapi import APIRouter

from app.api.v1.routes import (
    auth,
    classes,
    dashboard,
    payments,
    reports,
    students,
    subjects,
    teachers,
    utilities,
)

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(dashboard.router)
api_router.include_router(students.router)
api_router.include_router(teachers.router)
api_router.include_router(subjects.router)
api_router.include_router(classes.router)
api_router.include_router(payments.router)
api_router.include_router(reports.router)
api_router.include_router(utilities.router)
