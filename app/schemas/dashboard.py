"""Dashboard schemas."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class MonthRevenue(BaseModel):
    month: str
    month_number: int
    year: int
    revenue: Decimal


class YearToDate(BaseModel):
    total_revenue: Decimal
    average_monthly: Decimal
    growth_percentage: Decimal


class RecentPayment(BaseModel):
    id: int
    student_id: int
    student_name: str
    amount: Decimal
    month: int
    year: int
    payment_date: date
    subject_name: str | None


class DashboardStatistics(BaseModel):
    """Headline figures for the admin dashboard."""

    total_students: int
    total_teachers: int
    total_classes: int
    total_subjects: int
    monthly_revenue: Decimal
    current_month_revenue: Decimal
    last_6_months_revenue: list[MonthRevenue]
    year_to_date: YearToDate
    recent_payments: list[RecentPayment]
