"""Aggregation layer - derived statistics for dashboards and reports.

Every function here is pure: it takes rows already fetched by the service
layer (ORM objects, SQLAlchemy ``Row`` objects or the named tuples below,
anything with the right attributes) and returns plain dicts and lists ready
for the response schemas. Nothing reads the clock; callers pass ``today``.

All percentages and rates are ``Decimal`` rounded to two places, half away
from zero. Empty input yields zeros and empty lists, and no division is
attempted with a zero denominator.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, NamedTuple

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

GOOD_ATTENDANCE = Decimal("80")
POOR_ATTENDANCE = Decimal("60")

COMPLETED = "completed"
PENDING = "pending"

_TWO_PLACES = Decimal("0.01")
_ZERO = Decimal("0")


class PaymentRow(NamedTuple):
    """Minimal payment shape used by the revenue functions."""

    amount: Decimal
    status: str
    payment_method: str
    payment_date: date
    class_id: int | None = None
    subject_id: int | None = None
    month: int | None = None
    year: int | None = None


class ClassLoad(NamedTuple):
    id: int
    name: str
    max_students: int
    current_students: int


class StudentAttendance(NamedTuple):
    id: int
    first_name: str
    last_name: str
    grade_level: int
    attendance_rate: Decimal


class TeacherLoad(NamedTuple):
    id: int
    first_name: str
    last_name: str
    classes_count: int
    subjects: list[str]


# ============== Helpers ==============


def to_decimal(value: Any) -> Decimal:
    """Coerce a DB value (Decimal, int, float, None) to Decimal."""
    if value is None:
        return _ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def round2(value: Any) -> Decimal:
    """Round to two decimal places, half away from zero."""
    return to_decimal(value).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def percentage(part: Any, whole: Any) -> Decimal:
    """``part / whole * 100`` rounded, or 0 when ``whole`` is 0."""
    whole = to_decimal(whole)
    if whole == 0:
        return round2(_ZERO)
    return round2(to_decimal(part) / whole * 100)


def enum_value(value: Any) -> Any:
    """Return ``value.value`` for enums, the value itself otherwise."""
    if hasattr(value, "value"):
        return value.value
    return value


def _is_completed(payment: Any) -> bool:
    return enum_value(payment.status) == COMPLETED


def _sort_key(value: Any) -> tuple:
    # None sorts last
    return (value is None, value if value is not None else 0)


# ============== Revenue ==============


def trailing_months(today: date, window: int = 6) -> list[tuple[int, int]]:
    """(year, month) pairs for the ``window`` months ending at ``today``, oldest first."""
    months = []
    for offset in range(window - 1, -1, -1):
        month = today.month - offset
        year = today.year
        while month <= 0:
            month += 12
            year -= 1
        months.append((year, month))
    return months


def monthly_revenue_series(
    totals: Mapping[tuple[int, int], Any],
    today: date,
    window: int = 6,
) -> list[dict]:
    """Revenue per month for the trailing window; months without payments are 0.

    ``totals`` maps ``(year, month)`` to the completed-payment sum.
    """
    series = []
    for year, month in trailing_months(today, window):
        series.append(
            {
                "month": MONTH_NAMES[month - 1],
                "month_number": month,
                "year": year,
                "revenue": to_decimal(totals.get((year, month))),
            }
        )
    return series


def year_to_date_stats(this_year_total: Any, last_year_total: Any, today: date) -> dict:
    """Total, monthly average and growth against the previous year."""
    total = to_decimal(this_year_total)
    previous = to_decimal(last_year_total)

    average_monthly = round2(total / today.month) if today.month > 0 else round2(_ZERO)
    growth = percentage(total - previous, previous)

    return {
        "total_revenue": total,
        "average_monthly": average_monthly,
        "growth_percentage": growth,
    }


def financial_summary(
    payments: Iterable[Any],
    start_date: date,
    end_date: date,
    class_names: Mapping[int, str] | None = None,
) -> dict:
    """Completed-payment revenue in [start_date, end_date], broken down three ways.

    Each payment is counted at most once, no matter how the caller filtered.
    """
    class_names = class_names or {}
    total = _ZERO
    by_method: dict[str, list] = {}
    by_class: dict[int | None, Decimal] = defaultdict(lambda: _ZERO)
    by_month: dict[tuple[int, int], Decimal] = defaultdict(lambda: _ZERO)

    for payment in payments:
        if not _is_completed(payment):
            continue
        if not (start_date <= payment.payment_date <= end_date):
            continue
        amount = to_decimal(payment.amount)
        total += amount

        method = enum_value(payment.payment_method)
        bucket = by_method.setdefault(method, [_ZERO, 0])
        bucket[0] += amount
        bucket[1] += 1

        by_class[payment.class_id] += amount
        by_month[(payment.payment_date.year, payment.payment_date.month)] += amount

    revenue_by_method = [
        {"payment_method": method, "total": values[0], "count": values[1]}
        for method, values in sorted(by_method.items())
    ]
    revenue_by_class = [
        {"class_id": class_id, "class_name": class_names.get(class_id), "total": amount}
        for class_id, amount in sorted(
            by_class.items(), key=lambda item: (-item[1], item[0] is None, item[0] or 0)
        )
    ]
    monthly_trend = [
        {"year": year, "month": month, "total": amount}
        for (year, month), amount in sorted(by_month.items())
    ]

    return {
        "total_revenue": total,
        "revenue_by_method": revenue_by_method,
        "revenue_by_class": revenue_by_class,
        "monthly_trend": monthly_trend,
    }


def payment_totals(payments: Iterable[Any]) -> dict:
    """Paid total and pending figures for a student's payment history."""
    total_paid = _ZERO
    pending_count = 0
    pending_amount = _ZERO
    for payment in payments:
        status = enum_value(payment.status)
        if status == COMPLETED:
            total_paid += to_decimal(payment.amount)
        elif status == PENDING:
            pending_count += 1
            pending_amount += to_decimal(payment.amount)
    return {
        "total_paid": total_paid,
        "pending_payments_count": pending_count,
        "pending_amount": pending_amount,
    }


def payment_statistics(payments: Iterable[Any], months_limit: int = 6) -> dict:
    """Counts, completed total, method breakdown and most recent monthly revenue."""
    payments = list(payments)
    completed = [p for p in payments if _is_completed(p)]
    pending = [p for p in payments if enum_value(p.status) == PENDING]

    methods: dict[str, list] = {}
    months: dict[tuple[int, int], Decimal] = defaultdict(lambda: _ZERO)
    for payment in completed:
        method = enum_value(payment.payment_method)
        bucket = methods.setdefault(method, [_ZERO, 0])
        bucket[0] += to_decimal(payment.amount)
        bucket[1] += 1
        months[(payment.payment_date.year, payment.payment_date.month)] += to_decimal(
            payment.amount
        )

    recent_months = sorted(months.items(), reverse=True)[:months_limit]

    return {
        "total_payments": len(payments),
        "completed_payments": len(completed),
        "pending_payments": len(pending),
        "total_amount": sum((to_decimal(p.amount) for p in completed), _ZERO),
        "payment_methods": [
            {"payment_method": method, "total": values[0], "count": values[1]}
            for method, values in sorted(methods.items())
        ],
        "monthly_revenue": [
            {"year": year, "month": month, "total": amount}
            for (year, month), amount in recent_months
        ],
    }


# ============== Classes ==============


def collection_rate(collected: Any, enrolled_count: int, monthly_fee: Any) -> Decimal:
    """Share of expected monthly revenue actually collected."""
    expected = to_decimal(enrolled_count) * to_decimal(monthly_fee)
    return percentage(collected, expected)


def capacity_utilization(classes: Iterable[Any], limit: int = 10) -> list[dict]:
    """Classes ranked by enrolled/max ratio, non-empty ones only."""
    rows = []
    for school_class in classes:
        rate = percentage(school_class.current_students, school_class.max_students)
        if rate <= 0:
            continue
        rows.append(
            {
                "id": school_class.id,
                "name": school_class.name,
                "max_students": school_class.max_students,
                "current_students": school_class.current_students,
                "utilization_rate": rate,
            }
        )
    rows.sort(key=lambda row: (-row["utilization_rate"], row["id"]))
    return rows[:limit]


def class_statistics(
    enrolled_count: int,
    max_students: int,
    attendance_rates: Iterable[Any],
) -> dict:
    """Seat usage and mean attendance for a single class."""
    rates = [to_decimal(rate) for rate in attendance_rates]
    average = round2(sum(rates, _ZERO) / len(rates)) if rates else round2(_ZERO)
    return {
        "total_students": enrolled_count,
        "available_slots": max(max_students - enrolled_count, 0),
        "attendance_rate": average,
        "capacity_percentage": percentage(enrolled_count, max_students),
    }


# ============== Attendance ==============


def attendance_bucket(rate: Any) -> str:
    """Classify an attendance rate as good, average or poor."""
    rate = to_decimal(rate)
    if rate >= GOOD_ATTENDANCE:
        return "good"
    if rate >= POOR_ATTENDANCE:
        return "average"
    return "poor"


def attendance_summary(rates: Iterable[Any]) -> dict:
    """Overall mean attendance and bucket counts."""
    rates = [to_decimal(rate) for rate in rates]
    buckets = {"good": 0, "average": 0, "poor": 0}
    for rate in rates:
        buckets[attendance_bucket(rate)] += 1

    average = round2(sum(rates, _ZERO) / len(rates)) if rates else round2(_ZERO)
    return {
        "average_attendance": average,
        "total_students": len(rates),
        "good_attendance": buckets["good"],
        "average_attendance_count": buckets["average"],
        "poor_attendance": buckets["poor"],
    }


def attendance_by_grade(students: Iterable[Any]) -> list[dict]:
    """Mean attendance and head count per grade level, ascending grade."""
    grades: dict[int, list[Decimal]] = defaultdict(list)
    for student in students:
        grades[student.grade_level].append(to_decimal(student.attendance_rate))
    return [
        {
            "grade_level": grade,
            "average_attendance": round2(sum(rates, _ZERO) / len(rates)),
            "student_count": len(rates),
        }
        for grade, rates in sorted(grades.items())
    ]


def poor_attendance_students(students: Iterable[Any], limit: int = 20) -> list[dict]:
    """Students under the poor threshold, worst first."""
    poor = [s for s in students if to_decimal(s.attendance_rate) < POOR_ATTENDANCE]
    poor.sort(key=lambda s: (to_decimal(s.attendance_rate), s.id))
    return [
        {
            "id": s.id,
            "first_name": s.first_name,
            "last_name": s.last_name,
            "grade_level": s.grade_level,
            "attendance_rate": round2(s.attendance_rate),
        }
        for s in poor[:limit]
    ]


# ============== Students ==============


def paid_subject_ids(payments: Iterable[Any], year: int, month: int) -> set[int]:
    """Subjects with a completed payment for the given month."""
    return {
        p.subject_id
        for p in payments
        if p.subject_id is not None
        and _is_completed(p)
        and p.year == year
        and p.month == month
    }


def count_paid_subjects(
    subject_ids: Iterable[int],
    payments: Iterable[Any],
    today: date,
) -> int:
    """How many of the student's subjects are paid for ``today``'s month."""
    return len(set(subject_ids) & paid_subject_ids(payments, today.year, today.month))


def payment_status(total_subjects: int, paid_subjects: int) -> str:
    """Enrollment-based payment status of a student."""
    if total_subjects == 0:
        return "no_subjects"
    if paid_subjects == total_subjects:
        return "paid"
    if paid_subjects > 0:
        return "partial"
    return "unpaid"


def monthly_payments(payments: Iterable[Any]) -> list[dict]:
    """Completed amounts per billing (year, month), newest first."""
    months: dict[tuple[int, int], Decimal] = defaultdict(lambda: _ZERO)
    for payment in payments:
        if _is_completed(payment):
            months[(payment.year, payment.month)] += to_decimal(payment.amount)
    return [
        {"year": year, "month": month, "total": amount}
        for (year, month), amount in sorted(months.items(), reverse=True)
    ]


# ============== Group-bys ==============


def count_by(values: Iterable[Any], key: str) -> list[dict]:
    """Count occurrences of each value, labelled ``key``, ordered by value."""
    counts: dict[Any, int] = defaultdict(int)
    for value in values:
        counts[enum_value(value)] += 1
    return [
        {key: value, "count": count}
        for value, count in sorted(counts.items(), key=lambda item: _sort_key(item[0]))
    ]


def monthly_counts(dates: Iterable[date]) -> list[dict]:
    """Number of dates per (year, month), ascending."""
    counts: dict[tuple[int, int], int] = defaultdict(int)
    for value in dates:
        counts[(value.year, value.month)] += 1
    return [
        {"year": year, "month": month, "count": count}
        for (year, month), count in sorted(counts.items())
    ]


# ============== Teachers ==============


def top_teachers(teachers: Iterable[Any], limit: int = 10) -> list[dict]:
    """Teachers ranked by classes created in the period; ties by id."""
    ranked = sorted(teachers, key=lambda t: (-t.classes_count, t.id))
    return [
        {
            "id": t.id,
            "first_name": t.first_name,
            "last_name": t.last_name,
            "classes_count": t.classes_count,
            "subjects": list(t.subjects),
        }
        for t in ranked[:limit]
    ]


def subject_distribution(links: Iterable[Any], count_key: str = "teacher_count") -> list[dict]:
    """Row count per subject from (subject_id, subject_name) rows, largest first."""
    counts: dict[int, int] = defaultdict(int)
    names: dict[int, str] = {}
    for link in links:
        counts[link.subject_id] += 1
        names[link.subject_id] = link.subject_name
    return [
        {"subject_id": subject_id, "subject_name": names[subject_id], count_key: count}
        for subject_id, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]
