"""Custom validators and types."""

import re
from typing import Annotated

from pydantic import AfterValidator, Field

# Optional leading "+", then 7-15 digits (E.164 length)
PHONE_PATTERN = re.compile(r"^\+?[0-9]{7,15}$")

GRADE_LEVELS = (7, 8, 9, 10, 11, 12)


def validate_phone_number(value: str) -> str:
    """
    Validate and normalize a phone number.

    Accepts formats:
    - +962791234567
    - +962 79 123 4567
    - 079-123-4567
    - (079) 1234567

    Returns the number with separators removed: +962791234567
    """
    # Remove spaces, dashes, parentheses
    normalized = re.sub(r"[\s\-\(\)]", "", value)

    if not PHONE_PATTERN.match(normalized):
        raise ValueError(
            "Invalid phone number. Use digits with an optional leading + (e.g., +962 79 123 4567)"
        )

    return normalized


def validate_grade_level(value: int) -> int:
    """Grade levels run from 7 to 12."""
    if value not in GRADE_LEVELS:
        raise ValueError("The selected grade level is invalid. Allowed: 7, 8, 9, 10, 11, 12")
    return value


# Annotated type for phone number validation
PhoneNumber = Annotated[
    str,
    Field(min_length=7, max_length=20),
    AfterValidator(validate_phone_number),
]

GradeLevel = Annotated[int, AfterValidator(validate_grade_level)]

Month = Annotated[int, Field(ge=1, le=12)]

Year = Annotated[int, Field(ge=2020, le=2100)]
