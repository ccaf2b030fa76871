"""Tests for shared field validators."""

import pytest
from pydantic import BaseModel, ValidationError

from app.schemas.validators import GradeLevel, Month, PhoneNumber, Year, validate_phone_number


class PhoneModel(BaseModel):
    """Test model with phone number."""
    phone: PhoneNumber


class GradeModel(BaseModel):
    grade: GradeLevel


class PeriodModel(BaseModel):
    month: Month
    year: Year


class TestPhoneValidator:
    """Tests for phone number validation."""

    def test_valid_phone_compact(self):
        """Test valid phone without spaces."""
        model = PhoneModel(phone="+962791234567")
        assert model.phone == "+962791234567"

    def test_valid_phone_with_spaces(self):
        """Test valid phone with spaces."""
        model = PhoneModel(phone="+962 79 123 4567")
        assert model.phone == "+962791234567"

    def test_valid_phone_with_dashes(self):
        """Test valid local phone with dashes."""
        model = PhoneModel(phone="079-123-4567")
        assert model.phone == "0791234567"

    def test_valid_phone_with_parentheses(self):
        model = PhoneModel(phone="(079) 1234567")
        assert model.phone == "0791234567"

    def test_invalid_phone_letters(self):
        """Test phone with letters."""
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="+96279123abcd")
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_phone_plus_in_middle(self):
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="0791+234567")
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_phone_too_many_digits(self):
        """Sixteen digits is over the E.164 limit."""
        with pytest.raises(ValidationError) as exc_info:
            PhoneModel(phone="+1234567890123456")
        assert "Invalid phone number" in str(exc_info.value)

    def test_invalid_phone_too_short(self):
        with pytest.raises(ValidationError):
            PhoneModel(phone="12345")

    def test_validate_function_directly(self):
        """Test the validator function directly."""
        assert validate_phone_number("+962 79 123 4567") == "+962791234567"

        with pytest.raises(ValueError):
            validate_phone_number("phone")


class TestGradeLevelValidator:
    """Grades run from 7 to 12."""

    @pytest.mark.parametrize("grade", [7, 8, 9, 10, 11, 12])
    def test_valid_grades(self, grade):
        assert GradeModel(grade=grade).grade == grade

    @pytest.mark.parametrize("grade", [0, 6, 13])
    def test_invalid_grades(self, grade):
        with pytest.raises(ValidationError) as exc_info:
            GradeModel(grade=grade)
        assert "grade level is invalid" in str(exc_info.value)

    def test_numeric_string_is_coerced(self):
        assert GradeModel(grade="9").grade == 9


class TestBillingPeriod:
    def test_valid_period(self):
        model = PeriodModel(month=12, year=2024)
        assert (model.month, model.year) == (12, 2024)

    @pytest.mark.parametrize("month", [0, 13])
    def test_month_out_of_range(self, month):
        with pytest.raises(ValidationError):
            PeriodModel(month=month, year=2024)

    @pytest.mark.parametrize("year", [2019, 2101])
    def test_year_out_of_range(self, year):
        with pytest.raises(ValidationError):
            PeriodModel(month=1, year=year)
