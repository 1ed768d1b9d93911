from datetime import date, datetime

import pytest

from periodic.core.exceptions import PeriodValidationError
from periodic.core.validation import PeriodValidator, ValidationResult


@pytest.fixture
def validator():
    return PeriodValidator()


class TestPeriodValidator:
    def test_valid_period(self, validator, period_factory):
        result = validator.validate(period_factory(date(2024, 1, 1), date(2024, 12, 31)))

        assert result.is_valid
        assert result.errors == {}
        assert result.message is None

    def test_single_instant_is_valid(self, validator, period_factory):
        assert validator.validate(period_factory(date(2024, 1, 1), date(2024, 1, 1))).is_valid

    def test_blank_start(self, validator, period_factory):
        result = validator.validate(period_factory(None, date(2024, 12, 31)))

        assert not result.is_valid
        assert result.errors == {"start_at": ["can't be blank"]}

    def test_blank_bounds(self, validator, period_factory):
        result = validator.validate(period_factory(None, None))
        assert result.errors == {"start_at": ["can't be blank"], "end_at": ["can't be blank"]}

    def test_end_before_start(self, validator, period_factory):
        result = validator.validate(period_factory(date(2024, 6, 10), date(2024, 6, 1)))

        assert result.errors == {"end_at": ["is invalid"]}
        assert result.message == "end_at is invalid"

    def test_mixed_temporal_types(self, validator, period_factory):
        result = validator.validate(period_factory(date(2024, 1, 1), datetime(2024, 6, 1, 8)))

        assert not result.is_valid
        assert list(result.errors) == ["end_at"]

    def test_does_not_modify_period(self, validator, period_factory):
        period = period_factory(date(2024, 6, 10), date(2024, 6, 1))
        validator.validate(period)
        assert period.boundaries == (date(2024, 6, 10), date(2024, 6, 1))


class TestValidationResult:
    def test_raise_if_invalid(self):
        result = ValidationResult()
        result.add("end_at", "is invalid")

        with pytest.raises(PeriodValidationError) as excinfo:
            result.raise_if_invalid()
        assert excinfo.value.errors == {"end_at": ["is invalid"]}
        assert str(excinfo.value) == "end_at is invalid"

    def test_valid_result_does_not_raise(self):
        ValidationResult().raise_if_invalid()
