from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from periodic.core.exceptions import ErrorMessages, PeriodValidationError
from periodic.core.period import Period


@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: Dict[str, List[str]] = field(default_factory=dict)

    def add(self, field_name: str, message: str) -> None:
        self.errors.setdefault(field_name, []).append(message)
        self.is_valid = False

    @property
    def message(self) -> Optional[str]:
        if self.is_valid:
            return None
        return "; ".join(f"{name} {msg}" for name, messages in self.errors.items() for msg in messages)

    def raise_if_invalid(self) -> None:
        if not self.is_valid:
            raise PeriodValidationError(self.errors)


class PeriodValidator:
    """Validates the presence and ordering of a period's own bounds"""

    def validate(self, period: Period) -> ValidationResult:
        result = ValidationResult()

        if period.start is None:
            result.add(period.start_field, ErrorMessages.BLANK)
        if period.end is None:
            result.add(period.end_field, ErrorMessages.BLANK)
        if not result.is_valid:
            return result

        # a date and a datetime cannot be ordered against each other
        if isinstance(period.start, datetime) != isinstance(period.end, datetime):
            result.add(period.end_field, ErrorMessages.MIXED_TYPES.format(period.start_field))
            return result

        if period.end < period.start:
            result.add(period.end_field, ErrorMessages.INVALID)

        return result
