from typing import Dict, List, Optional


class PeriodicError(Exception):
    """Base exception for all period handling errors"""
    pass


class PeriodValidationError(PeriodicError):
    """Raised when a period fails presence or ordering validation"""

    def __init__(self, errors: Optional[Dict[str, List[str]]] = None, message: Optional[str] = None):
        self.errors = {field: list(messages) for field, messages in (errors or {}).items()}
        if message is None:
            message = "; ".join(
                f"{field} {msg}" for field, messages in self.errors.items() for msg in messages
            ) or "Period is invalid"
        super().__init__(message)


class InvalidBoundaryTypeError(PeriodicError):
    """Raised when a boundary value cannot be converted to a date or datetime"""
    pass


class InvalidResolutionError(PeriodicError):
    """Raised when a temporal resolution is misconfigured"""
    pass


class InvalidSchemaError(PeriodicError):
    """Raised when a timeline schema does not match the record data"""
    pass


class StoreError(PeriodicError):
    """Raised when the backing store rejects an operation"""
    pass


class PeriodNotFoundError(StoreError):
    """Raised when a period is not present in the store"""
    pass


class ErrorMessages:
    """Centralized error message definitions for consistent error handling"""
    BLANK = "can't be blank"
    INVALID = "is invalid"
    MIXED_TYPES = "must have the same temporal type as {}"
    MIXED_TIMELINE = "must have the same temporal type as the other periods of its timeline"
    MIXED_SIBLING = "Sibling {} and candidate {} mix dates and datetimes"
    UNSUPPORTED_BOUNDARY = "Unsupported boundary type: {}"
    UNPARSEABLE_BOUNDARY = "Unable to parse boundary value: {!r}"
    PRECISION_RANGE = "Sub-second precision must be between 0 and {}, got {}"
    UNKNOWN_GRANULARITY = "Unknown granularity: {}"
    MISSING_FIELD = "Record is missing required field: {}"
    DUPLICATE_FIELDS = "Timeline fields must be distinct, got {}"
    NOT_PERSISTED = "Period has not been persisted: {}"
    NOT_FOUND = "No period with key {!r} in store"
    INVALID_CANDIDATE = "Refusing to resolve overlaps for an invalid candidate: {}"
    DEGENERATE = "{} of period {!r} produced an empty interval [{}, {}]"
    NO_RESOLVER = "No resolver registered for relation: {}"
