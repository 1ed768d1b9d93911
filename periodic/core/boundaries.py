import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional, Protocol, Type

from numpy import datetime64, datetime_data
from pandas import Series, Timestamp, isna
from pandas.api.types import is_scalar

from periodic.core.exceptions import ErrorMessages, InvalidBoundaryTypeError
from periodic.core.types import NativeBoundary, PeriodBoundary

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_CALENDAR_UNITS = ("Y", "M", "W", "D")


class ToNativeProtocol(Protocol):
    def __call__(self, value: PeriodBoundary) -> Optional[NativeBoundary]: ...


def is_missing(value: Any) -> bool:
    return value is None or (is_scalar(value) and not isinstance(value, str) and bool(isna(value)))


def _str_to_native(value: str) -> NativeBoundary:
    text = value.strip()
    try:
        if _DATE_ONLY.match(text):
            return date.fromisoformat(text)
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    # let pandas have a go at anything fromisoformat rejects
    try:
        return Timestamp(text).to_pydatetime()
    except (ValueError, TypeError, OverflowError) as e:
        raise InvalidBoundaryTypeError(ErrorMessages.UNPARSEABLE_BOUNDARY.format(value)) from e


def _datetime64_to_native(value: datetime64) -> Optional[NativeBoundary]:
    unit, _ = datetime_data(value.dtype)
    if unit in _CALENDAR_UNITS:
        return value.astype("datetime64[D]").astype(object)
    return value.astype("datetime64[us]").astype(object)


@dataclass
class BoundaryConverter:
    """
    Converts user-provided boundary values into the native ``date`` or
    ``datetime`` used throughout the timeline.

    Plain Python values are kept rather than ``pd.Timestamp`` because the
    open-ended sentinel (year 9999) lies outside the nanosecond range pandas
    timestamps can represent.
    """

    to_native: ToNativeProtocol
    original_type: Type[Any]

    @classmethod
    def for_type(cls, sample_value: PeriodBoundary) -> "BoundaryConverter":
        """Factory method to create appropriate converter based on input type"""
        if is_missing(sample_value):
            return cls(to_native=lambda value: None, original_type=type(None))
        # Handle Timestamp first because pandas.Timestamp is a subclass of datetime
        if isinstance(sample_value, Timestamp):
            return cls(to_native=lambda value: value.to_pydatetime(), original_type=Timestamp)
        # datetime before date for the same reason
        if isinstance(sample_value, datetime):
            return cls(to_native=lambda value: value, original_type=datetime)
        if isinstance(sample_value, date):
            return cls(to_native=lambda value: value, original_type=date)
        if isinstance(sample_value, datetime64):
            return cls(to_native=_datetime64_to_native, original_type=datetime64)
        if isinstance(sample_value, str):
            return cls(to_native=_str_to_native, original_type=str)
        raise InvalidBoundaryTypeError(ErrorMessages.UNSUPPORTED_BOUNDARY.format(type(sample_value)))

    @classmethod
    def convert(cls, value: PeriodBoundary) -> Optional[NativeBoundary]:
        return cls.for_type(value).to_native(value)


@dataclass(frozen=True)
class PeriodBoundaries:
    start: Optional[NativeBoundary]
    end: Optional[NativeBoundary]

    @classmethod
    def create(cls, start: PeriodBoundary, end: PeriodBoundary) -> "PeriodBoundaries":
        return cls(start=BoundaryConverter.convert(start), end=BoundaryConverter.convert(end))

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None


# This class handles the mapping between user-provided field names and our internal structure
class _BoundaryAccessor:
    """
    Manages access to period boundaries using user-provided field names.

    Records keep whatever field names the host application uses for their
    bounds; the accessor reads and writes those fields so the rest of the
    package only deals with ``start`` and ``end``.
    """

    def __init__(self, start_field: str, end_field: str):
        self.start_field = start_field
        self.end_field = end_field

    def get_boundaries(self, data: Series) -> PeriodBoundaries:
        """Extract boundary values from data using configured field names"""
        return PeriodBoundaries.create(
            start=data.get(self.start_field),
            end=data.get(self.end_field),
        )

    def set_boundaries(self, data: Series, boundaries: PeriodBoundaries) -> Series:
        """Return a copy of data carrying the given boundary values"""
        data = data.copy()
        data[self.start_field] = boundaries.start
        data[self.end_field] = boundaries.end
        return data
