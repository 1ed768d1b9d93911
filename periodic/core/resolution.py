from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Optional

from periodic.core.exceptions import ErrorMessages, InvalidResolutionError
from periodic.core.types import MAX_DATE, MAX_DATETIME, MIN_DATE, MIN_DATETIME, NativeBoundary

# Python datetimes carry at most microseconds
MAX_PRECISION = 6
DEFAULT_PRECISION = 6


class Granularity(Enum):
    DAY = "day"
    SUBSECOND = "subsecond"


@dataclass(frozen=True)
class TemporalResolution:
    """
    The smallest unit a timeline distinguishes.

    The split step (``step``) is what makes two periods abut without
    overlapping: a sibling trimmed against a candidate ends one step before
    the candidate starts, or starts one step after it ends. It is one day for
    date timelines and one unit of the configured sub-second precision for
    timestamped timelines.
    """

    granularity: Granularity
    precision: int = DEFAULT_PRECISION

    def __post_init__(self):
        if not isinstance(self.granularity, Granularity):
            raise InvalidResolutionError(ErrorMessages.UNKNOWN_GRANULARITY.format(self.granularity))
        if not isinstance(self.precision, int) or not 0 <= self.precision <= MAX_PRECISION:
            raise InvalidResolutionError(
                ErrorMessages.PRECISION_RANGE.format(MAX_PRECISION, self.precision)
            )

    @classmethod
    def day(cls) -> "TemporalResolution":
        return cls(Granularity.DAY)

    @classmethod
    def subsecond(cls, precision: int = DEFAULT_PRECISION) -> "TemporalResolution":
        return cls(Granularity.SUBSECOND, precision)

    @classmethod
    def infer(
            cls,
            start: Optional[NativeBoundary],
            end: Optional[NativeBoundary],
            precision: int = DEFAULT_PRECISION,
    ) -> "TemporalResolution":
        """Day granularity unless either bound carries a time of day"""
        if isinstance(start, datetime) or isinstance(end, datetime):
            return cls.subsecond(precision)
        return cls.day()

    @property
    def step(self) -> timedelta:
        if self.granularity is Granularity.DAY:
            return timedelta(days=1)
        return timedelta(microseconds=10 ** (MAX_PRECISION - self.precision))

    @property
    def sentinel_max(self) -> NativeBoundary:
        return MAX_DATE if self.granularity is Granularity.DAY else MAX_DATETIME

    @property
    def sentinel_min(self) -> NativeBoundary:
        return MIN_DATE if self.granularity is Granularity.DAY else MIN_DATETIME

    def coerce(self, value: Optional[NativeBoundary]) -> Optional[NativeBoundary]:
        """Bring a native bound to this resolution's temporal type"""
        if value is None:
            return None
        if self.granularity is Granularity.DAY:
            return value.date() if isinstance(value, datetime) else value
        if not isinstance(value, datetime):
            return datetime.combine(value, time.min)
        # drop digits finer than the declared precision
        unit = 10 ** (MAX_PRECISION - self.precision)
        return value.replace(microsecond=value.microsecond - value.microsecond % unit)
