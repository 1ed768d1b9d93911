import os
from datetime import date, datetime
from typing import Callable, Mapping, Optional

from periodic.core.exceptions import ErrorMessages, InvalidResolutionError
from periodic.core.resolution import DEFAULT_PRECISION, MAX_PRECISION, Granularity, TemporalResolution
from periodic.core.types import NativeBoundary

PRECISION_ENV_VAR = "PERIODIC_SUBSECOND_PRECISION"


class PeriodicConfig:
    """
    Runtime settings shared by the save workflow.

    Supplies the clock used to default new periods and to answer "current"
    queries, and the sub-second precision assumed for timelines whose schema
    does not fix a resolution.
    """

    def __init__(
            self,
            subsecond_precision: int = DEFAULT_PRECISION,
            today: Optional[Callable[[], date]] = None,
            now: Optional[Callable[[], datetime]] = None,
    ):
        self.subsecond_precision = subsecond_precision
        self.today = today or date.today
        self.now = now or datetime.now
        self._validate_precision()

    def _validate_precision(self) -> None:
        if not isinstance(self.subsecond_precision, int) or not 0 <= self.subsecond_precision <= MAX_PRECISION:
            raise InvalidResolutionError(
                ErrorMessages.PRECISION_RANGE.format(MAX_PRECISION, self.subsecond_precision)
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **kwargs) -> "PeriodicConfig":
        environ = os.environ if environ is None else environ
        raw = environ.get(PRECISION_ENV_VAR)
        if raw is not None:
            try:
                kwargs.setdefault("subsecond_precision", int(raw))
            except ValueError as e:
                raise InvalidResolutionError(
                    ErrorMessages.PRECISION_RANGE.format(MAX_PRECISION, raw)
                ) from e
        return cls(**kwargs)

    def current_instant(self, resolution: TemporalResolution) -> NativeBoundary:
        if resolution.granularity is Granularity.DAY:
            return self.today()
        return resolution.coerce(self.now())
