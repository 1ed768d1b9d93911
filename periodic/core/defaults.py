import logging
from typing import Optional

from periodic.config import PeriodicConfig
from periodic.core.period import Period

logger = logging.getLogger(__name__)


class DefaultPeriod:
    """
    Fills in the bounds of a freshly built record.

    A new record without a start begins today; one without an end stays open
    until the maximum sentinel of its timeline. Persisted records are never
    touched, and the minimum sentinel is never assigned.
    """

    def __init__(self, config: Optional[PeriodicConfig] = None):
        self.config = config or PeriodicConfig()

    def should_apply(self, period: Period) -> bool:
        return period.is_new_record

    def apply(self, period: Period) -> Period:
        if not self.should_apply(period) or period.is_complete:
            return period

        resolution = period.schema.resolution_for(
            period.start, period.end, self.config.subsecond_precision
        )
        start = period.start if period.start is not None else resolution.coerce(self.config.today())
        end = period.end if period.end is not None else resolution.sentinel_max

        logger.debug(f"Defaulting bounds of new period to [{start}, {end}]")
        return period.update_boundaries(start, end)
