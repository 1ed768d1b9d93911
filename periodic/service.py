import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

from pandas import Series

from periodic.config import PeriodicConfig
from periodic.core.boundaries import BoundaryConverter
from periodic.core.defaults import DefaultPeriod
from periodic.core.exceptions import ErrorMessages, StoreError
from periodic.core.period import Period
from periodic.core.resolution import TemporalResolution
from periodic.core.schema import TimelineSchema
from periodic.core.types import GroupKey, PeriodBoundary
from periodic.core.utils import PeriodsUtils
from periodic.core.validation import PeriodValidator, ValidationResult
from periodic.overlap.resolution import ResolutionResult
from periodic.overlap.resolver import OverlapResolver
from periodic.overlap.types import MutationType
from periodic.store.protocols import PeriodStore

logger = logging.getLogger(__name__)

SiblingsStrategy = Callable[[Period], GroupKey]


@dataclass
class SaveResult:
    period: Period
    validation: ValidationResult
    resolution: Optional[ResolutionResult] = None

    @property
    def saved(self) -> bool:
        return self.validation.is_valid and self.resolution is not None


class PeriodService:
    """
    Saves periods so that no two periods of a timeline overlap.

    Saving a candidate validates its own bounds, then, inside one store
    transaction, checks it holds the same kind of bounds (dates or
    datetimes) as the rest of its timeline, fetches the siblings it
    overlaps, rewrites them and persists the candidate. Which records are
    siblings is decided by the injected ``siblings`` strategy, which maps a
    period to the key of its group; by default the schema's group fields
    are used.

    Example:
    -------
    >>> schema = TimelineSchema(group_fields=["employee_id"])
    >>> service = PeriodService(PandasPeriodStore(schema), schema)
    >>> service.save(service.build({"employee_id": 1, "start_at": "2024-01-01"}))
    """

    def __init__(
            self,
            store: PeriodStore,
            schema: Optional[TimelineSchema] = None,
            siblings: Optional[SiblingsStrategy] = None,
            validator: Optional[PeriodValidator] = None,
            defaults: Optional[DefaultPeriod] = None,
            config: Optional[PeriodicConfig] = None,
    ):
        self.store = store
        self.schema = schema or getattr(store, "schema", None) or TimelineSchema()
        self.siblings = siblings or (lambda period: period.group_key)
        self.config = config or PeriodicConfig()
        self.validator = validator or PeriodValidator()
        self.defaults = defaults or DefaultPeriod(self.config)
        self.resolver = OverlapResolver(
            self.schema,
            self.validator,
            self.config.subsecond_precision,
            duplicate=store.duplicate,
        )

    def build(self, data: Union[Series, Mapping[str, Any]]) -> Period:
        """A new period with its missing bounds defaulted"""
        return self.defaults.apply(Period.create(data, self.schema))

    def save(self, candidate: Period) -> SaveResult:
        validation = self.validator.validate(candidate)
        if not validation.is_valid:
            logger.info(f"Not saving {candidate}: {validation.message}")
            return SaveResult(candidate, validation)

        # the bounds are final from here on; siblings are fetched against them
        group_key = self.siblings(candidate)
        try:
            with self.store.lock(group_key), self.store.transaction():
                self._check_temporal_type(candidate, group_key, validation)
                if not validation.is_valid:
                    logger.info(f"Not saving {candidate}: {validation.message}")
                    return SaveResult(candidate, validation)

                siblings = self.store.fetch_overlapping(group_key, candidate.start, candidate.end)
                resolution = self.resolver.resolve(candidate, siblings)
                self._apply(resolution)
                saved = self.store.save(candidate, validate=False)
        except StoreError as e:
            logger.error(f"Saving {candidate} failed, changes rolled back: {e}")
            raise

        logger.info(f"Saved {saved} in group {group_key} with {len(resolution.mutations)} sibling rewrites")
        return SaveResult(saved, validation, resolution)

    def save_or_raise(self, candidate: Period) -> Period:
        result = self.save(candidate)
        result.validation.raise_if_invalid()
        return result.period

    def _check_temporal_type(self, candidate: Period, group_key: GroupKey, validation: ValidationResult) -> None:
        # a fixed resolution already coerces every bound to one type
        if self.schema.resolution is not None:
            return
        # the candidate's own stored row counts too, so a period never changes type in place
        for period in self.store.fetch_group(group_key):
            if not period.has_same_temporal_type(candidate):
                validation.add(candidate.start_field, ErrorMessages.MIXED_TIMELINE)
            # the rest of the timeline shares this period's type
            return

    def _apply(self, resolution: ResolutionResult) -> None:
        # rewrites are trusted derivations, so they skip validation
        for mutation in resolution.mutations:
            if mutation.type is MutationType.DELETE:
                self.store.destroy(mutation.original)
            else:
                for period in mutation.replacements:
                    self.store.save(period, validate=False)

    # Queries
    # -------

    def current(self, group_key: GroupKey, instant: Optional[PeriodBoundary] = None) -> List[Period]:
        """
        Periods of the group covering the given instant, or the current
        instant of the timeline's resolution (today for date timelines).
        """
        resolution = self._group_resolution(group_key)
        if resolution is None:
            return []
        if instant is None:
            instant = self.config.current_instant(resolution)
        else:
            instant = resolution.coerce(BoundaryConverter.convert(instant))
        return list(self.store.fetch_current(group_key, instant))

    def from_date(self, group_key: GroupKey, instant: PeriodBoundary) -> List[Period]:
        resolution = self._group_resolution(group_key)
        if resolution is None:
            return []
        instant = resolution.coerce(BoundaryConverter.convert(instant))
        return list(self.store.fetch_from(group_key, instant))

    def timeline(self, group_key: GroupKey) -> List[Period]:
        """All periods of the group, ordered by their bounds"""
        return PeriodsUtils(self.store.fetch_group(group_key)).sorted()

    def _group_resolution(self, group_key: GroupKey) -> Optional[TemporalResolution]:
        """
        The resolution fixed on the schema, or else the one of the periods
        already stored in the group; None for an empty group.
        """
        if self.schema.resolution is not None:
            return self.schema.resolution
        for period in self.store.fetch_group(group_key):
            return self.schema.resolution_for(period.start, period.end, self.config.subsecond_precision)
        return None

    def verify(self, group_key: GroupKey) -> List[Tuple[Period, Period]]:
        """Pairs of periods in the group that overlap; empty for a healthy timeline"""
        pairs = PeriodsUtils(self.timeline(group_key)).overlapping_pairs()
        for period, other in pairs:
            logger.warning(f"{period} overlaps {other} in group {group_key}")
        return pairs
