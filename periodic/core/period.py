from datetime import date, datetime
from typing import Any, Hashable, Mapping, Optional, Union

from pandas import Series

from periodic.core.boundaries import BoundaryConverter, PeriodBoundaries, is_missing
from periodic.core.exceptions import InvalidSchemaError
from periodic.core.schema import TimelineSchema
from periodic.core.types import GroupKey, NativeBoundary, PeriodBoundary


class Period:
    """
    A record with inclusive ``[start, end]`` bounds belonging to one timeline.

    A Period wraps the full record (a pandas Series) together with the
    schema that names its bound, identity and group fields. It is treated as
    an immutable snapshot: every change to its bounds produces a new Period,
    so a sibling being split can safely be used as the source of both halves.

    The class provides operations for:
    - Reading bounds, identity and group membership
    - Deriving copies with new bounds or a new identity
    - Checking relationships with other periods and instants
    """

    @classmethod
    def create(
            cls,
            data: Union[Series, Mapping[str, Any]],
            schema: Optional[TimelineSchema] = None,
    ) -> "Period":
        """
        Creates a new Period from a record and the timeline schema.

        Bound and key fields absent from the record are added as ``None``;
        bound values are normalized to ``date``/``datetime``, and to the
        schema's temporal type when its resolution is fixed.
        """
        schema = schema or TimelineSchema()
        data = cls._to_series(data)

        for name in (schema.key_field, schema.start_field, schema.end_field):
            if name not in data.index:
                data[name] = None

        boundaries = schema.boundary_accessor.get_boundaries(data)
        if schema.resolution is not None:
            boundaries = PeriodBoundaries(
                start=schema.resolution.coerce(boundaries.start),
                end=schema.resolution.coerce(boundaries.end),
            )
        data = schema.boundary_accessor.set_boundaries(data, boundaries)

        return cls(data, schema, boundaries)

    def __init__(self, data: Series, schema: TimelineSchema, boundaries: Optional[PeriodBoundaries] = None):
        self.data = data
        self.schema = schema
        self._boundaries = boundaries or schema.boundary_accessor.get_boundaries(data)

    @staticmethod
    def _to_series(data: Union[Series, Mapping[str, Any]]) -> Series:
        if isinstance(data, Series):
            series = data.astype(object)
        elif isinstance(data, Mapping):
            series = Series(dict(data), dtype=object)
        else:
            raise InvalidSchemaError("Period data must be a pandas Series or a mapping")
        if not all(isinstance(name, str) for name in series.index):
            raise InvalidSchemaError("All record field names must be strings")
        return series

    def __repr__(self) -> str:
        return f"Period(key={self.key!r}, start={self.start!r}, end={self.end!r})"

    # Record Accessors
    # ----------------

    @property
    def start(self) -> Optional[NativeBoundary]:
        return self._boundaries.start

    @property
    def end(self) -> Optional[NativeBoundary]:
        return self._boundaries.end

    @property
    def boundaries(self) -> tuple:
        return self.start, self.end

    @property
    def start_field(self) -> str:
        return self.schema.start_field

    @property
    def end_field(self) -> str:
        return self.schema.end_field

    @property
    def key(self) -> Optional[Hashable]:
        key = self.data[self.schema.key_field]
        return None if is_missing(key) else key

    @property
    def is_new_record(self) -> bool:
        return self.key is None

    @property
    def group_key(self) -> GroupKey:
        return self.schema.group_key(self.data)

    @property
    def attributes(self) -> dict:
        """Everything except identity and bounds"""
        skip = {self.schema.key_field, self.start_field, self.end_field}
        return {name: value for name, value in self.data.items() if name not in skip}

    def to_dict(self) -> dict:
        return dict(self.data.items())

    # Derivations
    # -----------

    def update_start(self, new_start: PeriodBoundary) -> "Period":
        """Creates a new period with the given start and this period's end"""
        return self._with_boundaries(PeriodBoundaries(self._convert(new_start), self.end))

    def update_end(self, new_end: PeriodBoundary) -> "Period":
        """Creates a new period with this period's start and the given end"""
        return self._with_boundaries(PeriodBoundaries(self.start, self._convert(new_end)))

    def update_boundaries(self, new_start: PeriodBoundary, new_end: PeriodBoundary) -> "Period":
        return self._with_boundaries(PeriodBoundaries(self._convert(new_start), self._convert(new_end)))

    def with_key(self, key: Optional[Hashable]) -> "Period":
        data = self.data.copy()
        data[self.schema.key_field] = key
        return Period(data, self.schema, self._boundaries)

    def duplicate(self) -> "Period":
        """A not-yet-persisted copy with identical attributes and bounds"""
        return self.with_key(None)

    def _convert(self, value: PeriodBoundary) -> Optional[NativeBoundary]:
        value = BoundaryConverter.convert(value)
        if self.schema.resolution is not None:
            return self.schema.resolution.coerce(value)
        return value

    def _with_boundaries(self, boundaries: PeriodBoundaries) -> "Period":
        data = self.schema.boundary_accessor.set_boundaries(self.data, boundaries)
        return Period(data, self.schema, boundaries)

    # Period Relationships
    # --------------------

    @property
    def is_complete(self) -> bool:
        return self._boundaries.is_complete

    @property
    def is_timestamped(self) -> bool:
        """True when the bounds carry a time of day"""
        return isinstance(self.start, datetime) or isinstance(self.end, datetime)

    def has_same_temporal_type(self, other: "Period") -> bool:
        return self.is_timestamped == other.is_timestamped

    @property
    def is_degenerate(self) -> bool:
        """True when the bounds describe an empty interval"""
        return self.is_complete and self.end < self.start

    def within_interval(self, start: NativeBoundary, end: NativeBoundary) -> bool:
        """Checks if this period shares at least one instant with ``[start, end]``"""
        return self.is_complete and self.start <= end and self.end >= start

    def intersects(self, other: "Period") -> bool:
        return other.is_complete and self.within_interval(other.start, other.end)

    def contains_date(self, instant: NativeBoundary) -> bool:
        return self.within_interval(instant, instant)

    def is_current(self, today: Optional[NativeBoundary] = None) -> bool:
        today = today or date.today()
        instant = self.schema.resolution_for(self.start, self.end).coerce(today)
        return self.contains_date(instant)


def intersects(period: Period, other: Period) -> bool:
    """Inclusive-bound overlap test between two periods"""
    return period.intersects(other)


def contains_current_period(period: Period, instant: NativeBoundary) -> bool:
    return period.contains_date(instant)
