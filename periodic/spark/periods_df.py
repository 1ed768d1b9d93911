import logging
from datetime import date
from numbers import Integral
from typing import List, Optional

import pyspark.sql.functions as sfn
from pyspark.sql.dataframe import DataFrame

from periodic.core.exceptions import ErrorMessages, InvalidSchemaError
from periodic.core.period import Period
from periodic.core.schema import TimelineSchema
from periodic.core.types import GroupKey, NativeBoundary
from periodic.overlap.resolver import OverlapResolver
from periodic.overlap.types import MutationType
from periodic.spark.functions import from_date, in_group, within_interval

logger = logging.getLogger(__name__)


class PeriodsDF:
    """
    A wrapper over a Spark DataFrame of period records.

    Provides the query scopes of a timeline (overlapping an interval,
    containing an instant, not entirely in the past, siblings of a group) and
    an immutable insert that resolves overlaps the same way the save workflow
    does, returning a new :class:`PeriodsDF`.

    Examples:
    --------
    >>> df = spark.createDataFrame(
    ...     [[1, "e1", date(2024, 1, 1), date(9999, 1, 1)]],
    ...     "id LONG, employee STRING, start_at DATE, end_at DATE",
    ... )
    >>> pdf = PeriodsDF(df, TimelineSchema(group_fields=["employee"]))
    >>> pdf.within_date(date(2024, 6, 1)).df.count()
    1
    """

    def __init__(self, df: DataFrame, schema: Optional[TimelineSchema] = None) -> None:
        self.df = df
        self.schema = schema or TimelineSchema()
        self._validate_columns()

    def _validate_columns(self) -> None:
        missing = [name for name in self.schema.structural_fields if name not in self.df.columns]
        if missing:
            raise InvalidSchemaError(ErrorMessages.MISSING_FIELD.format(", ".join(missing)))

    def _wrap(self, df: DataFrame) -> "PeriodsDF":
        return PeriodsDF(df, self.schema)

    # Scopes
    # ------

    def within_interval(self, start: NativeBoundary, end: NativeBoundary) -> "PeriodsDF":
        return self._wrap(
            self.df.filter(within_interval(self.schema.start_field, self.schema.end_field, start, end))
        )

    def within_date(self, instant: NativeBoundary) -> "PeriodsDF":
        return self.within_interval(instant, instant)

    def current(self, today: Optional[NativeBoundary] = None) -> "PeriodsDF":
        return self.within_date(today or date.today())

    def from_date(self, instant: NativeBoundary) -> "PeriodsDF":
        return self._wrap(self.df.filter(from_date(self.schema.end_field, instant)))

    def siblings(self, group_key: GroupKey) -> "PeriodsDF":
        return self._wrap(self.df.filter(in_group(self.schema.group_fields, group_key)))

    def overlapping(self, period: Period) -> "PeriodsDF":
        """Periods of the same group sharing an instant with the given one, itself excluded"""
        overlapping = self.siblings(period.group_key).within_interval(period.start, period.end)
        if period.key is None:
            return overlapping
        return self._wrap(overlapping.df.filter(~sfn.col(self.schema.key_field).eqNullSafe(period.key)))

    def to_periods(self) -> List[Period]:
        return [Period.create(row.asDict(), self.schema) for row in self.df.collect()]

    # Writes
    # ------

    def insert(self, candidate: Period, resolver: Optional[OverlapResolver] = None) -> "PeriodsDF":
        """
        Returns a new :class:`PeriodsDF` holding the candidate, with every
        sibling it overlaps deleted, split or shrunk. New records (the
        candidate if unsaved, the second half of a split) receive integer
        keys following the largest existing one.
        """
        resolver = resolver or OverlapResolver(self.schema)
        siblings = self.overlapping(candidate).to_periods()
        result = resolver.resolve(candidate, siblings)

        replaced = [m.original.key for m in result.mutations]
        if candidate.key is not None:
            replaced.append(candidate.key)
        written = [period for m in result.mutations if m.type is not MutationType.DELETE for period in m.replacements]
        written.append(candidate)

        written = self._assign_keys(written)
        logger.info(f"Inserting {candidate}: {len(result.mutations)} sibling rewrites")

        remaining = self.df.filter(~sfn.col(self.schema.key_field).isin(replaced)) if replaced else self.df
        rows = [tuple(period.data.get(name) for name in self.df.columns) for period in written]
        additions = self.df.sparkSession.createDataFrame(rows, schema=self.df.schema)
        return self._wrap(remaining.unionByName(additions))

    def _assign_keys(self, periods: List[Period]) -> List[Period]:
        if all(period.key is not None for period in periods):
            return periods
        current_max = self.df.agg(sfn.max(self.schema.key_field)).collect()[0][0]
        if current_max is not None and not isinstance(current_max, Integral):
            raise InvalidSchemaError(f"Cannot assign keys after non-integer key {current_max!r}")
        next_key = (current_max or 0) + 1

        keyed = []
        for period in periods:
            if period.key is None:
                period = period.with_key(next_key)
                next_key += 1
            keyed.append(period)
        return keyed
