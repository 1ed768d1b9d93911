import logging
from contextlib import contextmanager
from numbers import Integral
from threading import Lock, RLock
from typing import Dict, Iterator, List, Optional

from pandas import DataFrame, Series, concat

from periodic.core.boundaries import is_missing
from periodic.core.exceptions import ErrorMessages, PeriodNotFoundError, StoreError
from periodic.core.period import Period
from periodic.core.schema import TimelineSchema
from periodic.core.types import GroupKey, NativeBoundary
from periodic.core.validation import PeriodValidator

logger = logging.getLogger(__name__)


class PandasPeriodStore:
    """
    An in-memory period store backed by a pandas DataFrame.

    Rows are indexed by the period identity; integer identities are assigned
    on first save. All columns use the object dtype so plain ``date`` values
    and the year-9999 sentinel are stored as-is.

    Transactions snapshot the whole frame and restore it on error. They are
    serialized across groups, so ``lock`` only adds ordering between callers
    that share a group.
    """

    def __init__(
            self,
            schema: Optional[TimelineSchema] = None,
            data: Optional[DataFrame] = None,
            validator: Optional[PeriodValidator] = None,
    ):
        self.schema = schema or TimelineSchema()
        self.validator = validator or PeriodValidator()

        self._df = DataFrame(columns=list(self.schema.structural_fields), dtype=object)
        self._next_key = 1
        self._write_lock = RLock()
        self._group_locks: Dict[GroupKey, RLock] = {}
        self._group_locks_guard = Lock()

        if data is not None:
            for _, row in data.iterrows():
                self._insert(Period.create(row, self.schema))

    # Queries
    # -------

    def fetch_group(self, group_key: GroupKey) -> List[Period]:
        return self._to_periods(self._complete_in_group(group_key))

    def fetch_overlapping(self, group_key: GroupKey, start: NativeBoundary, end: NativeBoundary) -> List[Period]:
        candidates = self._complete_in_group(group_key)
        mask = (candidates[self.schema.start_field] <= end) & (candidates[self.schema.end_field] >= start)
        return self._to_periods(candidates[mask])

    def fetch_current(self, group_key: GroupKey, instant: NativeBoundary) -> List[Period]:
        return self.fetch_overlapping(group_key, instant, instant)

    def fetch_from(self, group_key: GroupKey, instant: NativeBoundary) -> List[Period]:
        candidates = self._complete_in_group(group_key)
        return self._to_periods(candidates[candidates[self.schema.end_field] >= instant])

    def periods(self, group_key: Optional[GroupKey] = None) -> List[Period]:
        with self._write_lock:
            df = self._df if group_key is None else self._df[self._group_mask(self._df, group_key)]
            return self._to_periods(df)

    def to_pandas(self) -> DataFrame:
        with self._write_lock:
            return self._df.copy()

    def __len__(self) -> int:
        return len(self._df.index)

    # Writes
    # ------

    def save(self, period: Period, validate: bool = True) -> Period:
        if validate:
            self.validator.validate(period).raise_if_invalid()
        # fails early on records lacking group fields
        period.group_key

        with self._write_lock:
            if period.is_new_record:
                return self._insert(period)
            if period.key not in self._df.index:
                raise PeriodNotFoundError(ErrorMessages.NOT_FOUND.format(period.key))
            self._write(period)
            return period

    def destroy(self, period: Period) -> None:
        if period.is_new_record:
            raise StoreError(ErrorMessages.NOT_PERSISTED.format(period))
        with self._write_lock:
            if period.key not in self._df.index:
                raise PeriodNotFoundError(ErrorMessages.NOT_FOUND.format(period.key))
            self._df = self._df.drop(index=period.key)

    def duplicate(self, period: Period) -> Period:
        return period.duplicate()

    @contextmanager
    def transaction(self) -> Iterator["PandasPeriodStore"]:
        with self._write_lock:
            snapshot = self._df.copy()
            next_key = self._next_key
            try:
                yield self
            except Exception:
                self._df = snapshot
                self._next_key = next_key
                logger.warning("Transaction rolled back")
                raise

    @contextmanager
    def lock(self, group_key: GroupKey) -> Iterator[None]:
        with self._group_locks_guard:
            group_lock = self._group_locks.setdefault(group_key, RLock())
        with group_lock:
            yield

    # Internals
    # ---------

    def _insert(self, period: Period) -> Period:
        with self._write_lock:
            if period.is_new_record:
                period = period.with_key(self._next_key)
            elif period.key in self._df.index:
                raise StoreError(f"Duplicate key {period.key!r}")
            if isinstance(period.key, Integral):
                self._next_key = max(self._next_key, int(period.key) + 1)
            self._write(period)
            return period

    def _write(self, period: Period) -> None:
        row = DataFrame([period.data.to_dict()], index=[period.key], dtype=object)
        remaining = self._df.drop(index=period.key, errors="ignore")
        self._df = row if remaining.empty else concat([remaining, row])

    def _group_mask(self, df: DataFrame, group_key: GroupKey) -> Series:
        mask = Series(True, index=df.index)
        for name, value in zip(self.schema.group_fields, group_key):
            if name not in df.columns:
                return Series(False, index=df.index)
            mask &= df[name] == value
        return mask

    def _complete_in_group(self, group_key: GroupKey) -> DataFrame:
        with self._write_lock:
            df = self._df
        mask = self._group_mask(df, group_key)
        mask &= df[self.schema.start_field].notna() & df[self.schema.end_field].notna()
        return df[mask]

    def _to_periods(self, df: DataFrame) -> List[Period]:
        # rows are padded with NaN for attributes only other records carry
        structural = set(self.schema.structural_fields)
        periods = []
        for _, row in df.iterrows():
            present = [name for name, value in row.items() if name in structural or not is_missing(value)]
            periods.append(Period.create(row[present], self.schema))
        return periods
