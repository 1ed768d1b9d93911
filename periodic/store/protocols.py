from typing import ContextManager, Protocol, Sequence, runtime_checkable

from periodic.core.period import Period
from periodic.core.types import GroupKey, NativeBoundary


@runtime_checkable
class PeriodStore(Protocol):
    """
    What the save workflow needs from persistence.

    Queries use inclusive bounds and may return periods in any order; they
    must see uncommitted writes of an open transaction.
    """

    def fetch_group(self, group_key: GroupKey) -> Sequence[Period]:
        """Every period of the group with both bounds set, whatever their temporal type"""
        ...

    def fetch_overlapping(self, group_key: GroupKey, start: NativeBoundary, end: NativeBoundary) -> Sequence[Period]:
        """Periods of the group with ``start <= end_q`` and ``end >= start_q``"""
        ...

    def fetch_current(self, group_key: GroupKey, instant: NativeBoundary) -> Sequence[Period]:
        """Periods of the group containing the instant"""
        ...

    def fetch_from(self, group_key: GroupKey, instant: NativeBoundary) -> Sequence[Period]:
        """Periods of the group not entirely before the instant"""
        ...

    def save(self, period: Period, validate: bool = True) -> Period:
        """Persist a period and return it with its identity assigned"""
        ...

    def destroy(self, period: Period) -> None: ...

    def duplicate(self, period: Period) -> Period:
        """A not-yet-persisted copy with identical non-bound attributes"""
        ...

    def transaction(self) -> ContextManager: ...

    def lock(self, group_key: GroupKey) -> ContextManager:
        """Serializes resolutions within one group"""
        ...
