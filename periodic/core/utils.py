from datetime import timedelta
from itertools import combinations
from typing import Iterable, List, Tuple

from pandas import DataFrame

from periodic.core.period import Period


class PeriodsUtils:
    def __init__(self, periods: Iterable[Period]):
        """
        Helpers over the periods of a single timeline.

        periods (Iterable[Period]): the periods to inspect; only complete
            periods (both bounds present) take part.
        """
        self.periods = [period for period in periods if period.is_complete]

    def sorted(self) -> List[Period]:
        return sorted(self.periods, key=lambda period: (period.start, period.end))

    def overlapping_pairs(self) -> List[Tuple[Period, Period]]:
        """Every pair of distinct periods sharing at least one instant"""
        return [
            (period, other)
            for period, other in combinations(self.sorted(), 2)
            if period.intersects(other)
        ]

    def gaps(self, step: timedelta) -> List[Tuple[Period, Period]]:
        """Consecutive periods with uncovered time between them"""
        ordered = self.sorted()
        return [
            (period, following)
            for period, following in zip(ordered, ordered[1:])
            if period.end + step < following.start
        ]

    def to_pandas(self) -> DataFrame:
        return DataFrame([period.data for period in self.sorted()], dtype=object)
