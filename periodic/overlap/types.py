from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Tuple

from periodic.core.period import Period


class Relation(Enum):
    """
    How an existing sibling overlaps a candidate period.

    Checked in declaration order; the first match wins.
    """

    ENGULFED = auto()  # sibling lies within (or equals) the candidate
    ENGULFING = auto()  # sibling strictly contains the candidate on both sides
    OVERLAPS_LEFT = auto()  # sibling starts before the candidate, ends within it
    OVERLAPS_RIGHT = auto()  # sibling starts within the candidate, ends after it


class MutationType(Enum):
    DELETE = auto()
    SPLIT = auto()
    SHRINK_END = auto()
    SHRINK_START = auto()


@dataclass(frozen=True)
class Mutation:
    """A rewrite of one sibling, to be persisted by the store"""

    type: MutationType
    original: Period
    replacements: Tuple[Period, ...] = field(default_factory=tuple)

    @property
    def is_degenerate(self) -> bool:
        return any(period.is_degenerate for period in self.replacements)
