from collections import OrderedDict
from datetime import timedelta
from typing import Callable, Optional, Type

from periodic.core.exceptions import ErrorMessages
from periodic.core.period import Period
from periodic.overlap.detection import (
    EngulfedChecker,
    EngulfingChecker,
    OverlapsLeftChecker,
    OverlapsRightChecker,
)
from periodic.overlap.resolution import (
    DeleteResolver,
    RelationResolver,
    ShrinkEndResolver,
    ShrinkStartResolver,
    SplitResolver,
)
from periodic.overlap.types import Mutation, Relation

# Order matters: a sibling equal to the candidate is engulfed, and only a
# sibling that is neither engulfed nor engulfing is a one-sided overlap
CHECKERS = OrderedDict([
    (Relation.ENGULFED, EngulfedChecker()),  # sibling within the candidate
    (Relation.ENGULFING, EngulfingChecker()),  # sibling around the candidate
    (Relation.OVERLAPS_LEFT, OverlapsLeftChecker()),  # sibling sticks out on the left
    (Relation.OVERLAPS_RIGHT, OverlapsRightChecker()),  # sibling sticks out on the right
])

RESOLVERS = {
    Relation.ENGULFED: DeleteResolver,
    # Returns: DELETE, no replacements
    Relation.ENGULFING: SplitResolver,
    # Returns: SPLIT, [sibling up to candidate start - step, copy from candidate end + step]
    Relation.OVERLAPS_LEFT: ShrinkEndResolver,
    # Returns: SHRINK_END, [sibling up to candidate start - step]
    Relation.OVERLAPS_RIGHT: ShrinkStartResolver,
    # Returns: SHRINK_START, [sibling from candidate end + step]
}


class SiblingTransformer:
    def __init__(
            self,
            candidate: Period,
            sibling: Period,
            step: timedelta,
            duplicate: Optional[Callable[[Period], Period]] = None,
    ) -> None:
        """
        Pair a candidate period with one existing sibling of its timeline.

        Args:
            candidate (Period): The period being saved; never modified.
            sibling (Period): The existing period to make room in.
            step (timedelta): The split step of the candidate's timeline.
            duplicate (Callable): Creates the new record of a split; defaults
                to Period.duplicate.
        """
        self.candidate = candidate
        self.sibling = sibling
        self.step = step
        self.duplicate = duplicate

    def detect_relationship(self) -> Optional[Relation]:
        """
        Detect how the sibling overlaps the candidate.
        Returns None if the two periods do not intersect.
        """
        if not self.sibling.intersects(self.candidate):
            return None

        for relation, checker in CHECKERS.items():
            if checker.check(self.candidate, self.sibling):
                return relation

        return None

    def resolve_overlap(self) -> Optional[Mutation]:
        """Rewrite the sibling so it no longer overlaps the candidate."""
        relation = self.detect_relationship()
        if relation is None:
            return None

        resolver = self._get_resolver(relation)(self.duplicate)
        return resolver.resolve(self.candidate, self.sibling, self.step)

    @staticmethod
    def _get_resolver(relation: Relation) -> Type[RelationResolver]:
        resolver = RESOLVERS.get(relation)
        if resolver is None:
            raise ValueError(ErrorMessages.NO_RESOLVER.format(relation))
        return resolver


def classify(candidate: Period, sibling: Period) -> Optional[Relation]:
    """The relation of an intersecting sibling to the candidate, or None if disjoint"""
    # the step only matters when resolving
    return SiblingTransformer(candidate, sibling, timedelta(0)).detect_relationship()
