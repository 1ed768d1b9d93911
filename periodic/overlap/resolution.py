from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Dict, List, Optional

from periodic.core.period import Period
from periodic.overlap.types import Mutation, MutationType


@dataclass
class ResolutionResult:
    """The sibling rewrites needed to make room for one candidate"""
    _mutations: List[Mutation] = field(repr=False)
    metadata: Optional[Dict] = None
    warnings: List[str] = field(default_factory=list)

    def __init__(self, mutations: List[Mutation], metadata=None, warnings=None):
        # Make defensive copies of mutable inputs
        self._mutations = list(mutations)
        self.metadata = metadata.copy() if metadata is not None else None
        self.warnings = list(warnings) if warnings is not None else []

    @property
    def mutations(self) -> List[Mutation]:
        """Return a copy of the mutations to prevent modification"""
        return self._mutations.copy()

    @property
    def is_empty(self) -> bool:
        return not self._mutations

    @property
    def deleted(self) -> List[Period]:
        """Siblings the store must destroy"""
        return [m.original for m in self._mutations if m.type is MutationType.DELETE]

    @property
    def saved(self) -> List[Period]:
        """Rewritten or newly split siblings the store must save without validation"""
        return [period for m in self._mutations for period in m.replacements]


class RelationResolver(ABC):
    def __init__(self, duplicate: Optional[Callable[[Period], Period]] = None):
        # new records created by a rewrite come from the store's duplication facility
        self.duplicate = duplicate or Period.duplicate

    @abstractmethod
    def resolve(self, candidate: Period, sibling: Period, step: timedelta) -> Mutation:
        pass


class DeleteResolver(RelationResolver):
    """Resolver for siblings engulfed by the candidate"""

    def resolve(self, candidate: Period, sibling: Period, step: timedelta) -> Mutation:
        # Nothing of the sibling survives
        return Mutation(MutationType.DELETE, sibling)


class SplitResolver(RelationResolver):
    """Resolver for siblings that strictly contain the candidate"""

    def resolve(self, candidate: Period, sibling: Period, step: timedelta) -> Mutation:
        # Both halves derive from the same snapshot of the sibling; the left
        # half keeps its identity, the right half is a new record
        left_part = sibling.update_end(candidate.start - step)
        right_part = self.duplicate(sibling).update_boundaries(candidate.end + step, sibling.end)

        return Mutation(MutationType.SPLIT, sibling, (left_part, right_part))


class ShrinkEndResolver(RelationResolver):
    """Resolver for siblings overlapping the start of the candidate"""

    def resolve(self, candidate: Period, sibling: Period, step: timedelta) -> Mutation:
        return Mutation(MutationType.SHRINK_END, sibling, (sibling.update_end(candidate.start - step),))


class ShrinkStartResolver(RelationResolver):
    """Resolver for siblings overlapping the end of the candidate"""

    def resolve(self, candidate: Period, sibling: Period, step: timedelta) -> Mutation:
        return Mutation(MutationType.SHRINK_START, sibling, (sibling.update_start(candidate.end + step),))
