from abc import ABC, abstractmethod

from periodic.core.period import Period


class RelationChecker(ABC):
    """Abstract base class for sibling relation checks"""

    def check(self, candidate: Period, sibling: Period) -> bool:
        """
        Base implementation of check that handles missing bounds
        before delegating to the specific implementation.

        Both periods must share a temporal type; a date bound cannot be
        ordered against a datetime bound.
        """
        if candidate is None or sibling is None:
            return False
        if not (candidate.is_complete and sibling.is_complete):
            return False

        return bool(self._check_impl(candidate, sibling))

    @abstractmethod
    def _check_impl(self, candidate: Period, sibling: Period) -> bool:
        """Implementation of the specific relation check"""
        pass


class EngulfedChecker(RelationChecker):
    """Checks if the sibling lies entirely within or equal to the candidate"""

    def _check_impl(self, candidate: Period, sibling: Period) -> bool:
        return sibling.start >= candidate.start and sibling.end <= candidate.end


class EngulfingChecker(RelationChecker):
    """Checks if the sibling strictly contains the candidate on both sides"""

    def _check_impl(self, candidate: Period, sibling: Period) -> bool:
        return sibling.start < candidate.start and sibling.end > candidate.end


class OverlapsLeftChecker(RelationChecker):
    """Checks if the sibling extends before the candidate's start"""

    def _check_impl(self, candidate: Period, sibling: Period) -> bool:
        return sibling.start < candidate.start


class OverlapsRightChecker(RelationChecker):
    """Checks if the sibling extends past the candidate's end"""

    def _check_impl(self, candidate: Period, sibling: Period) -> bool:
        return sibling.end > candidate.end
