from datetime import date, timedelta
from unittest.mock import Mock

import pytest

from periodic.overlap.resolution import (
    DeleteResolver,
    ResolutionResult,
    ShrinkEndResolver,
    ShrinkStartResolver,
    SplitResolver,
)
from periodic.overlap.types import Mutation, MutationType

DAY = timedelta(days=1)


@pytest.fixture
def candidate(period_factory):
    return period_factory(date(2024, 6, 1), date(2024, 6, 10))


class TestResolutionResult:
    def test_defensive_copies(self, period_factory):
        mutations = [Mutation(MutationType.DELETE, period_factory(date(2024, 1, 1), date(2024, 1, 2), key=1))]
        metadata = {"step": DAY}
        result = ResolutionResult(mutations, metadata)

        mutations.clear()
        metadata["step"] = None
        result.mutations.clear()

        assert len(result.mutations) == 1
        assert result.metadata == {"step": DAY}

    def test_empty(self):
        result = ResolutionResult([])

        assert result.is_empty
        assert result.warnings == []
        assert result.metadata is None

    def test_deleted_and_saved(self, period_factory):
        gone = period_factory(date(2024, 1, 1), date(2024, 1, 2), key=1)
        shrunk = period_factory(date(2024, 2, 1), date(2024, 2, 5), key=2)
        result = ResolutionResult([
            Mutation(MutationType.DELETE, gone),
            Mutation(MutationType.SHRINK_END, shrunk, (shrunk.update_end(date(2024, 2, 3)),)),
        ])

        assert result.deleted == [gone]
        assert [period.boundaries for period in result.saved] == [(date(2024, 2, 1), date(2024, 2, 3))]


class TestResolvers:
    def test_delete(self, candidate, period_factory):
        sibling = period_factory(date(2024, 6, 2), date(2024, 6, 3), key=1)
        assert DeleteResolver().resolve(candidate, sibling, DAY) == Mutation(MutationType.DELETE, sibling)

    def test_split_halves_are_independent(self, candidate, period_factory):
        sibling = period_factory(date(2024, 1, 1), date(9999, 1, 1), key=1, rate=75)
        left, right = SplitResolver().resolve(candidate, sibling, DAY).replacements

        assert left.data is not right.data
        assert left.end == date(2024, 5, 31)
        assert right.start == date(2024, 6, 11)
        assert right.end == date(9999, 1, 1)
        assert left.attributes == right.attributes == {"employee_id": 1, "rate": 75}
        assert (left.key, right.key) == (1, None)

    def test_split_uses_duplication_facility(self, candidate, period_factory):
        sibling = period_factory(date(2024, 1, 1), date(9999, 1, 1), key=1)
        duplicate = Mock(side_effect=lambda period: period.duplicate())

        SplitResolver(duplicate).resolve(candidate, sibling, DAY)

        duplicate.assert_called_once_with(sibling)

    def test_shrink_end(self, candidate, period_factory):
        sibling = period_factory(date(2024, 5, 1), date(2024, 6, 5), key=1)
        mutation = ShrinkEndResolver().resolve(candidate, sibling, DAY)

        assert mutation.type is MutationType.SHRINK_END
        assert mutation.original is sibling
        assert mutation.replacements[0].boundaries == (date(2024, 5, 1), date(2024, 5, 31))
        assert not mutation.is_degenerate

    def test_shrink_start(self, candidate, period_factory):
        sibling = period_factory(date(2024, 6, 5), date(2024, 7, 1), key=1)
        mutation = ShrinkStartResolver().resolve(candidate, sibling, DAY)

        assert mutation.type is MutationType.SHRINK_START
        assert mutation.replacements[0].boundaries == (date(2024, 6, 11), date(2024, 7, 1))

    def test_degenerate_shrink_is_flagged(self, candidate, period_factory):
        # a sibling starting on the candidate's first day can only shrink to nothing
        sibling = period_factory(date(2024, 6, 1), date(2024, 6, 5), key=1)
        mutation = ShrinkEndResolver().resolve(candidate, sibling, DAY)

        assert mutation.is_degenerate
        assert mutation.replacements[0].boundaries == (date(2024, 6, 1), date(2024, 5, 31))
