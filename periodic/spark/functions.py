from functools import reduce
from typing import Sequence

import pyspark.sql.functions as sfn
from pyspark.sql import Column

from periodic.core.types import GroupKey, NativeBoundary


def within_interval(start_col: str, end_col: str, start: NativeBoundary, end: NativeBoundary) -> Column:
    """Rows whose inclusive ``[start_col, end_col]`` shares an instant with ``[start, end]``"""
    return (sfn.col(start_col) <= sfn.lit(end)) & (sfn.col(end_col) >= sfn.lit(start))


def within_date(start_col: str, end_col: str, instant: NativeBoundary) -> Column:
    return within_interval(start_col, end_col, instant, instant)


def from_date(end_col: str, instant: NativeBoundary) -> Column:
    """Rows not entirely before the instant"""
    return sfn.col(end_col) >= sfn.lit(instant)


def in_group(group_fields: Sequence[str], group_key: GroupKey) -> Column:
    # null-safe so a null group value still matches its own group
    conditions = [sfn.col(name).eqNullSafe(sfn.lit(value)) for name, value in zip(group_fields, group_key)]
    return reduce(lambda left, right: left & right, conditions, sfn.lit(True))
