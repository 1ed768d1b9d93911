from datetime import date, datetime
from typing import Hashable, Tuple, Union

from numpy import datetime64
from pandas import Timestamp

PeriodBoundary = Union[date, datetime, Timestamp, datetime64, str, None]
NativeBoundary = Union[date, datetime]
GroupKey = Tuple[Hashable, ...]

# "open-ended" periods end at the maximum sentinel; the minimum is never auto-assigned
MIN_DATE = date(1, 1, 1)
MAX_DATE = date(9999, 1, 1)
MIN_DATETIME = datetime(1, 1, 1)
MAX_DATETIME = datetime(9999, 1, 1)
