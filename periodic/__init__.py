from periodic.config import PeriodicConfig
from periodic.core.period import Period, contains_current_period, intersects
from periodic.core.resolution import Granularity, TemporalResolution
from periodic.core.schema import TimelineSchema
from periodic.core.types import MAX_DATE, MAX_DATETIME, MIN_DATE, MIN_DATETIME
from periodic.overlap.resolver import OverlapResolver
from periodic.overlap.transformer import classify
from periodic.overlap.types import Mutation, MutationType, Relation
from periodic.service import PeriodService, SaveResult
from periodic.store import PandasPeriodStore, PeriodStore
