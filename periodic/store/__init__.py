from periodic.store.memory import PandasPeriodStore
from periodic.store.protocols import PeriodStore
