from datetime import date

import pytest

from periodic.config import PeriodicConfig
from periodic.core.period import Period
from periodic.core.schema import TimelineSchema
from periodic.service import PeriodService
from periodic.store.memory import PandasPeriodStore

TODAY = date(2024, 3, 15)


@pytest.fixture
def schema():
    return TimelineSchema(group_fields=["employee_id"])


@pytest.fixture
def period_factory(schema):
    """Factory function to create periods of one employee's timeline"""

    def create_period(start, end, key=None, employee_id=1, **attributes):
        """
        Create a period with given bounds and attributes

        Args:
            start: Start bound
            end: End bound
            key: Store identity, None for a new record
            employee_id: Group the period belongs to
            attributes: Any other record fields, defaults to {"rate": 100}
        """
        data = {"id": key, "employee_id": employee_id, "start_at": start, "end_at": end}
        data.update(attributes or {"rate": 100})
        return Period.create(data, schema)

    return create_period


@pytest.fixture
def config():
    return PeriodicConfig(today=lambda: TODAY)


@pytest.fixture
def store(schema):
    return PandasPeriodStore(schema)


@pytest.fixture
def service(store, schema, config):
    return PeriodService(store, schema, config=config)
