import logging
from datetime import date

import pandas as pd
import pytest

from periodic.core.exceptions import InvalidSchemaError, PeriodNotFoundError, PeriodValidationError, StoreError
from periodic.core.period import Period
from periodic.store.memory import PandasPeriodStore
from periodic.store.protocols import PeriodStore


@pytest.fixture
def populated_store(store, period_factory):
    store.save(period_factory(date(2024, 1, 1), date(2024, 3, 31)))
    store.save(period_factory(date(2024, 4, 1), date(9999, 1, 1)))
    store.save(period_factory(date(2024, 1, 1), date(9999, 1, 1), employee_id=2))
    return store


class TestPandasPeriodStoreWrites:
    def test_implements_store_protocol(self, store):
        assert isinstance(store, PeriodStore)

    def test_save_assigns_keys(self, store, period_factory):
        first = store.save(period_factory(date(2024, 1, 1), date(2024, 1, 31)))
        second = store.save(period_factory(date(2024, 2, 1), date(2024, 2, 29)))

        assert (first.key, second.key) == (1, 2)
        assert len(store) == 2

    def test_save_validates_by_default(self, store, period_factory):
        with pytest.raises(PeriodValidationError):
            store.save(period_factory(date(2024, 2, 1), date(2024, 1, 1)))
        assert len(store) == 0

    def test_save_without_validation(self, store, period_factory):
        saved = store.save(period_factory(date(2024, 2, 1), date(2024, 1, 1)), validate=False)
        assert store.periods()[0].boundaries == (date(2024, 2, 1), date(2024, 1, 1))
        assert saved.key == 1

    def test_save_requires_group_fields(self, store, schema):
        with pytest.raises(InvalidSchemaError):
            store.save(Period.create({"start_at": "2024-01-01", "end_at": "2024-01-31"}, schema))

    def test_save_updates_existing(self, store, period_factory):
        saved = store.save(period_factory(date(2024, 1, 1), date(2024, 1, 31), rate=100))
        store.save(saved.update_end(date(2024, 1, 15)))

        [period] = store.periods()
        assert period.key == saved.key
        assert period.end == date(2024, 1, 15)
        assert period.data["rate"] == 100

    def test_save_unknown_key(self, store, period_factory):
        with pytest.raises(PeriodNotFoundError):
            store.save(period_factory(date(2024, 1, 1), date(2024, 1, 31), key=99))

    def test_destroy(self, populated_store):
        [first, *_] = populated_store.periods((1,))
        populated_store.destroy(first)

        assert len(populated_store) == 2
        assert first.key not in [period.key for period in populated_store.periods()]

    def test_destroy_unknown_key(self, store, period_factory):
        with pytest.raises(PeriodNotFoundError):
            store.destroy(period_factory(date(2024, 1, 1), date(2024, 1, 31), key=99))

    def test_destroy_new_record(self, store, period_factory):
        with pytest.raises(StoreError):
            store.destroy(period_factory(date(2024, 1, 1), date(2024, 1, 31)))

    def test_duplicate(self, populated_store):
        [period, *_] = populated_store.periods((1,))
        copy = populated_store.duplicate(period)

        assert copy.is_new_record
        assert copy.attributes == period.attributes

    def test_sentinel_survives_storage(self, populated_store):
        [period] = populated_store.fetch_current((2,), date(2500, 1, 1))
        assert type(period.end) is date
        assert period.end == date(9999, 1, 1)

    def test_load_from_dataframe(self, schema):
        data = pd.DataFrame({
            "id": [10, 11],
            "employee_id": [1, 1],
            "start_at": [date(2024, 1, 1), date(2024, 2, 1)],
            "end_at": [date(2024, 1, 31), date(9999, 1, 1)],
        })
        store = PandasPeriodStore(schema, data)

        assert len(store) == 2
        assert store.save(Period.create({"employee_id": 1, "start_at": "2025-01-01", "end_at": "2025-01-02"},
                                        schema)).key == 12

    def test_attributes_of_other_records_are_not_read_back(self, store, period_factory):
        store.save(period_factory(date(2024, 1, 1), date(2024, 1, 31), note="probation"))
        plain = store.save(period_factory(date(2024, 2, 1), date(9999, 1, 1)))

        [period] = [p for p in store.periods() if p.key == plain.key]

        assert period.attributes == {"employee_id": 1, "rate": 100}
        assert "note" not in period.duplicate().attributes

    def test_to_pandas_is_a_copy(self, populated_store):
        df = populated_store.to_pandas()
        df.drop(df.index, inplace=True)
        assert len(populated_store) == 3


class TestPandasPeriodStoreQueries:
    def test_fetch_overlapping_is_inclusive(self, populated_store):
        periods = populated_store.fetch_overlapping((1,), date(2024, 3, 31), date(2024, 4, 1))
        assert sorted(period.start for period in periods) == [date(2024, 1, 1), date(2024, 4, 1)]

    def test_fetch_overlapping_stays_in_group(self, populated_store):
        periods = populated_store.fetch_overlapping((2,), date(2024, 1, 1), date(2024, 12, 31))
        assert [period.group_key for period in periods] == [(2,)]

    def test_fetch_overlapping_unknown_group(self, populated_store):
        assert populated_store.fetch_overlapping((3,), date(1, 1, 1), date(9999, 1, 1)) == []

    def test_fetch_current(self, populated_store):
        [period] = populated_store.fetch_current((1,), date(2024, 3, 31))
        assert period.end == date(2024, 3, 31)

    def test_fetch_from(self, populated_store):
        periods = populated_store.fetch_from((1,), date(2024, 4, 1))
        assert [period.start for period in periods] == [date(2024, 4, 1)]

    def test_fetch_ignores_incomplete_rows(self, store, period_factory):
        store.save(period_factory(date(2024, 1, 1), None), validate=False)
        assert store.fetch_overlapping((1,), date(1, 1, 1), date(9999, 1, 1)) == []

    def test_empty_store(self, store):
        assert store.fetch_current((1,), date(2024, 1, 1)) == []
        assert store.periods() == []


class TestPandasPeriodStoreTransactions:
    def test_rollback_on_error(self, populated_store, period_factory, caplog):
        before = populated_store.to_pandas()

        with caplog.at_level(logging.WARNING):
            with pytest.raises(RuntimeError):
                with populated_store.transaction():
                    populated_store.destroy(populated_store.periods((1,))[0])
                    populated_store.save(period_factory(date(2025, 1, 1), date(2025, 1, 31)))
                    raise RuntimeError("boom")

        pd.testing.assert_frame_equal(populated_store.to_pandas(), before)
        assert "rolled back" in caplog.text
        # key assignment is rolled back too
        assert populated_store.save(period_factory(date(2025, 1, 1), date(2025, 1, 31))).key == 4

    def test_commit(self, populated_store, period_factory):
        with populated_store.transaction():
            populated_store.save(period_factory(date(2025, 1, 1), date(2025, 1, 31)))
        assert len(populated_store) == 4

    def test_lock_is_reentrant(self, store):
        with store.lock((1,)):
            with store.lock((1,)):
                pass
