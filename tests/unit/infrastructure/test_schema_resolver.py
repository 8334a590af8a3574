"""Tests for column plan resolution."""

import pytest

from ingest_hub.domain.errors import (
    EmptyBatchError,
    InvalidIdentifierError,
    SchemaMismatchError,
)
from ingest_hub.domain.records import Record, TableTarget
from ingest_hub.infrastructure.schema import check_row, resolve, validate_target


def _rows(*mappings):
    return [Record.from_mapping(m) for m in mappings]


@pytest.mark.unit
class TestKnownColumns:
    def test_known_columns_win(self):
        plan = resolve(TableTarget("t", ("c", "a", "b")), _rows({"a": 1}))
        assert plan.columns == ("c", "a", "b")
        assert plan.known

    def test_subset_is_accepted(self):
        plan = resolve(TableTarget("t", ("a", "b")), _rows({"b": 1}, {}))
        assert plan.columns == ("a", "b")

    def test_unknown_column_reports_row(self):
        target = TableTarget("t", ("a",))
        with pytest.raises(SchemaMismatchError) as excinfo:
            resolve(target, _rows({"a": 1}, {"a": 2, "z": 3}), first_index=10)

        assert excinfo.value.row_index == 11
        assert excinfo.value.unknown_columns == ("z",)

    def test_empty_batch_with_known_columns(self):
        plan = resolve(TableTarget("t", ("a",)), [])
        assert plan.columns == ("a",)

    def test_check_row(self):
        plan = resolve(TableTarget("t", ("a",)), [])
        check_row(plan, Record.from_mapping({"a": 1}), 0)
        with pytest.raises(SchemaMismatchError):
            check_row(plan, Record.from_mapping({"b": 1}), 1)


@pytest.mark.unit
class TestDerivedColumns:
    def test_ordered_union_of_keys(self):
        plan = resolve(TableTarget("t"), _rows({"a": 1, "b": "x"}, {"c": 2, "a": 2}))
        assert plan.columns == ("a", "b", "c")
        assert not plan.known

    def test_single_record_sample(self):
        plan = resolve(TableTarget("t"), Record.from_mapping({"x": 1}))
        assert plan.columns == ("x",)

    def test_empty_batch_without_columns(self):
        with pytest.raises(EmptyBatchError):
            resolve(TableTarget("t"), [])

    def test_records_without_keys(self):
        with pytest.raises(EmptyBatchError):
            resolve(TableTarget("t"), _rows({}, {}))

    def test_unsafe_key_is_rejected(self):
        with pytest.raises(InvalidIdentifierError):
            resolve(TableTarget("t"), _rows({"first name": "Ada"}))


@pytest.mark.unit
class TestValidateTarget:
    def test_unsafe_table(self):
        with pytest.raises(InvalidIdentifierError):
            validate_target(TableTarget("people; DROP TABLE x"))

    def test_unsafe_known_column(self):
        with pytest.raises(InvalidIdentifierError):
            validate_target(TableTarget("people", ("ok", "not-ok")))

    def test_empty_known_columns(self):
        with pytest.raises(EmptyBatchError):
            validate_target(TableTarget("people", ()))
