"""Tests for the JSON / JSON Lines adapter."""

import io

import pytest

from ingest_hub.domain.errors import DecodeError
from ingest_hub.domain.records import Value
from ingest_hub.io.readers import JsonAdapter


@pytest.mark.unit
class TestJsonAdapter:
    def test_array_of_objects(self, tmp_path):
        path = tmp_path / "people.json"
        path.write_text('[{"id": 1, "name": "Ada"}, {"id": 2, "active": true}]', encoding="utf-8")

        records = list(JsonAdapter().open(path))

        assert [r.to_python() for r in records] == [
            {"id": 1, "name": "Ada"},
            {"id": 2, "active": True},
        ]
        assert records[1]["active"] == Value.boolean(True)

    def test_single_object_is_one_record(self):
        records = list(JsonAdapter().open(io.StringIO('{"a": 1.5, "b": null}')))
        assert len(records) == 1
        assert records[0]["a"] == Value.float_(1.5)
        assert records[0]["b"].is_null

    def test_nested_values_become_json_text(self):
        records = list(JsonAdapter().open(io.StringIO('{"tags": ["x", "y"], "meta": {"k": 1}}')))
        assert records[0]["tags"] == Value.text('["x","y"]')
        assert records[0]["meta"] == Value.text('{"k":1}')

    def test_json_lines_by_suffix(self, tmp_path):
        path = tmp_path / "events.jsonl"
        path.write_text('{"n": 1}\n\n{"n": 2}\n', encoding="utf-8")

        assert [r.to_python() for r in JsonAdapter().open(path)] == [{"n": 1}, {"n": 2}]

    def test_json_lines_error_reports_position(self):
        stream = io.StringIO('{"n": 1}\n{"n": \n')
        iterator = JsonAdapter(lines=True).open(stream)

        assert next(iterator).to_python() == {"n": 1}
        with pytest.raises(DecodeError) as excinfo:
            next(iterator)
        assert excinfo.value.position == 1
        assert excinfo.value.source_format == "json"
        assert excinfo.value.__cause__ is not None

    def test_empty_document_yields_nothing(self):
        assert list(JsonAdapter().open(io.StringIO("  \n"))) == []
        assert list(JsonAdapter().open(io.StringIO("[]"))) == []

    def test_scalar_document_is_rejected(self):
        with pytest.raises(DecodeError, match="object or an array"):
            list(JsonAdapter().open(io.StringIO("42")))

    def test_non_object_element_is_rejected(self):
        iterator = JsonAdapter().open(io.StringIO('[{"a": 1}, 5]'))
        next(iterator)
        with pytest.raises(DecodeError, match="Expected a JSON object"):
            next(iterator)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DecodeError, match="not found"):
            list(JsonAdapter().open(tmp_path / "missing.json"))


@pytest.mark.unit
@pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
def test_non_finite_constants_are_decode_errors(constant):
    with pytest.raises(DecodeError, match=constant):
        list(JsonAdapter().open(io.StringIO(f'[{{"v": {constant}}}]')))


@pytest.mark.unit
def test_non_finite_constant_in_json_lines_stops_at_that_line():
    iterator = JsonAdapter(lines=True).open(io.StringIO('{"v": 1}\n{"v": NaN}\n'))
    assert next(iterator)["v"] == Value.integer(1)
    with pytest.raises(DecodeError) as excinfo:
        next(iterator)
    assert excinfo.value.position == 1
