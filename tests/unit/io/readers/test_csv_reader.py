"""Tests for the CSV adapter."""

import io

import pytest

from ingest_hub.domain.errors import DecodeError
from ingest_hub.domain.records import Value
from ingest_hub.io.readers import CsvAdapter
from ingest_hub.io.readers.csv_reader import infer_scalar


@pytest.mark.unit
class TestCsvAdapter:
    def test_cells_are_text_by_default(self):
        records = list(CsvAdapter().open(io.StringIO("id,name\n1,Ada\n2,\n")))

        assert records[0]["id"] == Value.text("1")
        assert records[1]["name"].is_null

    def test_keep_empty_strings(self):
        records = list(CsvAdapter(empty_as_null=False).open(io.StringIO("a\n\"\"\n")))
        assert records[0]["a"] == Value.text("")

    def test_infer_types(self):
        stream = io.StringIO("i,f,b,s\n42,2.5,true,00x\n")
        record = next(CsvAdapter(infer_types=True).open(stream))

        assert record.to_python() == {"i": 42, "f": 2.5, "b": True, "s": "00x"}

    def test_delimiter(self):
        record = next(CsvAdapter(delimiter=";").open(io.StringIO("a;b\n1;2\n")))
        assert record.columns == ("a", "b")

    def test_reads_file_with_bom(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_bytes("\ufeffid,name\n1,Zoë\n".encode("utf-8"))

        record = next(CsvAdapter().open(path))
        assert record.columns == ("id", "name")
        assert record["name"] == Value.text("Zoë")

    def test_ragged_row_is_decode_error(self):
        iterator = CsvAdapter().open(io.StringIO("a,b\n1,2\n3\n"))
        next(iterator)
        with pytest.raises(DecodeError) as excinfo:
            next(iterator)
        assert excinfo.value.position == 1
        assert "fields" in str(excinfo.value)

    def test_duplicate_header(self):
        with pytest.raises(DecodeError, match="Duplicate column header"):
            list(CsvAdapter().open(io.StringIO("a,a\n1,2\n")))

    def test_empty_header(self):
        with pytest.raises(DecodeError, match="Empty column header"):
            list(CsvAdapter().open(io.StringIO("a,\n1,2\n")))

    def test_empty_source(self):
        assert list(CsvAdapter().open(io.StringIO(""))) == []
        assert list(CsvAdapter().open(io.StringIO("a,b\n"))) == []


@pytest.mark.unit
@pytest.mark.parametrize(
    "text, expected",
    [("7", 7), ("-3", -3), ("1e3", 1000.0), (".5", 0.5), ("FALSE", False), ("abc", "abc")],
)
def test_infer_scalar(text, expected):
    result = infer_scalar(text)
    assert result == expected
    assert type(result) is type(expected)
