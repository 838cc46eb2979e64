"""Tests for mapper (layout) reading."""

from __future__ import annotations

import pandas as pd
import pytest

from ice_mapper.config_options import MapperReaderConfig
from ice_mapper.mapper_reader import (
    MapperReader,
    mapper_to_csv,
    normalize_column_name,
    normalize_rows,
    parse_declared_length,
    parse_position,
)
from ice_mapper.types_and_errors import REJECTED, SKIPPED, FieldMapping, MapperReaderError


def _row(element="F", position="1 to 3", **extra):
    row = {"Element": element, "Position": position}
    row.update(extra)
    return row


@pytest.mark.parametrize("text", ["1 to 7", "1-7", "  1  TO 7 ", "1 To 7", "1 - 7"])
def test_position_forms_give_same_bounds(text):
    assert parse_position(text) == (1, 7)


@pytest.mark.parametrize("text", ["", "1 to", "a to b", "1 through 7", "1 to 7 extra", "-1 to 7"])
def test_unparseable_positions(text):
    assert parse_position(text) is None


def test_declared_length_falls_back_to_calculated():
    assert parse_declared_length("", 4) == 4
    assert parse_declared_length("abc", 4) == 4
    assert parse_declared_length("0", 4) == 4
    assert parse_declared_length("9", 4) == 9
    assert parse_declared_length("7.0", 4) == 7


def test_column_names_match_by_substring_and_case():
    assert normalize_column_name("  ELEMENT ") == "element"
    assert normalize_column_name("Field Position") == "position"
    assert normalize_column_name("Data Type") == "type"
    assert normalize_column_name("Preview Text") == "preview"
    assert normalize_column_name("Notes") is None
    # first canonical name in the synonym list wins
    assert normalize_column_name("Element Description") == "element"


def test_custom_synonyms_are_data_driven():
    config = MapperReaderConfig()
    config.column_synonyms = [
        ("element", ["element", "field name"]),
        ("position", ["position", "columns"]),
    ]
    mappings, _ = normalize_rows([{"Field Name": "X", "Columns": "2-4"}], config)
    assert mappings[0].element == "X"
    assert (mappings[0].position_start, mappings[0].position_end) == (2, 4)


def test_unused_rows_are_skipped_regardless_of_other_columns():
    rows = [
        _row("KEEP", "1 to 3"),
        _row("GONE", "0 to 0", Length="5", Type="NUM"),
        _row("BLANK", "   "),
    ]
    mappings, report = normalize_rows(rows)
    assert [m.element for m in mappings] == ["KEEP"]
    assert report.skipped == 2
    assert all(row.status == SKIPPED for row in report.rows[1:])


def test_invalid_position_is_rejected_and_ingestion_continues():
    rows = [_row("A", "1 to 3"), _row("B", "three to four"), _row("C", "4 to 6")]
    mappings, report = normalize_rows(rows)
    assert [m.element for m in mappings] == ["A", "C"]
    assert report.rejected == 1
    rejection = report.rejections[0]
    assert rejection.index == 1
    assert rejection.status == REJECTED
    assert "three to four" in rejection.reason


def test_row_without_element_is_discarded():
    mappings, report = normalize_rows([_row("   ", "1 to 3"), _row("B", "4 to 5")])
    assert [m.element for m in mappings] == ["B"]
    assert report.rejections[0].reason == "missing element"


def test_fields_are_trimmed_and_type_defaults_to_chr():
    rows = [{
        "Element": "  ACCT ",
        "Value": " acct ",
        "Description": " Account number ",
        "Type": "  ",
        "Position": "1 to 10",
        "Length": "",
        "Preview": " 12345 ",
    }]
    mappings, _ = normalize_rows(rows)
    assert mappings == [FieldMapping(
        element="ACCT",
        value="acct",
        description="Account number",
        type="CHR",
        position_start=1,
        position_end=10,
        length=10,
        preview="12345",
    )]


def test_length_mismatch_does_not_fail_ingestion():
    mappings, report = normalize_rows([_row("A", "1 to 3", Length="8")])
    assert mappings[0].length == 8
    assert mappings[0].calculated_length == 3
    assert report.accepted == 1


def test_sorted_by_start_with_stable_ties():
    rows = [_row("C", "10 to 12"), _row("A1", "1 to 3"), _row("B", "4 to 9"), _row("A2", "1 to 2")]
    mappings, _ = normalize_rows(rows)
    assert [m.element for m in mappings] == ["A1", "A2", "B", "C"]


def test_missing_cells_are_treated_as_blank():
    mappings, _ = normalize_rows([{"Element": "A", "Position": "1-2", "Type": float("nan"), "Value": None}])
    assert mappings[0].type == "CHR"
    assert mappings[0].value == ""


def test_read_rows_without_survivors_raises():
    with pytest.raises(MapperReaderError, match="No valid mappings found"):
        MapperReader().read_rows([_row("A", "0 to 0"), _row("", "1 to 2")])


def test_read_csv_text(mapper_csv):
    mappings, report = MapperReader().read_csv_text(mapper_csv, "layout.csv")
    assert [m.element for m in mappings] == ["ID", "NAME"]
    assert mappings[0].type == "NUM"
    assert mappings[1].description == "Customer name"
    assert report.source == "layout.csv"
    assert report.accepted == 2


def test_read_tab_delimited_text():
    text = "Element\tType\tPosition\tLength\nA\tNUM\t1 to 2\t2\nB\t\t3-5\t3\n"
    mappings, _ = MapperReader().read_csv_text(text)
    assert [(m.element, m.type, m.position_end) for m in mappings] == [("A", "NUM", 2), ("B", "CHR", 5)]


def test_read_pipe_delimited_text_with_bom():
    text = "\ufeffElement|Position\nA|1 to 4\n"
    mappings, _ = MapperReader().read_csv_text(text)
    assert mappings[0].element == "A"


def test_quoted_commas_stay_in_one_cell():
    text = 'Element,Description,Position\nA,"Last, first",1 to 4\n'
    mappings, _ = MapperReader().read_csv_text(text)
    assert mappings[0].description == "Last, first"


def test_blank_lines_are_ignored():
    text = "Element,Position\n\nA,1 to 4\n\n,\nB,5 to 6\n"
    mappings, report = MapperReader().read_csv_text(text)
    assert [m.element for m in mappings] == ["A", "B"]
    assert report.skipped == 1


def test_empty_text_raises():
    with pytest.raises(MapperReaderError):
        MapperReader().read_csv_text("   \n")


def test_read_excel_file(tmp_path):
    path = tmp_path / "layout.xlsx"
    pd.DataFrame([
        {"Element": "B", "Type": "", "Position": "4 to 6", "Length": 3},
        {"Element": "A", "Type": "NUM", "Position": "1 to 3", "Length": 3},
        {"Element": "X", "Type": "", "Position": "0 to 0", "Length": 0},
    ]).to_excel(path, index=False)

    mappings, report = MapperReader().read_file(path)
    assert [m.element for m in mappings] == ["A", "B"]
    assert mappings[0].length == 3
    assert mappings[1].type == "CHR"
    assert report.skipped == 1


def test_empty_excel_sheet_raises(tmp_path):
    path = tmp_path / "empty.xlsx"
    pd.DataFrame(columns=["Element", "Position"]).to_excel(path, index=False)
    with pytest.raises(MapperReaderError, match="empty"):
        MapperReader().read_file(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(MapperReaderError, match="not found"):
        MapperReader().read_file(tmp_path / "nope.csv")


def test_read_file_with_latin1_fallback(tmp_path):
    path = tmp_path / "layout.csv"
    path.write_bytes("Element,Description,Position\nA,Caf\xe9,1 to 2\n".encode("iso-8859-1"))
    mappings, _ = MapperReader().read_file(path)
    assert mappings[0].description == "Café"


def test_round_trip_through_csv():
    original = [
        FieldMapping("ID", "id", "Identifier", "NUM", 1, 3, 3, "001"),
        FieldMapping("NAME", "", "Name, full", "CHR", 4, 13, 12, ""),
        FieldMapping("DOB", "dob", "", "FCD", 14, 21, 8, "19800101"),
    ]
    mappings, _ = MapperReader().read_csv_text(mapper_to_csv(original))
    assert mappings == original


def test_ragged_row_is_rejected_alone():
    text = "Element,Description,Position\nA,x,1 to 4\nB,Last, first,5 to 8\nC,y,9 to 10\n"
    mappings, report = MapperReader().read_csv_text(text)
    assert [m.element for m in mappings] == ["A", "C"]
    assert report.rejected == 1
    assert report.rejections[0].index == 1


def test_short_row_keeps_reading():
    text = "Element,Position,Type\nA,1 to 4\nB,5 to 6,NUM\n"
    mappings, _ = MapperReader().read_csv_text(text)
    assert [(m.element, m.type) for m in mappings] == [("A", "CHR"), ("B", "NUM")]
