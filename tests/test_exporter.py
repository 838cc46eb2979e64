"""Tests for CSV exports."""

from __future__ import annotations

import datetime

import pandas as pd

from ice_mapper.config_options import ExportConfig
from ice_mapper.exporter import MapperExporter, parsed_records_to_frame
from ice_mapper.mapper_reader import MapperReader
from ice_mapper.types_and_errors import ERROR, WARNING, ParsedField, ValidationIssue


def _exporter(tmp_path):
    return MapperExporter(ExportConfig(output_folder=tmp_path / "out"))


def _records():
    return [
        {"ID": ParsedField("ID", "001", "NUM"), "NAME": ParsedField("NAME", "ALICE", "CHR")},
        {"ID": ParsedField("ID", "002", "NUM")},
    ]


def test_data_frame_follows_layout_order(id_name_mappings):
    df = parsed_records_to_frame(_records(), id_name_mappings)
    assert list(df.columns) == ["ID", "NAME"]
    assert df.values.tolist() == [["001", "ALICE"], ["002", ""]]


def test_export_mapper_reads_back(tmp_path, id_name_mappings):
    path = _exporter(tmp_path).export_mapper_csv(id_name_mappings)
    assert path.name == "mapper.csv"
    mappings, _ = MapperReader().read_file(path)
    assert mappings == id_name_mappings


def test_export_data_keeps_leading_zeros(tmp_path, id_name_mappings):
    path = _exporter(tmp_path).export_data_csv(_records(), id_name_mappings)
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    assert df["ID"].tolist() == ["001", "002"]
    assert df["NAME"].tolist() == ["ALICE", ""]


def test_export_validation_report(tmp_path, id_name_mappings):
    issues = [
        ValidationIssue(ERROR, "ID", "Overlapping with NAME"),
        ValidationIssue(WARNING, "NAME", "Invalid date format", 3),
    ]
    paths = _exporter(tmp_path).export_validation_report(issues, id_name_mappings)

    report = pd.read_csv(paths["report"], dtype=str, keep_default_na=False)
    assert list(report.columns) == ["Type", "Field", "Message", "Line"]
    assert report.values.tolist() == [
        ["ERROR", "ID", "Overlapping with NAME", ""],
        ["WARNING", "NAME", "Invalid date format", "3"],
    ]

    summary = pd.read_csv(paths["summary"], dtype=str, keep_default_na=False)
    values = dict(zip(summary["Metric"], summary["Value"]))
    assert values["Total Fields"] == "2"
    assert values["Total Errors"] == "1"
    assert values["Total Warnings"] == "1"
    assert paths["summary"].name == "validation-report-summary.csv"


def test_export_all_skips_data_without_records(tmp_path, id_name_mappings):
    outputs = _exporter(tmp_path).export_all(id_name_mappings, [], [])
    stamp = datetime.date.today().isoformat()
    assert set(outputs) == {"mapper", "validation"}
    assert outputs["mapper"].name == f"mapper-{stamp}.csv"
    assert outputs["validation"]["report"].exists()


def test_export_all_with_records(tmp_path, id_name_mappings):
    outputs = _exporter(tmp_path).export_all(id_name_mappings, _records(), [])
    assert outputs["data"].exists()
