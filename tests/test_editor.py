"""Tests for field-by-field layout editing."""

from __future__ import annotations

from ice_mapper.editor import MappingEditor
from ice_mapper.types_and_errors import ERROR, WARNING, FieldMapping


def _editor():
    return MappingEditor([
        FieldMapping("B", position_start=4, position_end=8, length=5),
        FieldMapping("A", position_start=1, position_end=3, length=3),
    ])


def test_add_field_keeps_order():
    editor = _editor()
    editor.sort_mappings()
    editor.add_field(FieldMapping("C", position_start=2, position_end=2, length=1))
    assert [m.element for m in editor.mappings] == ["A", "C", "B"]


def test_update_position_recalculates_length():
    editor = _editor()
    updated = editor.update_field("B", position_end=12)
    assert updated.length == 9
    assert editor.get_field("B").position_end == 12


def test_update_other_attributes_keeps_length():
    editor = _editor()
    updated = editor.update_field("A", description="Identifier", length=7)
    assert updated.description == "Identifier"
    assert updated.length == 7


def test_update_resorts_by_start():
    editor = _editor()
    editor.update_field("A", position_start=20, position_end=22)
    assert [m.element for m in editor.mappings] == ["B", "A"]


def test_update_unknown_field_is_ignored():
    editor = _editor()
    before = list(editor.mappings)
    assert editor.update_field("Z", position_end=3) is None
    assert editor.mappings == before


def test_delete_fields_and_selection():
    editor = _editor()
    editor.select_all()
    assert sorted(editor.selected) == ["A", "B"]

    editor.delete_field("A")
    assert not editor.field_exists("A")
    assert editor.selected_elements == ["B"]

    editor.add_field(FieldMapping("C", position_start=9, position_end=9))
    editor.toggle_selection("C")
    editor.delete_fields(editor.selected_elements)
    assert editor.mappings == []
    assert editor.selected == set()


def test_toggle_and_clear_selection():
    editor = _editor()
    editor.toggle_selection("A")
    editor.toggle_selection("B")
    editor.toggle_selection("A")
    assert editor.selected_elements == ["B"]
    editor.clear_selection()
    assert editor.selected_elements == []


def test_validate_field_accepts_consistent_field():
    assert MappingEditor.validate_field(FieldMapping("A", position_start=1, position_end=3, length=3)) == []


def test_validate_field_reports_each_problem():
    issues = MappingEditor.validate_field(FieldMapping(" ", position_start=0, position_end=-2, length=0))
    assert [(i.type, i.field) for i in issues] == [
        (ERROR, "element"),
        (ERROR, "position_start"),
        (ERROR, "position_end"),
        (ERROR, "length"),
        (WARNING, "length"),
    ]
