"""Tests for session snapshots."""

from __future__ import annotations

import pytest

from ice_mapper.config_options import SessionConfig
from ice_mapper.session_store import MAPPINGS_FILE, SessionStore
from ice_mapper.types_and_errors import FieldMapping, SessionError


def _store(tmp_path):
    return SessionStore(SessionConfig(session_folder=tmp_path / "session"))


def test_no_session(tmp_path):
    store = _store(tmp_path)
    assert not store.has_session()
    assert store.load_session() is None
    assert store.get_session_age() is None


def test_save_and_load(tmp_path, id_name_mappings):
    store = _store(tmp_path)
    mappings = id_name_mappings + [FieldMapping("NOTE", "note", "Café note", "CHR", 9, 12, 4, "")]
    store.save_session(mappings, ["001ALICE    ", "002BOB      "])

    snapshot = store.load_session()
    assert snapshot.mappings == mappings
    assert snapshot.raw_records == ["001ALICE    ", "002BOB      "]
    assert snapshot.timestamp > 0
    assert store.get_session_age() == 0


def test_save_without_records(tmp_path, id_name_mappings):
    store = _store(tmp_path)
    store.save_session(id_name_mappings, [])
    assert store.load_session().raw_records == []


def test_clear_session(tmp_path, id_name_mappings):
    store = _store(tmp_path)
    store.save_session(id_name_mappings, ["001ALICE"])
    store.clear_session()
    assert store.load_session() is None


def test_corrupt_session_raises(tmp_path, id_name_mappings):
    store = _store(tmp_path)
    store.save_session(id_name_mappings, ["001ALICE"])
    (store.folder / MAPPINGS_FILE).write_text("- element: A\n  position_start: x\n", encoding="utf-8")
    with pytest.raises(SessionError):
        store.load_session()
