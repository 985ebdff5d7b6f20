"""Tests for the record store."""

import json

import pytest

from panekeeper.content.descriptors import DirectoryListingDescriptor
from panekeeper.errors import NotFound, StructuralError
from panekeeper.layout.tree import Bounds, LeafNode
from panekeeper.records import SessionRecord, SurfaceSnapshot, WorkspaceRecord
from panekeeper.store import SESSION, WORKSPACE, RecordStore, validate_name
from panekeeper.telemetry import metrics


@pytest.fixture
def store(tmp_path):
    return RecordStore(tmp_path)


@pytest.fixture
def session_record():
    tree = LeafNode(DirectoryListingDescriptor("/srv", cursor_offset=1), Bounds(0, 0, 80, 24))
    return SessionRecord("shell", 1700000000.0, 80, 24, layout_tree=tree)


class TestValidateName:
    @pytest.mark.parametrize("name", ["work", "work-2", "a.b_c", "X"])
    def test_valid(self, name):
        assert validate_name(name) == name

    @pytest.mark.parametrize("name", ["", ".hidden", "a/b", "../up", "with space", "x" * 200])
    def test_invalid(self, name):
        with pytest.raises(ValueError):
            validate_name(name)


class TestSessions:
    def test_save_and_load(self, store, session_record, tmp_path):
        path = store.save_session(session_record)

        assert path == tmp_path / "sessions" / "shell.json"
        assert store.load_session("shell") == session_record

    def test_file_layout(self, store, session_record):
        path = store.save_session(session_record)
        data = json.loads(path.read_text())

        assert data["kind"] == SESSION
        assert data["version"] == store.version
        assert data["record"]["name"] == "shell"
        assert len(data["checksum"]) == 64

    def test_overwrite(self, store, session_record):
        store.save_session(session_record)
        session_record.surface_width = 100
        store.save_session(session_record)
        assert store.load_session("shell").surface_width == 100

    def test_no_temp_files_left(self, store, session_record, tmp_path):
        store.save_session(session_record)
        assert [p.name for p in (tmp_path / "sessions").iterdir()] == ["shell.json"]

    def test_missing(self, store):
        with pytest.raises(NotFound):
            store.load_session("nope")


class TestCorruption:
    def test_invalid_json(self, store, session_record):
        path = store.save_session(session_record)
        path.write_text("{not json")

        with pytest.raises(StructuralError, match="invalid JSON"):
            store.load_session("shell")
        assert metrics.get_counter("store.error", {"op": "load", "reason": "json"}) == 1

    def test_checksum_mismatch(self, store, session_record):
        path = store.save_session(session_record)
        data = json.loads(path.read_text())
        data["record"]["surface_width"] = 999
        path.write_text(json.dumps(data))

        with pytest.raises(StructuralError, match="checksum"):
            store.load_session("shell")

    def test_version_mismatch(self, store, session_record, tmp_path):
        store.save_session(session_record)

        with pytest.raises(StructuralError, match="version mismatch"):
            RecordStore(tmp_path, version=store.version + 1).load_session("shell")

    def test_missing_body(self, store, session_record):
        path = store.save_session(session_record)
        path.write_text(json.dumps({"version": store.version, "kind": SESSION}))

        with pytest.raises(StructuralError, match="missing record body"):
            store.load_session("shell")

    def test_malformed_tree(self, store, session_record):
        path = store.save_session(session_record)
        data = json.loads(path.read_text())
        data.pop("checksum")
        data["record"]["layout_tree"]["bounds"] = [0, 0, 0, 24]
        path.write_text(json.dumps(data))

        with pytest.raises(StructuralError):
            store.load_session("shell")


class TestWorkspacesAndListing:
    def test_workspace_round_trip(self, store):
        record = WorkspaceRecord("desk", 5.0, [SurfaceSnapshot(80, 24, is_dominant=True), SurfaceSnapshot(90, 30)])
        store.save_workspace(record)
        assert store.load_workspace("desk") == record

    def test_kinds_are_separate(self, store, session_record):
        store.save_session(session_record)
        with pytest.raises(NotFound):
            store.load_workspace("shell")

    def test_list_names(self, store, session_record):
        assert store.list_names(SESSION) == []
        store.save_session(session_record)
        store.save_session(SessionRecord("alpha", 0.0, 80, 24))

        assert store.list_names(SESSION) == ["alpha", "shell"]
        assert store.list_names(WORKSPACE) == []

    def test_unknown_kind(self, store):
        with pytest.raises(ValueError):
            store.list_names("tab")

    def test_delete(self, store, session_record):
        store.save_session(session_record)
        store.delete(SESSION, "shell")

        assert store.list_names(SESSION) == []
        with pytest.raises(NotFound):
            store.delete(SESSION, "shell")
