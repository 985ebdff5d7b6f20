"""Tests for the HTTP control surface."""

import pytest
from fastapi.testclient import TestClient

from fakes import file_unit, pane, split
from panekeeper.errors import HostOperationFailed
from panekeeper.layout.tree import Orientation
from panekeeper.session import SessionManager
from panekeeper.store import RecordStore
from panekeeper.web import create_app
from panekeeper.workspace import WorkspaceManager


@pytest.fixture
def store(tmp_path):
    return RecordStore(tmp_path)


@pytest.fixture
def sessions(host, registry):
    return SessionManager(host, host, registry=registry)


@pytest.fixture
def client(sessions, store):
    return TestClient(create_app(sessions, WorkspaceManager(sessions), store))


@pytest.fixture
def editing(host):
    root = split(
        Orientation.SIDE_BY_SIDE, 0, 0, 80, 24,
        pane("p1", 0, 0, 40, 24),
        pane("p2", 40, 0, 80, 24),
    )
    surface = host.add_surface(80, 24, root=root)
    host.show("p1", file_unit("/a.py"))
    host.show("p2", file_unit("/b.py"))
    host.add_path("/a.py")
    host.add_path("/b.py")
    return surface


class TestSessionRoutes:
    def test_capture_list_get(self, client, editing):
        response = client.post("/api/sessions/work")
        assert response.status_code == 200
        assert response.json()["panes"] == 2
        assert response.json()["surfaces"] == 1

        assert client.get("/api/sessions").json() == {"names": ["work"]}
        record = client.get("/api/sessions/work").json()
        assert record["name"] == "work"
        assert record["layout_tree"]["type"] == "split"

    def test_restore(self, client, editing, host):
        client.post("/api/sessions/work")
        host.calls.clear()

        response = client.post("/api/sessions/work/restore")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["complete"] is True
        assert len(body["report"]["restored"]) == 2
        assert ("collapse_surface", editing) in host.calls

    def test_delete(self, client, editing):
        client.post("/api/sessions/work")
        response = client.delete("/api/sessions/work")
        assert response.json()["success"] is True
        assert client.get("/api/sessions").json() == {"names": []}


class TestErrorMapping:
    def test_missing_record_is_404(self, client):
        assert client.get("/api/sessions/ghost").status_code == 404
        assert client.post("/api/workspaces/ghost/restore").status_code == 404
        assert client.delete("/api/sessions/ghost").status_code == 404

    def test_invalid_name_is_400(self, client, editing):
        response = client.post("/api/sessions/.hidden")
        assert response.status_code == 400
        assert "Invalid record name" in response.json()["detail"]

    def test_corrupt_record_is_422(self, client, editing, tmp_path):
        client.post("/api/sessions/work")
        (tmp_path / "sessions" / "work.json").write_text("{oops")
        assert client.post("/api/sessions/work/restore").status_code == 422

    def test_host_failure_is_503(self, client, host, monkeypatch):
        async def no_surfaces():
            raise HostOperationFailed("tmux server gone")

        monkeypatch.setattr(host, "list_surfaces", no_surfaces)
        response = client.post("/api/workspaces/desk")
        assert response.status_code == 503
        assert response.json()["detail"] == "tmux server gone"


class TestWorkspaceRoutes:
    def test_capture_and_restore(self, client, editing, host):
        host.add_surface(60, 20)

        captured = client.post("/api/workspaces/desk").json()
        assert captured["surfaces"] == 2
        assert captured["panes"] == 2

        response = client.post("/api/workspaces/desk/restore")
        body = response.json()
        assert response.status_code == 200
        assert body["ok"] is True
        assert body["report"]["created"] == 1
