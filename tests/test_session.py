"""Single-surface session tests"""

import pytest

from fakes import dir_unit, doc_unit, file_unit, pane, split
from panekeeper.content.descriptors import FileDescriptor
from panekeeper.errors import HostOperationFailed, StructuralError
from panekeeper.host.base import PaneState, SurfaceGeometry
from panekeeper.layout.tree import Bounds, LeafNode, Orientation, SplitNode
from panekeeper.records import SessionRecord
from panekeeper.session import SessionManager

H = Orientation.SIDE_BY_SIDE
V = Orientation.STACKED


@pytest.fixture
def sessions(host, registry):
    return SessionManager(host, host, registry=registry)


def build_editing_surface(host):
    root = split(
        H, 0, 0, 120, 40,
        pane("e1", 0, 0, 70, 40),
        split(V, 70, 0, 120, 40, pane("e2", 70, 0, 120, 25), pane("e3", 70, 25, 120, 40)),
    )
    surface = host.add_surface(120, 40, root=root, pixel_width=1200, pixel_height=800)
    host.show("e1", file_unit("/src/main.py", cursor_offset=512), PaneState(viewport_start=300, cursor=512))
    host.show("e2", doc_unit("/docs/ref.pdf", page=9, scale=1.25))
    host.show("e3", dir_unit("/src", cursor_offset=3), PaneState(cursor=3))
    for path in ("/src/main.py", "/docs/ref.pdf", "/src"):
        host.add_path(path)
    return surface


class TestCapture:
    @pytest.mark.asyncio
    async def test_focused_surface_by_default(self, host, sessions):
        surface = build_editing_surface(host)
        host.focused = surface

        record = await sessions.capture("editing")

        assert record.name == "editing"
        assert (record.surface_width, record.surface_height) == (120, 40)
        assert (record.pixel_width, record.pixel_height) == (1200, 800)
        assert record.leaf_count == 3
        assert record.timestamp > 0

    @pytest.mark.asyncio
    async def test_no_surface(self, host, sessions):
        with pytest.raises(HostOperationFailed):
            await sessions.capture("nothing")

    @pytest.mark.asyncio
    async def test_nothing_capturable(self, host, sessions):
        host.add_surface(80, 24)
        record = await sessions.capture("empty")
        assert record.layout_tree is None
        assert record.leaf_count == 0


class TestRestore:
    @pytest.mark.asyncio
    async def test_round_trip_into_fresh_surface(self, host, sessions):
        original = await sessions.capture("editing", build_editing_surface(host))

        target = host.add_surface(80, 24)
        report = await sessions.restore(original, target)

        assert report.complete
        again = await sessions.capture("editing", target)
        assert again.layout_tree == original.layout_tree
        assert (again.surface_width, again.surface_height) == (120, 40)

    @pytest.mark.asyncio
    async def test_resize_then_collapse_then_split(self, host, sessions):
        original = await sessions.capture("editing", build_editing_surface(host))
        target = host.add_surface(80, 24)
        host.calls.clear()

        await sessions.restore(original, target)

        names = [c[0] for c in host.calls]
        assert names[:2] == ["resize_surface", "collapse_surface"]
        assert host.calls[0] == ("resize_surface", target, 120, 40)
        assert names.count("split_pane") == 2

    @pytest.mark.asyncio
    async def test_empty_tree_only_prepares_surface(self, host, sessions):
        target = host.add_surface(80, 24)
        record = SessionRecord("empty", 0.0, 100, 30)

        report = await sessions.restore(record, target)

        assert report.complete
        assert [c[0] for c in host.calls] == ["resize_surface", "collapse_surface"]

    @pytest.mark.asyncio
    async def test_malformed_tree_touches_nothing(self, host, sessions):
        target = host.add_surface(80, 24)
        bad = SplitNode(
            H,
            Bounds(0, 0, 80, 24),
            (
                LeafNode(FileDescriptor("/a"), Bounds(0, 0, 40, 24)),
                LeafNode(FileDescriptor("/b"), Bounds(50, 0, 80, 24)),
            ),
        )
        record = SessionRecord("bad", 0.0, 80, 24, layout_tree=bad)

        with pytest.raises(StructuralError):
            await sessions.restore(record, target)
        assert host.calls == []

    @pytest.mark.asyncio
    async def test_restore_into_uses_given_geometry(self, host, sessions):
        target = host.add_surface(80, 24)
        await sessions.restore_into(target, SurfaceGeometry(100, 50), None)
        assert host.surfaces[target].width == 100
        assert host.surfaces[target].height == 50
