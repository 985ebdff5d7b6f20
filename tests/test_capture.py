"""Capture walker tests"""

import pytest

from fakes import FakeUnit, dir_unit, file_unit, named_unit, pane, split
from panekeeper.content.descriptors import DirectoryListingDescriptor, FileDescriptor
from panekeeper.host.base import PaneState
from panekeeper.layout.capture import CaptureWalker, absorb_pruned, stretch
from panekeeper.layout.tree import Bounds, LeafNode, Orientation, SplitNode, iter_leaves, validate
from panekeeper.telemetry import metrics

H = Orientation.SIDE_BY_SIDE
V = Orientation.STACKED


@pytest.fixture
def walker(host, registry):
    return CaptureWalker(host, registry)


class TestStretch:
    def test_leaf(self):
        leaf = LeafNode(FileDescriptor("/a"), Bounds(0, 0, 10, 10))
        assert stretch(leaf, H, end=20).bounds == Bounds(0, 0, 20, 10)

    def test_same_axis_split_grows_outer_child(self):
        node = SplitNode(
            H,
            Bounds(0, 0, 20, 10),
            (
                LeafNode(FileDescriptor("/a"), Bounds(0, 0, 10, 10)),
                LeafNode(FileDescriptor("/b"), Bounds(10, 0, 20, 10)),
            ),
        )
        grown = stretch(node, H, end=30)
        assert grown.bounds == Bounds(0, 0, 30, 10)
        assert grown.children[0].bounds == Bounds(0, 0, 10, 10)
        assert grown.children[1].bounds == Bounds(10, 0, 30, 10)
        validate(grown)

    def test_cross_axis_split_grows_every_child(self):
        node = SplitNode(
            V,
            Bounds(0, 0, 20, 10),
            (
                LeafNode(FileDescriptor("/a"), Bounds(0, 0, 20, 5)),
                LeafNode(FileDescriptor("/b"), Bounds(0, 5, 20, 10)),
            ),
        )
        grown = stretch(node, H, start=-5)
        assert [c.bounds.left for c in grown.children] == [-5, -5]
        validate(grown)


class TestAbsorbPruned:
    def test_leading_pruned_goes_to_next(self):
        a = LeafNode(FileDescriptor("/a"), Bounds(10, 0, 20, 10))
        survivors = absorb_pruned(H, [(Bounds(0, 0, 10, 10), None), (a.bounds, a)])
        assert survivors[0].bounds == Bounds(0, 0, 20, 10)

    def test_trailing_pruned_goes_to_previous(self):
        a = LeafNode(FileDescriptor("/a"), Bounds(0, 0, 10, 10))
        survivors = absorb_pruned(H, [(a.bounds, a), (Bounds(10, 0, 20, 10), None)])
        assert survivors[0].bounds == Bounds(0, 0, 20, 10)

    def test_all_pruned(self):
        assert absorb_pruned(H, [(Bounds(0, 0, 10, 10), None)]) == []


class TestCaptureWalker:
    @pytest.mark.asyncio
    async def test_single_pane(self, host, walker):
        surface = host.add_surface(80, 24, root=pane("p1", 0, 0, 80, 24))
        host.show("p1", file_unit("/a.py", cursor_offset=3), PaneState(hscroll=1, vscroll=2, viewport_start=30, cursor=45))

        tree = await walker.capture_surface(surface)

        assert tree == LeafNode(
            FileDescriptor("/a.py", cursor_offset=3),
            Bounds(0, 0, 80, 24),
            hscroll=1,
            vscroll=2,
            viewport_start=30,
            cursor_offset=45,
        )

    @pytest.mark.asyncio
    async def test_nested_tree_is_mirrored(self, host, walker):
        root = split(
            H, 0, 0, 80, 24,
            pane("p1", 0, 0, 40, 24),
            split(V, 40, 0, 80, 24, pane("p2", 40, 0, 80, 12), pane("p3", 40, 12, 80, 24)),
        )
        surface = host.add_surface(80, 24, root=root)
        for p, path in (("p1", "/a"), ("p2", "/b"), ("p3", "/c")):
            host.show(p, file_unit(path))

        tree = await walker.capture_surface(surface)

        validate(tree)
        assert tree.orientation is H
        assert tree.children[1].orientation is V
        assert [l.descriptor.path for l in iter_leaves(tree)] == ["/a", "/b", "/c"]

    @pytest.mark.asyncio
    async def test_pruned_pane_equals_absent_pane(self, host, walker):
        with_junk = host.add_surface(
            90, 24,
            root=split(H, 0, 0, 90, 24, pane("a1", 0, 0, 30, 24), pane("a2", 30, 0, 60, 24), pane("a3", 60, 0, 90, 24)),
        )
        host.show("a1", file_unit("/a"))
        host.show("a2", FakeUnit(None))
        host.show("a3", file_unit("/c"))

        without = host.add_surface(
            90, 24, root=split(H, 0, 0, 90, 24, pane("b1", 0, 0, 60, 24), pane("b3", 60, 0, 90, 24))
        )
        host.show("b1", file_unit("/a"))
        host.show("b3", file_unit("/c"))

        assert await walker.capture_surface(with_junk) == await walker.capture_surface(without)
        assert metrics.get_counter("capture.pruned", {"reason": "unrecognized"}) == 1

    @pytest.mark.asyncio
    async def test_single_survivor_collapses(self, host, walker):
        surface = host.add_surface(
            80, 24, root=split(V, 0, 0, 80, 24, pane("p1", 0, 0, 80, 10), pane("p2", 0, 10, 80, 24))
        )
        host.show("p2", dir_unit("/tmp"))

        tree = await walker.capture_surface(surface)

        assert isinstance(tree, LeafNode)
        assert tree.descriptor == DirectoryListingDescriptor("/tmp")
        assert tree.bounds == Bounds(0, 0, 80, 24)

    @pytest.mark.asyncio
    async def test_empty_split_vanishes(self, host, walker):
        root = split(
            H, 0, 0, 80, 24,
            split(V, 0, 0, 40, 24, pane("p1", 0, 0, 40, 12), pane("p2", 0, 12, 40, 24)),
            pane("p3", 40, 0, 80, 24),
        )
        surface = host.add_surface(80, 24, root=root)
        host.show("p3", named_unit("monitor", "htop"))

        tree = await walker.capture_surface(surface)

        assert isinstance(tree, LeafNode)
        assert tree.bounds == Bounds(0, 0, 80, 24)

    @pytest.mark.asyncio
    async def test_everything_pruned(self, host, walker):
        surface = host.add_surface(80, 24, root=pane("p1", 0, 0, 80, 24))
        assert await walker.capture_surface(surface) is None

    @pytest.mark.asyncio
    async def test_capture_error_prunes(self, host, walker, monkeypatch):
        surface = host.add_surface(
            80, 24, root=split(H, 0, 0, 80, 24, pane("p1", 0, 0, 40, 24), pane("p2", 40, 0, 80, 24))
        )
        host.show("p1", file_unit("/a"))
        host.show("p2", file_unit("/b"))

        original = host.pane_state

        async def broken_state(p):
            if p == "p2":
                raise RuntimeError("pane vanished")
            return await original(p)

        monkeypatch.setattr(host, "pane_state", broken_state)
        tree = await walker.capture_surface(surface)

        assert tree.descriptor == FileDescriptor("/a")
        assert tree.bounds == Bounds(0, 0, 80, 24)
        assert metrics.get_counter("capture.pruned", {"reason": "error"}) == 1
