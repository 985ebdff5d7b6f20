"""Tests for ITerm2Host."""

from unittest.mock import AsyncMock, MagicMock, patch

import iterm2
import pytest

from panekeeper.content.descriptors import ContentKind
from panekeeper.errors import HostOperationFailed
from panekeeper.host.base import ContentHost, LivePane, LiveSplit, WindowHost
from panekeeper.host.iterm2 import ITerm2Host, walk_splitter
from panekeeper.host.terminal import LaunchPlan, TerminalProcess
from panekeeper.layout.tree import Bounds, Orientation


def mock_session(width, height, session_id="s"):
    session = MagicMock(spec=iterm2.Session)
    session.grid_size = iterm2.Size(width, height)
    session.session_id = session_id
    return session


def mock_splitter(vertical, *children):
    splitter = MagicMock(spec=iterm2.Splitter)
    splitter.vertical = vertical
    splitter.children = list(children)
    return splitter


def session_variables(session, **values):
    async def get_variable(name):
        return values.get(name)

    session.async_get_variable = AsyncMock(side_effect=get_variable)


class TestWalkSplitter:
    """Tests for splitter traversal."""

    def test_single_session(self):
        session = mock_session(80, 24)
        node = walk_splitter(session)
        assert node == LivePane(handle=session, bounds=Bounds(0, 0, 80, 24))

    def test_side_by_side_offsets(self):
        a, b = mock_session(40, 24), mock_session(39, 24)
        node = walk_splitter(mock_splitter(True, a, b))

        assert isinstance(node, LiveSplit)
        assert node.orientation is Orientation.SIDE_BY_SIDE
        assert [c.bounds for c in node.children] == [Bounds(0, 0, 40, 24), Bounds(40, 0, 79, 24)]
        assert node.bounds == Bounds(0, 0, 79, 24)

    def test_cross_axis_stretched(self):
        """Stacked sessions all take the widest width."""
        a, b = mock_session(80, 10), mock_session(79, 13)
        node = walk_splitter(mock_splitter(False, a, b))

        assert [c.bounds for c in node.children] == [Bounds(0, 0, 80, 10), Bounds(0, 10, 80, 23)]

    def test_nested(self):
        left = mock_session(40, 24)
        top, bottom = mock_session(40, 12), mock_session(40, 12)
        node = walk_splitter(mock_splitter(True, left, mock_splitter(False, top, bottom)))

        right = node.children[1]
        assert right.bounds == Bounds(40, 0, 80, 24)
        assert right.children[1].bounds == Bounds(40, 12, 80, 24)

    def test_single_child_splitter_collapses(self):
        session = mock_session(80, 24)
        assert isinstance(walk_splitter(mock_splitter(True, session)), LivePane)


class TestITerm2Host:
    """Tests for window and pane operations."""

    @pytest.fixture
    def host(self):
        return ITerm2Host(MagicMock())

    def test_implements_both_hosts(self, host):
        assert isinstance(host, WindowHost)
        assert isinstance(host, ContentHost)
        assert host.name == "iterm2"

    @pytest.mark.asyncio
    async def test_get_app_unavailable(self, host):
        with patch("iterm2.async_get_app", new_callable=AsyncMock, return_value=None):
            with pytest.raises(HostOperationFailed):
                await host.get_app()

    @pytest.mark.asyncio
    async def test_list_and_focused_surfaces(self, host):
        app = MagicMock()
        app.windows = ["w1", "w2"]
        app.current_window = "w2"
        with patch("iterm2.async_get_app", new_callable=AsyncMock, return_value=app):
            assert await host.list_surfaces() == ["w1", "w2"]
            assert await host.focused_surface() == "w2"

    @pytest.mark.asyncio
    async def test_split_sizes_original_pane(self, host):
        pane = mock_session(80, 24)
        new = mock_session(40, 24)
        pane.async_split_pane = AsyncMock(return_value=new)
        tab = MagicMock()
        tab.async_update_layout = AsyncMock()
        app = MagicMock()
        app.get_window_and_tab_for_session.return_value = (MagicMock(), tab)

        with patch("iterm2.async_get_app", new_callable=AsyncMock, return_value=app):
            leading, trailing = await host.split_pane(pane, Orientation.SIDE_BY_SIDE, 30)

        assert (leading, trailing) == (pane, new)
        pane.async_split_pane.assert_awaited_once_with(vertical=True)
        assert (pane.preferred_size.width, new.preferred_size.width) == (30, 50)
        tab.async_update_layout.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_split_without_room(self, host):
        pane = mock_session(80, 6)
        pane.async_split_pane = AsyncMock()
        with pytest.raises(HostOperationFailed):
            await host.split_pane(pane, Orientation.STACKED, 6)
        pane.async_split_pane.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_collapse_closes_other_sessions(self, host):
        keep, other = mock_session(40, 24, "keep"), mock_session(40, 24, "other")
        other.async_close = AsyncMock()
        tab = MagicMock(tab_id="t1", current_session=keep, sessions=[keep, other])
        extra_tab = MagicMock(tab_id="t2")
        extra_tab.async_close = AsyncMock()
        window = MagicMock(current_tab=tab, tabs=[tab, extra_tab])

        assert await host.collapse_surface(window) is keep
        other.async_close.assert_awaited_once_with(force=True)
        extra_tab.async_close.assert_awaited_once_with(force=True)


class TestITerm2Content:
    """Tests for session content."""

    @pytest.fixture
    def host(self):
        return ITerm2Host(MagicMock())

    @pytest.mark.asyncio
    async def test_process_of(self, host):
        session = mock_session(80, 24)
        session_variables(session, jobName="vim", commandLine="vim notes.md", path="/home/u", name="notes")

        process = await host.content_of(session)

        assert process.argv == ["vim", "notes.md"]
        assert await host.kind_of(process) is ContentKind.FILE
        assert await host.describe(process) == {"path": "/home/u/notes.md"}

    @pytest.mark.asyncio
    async def test_locate_never_finds(self, host):
        assert await host.locate("monitor", "htop") is None

    @pytest.mark.asyncio
    async def test_respawn_from_shell(self, host):
        session = mock_session(80, 24)
        session_variables(session, jobName="zsh", commandLine="-zsh")
        session.async_send_text = AsyncMock()
        session.async_restart = AsyncMock()

        await host.attach(session, LaunchPlan(ContentKind.FILE, ["vim", "/my dir/a.txt"], cwd="/my dir"))

        session.async_restart.assert_not_awaited()
        session.async_send_text.assert_awaited_once_with("cd '/my dir' && vim '/my dir/a.txt'\n")

    @pytest.mark.asyncio
    async def test_respawn_restarts_running_program(self, host):
        session = mock_session(80, 24)
        session_variables(session, jobName="htop", commandLine="htop")
        session.async_send_text = AsyncMock()
        session.async_restart = AsyncMock()

        await host.attach(session, LaunchPlan(ContentKind.DIRECTORY_LISTING, [], cwd="/tmp"))

        session.async_restart.assert_awaited_once()
        session.async_send_text.assert_awaited_once_with("cd /tmp\n")

    @pytest.mark.asyncio
    async def test_move_process_unsupported(self, host):
        process = TerminalProcess(pane=mock_session(80, 24), command="htop", argv=["htop"])
        with pytest.raises(HostOperationFailed):
            await host.attach(mock_session(80, 24), process)
