"""Tmux host: windows of one session are surfaces, tmux panes are panes."""

import logging
import os
import shlex

from ...errors import HostOperationFailed
from ...layout.tree import Orientation
from ..base import LiveNode, PaneState, SurfaceGeometry, WindowHost
from ..terminal import LaunchPlan, TerminalContentHost, TerminalProcess
from .client import TmuxClient
from .layout import parse_layout

logger = logging.getLogger(__name__)


def _argv_of(info: dict) -> list[str]:
    """Best argv for a pane: the start command when it is still in front."""
    current = info.get("current_command", "")
    start = info.get("start_command", "")
    if start:
        try:
            argv = shlex.split(start)
        except ValueError:
            argv = []
        if argv and os.path.basename(argv[0]) == current:
            return argv
    return [current] if current else []


def _process_from_info(info: dict) -> TerminalProcess:
    return TerminalProcess(
        pane=info["pane_id"],
        command=info.get("current_command", ""),
        argv=_argv_of(info),
        cwd=info.get("path", ""),
        title=info.get("title", ""),
    )


def _own_pane(socket_path: str | None) -> str | None:
    """$TMUX_PANE, when this process runs on the server at ``socket_path``."""
    tmux = os.environ.get("TMUX")
    if not tmux:
        return None
    if socket_path and socket_path != tmux.split(",")[0]:
        return None
    return os.environ.get("TMUX_PANE")


class TmuxHost(WindowHost, TerminalContentHost):
    """WindowHost and ContentHost over a tmux session.

    Surfaces are window IDs ("@1"), panes are pane IDs ("%3"). tmux windows
    have no screen position or pixel size; both are ignored.
    """

    def __init__(
        self,
        socket_path: str | None = None,
        session: str | None = None,
        own_pane: str | None = None,
    ):
        """Initialize TmuxHost.

        Args:
            socket_path: Optional tmux socket path.
            session: Session whose windows are managed; None for the current one.
            own_pane: Pane this process runs in, never killed or respawned.
                Defaults to $TMUX_PANE on the same server.
        """
        self._client = TmuxClient(socket_path=socket_path, session=session)
        self._own_pane = own_pane if own_pane is not None else _own_pane(socket_path)

    @property
    def name(self) -> str:
        return "tmux"

    @property
    def client(self) -> TmuxClient:
        """Access underlying TmuxClient."""
        return self._client

    # === Surfaces ===

    async def list_surfaces(self) -> list[str]:
        return [w["window_id"] for w in await self._client.list_windows()]

    async def focused_surface(self) -> str | None:
        return await self._client.get_active_window()

    async def live_root(self, surface: str) -> LiveNode:
        layout = await self._client.get_window_layout(surface)
        try:
            return parse_layout(layout)
        except ValueError as e:
            raise HostOperationFailed(f"Unreadable layout for window {surface}: {e}") from e

    async def surface_geometry(self, surface: str) -> SurfaceGeometry:
        for window in await self._client.list_windows():
            if window["window_id"] == surface:
                return SurfaceGeometry(width=window["width"], height=window["height"])
        raise HostOperationFailed(f"Window {surface} not found")

    async def create_surface(self, geometry: SurfaceGeometry) -> str:
        window_id = await self._client.new_window()
        await self.resize_surface(window_id, geometry)
        logger.debug(f"[tmux] Created window {window_id}")
        return window_id

    async def destroy_surface(self, surface: str) -> None:
        if self._own_pane:
            panes = await self._client.list_panes(surface)
            if any(p["pane_id"] == self._own_pane for p in panes):
                # the window holding this process stays; only its other panes go
                logger.info(f"[tmux] Keeping window {surface}, it holds pane {self._own_pane}")
                if len(panes) > 1:
                    await self._client.kill_other_panes(self._own_pane)
                return
        await self._client.kill_window(surface)

    async def resize_surface(self, surface: str, geometry: SurfaceGeometry) -> None:
        if geometry.width > 0 and geometry.height > 0:
            await self._client.resize_window(surface, geometry.width, geometry.height)

    async def move_surface(self, surface: str, left: int, top: int) -> None:
        return None

    async def collapse_surface(self, surface: str) -> str:
        panes = await self._client.list_panes(surface)
        if not panes:
            raise HostOperationFailed(f"Window {surface} has no panes")
        if self._own_pane and any(p["pane_id"] == self._own_pane for p in panes):
            panes = await self._evict_own_pane(surface, len(panes))
        keep = next((p for p in panes if p["active"]), panes[0])["pane_id"]
        if len(panes) > 1:
            await self._client.kill_other_panes(keep)
        return keep

    async def _evict_own_pane(self, surface: str, pane_count: int) -> list[dict]:
        """Move this process's pane out of ``surface`` into a background window."""
        if pane_count == 1:
            await self._client.split_window(self._own_pane, horizontal=False)
        window = await self._client.break_pane(self._own_pane)
        logger.info(f"[tmux] Moved pane {self._own_pane} out of {surface} into window {window}")
        panes = await self._client.list_panes(surface)
        if not panes:
            raise HostOperationFailed(f"Window {surface} has no panes")
        return panes

    async def split_pane(
        self, pane: str, orientation: Orientation, size: int | None = None
    ) -> tuple[str, str]:
        # the new pane goes first (-b); stored extents include the border
        # cell, which tmux adds on top of -l
        cells = max(1, size - 1) if size is not None else None
        new_pane = await self._client.split_window(
            pane, horizontal=orientation is Orientation.SIDE_BY_SIDE, size=cells
        )
        return new_pane, pane

    # === Pane state ===

    async def pane_state(self, pane: str) -> PaneState:
        return PaneState(vscroll=await self._client.pane_scroll_position(pane))

    async def set_viewport_start(self, pane: str, offset: int) -> None:
        return None

    async def set_pane_cursor(self, pane: str, offset: int) -> None:
        return None

    async def set_hscroll(self, pane: str, offset: int) -> None:
        return None

    async def raise_surface(self, surface: str) -> None:
        if not await self._client.select_window(surface):
            raise HostOperationFailed(f"Cannot select window {surface}")

    async def focus_surface(self, surface: str) -> None:
        await self.raise_surface(surface)

    # === Content primitives ===

    async def _process_of(self, pane: str) -> TerminalProcess | None:
        info = await self._client.get_pane_info(pane)
        if info is None:
            return None
        return _process_from_info(info)

    async def _list_processes(self) -> list[TerminalProcess]:
        return [
            _process_from_info(info)
            for info in await self._client.list_panes()
            if info["pane_id"] != self._own_pane
        ]

    async def _respawn(self, pane: str, plan: LaunchPlan) -> None:
        await self._client.respawn_pane(pane, cwd=plan.cwd or None, argv=plan.argv)

    async def _move_process(self, process: TerminalProcess, pane: str) -> None:
        await self._client.swap_pane(process.pane, pane)

    async def _send_keys(self, pane: str, text: str) -> None:
        await self._client.send_text(pane, text)
