"""iTerm2 host: windows are surfaces, sessions of the current tab are panes."""

import logging
import shlex

import iterm2

from ... import config
from ...errors import HostOperationFailed
from ...layout.tree import Orientation
from ..base import LiveNode, PaneState, SurfaceGeometry, WindowHost
from ..terminal import LaunchPlan, TerminalContentHost, TerminalProcess
from .layout import walk_splitter

logger = logging.getLogger(__name__)


class ITerm2Host(WindowHost, TerminalContentHost):
    """WindowHost and ContentHost over the iTerm2 Python API.

    Sessions cannot move between panes, so named surfaces are never
    located; they are regenerated through their producer instead.
    """

    def __init__(self, connection: iterm2.Connection):
        self.connection = connection

    @property
    def name(self) -> str:
        return "iterm2"

    async def get_app(self) -> iterm2.App:
        app = await iterm2.async_get_app(self.connection)
        if app is None:
            raise HostOperationFailed("iTerm2 app unavailable")
        return app

    # === Surfaces ===

    async def list_surfaces(self) -> list[iterm2.Window]:
        app = await self.get_app()
        return list(app.windows)

    async def focused_surface(self) -> iterm2.Window | None:
        app = await self.get_app()
        return app.current_window

    async def live_root(self, surface: iterm2.Window) -> LiveNode:
        tab = surface.current_tab
        if tab is None or tab.root is None:
            raise HostOperationFailed(f"Window {surface.window_id} has no tab")
        return walk_splitter(tab.root)

    async def surface_geometry(self, surface: iterm2.Window) -> SurfaceGeometry:
        root = await self.live_root(surface)
        frame = await surface.async_get_frame()
        return SurfaceGeometry(
            width=root.bounds.width,
            height=root.bounds.height,
            pixel_width=int(frame.size.width),
            pixel_height=int(frame.size.height),
            left=int(frame.origin.x),
            top=int(frame.origin.y),
        )

    async def create_surface(self, geometry: SurfaceGeometry) -> iterm2.Window:
        window = await iterm2.Window.async_create(self.connection)
        if window is None:
            raise HostOperationFailed("iTerm2 refused to create a window")
        if geometry.pixel_width > 0 and geometry.pixel_height > 0:
            await window.async_set_frame(
                iterm2.Frame(
                    origin=iterm2.Point(geometry.left, geometry.top),
                    size=iterm2.Size(geometry.pixel_width, geometry.pixel_height),
                )
            )
        return window

    async def destroy_surface(self, surface: iterm2.Window) -> None:
        await surface.async_close(force=True)

    async def resize_surface(self, surface: iterm2.Window, geometry: SurfaceGeometry) -> None:
        if geometry.pixel_width <= 0 or geometry.pixel_height <= 0:
            logger.debug("[iTerm2] No pixel size recorded, window left as is")
            return
        frame = await surface.async_get_frame()
        await surface.async_set_frame(
            iterm2.Frame(
                origin=frame.origin,
                size=iterm2.Size(geometry.pixel_width, geometry.pixel_height),
            )
        )

    async def move_surface(self, surface: iterm2.Window, left: int, top: int) -> None:
        frame = await surface.async_get_frame()
        await surface.async_set_frame(iterm2.Frame(origin=iterm2.Point(left, top), size=frame.size))

    async def collapse_surface(self, surface: iterm2.Window) -> iterm2.Session:
        tab = surface.current_tab
        if tab is None or tab.current_session is None:
            raise HostOperationFailed(f"Window {surface.window_id} has no session")
        keep = tab.current_session
        for other in list(surface.tabs):
            if other.tab_id != tab.tab_id:
                await other.async_close(force=True)
        for session in list(tab.sessions):
            if session.session_id != keep.session_id:
                await session.async_close(force=True)
        return keep

    async def split_pane(
        self, pane: iterm2.Session, orientation: Orientation, size: int | None = None
    ) -> tuple[iterm2.Session, iterm2.Session]:
        vertical = orientation is Orientation.SIDE_BY_SIDE
        grid = pane.grid_size
        total = grid.width if vertical else grid.height
        if size is not None and size >= total:
            raise HostOperationFailed(f"Pane of {total} cells cannot give {size} to a new pane")

        try:
            new = await pane.async_split_pane(vertical=vertical)
        except Exception as e:
            raise HostOperationFailed(f"iTerm2 split failed: {e}") from e
        if new is None:
            raise HostOperationFailed("iTerm2 split failed")

        if size is not None:
            if vertical:
                pane.preferred_size = iterm2.Size(size, grid.height)
                new.preferred_size = iterm2.Size(total - size, grid.height)
            else:
                pane.preferred_size = iterm2.Size(grid.width, size)
                new.preferred_size = iterm2.Size(grid.width, total - size)
            app = await self.get_app()
            _, tab = app.get_window_and_tab_for_session(pane)
            if tab is not None:
                await tab.async_update_layout()

        return pane, new

    # === Pane state ===

    async def pane_state(self, pane: iterm2.Session) -> PaneState:
        return PaneState()

    async def set_viewport_start(self, pane: iterm2.Session, offset: int) -> None:
        return None

    async def set_pane_cursor(self, pane: iterm2.Session, offset: int) -> None:
        return None

    async def set_hscroll(self, pane: iterm2.Session, offset: int) -> None:
        return None

    async def raise_surface(self, surface: iterm2.Window) -> None:
        await surface.async_activate()

    async def focus_surface(self, surface: iterm2.Window) -> None:
        app = await self.get_app()
        await app.async_activate()
        await surface.async_activate()

    # === Content primitives ===

    async def _process_of(self, pane: iterm2.Session) -> TerminalProcess | None:
        job = await pane.async_get_variable("jobName") or ""
        command_line = await pane.async_get_variable("commandLine") or ""
        try:
            argv = shlex.split(command_line) if command_line else []
        except ValueError:
            argv = []
        if not argv and job:
            argv = [job]
        return TerminalProcess(
            pane=pane,
            command=job,
            argv=argv,
            cwd=await pane.async_get_variable("path") or "",
            title=await pane.async_get_variable("name") or "",
        )

    async def _list_processes(self) -> list[TerminalProcess]:
        processes = []
        for window in await self.list_surfaces():
            for tab in window.tabs:
                for session in tab.sessions:
                    process = await self._process_of(session)
                    if process is not None:
                        processes.append(process)
        return processes

    async def locate(self, name: str, surface_kind: str) -> None:
        return None

    async def _respawn(self, pane: iterm2.Session, plan: LaunchPlan) -> None:
        current = await self._process_of(pane)
        if current is not None and current.program not in config.SHELL_COMMANDS:
            await pane.async_restart()

        parts = []
        if plan.cwd:
            parts.append(f"cd {shlex.quote(plan.cwd)}")
        if plan.argv:
            parts.append(plan.command_line)
        if parts:
            await pane.async_send_text(" && ".join(parts) + "\n")

    async def _move_process(self, process: TerminalProcess, pane: iterm2.Session) -> None:
        raise HostOperationFailed("iTerm2 sessions cannot move between panes")

    async def _send_keys(self, pane: iterm2.Session, text: str) -> None:
        await pane.async_send_text(text)
