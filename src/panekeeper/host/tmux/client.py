"""Tmux client for subprocess-based tmux interaction."""

import asyncio
import logging
import shlex

from ...errors import HostOperationFailed

logger = logging.getLogger(__name__)

# Use tab as delimiter to avoid conflicts with colons in data (paths, titles)
_FIELD_SEP = "\t"

_PANE_FIELDS = [
    "#{pane_id}", "#{window_id}", "#{pane_left}", "#{pane_top}",
    "#{pane_width}", "#{pane_height}", "#{pane_active}", "#{pane_current_path}",
    "#{pane_current_command}", "#{pane_title}", "#{pane_start_command}",
]


def _parse_pane_line(line: str) -> dict | None:
    parts = line.split(_FIELD_SEP)
    if len(parts) < 10:
        return None
    try:
        return {
            "pane_id": parts[0],
            "window_id": parts[1],
            "x": int(parts[2]),
            "y": int(parts[3]),
            "width": int(parts[4]),
            "height": int(parts[5]),
            "active": parts[6] == "1",
            "path": parts[7],
            "current_command": parts[8],
            "title": parts[9],
            "start_command": parts[10] if len(parts) > 10 else "",
        }
    except ValueError as e:
        logger.warning(f"Failed to parse pane line: {line!r}: {e}")
        return None


class TmuxClient:
    """Client for interacting with tmux via subprocess commands.

    Query methods return None / empty results when tmux fails; commands
    that change the layout go through ``run_checked`` and raise
    HostOperationFailed instead.
    """

    def __init__(self, socket_path: str | None = None, session: str | None = None):
        """Initialize TmuxClient.

        Args:
            socket_path: Optional tmux socket path. If None, uses default socket.
            session: Target session. If None, uses the current session.
        """
        self._socket_path = socket_path
        self._session = session

    async def _exec(self, *args: str) -> tuple[int, str, str]:
        cmd = ["tmux"]
        if self._socket_path:
            cmd.extend(["-S", self._socket_path])
        cmd.extend(args)

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await proc.communicate()
        return proc.returncode, stdout.decode(), stderr.decode()

    async def run(self, *args: str) -> str | None:
        """Execute a tmux command.

        Args:
            *args: Command arguments (e.g., "list-windows", "-F", "...")

        Returns:
            Command stdout on success, None on failure.
        """
        try:
            returncode, stdout, stderr = await self._exec(*args)
        except Exception as e:
            logger.error(f"tmux subprocess error: {e}")
            return None

        if returncode != 0:
            logger.warning(f"tmux command failed: tmux {' '.join(args)}: {stderr.strip()}")
            return None
        return stdout

    async def run_checked(self, *args: str) -> str:
        """Execute a tmux command, raising HostOperationFailed on failure."""
        try:
            returncode, stdout, stderr = await self._exec(*args)
        except Exception as e:
            raise HostOperationFailed(f"tmux subprocess error: {e}") from e

        if returncode != 0:
            raise HostOperationFailed(f"tmux {args[0]} failed: {stderr.strip()}")
        return stdout

    def _session_args(self) -> list[str]:
        return ["-t", self._session] if self._session else []

    # === Windows ===

    async def list_windows(self) -> list[dict]:
        """List windows of the target session.

        Returns:
            List of window dicts with keys:
            - window_id: str (e.g., "@1")
            - window_name: str
            - width: int
            - height: int
            - active: bool
            - layout: str (#{window_layout})
        """
        fmt = _FIELD_SEP.join([
            "#{window_id}", "#{window_name}", "#{window_width}",
            "#{window_height}", "#{window_active}", "#{window_layout}",
        ])
        output = await self.run("list-windows", *self._session_args(), "-F", fmt)
        if not output:
            return []

        windows = []
        for line in output.strip().split("\n"):
            if not line:
                continue
            parts = line.split(_FIELD_SEP)
            if len(parts) >= 6:
                try:
                    windows.append({
                        "window_id": parts[0],
                        "window_name": parts[1],
                        "width": int(parts[2]),
                        "height": int(parts[3]),
                        "active": parts[4] == "1",
                        "layout": parts[5],
                    })
                except ValueError as e:
                    logger.warning(f"Failed to parse window line: {line!r}: {e}")
        return windows

    async def get_active_window(self) -> str | None:
        """Active window ID of the target session, or None if tmux is not running."""
        output = await self.run("display-message", *self._session_args(), "-p", "#{window_id}")
        if output:
            return output.strip()
        return None

    async def get_window_layout(self, window_id: str) -> str:
        output = await self.run_checked("display-message", "-t", window_id, "-p", "#{window_layout}")
        return output.strip()

    async def new_window(self, cwd: str | None = None) -> str:
        """Create a window in the target session.

        Returns:
            New window ID
        """
        args = ["new-window", "-P", "-F", "#{window_id}"]
        if self._session:
            args.extend(["-t", f"{self._session}:"])
        if cwd:
            args.extend(["-c", cwd])
        output = await self.run_checked(*args)
        return output.strip()

    async def kill_window(self, window_id: str) -> None:
        await self.run_checked("kill-window", "-t", window_id)

    async def resize_window(self, window_id: str, width: int, height: int) -> None:
        await self.run_checked("resize-window", "-t", window_id, "-x", str(width), "-y", str(height))

    async def select_window(self, target: str) -> bool:
        """Select/activate a tmux window.

        Args:
            target: Window target (e.g., "session:window" or "@1")

        Returns:
            True on success, False on failure.
        """
        result = await self.run("select-window", "-t", target)
        return result is not None

    # === Panes ===

    async def list_panes(self, window_id: str | None = None) -> list[dict]:
        """List panes of one window, or of the whole target session.

        Returns:
            List of pane dicts with keys:
            - pane_id: str (e.g., "%0")
            - window_id: str
            - x, y, width, height: int (cells)
            - active: bool
            - path: str
            - current_command: str
            - title: str
            - start_command: str
        """
        fmt = _FIELD_SEP.join(_PANE_FIELDS)
        if window_id:
            args = ["list-panes", "-t", window_id, "-F", fmt]
        else:
            args = ["list-panes", "-s", *self._session_args(), "-F", fmt]
        output = await self.run(*args)
        if not output:
            return []

        panes = []
        for line in output.strip().split("\n"):
            if not line:
                continue
            pane = _parse_pane_line(line)
            if pane is not None:
                panes.append(pane)
        return panes

    async def get_pane_info(self, pane_id: str) -> dict | None:
        """Get detailed info for a specific pane, or None if not found."""
        fmt = _FIELD_SEP.join(_PANE_FIELDS)
        output = await self.run("display-message", "-t", pane_id, "-p", fmt)
        if not output:
            return None
        return _parse_pane_line(output.rstrip("\n"))

    async def split_window(self, pane_id: str, horizontal: bool, size: int | None = None) -> str:
        """Split a pane, placing the new pane before it (left or above).

        Args:
            pane_id: Pane to split
            horizontal: True for a left/right split, False for top/bottom
            size: Cells for the new pane, None for an even split

        Returns:
            New pane ID
        """
        args = ["split-window", "-b", "-h" if horizontal else "-v", "-t", pane_id]
        if size is not None:
            args.extend(["-l", str(size)])
        args.extend(["-P", "-F", "#{pane_id}"])
        output = await self.run_checked(*args)
        return output.strip()

    async def kill_other_panes(self, pane_id: str) -> None:
        await self.run_checked("kill-pane", "-a", "-t", pane_id)

    async def respawn_pane(self, pane_id: str, cwd: str | None = None, argv: list[str] | None = None) -> None:
        """Replace the pane's process; no argv starts the default shell."""
        args = ["respawn-pane", "-k", "-t", pane_id]
        if cwd:
            args.extend(["-c", cwd])
        if argv:
            args.append(shlex.join(argv))
        await self.run_checked(*args)

    async def swap_pane(self, source: str, target: str) -> None:
        await self.run_checked("swap-pane", "-d", "-s", source, "-t", target)

    async def send_text(self, pane_id: str, text: str) -> None:
        """Send literal text (control characters included) to a pane."""
        await self.run_checked("send-keys", "-t", pane_id, "-l", text)

    async def break_pane(self, pane_id: str) -> str:
        """Move a pane into a new background window.

        Returns:
            ID of the window now holding the pane
        """
        output = await self.run_checked("break-pane", "-d", "-s", pane_id, "-P", "-F", "#{window_id}")
        return output.strip()

    async def pane_scroll_position(self, pane_id: str) -> int:
        """Lines scrolled back in copy mode, 0 outside copy mode."""
        output = await self.run("display-message", "-t", pane_id, "-p", "#{scroll_position}")
        if not output or not output.strip():
            return 0
        try:
            return int(output.strip())
        except ValueError:
            return 0
