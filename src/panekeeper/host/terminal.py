"""Content host for terminal multiplexers

In a terminal host every pane runs one foreground process. The process is
the live content unit:

- shell                         -> directory listing (its cwd)
- editor with a file argument   -> file
- document viewer with a file   -> paginated document
- info / pinfo                  -> indexed document
- anything else                 -> named surface (title, command)

Reopening content never spawns anything by itself: ``open`` and
``produce`` return a LaunchPlan, which ``attach`` runs in the target pane.

Concrete hosts provide five primitives:
    _process_of(pane), _list_processes(), _respawn(pane, plan),
    _move_process(process, pane), _send_keys(pane, text)
"""

import os
import shlex
from dataclasses import dataclass, field
from typing import Any

from .. import config
from ..content.descriptors import ContentKind
from ..telemetry import get_logger
from .base import ContentHost, LiveContent, PaneHandle

logger = get_logger(__name__)

# Kinds whose units are file-backed and discarded before a workspace restore
RESTORABLE_KINDS = {
    ContentKind.FILE,
    ContentKind.PAGINATED_DOCUMENT,
    ContentKind.INDEXED_DOCUMENT,
}


@dataclass
class TerminalProcess:
    """Foreground process of a live pane"""

    pane: Any
    command: str
    argv: list[str] = field(default_factory=list)
    cwd: str = ""
    title: str = ""

    @property
    def program(self) -> str:
        return os.path.basename(self.command or (self.argv[0] if self.argv else ""))


@dataclass
class LaunchPlan:
    """A process to start in a pane; empty argv means the default shell"""

    kind: ContentKind
    argv: list[str] = field(default_factory=list)
    cwd: str = ""
    path: str = ""
    name: str = ""

    @property
    def program(self) -> str:
        return os.path.basename(self.argv[0]) if self.argv else ""

    @property
    def command_line(self) -> str:
        return shlex.join(self.argv)


def file_argument(argv: list[str]) -> str | None:
    """First non-option argument after the program name"""
    for arg in argv[1:]:
        if arg == "--" or arg.startswith(("-", "+")):
            continue
        return arg
    return None


def classify(process: TerminalProcess) -> ContentKind:
    program = process.program
    if program in config.SHELL_COMMANDS:
        return ContentKind.DIRECTORY_LISTING
    if program in config.INDEXED_VIEWERS:
        return ContentKind.INDEXED_DOCUMENT
    if file_argument(process.argv) is not None:
        if program in config.EDITOR_COMMANDS:
            return ContentKind.FILE
        if program in config.DOCUMENT_VIEWERS:
            return ContentKind.PAGINATED_DOCUMENT
    return ContentKind.NAMED_SURFACE


def _resolve(path: str, cwd: str) -> str:
    return os.path.normpath(os.path.join(cwd, os.path.expanduser(path)))


class TerminalContentHost(ContentHost):
    """ContentHost implemented over a terminal's pane processes"""

    # === Primitives ===

    async def _process_of(self, pane: PaneHandle) -> TerminalProcess | None:
        raise NotImplementedError

    async def _list_processes(self) -> list[TerminalProcess]:
        raise NotImplementedError

    async def _respawn(self, pane: PaneHandle, plan: LaunchPlan) -> None:
        raise NotImplementedError

    async def _move_process(self, process: TerminalProcess, pane: PaneHandle) -> None:
        raise NotImplementedError

    async def _send_keys(self, pane: PaneHandle, text: str) -> None:
        raise NotImplementedError

    # === Capture ===

    async def content_of(self, pane: PaneHandle) -> TerminalProcess | None:
        return await self._process_of(pane)

    async def kind_of(self, unit: LiveContent) -> ContentKind | None:
        if isinstance(unit, LaunchPlan):
            return unit.kind
        if isinstance(unit, TerminalProcess):
            return classify(unit)
        return None

    async def describe(self, unit: LiveContent) -> dict:
        if isinstance(unit, LaunchPlan):
            if unit.kind is ContentKind.NAMED_SURFACE:
                return {"name": unit.name, "surface_kind": unit.program}
            return {"path": unit.path}

        kind = classify(unit)
        if kind is ContentKind.DIRECTORY_LISTING:
            return {"path": unit.cwd}
        if kind is ContentKind.INDEXED_DOCUMENT:
            topic = file_argument(unit.argv) or "dir"
            return {"path": _resolve(topic, unit.cwd) if os.sep in topic else topic}
        if kind in (ContentKind.FILE, ContentKind.PAGINATED_DOCUMENT):
            return {"path": _resolve(file_argument(unit.argv), unit.cwd)}
        return {"name": unit.title or unit.program, "surface_kind": unit.program}

    # === Restore ===

    async def open(self, kind: ContentKind, path: str) -> LaunchPlan | None:
        if kind is ContentKind.DIRECTORY_LISTING:
            if not os.path.isdir(path):
                return None
            return LaunchPlan(kind, [], cwd=path, path=path)

        if kind is ContentKind.INDEXED_DOCUMENT:
            # bare topics ("coreutils") are resolved by the viewer itself
            if os.sep not in path:
                return LaunchPlan(kind, [config.INDEX_VIEWER, path], cwd=os.path.expanduser("~"), path=path)
            if not os.path.isfile(path):
                return None
            return LaunchPlan(kind, [config.INDEX_VIEWER, "-f", path], cwd=os.path.dirname(path), path=path)

        if not os.path.isfile(path):
            return None
        program = config.EDITOR if kind is ContentKind.FILE else config.DOCUMENT_VIEWER
        return LaunchPlan(kind, [*shlex.split(program), path], cwd=os.path.dirname(path), path=path)

    async def locate(self, name: str, surface_kind: str) -> TerminalProcess | None:
        for process in await self._list_processes():
            if classify(process) is not ContentKind.NAMED_SURFACE:
                continue
            if process.program == surface_kind and (process.title or process.program) == name:
                return process
        return None

    async def produce(self, surface_kind: str, command: str) -> LaunchPlan:
        return LaunchPlan(
            ContentKind.NAMED_SURFACE,
            shlex.split(command),
            cwd=os.path.expanduser("~"),
            name=surface_kind,
        )

    async def attach(self, pane: PaneHandle, unit: LiveContent) -> None:
        if isinstance(unit, LaunchPlan):
            logger.debug(f"[Terminal] Launching {unit.command_line or '<shell>'} in {pane!r}")
            await self._respawn(pane, unit)
        elif unit.pane != pane:
            logger.debug(f"[Terminal] Moving {unit.program} from {unit.pane!r} to {pane!r}")
            await self._move_process(unit, pane)

    async def content_length(self, unit: LiveContent) -> int:
        path = unit.path if isinstance(unit, LaunchPlan) else ""
        try:
            if path and os.path.isfile(path):
                return os.path.getsize(path)
            if path and os.path.isdir(path):
                return len(os.listdir(path))
        except OSError as e:
            logger.debug(f"[Terminal] Cannot measure {path}: {e}")
        return 0

    async def set_cursor(self, unit: LiveContent, pane: PaneHandle, offset: int) -> None:
        program = unit.program if isinstance(unit, (LaunchPlan, TerminalProcess)) else ""
        if offset <= 0:
            return
        if program not in config.VI_FAMILY:
            logger.debug(f"[Terminal] Cursor offsets not supported for {program or 'unit'}")
            return
        # :goto counts bytes from 1
        await self._send_keys(pane, f":goto {offset + 1}\r")

    async def goto_page(self, unit, pane, page, slice=None, scale=None) -> None:
        if page > 1:
            await self._send_keys(pane, f"{page}G")
        if slice is not None or scale is not None:
            logger.debug("[Terminal] Page slice/scale ignored by terminal viewers")

    async def goto_section(self, unit, pane, section_index) -> None:
        if section_index > 0:
            await self._send_keys(pane, "]" * section_index)

    async def redraw_content(self, pane: PaneHandle) -> None:
        await self._send_keys(pane, "\x0c")

    async def discard_restorable(self) -> int:
        """Return panes running file-backed content to a plain shell."""
        discarded = 0
        for process in await self._list_processes():
            if classify(process) not in RESTORABLE_KINDS:
                continue
            await self._respawn(process.pane, LaunchPlan(ContentKind.DIRECTORY_LISTING, [], cwd=process.cwd))
            discarded += 1
        return discarded
