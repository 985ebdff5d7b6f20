"""宿主能力接口

引擎驱动两个协作者:
- WindowHost: 窗口、分割层级、pane 几何与滚动状态
- ContentHost: pane 中显示的实时内容

宿主可以使用任意句柄类型表示窗口、pane 和内容；引擎只会把句柄
交还给产生它的宿主。

设计原则:
1. 异步优先: 每个宿主调用都可能有 IO
2. 几何使用整数宿主单位（终端宿主为字符格）
3. 失败抛出 HostOperationFailed；"不存在" 返回 None
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .. import config
from ..content.descriptors import ContentKind
from ..layout.tree import Bounds, Orientation

Surface = Any
PaneHandle = Any
LiveContent = Any


@dataclass
class LivePane:
    """实时层级中的叶子"""

    handle: PaneHandle
    bounds: Bounds


@dataclass
class LiveSplit:
    """实时层级中的内部节点"""

    orientation: Orientation
    bounds: Bounds
    children: list["LiveSplit | LivePane"] = field(default_factory=list)


LiveNode = LiveSplit | LivePane


def extend_live(node: LiveNode, orientation: Orientation, end: int) -> None:
    """Move a live node's far edge along ``orientation`` to ``end``, in place.

    Along its own axis a split only grows its last child; across it every
    child grows.
    """
    start, _ = node.bounds.span(orientation)
    node.bounds = node.bounds.with_span(orientation, start, end)
    if isinstance(node, LiveSplit):
        if node.orientation is orientation:
            extend_live(node.children[-1], orientation, end)
        else:
            for child in node.children:
                extend_live(child, orientation, end)


@dataclass
class PaneState:
    """pane 的滚动 / 视口 / 光标状态（内容偏移）"""

    hscroll: int = 0
    vscroll: int = 0
    viewport_start: int = 0
    cursor: int = 0


@dataclass
class SurfaceGeometry:
    """Surface size in cells and pixels plus its on-screen position

    Pixel sizes are 0 when the host does not know them.
    """

    width: int
    height: int
    pixel_width: int = 0
    pixel_height: int = 0
    left: int = 0
    top: int = 0


class WindowHost(ABC):
    """窗口宿主: 被细分为 pane 的窗口"""

    @property
    @abstractmethod
    def name(self) -> str:
        """Host name (e.g. "tmux", "iterm2")"""

    @abstractmethod
    async def list_surfaces(self) -> list[Surface]:
        """Live surfaces in host order"""

    @abstractmethod
    async def focused_surface(self) -> Surface | None:
        """Surface holding input focus"""

    async def primary_surface(self) -> Surface | None:
        """Surface kept across a workspace restore (focused, else first)"""
        surface = await self.focused_surface()
        if surface is not None:
            return surface
        surfaces = await self.list_surfaces()
        return surfaces[0] if surfaces else None

    @abstractmethod
    async def live_root(self, surface: Surface) -> LiveNode:
        """Root of the surface's live split/pane hierarchy"""

    @abstractmethod
    async def surface_geometry(self, surface: Surface) -> SurfaceGeometry:
        """Current size and position"""

    @abstractmethod
    async def create_surface(self, geometry: SurfaceGeometry) -> Surface:
        """Create a surface using ``geometry`` as creation parameters"""

    @abstractmethod
    async def destroy_surface(self, surface: Surface) -> None:
        """Close a surface and everything in it"""

    @abstractmethod
    async def resize_surface(self, surface: Surface, geometry: SurfaceGeometry) -> None:
        """Resize to the stored size (pixels when known, else cells)"""

    @abstractmethod
    async def move_surface(self, surface: Surface, left: int, top: int) -> None:
        """Position the surface's top-left corner"""

    @abstractmethod
    async def collapse_surface(self, surface: Surface) -> PaneHandle:
        """Reduce the surface to a single pane and return it"""

    @abstractmethod
    async def split_pane(
        self, pane: PaneHandle, orientation: Orientation, size: int | None = None
    ) -> tuple[PaneHandle, PaneHandle]:
        """Subdivide ``pane`` along ``orientation``.

        Args:
            pane: Pane to subdivide
            orientation: STACKED splits top/bottom, SIDE_BY_SIDE left/right
            size: Extent of the leading pane, None for an even split

        Returns:
            (leading, trailing) panes

        Raises:
            HostOperationFailed: the pane cannot be subdivided
        """

    @abstractmethod
    async def pane_state(self, pane: PaneHandle) -> PaneState:
        """Scroll / viewport / cursor of a pane"""

    @abstractmethod
    async def set_viewport_start(self, pane: PaneHandle, offset: int) -> None:
        pass

    @abstractmethod
    async def set_pane_cursor(self, pane: PaneHandle, offset: int) -> None:
        pass

    @abstractmethod
    async def set_hscroll(self, pane: PaneHandle, offset: int) -> None:
        pass

    @abstractmethod
    async def raise_surface(self, surface: Surface) -> None:
        pass

    @abstractmethod
    async def focus_surface(self, surface: Surface) -> None:
        pass

    async def make_visible(self, surface: Surface) -> None:
        """De-iconify a surface (default: raise it)"""
        await self.raise_surface(surface)

    async def set_always_on_top(self, surface: Surface, enabled: bool) -> None:
        """Best-effort stacking hint; hosts without one ignore it"""
        return None

    async def redraw(self, surface: Surface) -> None:
        """Force a redraw (default: no-op)"""
        return None

    def min_pane_size(self, orientation: Orientation) -> int:
        """Smallest extent a pane may have along the split axis"""
        if orientation is Orientation.STACKED:
            return config.MIN_PANE_HEIGHT
        return config.MIN_PANE_WIDTH


class ContentHost(ABC):
    """内容宿主: 打开、查找并检查实时内容"""

    @abstractmethod
    async def content_of(self, pane: PaneHandle) -> LiveContent | None:
        """Content unit shown in a pane"""

    @abstractmethod
    async def kind_of(self, unit: LiveContent) -> ContentKind | None:
        """Kind of a unit, None when unrecognized"""

    @abstractmethod
    async def describe(self, unit: LiveContent) -> dict:
        """Kind-specific capture fields (e.g. {"path": ..., "page": ...})"""

    @abstractmethod
    async def open(self, kind: ContentKind, path: str) -> LiveContent | None:
        """Open a path-backed unit; None when the path no longer exists"""

    @abstractmethod
    async def locate(self, name: str, surface_kind: str) -> LiveContent | None:
        """Find an existing named surface"""

    @abstractmethod
    async def produce(self, surface_kind: str, command: str) -> LiveContent | None:
        """Regenerate a named surface with its registered producer"""

    @abstractmethod
    async def attach(self, pane: PaneHandle, unit: LiveContent) -> None:
        """Show ``unit`` in ``pane``"""

    @abstractmethod
    async def content_length(self, unit: LiveContent) -> int:
        """Current length of the unit's content (upper bound for offsets)"""

    @abstractmethod
    async def set_cursor(self, unit: LiveContent, pane: PaneHandle, offset: int) -> None:
        pass

    @abstractmethod
    async def goto_page(
        self,
        unit: LiveContent,
        pane: PaneHandle,
        page: int,
        slice: tuple[float, float, float, float] | None = None,
        scale: float | None = None,
    ) -> None:
        pass

    @abstractmethod
    async def goto_section(self, unit: LiveContent, pane: PaneHandle, section_index: int) -> None:
        pass

    @abstractmethod
    async def redraw_content(self, pane: PaneHandle) -> None:
        """Force a full redraw of the pane's content"""

    @abstractmethod
    async def discard_restorable(self) -> int:
        """Close every open unit that is file-backed or of a restorable kind.

        Returns:
            Number of units discarded
        """
