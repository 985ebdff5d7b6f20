"""捕获遍历

把实时的分割/pane 层级映射为 LayoutNode 树:
- 分割保留方向、边界和子节点顺序
- pane 保留边界、滚动/视口/光标状态和内容描述符
- 无法捕获的 pane 被剪除，其空间由相邻兄弟吸收，树保持连续
- 只剩一个子节点的分割折叠为该子节点，没有子节点则被剪除
"""

from dataclasses import replace
from typing import TYPE_CHECKING

from ..content.descriptors import descriptor_label
from ..host.base import LivePane
from ..telemetry import format_leaf_log, get_logger, metrics
from .tree import Bounds, LayoutNode, LeafNode, Orientation, SplitNode, validate

if TYPE_CHECKING:
    from ..content.protocol import HandlerRegistry
    from ..host.base import LiveNode, LiveSplit, Surface, WindowHost

logger = get_logger(__name__)


def stretch(
    node: LayoutNode,
    orientation: Orientation,
    start: int | None = None,
    end: int | None = None,
) -> LayoutNode:
    """Grow a node along ``orientation``'s axis to a new start and/or end.

    For a split along the same axis only the outermost child grows; for a
    perpendicular split every child grows.
    """
    old_start, old_end = node.bounds.span(orientation)
    bounds = node.bounds.with_span(
        orientation,
        old_start if start is None else start,
        old_end if end is None else end,
    )
    if isinstance(node, LeafNode):
        return replace(node, bounds=bounds)

    children = list(node.children)
    if node.orientation is orientation:
        if start is not None:
            children[0] = stretch(children[0], orientation, start=start)
        if end is not None:
            children[-1] = stretch(children[-1], orientation, end=end)
    else:
        children = [stretch(child, orientation, start, end) for child in children]
    return replace(node, bounds=bounds, children=tuple(children))


def absorb_pruned(
    orientation: Orientation,
    captured: "list[tuple[Bounds, LayoutNode | None]]",
) -> list[LayoutNode]:
    """Drop pruned children, giving their extent to a surviving sibling.

    Args:
        orientation: Split axis of the parent
        captured: (live bounds, captured node or None) per child, in order

    Returns:
        Surviving nodes, contiguous along the split axis
    """
    survivors: list[LayoutNode] = []
    leading_start: int | None = None

    for bounds, node in captured:
        start, end = bounds.span(orientation)
        if node is None:
            if survivors:
                survivors[-1] = stretch(survivors[-1], orientation, end=end)
            elif leading_start is None:
                leading_start = start
            continue
        if leading_start is not None:
            node = stretch(node, orientation, start=leading_start)
            leading_start = None
        survivors.append(node)

    return survivors


class CaptureWalker:
    """从实时窗口构建布局树"""

    def __init__(self, window_host: "WindowHost", registry: "HandlerRegistry"):
        self.window_host = window_host
        self.registry = registry

    async def capture_surface(self, surface: "Surface") -> LayoutNode | None:
        """Capture a surface.

        Returns:
            Validated layout tree, or None when every pane was pruned

        Raises:
            StructuralError: the host reported inconsistent geometry
        """
        live = await self.window_host.live_root(surface)
        tree = await self.capture_node(live)
        if tree is None:
            logger.info("[Capture] Nothing capturable on surface")
            return None
        validate(tree)
        return tree

    async def capture_node(self, live: "LiveNode") -> LayoutNode | None:
        """Capture a live node; None when it is pruned"""
        if isinstance(live, LivePane):
            return await self._capture_pane(live)
        return await self._capture_split(live)

    async def _capture_pane(self, live: "LivePane") -> LeafNode | None:
        try:
            unit = await self.registry.content_host.content_of(live.handle)
            descriptor = await self.registry.capture_content(unit)
            if descriptor is None:
                logger.debug(f"[Capture] Pane {live.handle!r} has no capturable content, pruned")
                metrics.inc("capture.pruned", {"reason": "unrecognized"})
                return None
            state = await self.window_host.pane_state(live.handle)
        except Exception as e:
            logger.warning(f"[Capture] Pane {live.handle!r} capture failed, pruned: {e}")
            metrics.inc("capture.pruned", {"reason": "error"})
            return None

        logger.debug(format_leaf_log("Capture", descriptor_label(descriptor), descriptor.kind.value))
        return LeafNode(
            descriptor=descriptor,
            bounds=live.bounds,
            hscroll=state.hscroll,
            vscroll=state.vscroll,
            viewport_start=state.viewport_start,
            cursor_offset=state.cursor,
        )

    async def _capture_split(self, live: "LiveSplit") -> LayoutNode | None:
        captured = []
        for child in live.children:
            captured.append((child.bounds, await self.capture_node(child)))

        survivors = absorb_pruned(live.orientation, captured)
        if not survivors:
            return None
        if len(survivors) == 1:
            return survivors[0]
        return SplitNode(orientation=live.orientation, bounds=live.bounds, children=tuple(survivors))
