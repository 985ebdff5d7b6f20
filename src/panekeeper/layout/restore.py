"""Reconstruction walker

Rebuilds a layout tree inside one existing pane:
- split: n-1 successive subdivisions, each sized from the stored bounds;
  the last child takes the remaining space
- leaf: reopen the content, attach it, then apply post-layout state

Failures are isolated at the leaf boundary: a leaf that cannot be restored
is reported and logged, and its siblings carry on.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ..content.descriptors import ContentDescriptor, descriptor_label, descriptor_to_dict
from ..content.protocol import LeafState, clamp_offset
from ..errors import ContentUnavailable, HostOperationFailed
from ..telemetry import format_leaf_log, get_logger, metrics
from .geometry import plan_split_sizes
from .tree import LayoutNode, LeafNode, Orientation, SplitNode, iter_leaves, validate

if TYPE_CHECKING:
    from ..content.protocol import HandlerRegistry
    from ..host.base import LiveContent, PaneHandle, WindowHost

logger = get_logger(__name__)


@dataclass
class LeafOutcome:
    """单个叶子的结果"""

    descriptor: ContentDescriptor
    reason: str = ""

    def to_dict(self) -> dict:
        return {"content": descriptor_to_dict(self.descriptor), "reason": self.reason}


@dataclass
class RestoreReport:
    """一次恢复中每个叶子的结果"""

    restored: list[LeafOutcome] = field(default_factory=list)
    unavailable: list[LeafOutcome] = field(default_factory=list)
    failed: list[LeafOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """No leaf failed (unavailable content is not a failure)"""
        return not self.failed

    @property
    def complete(self) -> bool:
        """Every leaf was restored"""
        return not self.failed and not self.unavailable

    def merge(self, other: "RestoreReport") -> None:
        self.restored.extend(other.restored)
        self.unavailable.extend(other.unavailable)
        self.failed.extend(other.failed)

    def to_dict(self) -> dict:
        return {
            "restored": [o.to_dict() for o in self.restored],
            "unavailable": [o.to_dict() for o in self.unavailable],
            "failed": [o.to_dict() for o in self.failed],
        }


class ReconstructionWalker:
    """在实时宿主上重建布局树"""

    def __init__(self, window_host: "WindowHost", registry: "HandlerRegistry"):
        self.window_host = window_host
        self.registry = registry

    @property
    def content_host(self):
        return self.registry.content_host

    async def restore_tree(self, tree: LayoutNode, target_pane: "PaneHandle") -> RestoreReport:
        """Restore ``tree`` into ``target_pane``.

        Raises:
            StructuralError: the tree is malformed (nothing is touched)
        """
        validate(tree)
        report = RestoreReport()
        await self._restore_node(tree, target_pane, report)
        logger.info(
            f"[Restore] Done: {len(report.restored)} restored, "
            f"{len(report.unavailable)} unavailable, {len(report.failed)} failed"
        )
        return report

    async def _restore_node(self, node: LayoutNode, pane: "PaneHandle", report: RestoreReport) -> None:
        if isinstance(node, LeafNode):
            await self._restore_leaf(node, pane, report)
        else:
            await self._restore_split(node, pane, report)

    async def _restore_split(self, node: SplitNode, pane: "PaneHandle", report: RestoreReport) -> None:
        children = node.children
        sizes = plan_split_sizes(
            children,
            node.orientation,
            min_height=self.window_host.min_pane_size(Orientation.STACKED),
            min_width=self.window_host.min_pane_size(Orientation.SIDE_BY_SIDE),
        )

        panes: list = []
        current = pane
        for size in sizes:
            try:
                leading, current = await self.window_host.split_pane(current, node.orientation, size)
            except HostOperationFailed as e:
                logger.warning(f"[Restore] Cannot subdivide pane {current!r} ({size} cells): {e}")
                break
            panes.append(leading)
        panes.append(current)

        for child in children[len(panes):]:
            self._fail_subtree(child, report, "no room to subdivide")

        for child, child_pane in zip(children, panes):
            await self._restore_node(child, child_pane, report)

    async def _restore_leaf(self, leaf: LeafNode, pane: "PaneHandle", report: RestoreReport) -> None:
        descriptor = leaf.descriptor
        label = descriptor_label(descriptor)
        labels = {"kind": descriptor.kind.value}

        handler = self.registry.get(descriptor.kind)
        if handler is None:
            logger.error(format_leaf_log("Restore", label, "no handler registered"))
            report.failed.append(LeafOutcome(descriptor, "no handler"))
            metrics.inc("restore.leaf.failed", labels)
            return

        try:
            unit = await handler.restore(descriptor)
            if unit is None:
                raise ContentUnavailable(label)
            await self.content_host.attach(pane, unit)
            await handler.apply_post_layout_state(unit, pane, descriptor, LeafState.from_leaf(leaf))
            if not handler.manages_scroll:
                await self._apply_pane_state(unit, pane, leaf)
        except ContentUnavailable:
            logger.warning(format_leaf_log("Restore", label, "content unavailable, pane left as is"))
            report.unavailable.append(LeafOutcome(descriptor, "unavailable"))
            metrics.inc("restore.leaf.unavailable", labels)
        except Exception as e:
            logger.error(format_leaf_log("Restore", label, f"failed: {e}"))
            report.failed.append(LeafOutcome(descriptor, str(e) or type(e).__name__))
            metrics.inc("restore.leaf.failed", labels)
        else:
            report.restored.append(LeafOutcome(descriptor))
            metrics.inc("restore.leaf.ok", labels)

    async def _apply_pane_state(
        self,
        unit: "LiveContent",
        pane: "PaneHandle",
        leaf: LeafNode,
    ) -> None:
        """Viewport, cursor and horizontal scroll, clamped to the current content length"""
        length = await self.content_host.content_length(unit)
        await self.window_host.set_viewport_start(pane, clamp_offset(leaf.viewport_start, length))
        await self.window_host.set_pane_cursor(pane, clamp_offset(leaf.cursor_offset, length))
        await self.window_host.set_hscroll(pane, max(0, leaf.hscroll))

    def _fail_subtree(self, node: LayoutNode, report: RestoreReport, reason: str) -> None:
        for leaf in iter_leaves(node):
            report.failed.append(LeafOutcome(leaf.descriptor, reason))
            metrics.inc("restore.leaf.failed", {"kind": leaf.descriptor.kind.value})
