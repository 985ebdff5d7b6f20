"""布局树模型

布局树要么是单个 LeafNode，要么是 SplitNode，其有序子节点本身也是布局树。
节点不可变。

方向约定:
- STACKED: 子节点从上到下排列
- SIDE_BY_SIDE: 子节点从左到右排列
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from ..content.descriptors import (
    ContentDescriptor,
    descriptor_from_dict,
    descriptor_to_dict,
)
from ..errors import StructuralError


class Orientation(str, Enum):
    STACKED = "stacked"
    SIDE_BY_SIDE = "side_by_side"


@dataclass(frozen=True)
class Bounds:
    """Edge rectangle in host geometry units (right/bottom exclusive)"""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    def extent(self, orientation: Orientation) -> int:
        """Size along the split axis of ``orientation``"""
        if orientation is Orientation.STACKED:
            return self.height
        return self.width

    def span(self, orientation: Orientation) -> tuple[int, int]:
        """(start, end) along the split axis"""
        if orientation is Orientation.STACKED:
            return self.top, self.bottom
        return self.left, self.right

    def cross_span(self, orientation: Orientation) -> tuple[int, int]:
        """(start, end) across the split axis"""
        if orientation is Orientation.STACKED:
            return self.left, self.right
        return self.top, self.bottom

    def with_span(self, orientation: Orientation, start: int, end: int) -> "Bounds":
        """Copy with the split-axis span replaced"""
        if orientation is Orientation.STACKED:
            return Bounds(self.left, start, self.right, end)
        return Bounds(start, self.top, end, self.bottom)

    def to_list(self) -> list[int]:
        return [self.left, self.top, self.right, self.bottom]

    @classmethod
    def from_list(cls, values) -> "Bounds":
        try:
            left, top, right, bottom = (int(v) for v in values)
        except (TypeError, ValueError) as e:
            raise StructuralError(f"Invalid bounds: {values!r}") from e
        return cls(left, top, right, bottom)


@dataclass(frozen=True)
class LeafNode:
    """一个 pane 及其显示的内容"""

    descriptor: ContentDescriptor
    bounds: Bounds
    hscroll: int = 0
    vscroll: int = 0
    viewport_start: int = 0
    cursor_offset: int = 0


@dataclass(frozen=True)
class SplitNode:
    """沿一个轴细分的区域"""

    orientation: Orientation
    bounds: Bounds
    children: tuple["LayoutNode", ...]


LayoutNode = LeafNode | SplitNode


def validate(tree: LayoutNode) -> None:
    """Check the structural invariants of a layout tree.

    Checks:
    - every split has at least one child
    - bounds satisfy left < right and top < bottom
    - children of a split tile the parent along the split axis,
      contiguous and without overlap, and share its cross-axis span

    Raises:
        StructuralError: describing the first violation found
    """
    _validate(tree, "root")


def _validate(node: LayoutNode, path: str) -> None:
    if not isinstance(node, (LeafNode, SplitNode)):
        raise StructuralError(f"{path}: not a layout node ({type(node).__name__})")

    b = node.bounds
    if not (b.left < b.right and b.top < b.bottom):
        raise StructuralError(f"{path}: degenerate bounds {b.to_list()}")

    if isinstance(node, LeafNode):
        return

    if not node.children:
        raise StructuralError(f"{path}: split has no children")

    start, end = b.span(node.orientation)
    cross = b.cross_span(node.orientation)
    cursor = start
    for i, child in enumerate(node.children):
        child_path = f"{path}/{i}"
        _validate(child, child_path)
        c_start, c_end = child.bounds.span(node.orientation)
        if c_start != cursor:
            kind = "gap" if c_start > cursor else "overlap"
            raise StructuralError(
                f"{child_path}: {kind} along {node.orientation.value} axis "
                f"(expected start {cursor}, got {c_start})"
            )
        if child.bounds.cross_span(node.orientation) != cross:
            raise StructuralError(f"{child_path}: cross-axis span differs from parent")
        cursor = c_end
    if cursor != end:
        raise StructuralError(f"{path}: children end at {cursor}, parent ends at {end}")


def iter_leaves(tree: LayoutNode) -> Iterator[LeafNode]:
    """按文档顺序遍历叶子"""
    if isinstance(tree, LeafNode):
        yield tree
        return
    for child in tree.children:
        yield from iter_leaves(child)


def node_to_dict(node: LayoutNode) -> dict:
    if isinstance(node, LeafNode):
        return {
            "type": "leaf",
            "bounds": node.bounds.to_list(),
            "content": descriptor_to_dict(node.descriptor),
            "hscroll": node.hscroll,
            "vscroll": node.vscroll,
            "viewport_start": node.viewport_start,
            "cursor_offset": node.cursor_offset,
        }
    return {
        "type": "split",
        "orientation": node.orientation.value,
        "bounds": node.bounds.to_list(),
        "children": [node_to_dict(child) for child in node.children],
    }


def node_from_dict(data: dict) -> LayoutNode:
    """Rebuild a node from its dict form (does not validate geometry).

    Raises:
        StructuralError: unknown node type or malformed fields
    """
    if not isinstance(data, dict):
        raise StructuralError(f"Node must be a mapping, got {type(data).__name__}")

    node_type = data.get("type")
    bounds = Bounds.from_list(data.get("bounds"))

    if node_type == "leaf":
        try:
            return LeafNode(
                descriptor=descriptor_from_dict(data.get("content")),
                bounds=bounds,
                hscroll=int(data.get("hscroll", 0)),
                vscroll=int(data.get("vscroll", 0)),
                viewport_start=int(data.get("viewport_start", 0)),
                cursor_offset=int(data.get("cursor_offset", 0)),
            )
        except (TypeError, ValueError) as e:
            raise StructuralError(f"Invalid leaf: {e}") from e

    if node_type == "split":
        try:
            orientation = Orientation(data.get("orientation"))
        except ValueError:
            raise StructuralError(f"Unknown orientation: {data.get('orientation')!r}") from None
        children = data.get("children")
        if not isinstance(children, list):
            raise StructuralError("Split children must be a list")
        return SplitNode(
            orientation=orientation,
            bounds=bounds,
            children=tuple(node_from_dict(child) for child in children),
        )

    raise StructuralError(f"Unknown node type: {node_type!r}")
