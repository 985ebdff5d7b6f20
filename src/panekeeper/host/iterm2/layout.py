"""iTerm2 布局遍历

以字符格为单位构建 tab 的实时层级。iTerm2 只报告每个 session 的
grid 尺寸，因此位置沿 splitter 轴向累加；随后兄弟节点在交叉轴上
拉伸到 splitter 的范围，舍入误差不会破坏平铺。
"""

import iterm2

from ...layout.tree import Bounds, Orientation
from ..base import LiveNode, LivePane, LiveSplit, extend_live


def walk_splitter(
    node: iterm2.Session | iterm2.Splitter,
    left: int = 0,
    top: int = 0,
) -> LiveNode:
    """Walk a tab's root splitter (or a single session).

    Returns:
        Live node whose bounds start at (left, top)
    """
    if isinstance(node, iterm2.Session):
        size = node.grid_size
        return LivePane(handle=node, bounds=Bounds(left, top, left + size.width, top + size.height))

    # vertical dividers put children side by side
    orientation = Orientation.SIDE_BY_SIDE if node.vertical else Orientation.STACKED
    children: list[LiveNode] = []
    x, y = left, top
    for child in node.children:
        live = walk_splitter(child, x, y)
        children.append(live)
        if orientation is Orientation.SIDE_BY_SIDE:
            x = live.bounds.right
        else:
            y = live.bounds.bottom

    if len(children) == 1:
        return children[0]

    cross_end = max(c.bounds.cross_span(orientation)[1] for c in children)
    cross = Orientation.STACKED if orientation is Orientation.SIDE_BY_SIDE else Orientation.SIDE_BY_SIDE
    for child in children:
        extend_live(child, cross, cross_end)

    last = children[-1].bounds
    bounds = Bounds(left, top, last.right, last.bottom)
    return LiveSplit(orientation=orientation, bounds=bounds, children=children)
