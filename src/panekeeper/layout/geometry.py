"""几何与尺寸

把存储的边界矩形转换为分割尺寸的纯函数。尺寸按存储几何以绝对值回放；
在任何分割之前，窗口本身已调整为存储的尺寸。
"""

from collections.abc import Sequence

from .. import config
from .tree import Bounds, LayoutNode, Orientation


def minimum_size(
    orientation: Orientation,
    min_height: int = config.MIN_PANE_HEIGHT,
    min_width: int = config.MIN_PANE_WIDTH,
) -> int:
    """Minimum pane size along the split axis of ``orientation``"""
    if orientation is Orientation.STACKED:
        return min_height
    return min_width


def split_size(bounds: Bounds, orientation: Orientation, minimum: int = 1) -> int:
    """Size to give a child pane when subdividing.

    Stacked splits size by height, side-by-side splits by width.
    The result is never below ``minimum`` (and never below 1).
    """
    return max(bounds.extent(orientation), minimum, 1)


def plan_split_sizes(
    children: Sequence[LayoutNode],
    orientation: Orientation,
    min_height: int = config.MIN_PANE_HEIGHT,
    min_width: int = config.MIN_PANE_WIDTH,
) -> list[int]:
    """Explicit sizes for every child but the last.

    The last child takes whatever space remains, so rounding in the host
    never accumulates into a visible gap.
    """
    minimum = minimum_size(orientation, min_height, min_width)
    return [split_size(child.bounds, orientation, minimum) for child in children[:-1]]
