"""Layout tree model and geometry

The walkers live in ``panekeeper.layout.capture`` and
``panekeeper.layout.restore``.
"""

from .geometry import minimum_size, plan_split_sizes, split_size
from .tree import (
    Bounds,
    LayoutNode,
    LeafNode,
    Orientation,
    SplitNode,
    iter_leaves,
    node_from_dict,
    node_to_dict,
    validate,
)

__all__ = [
    "Bounds",
    "LayoutNode",
    "LeafNode",
    "Orientation",
    "SplitNode",
    "iter_leaves",
    "minimum_size",
    "node_from_dict",
    "node_to_dict",
    "plan_split_sizes",
    "split_size",
    "validate",
]
