"""Tmux layout string parser.

Converts ``#{window_layout}`` into a live split/pane hierarchy.

Grammar (after the 4-digit checksum and comma):
    node  := WxH,X,Y ( ",ID" | "{" nodes "}" | "[" nodes "]" )
    nodes := node ( "," node )*

``{}`` lays children out left to right, ``[]`` top to bottom. tmux puts a
one-cell border between siblings; the border is given to the preceding
sibling so child bounds tile their parent.
"""

import re

from ...layout.tree import Bounds, Orientation
from ..base import LiveNode, LivePane, LiveSplit, extend_live

_CHECKSUM_RE = re.compile(r"^[0-9a-fA-F]{4},")
_GEOMETRY_RE = re.compile(r"(\d+)x(\d+),(\d+),(\d+)")
_PANE_RE = re.compile(r",(\d+)")

_OPENERS = {"{": ("}", Orientation.SIDE_BY_SIDE), "[": ("]", Orientation.STACKED)}


def parse_layout(layout: str) -> LiveNode:
    """Parse a tmux window layout string.

    Raises:
        ValueError: the string is not a tmux layout
    """
    body = _CHECKSUM_RE.sub("", layout.strip(), count=1)
    node, pos = _parse_node(body, 0)
    if pos != len(body):
        raise ValueError(f"Trailing data in tmux layout at {pos}: {layout!r}")
    return node


def _parse_node(text: str, pos: int) -> tuple[LiveNode, int]:
    m = _GEOMETRY_RE.match(text, pos)
    if not m:
        raise ValueError(f"Expected pane geometry at {pos}: {text!r}")
    width, height, x, y = (int(v) for v in m.groups())
    bounds = Bounds(x, y, x + width, y + height)
    pos = m.end()

    if pos < len(text) and text[pos] in _OPENERS:
        closer, orientation = _OPENERS[text[pos]]
        pos += 1
        children = []
        while True:
            child, pos = _parse_node(text, pos)
            children.append(child)
            if pos >= len(text):
                raise ValueError(f"Unterminated split in tmux layout: {text!r}")
            if text[pos] == ",":
                pos += 1
                continue
            if text[pos] == closer:
                pos += 1
                break
            raise ValueError(f"Unexpected {text[pos]!r} at {pos}: {text!r}")
        _absorb_borders(orientation, children)
        return LiveSplit(orientation=orientation, bounds=bounds, children=children), pos

    m = _PANE_RE.match(text, pos)
    if not m:
        raise ValueError(f"Expected pane id at {pos}: {text!r}")
    return LivePane(handle=f"%{m.group(1)}", bounds=bounds), m.end()


def _absorb_borders(orientation: Orientation, children: list[LiveNode]) -> None:
    for child, following in zip(children, children[1:]):
        next_start, _ = following.bounds.span(orientation)
        extend_live(child, orientation, next_start)
