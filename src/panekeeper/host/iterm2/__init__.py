"""iTerm2 host"""

from .host import ITerm2Host
from .layout import walk_splitter

__all__ = ["ITerm2Host", "walk_splitter"]
