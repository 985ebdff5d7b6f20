"""Tmux host"""

from .client import TmuxClient
from .host import TmuxHost
from .layout import parse_layout

__all__ = ["TmuxClient", "TmuxHost", "parse_layout"]
