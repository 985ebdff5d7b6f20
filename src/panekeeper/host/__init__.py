"""Windowing / content hosts

Usage:
    from panekeeper.host import create_host

    host = create_host("tmux")
    sessions = SessionManager(host, host)
"""

from .base import (
    ContentHost,
    LiveNode,
    LivePane,
    LiveSplit,
    PaneState,
    SurfaceGeometry,
    WindowHost,
)
from .factory import create_host, detect_host_type

__all__ = [
    "ContentHost",
    "LiveNode",
    "LivePane",
    "LiveSplit",
    "PaneState",
    "SurfaceGeometry",
    "WindowHost",
    "create_host",
    "detect_host_type",
]
