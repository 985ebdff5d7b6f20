"""Host factory"""

import logging
import os
from typing import TYPE_CHECKING

from .. import config

if TYPE_CHECKING:
    import iterm2

    from .base import ContentHost, WindowHost

logger = logging.getLogger(__name__)


def detect_host_type() -> str:
    """Detect the host from the environment.

    Returns:
        "tmux" if $TMUX is set, otherwise "iterm2"
    """
    if os.environ.get("TMUX"):
        return "tmux"
    return "iterm2"


def create_host(
    host_type: str | None = None,
    connection: "iterm2.Connection | None" = None,
    socket_path: str | None = None,
    session: str | None = None,
) -> "WindowHost | ContentHost":
    """Create a host implementing both WindowHost and ContentHost.

    Args:
        host_type: "tmux", "iterm2" or "auto". Default from config.
        connection: iTerm2 connection (required for iterm2)
        socket_path: Tmux socket path, default from config
        session: Tmux session, default from config

    Raises:
        ValueError: unknown host type or missing connection
    """
    if host_type is None:
        host_type = config.HOST_TYPE

    if host_type == "auto":
        host_type = detect_host_type()
        logger.info(f"Auto-detected host: {host_type}")

    if host_type == "tmux":
        from .tmux import TmuxHost

        return TmuxHost(
            socket_path=socket_path or config.TMUX_SOCKET_PATH,
            session=session or config.TMUX_SESSION,
        )

    if host_type == "iterm2":
        if connection is None:
            raise ValueError("iTerm2 host requires connection")
        from .iterm2 import ITerm2Host

        return ITerm2Host(connection)

    raise ValueError(f"Unknown host type: {host_type}")
