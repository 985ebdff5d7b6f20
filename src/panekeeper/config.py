"""PaneKeeper 配置

配置按功能分组:
- Host: 驱动哪个窗口宿主及其几何限制
- Restore: 渲染稳定延迟
- Content: 终端命令分类、命名面板的生成命令
- Store: 记录写入位置
- Logging / HTTP
"""

import os
from pathlib import Path

# === Host ===
HOST_TYPE = os.environ.get("PANEKEEPER_HOST", "auto")  # auto, tmux, iterm2
TMUX_SOCKET_PATH = os.environ.get("PANEKEEPER_TMUX_SOCKET") or None
TMUX_SESSION = os.environ.get("PANEKEEPER_TMUX_SESSION") or None  # None => current session

# Smallest pane a subdivision may produce, per axis (cells)
MIN_PANE_HEIGHT = 4
MIN_PANE_WIDTH = 10

# === Restore ===
RENDER_SETTLE_SECONDS = float(os.environ.get("PANEKEEPER_SETTLE_SECONDS", "0.1"))

# === Content classification (terminal hosts) ===
SHELL_COMMANDS = {"bash", "zsh", "fish", "sh", "dash", "ksh", "tcsh", "nu", "xonsh"}
EDITOR_COMMANDS = {"vim", "nvim", "vi", "view", "emacs", "nano", "hx", "kak", "micro"}
VI_FAMILY = {"vim", "nvim", "vi", "view"}  # support :goto for byte offsets
DOCUMENT_VIEWERS = {"tdf", "termpdf", "termpdf.py", "mupdf", "zathura"}
INDEXED_VIEWERS = {"info", "pinfo"}

# Commands used to reopen path-backed content
EDITOR = os.environ.get("PANEKEEPER_EDITOR") or os.environ.get("EDITOR") or "vim"
DOCUMENT_VIEWER = os.environ.get("PANEKEEPER_DOCUMENT_VIEWER", "tdf")
INDEX_VIEWER = "info"

# Named surfaces that may be regenerated when no live instance exists:
# {surface kind: command line}
NAMED_SURFACE_PRODUCERS: dict[str, str] = {
    "htop": "htop",
    "btop": "btop",
    "top": "top",
    "lazygit": "lazygit",
}

# === Store ===
STORE_DIR = Path(
    os.environ.get("PANEKEEPER_STORE_DIR", Path.home() / ".local" / "share" / "panekeeper")
)
STORE_VERSION = 1

# === Logging ===
LOG_LEVEL = os.environ.get("PANEKEEPER_LOG_LEVEL", "INFO")

# === HTTP ===
HTTP_HOST = os.environ.get("PANEKEEPER_HTTP_HOST", "127.0.0.1")
HTTP_PORT = int(os.environ.get("PANEKEEPER_HTTP_PORT", "8766"))
