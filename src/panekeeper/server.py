"""PaneKeeper 服务入口"""

import asyncio
import logging

import iterm2
import uvicorn

from . import config
from .host import create_host, detect_host_type
from .session import SessionManager
from .store import RecordStore
from .telemetry import configure_logging
from .web import create_app
from .workspace import WorkspaceManager

logger = logging.getLogger(__name__)


async def serve(host) -> None:
    """Serve the HTTP control surface for ``host`` until interrupted."""
    sessions = SessionManager(host, host)
    workspaces = WorkspaceManager(sessions)
    store = RecordStore(config.STORE_DIR)
    app = create_app(sessions, workspaces, store)

    uvicorn_config = uvicorn.Config(
        app, host=config.HTTP_HOST, port=config.HTTP_PORT, log_level=config.LOG_LEVEL.lower()
    )
    uvicorn_server = uvicorn.Server(uvicorn_config)

    logger.info(
        f"[Server] PaneKeeper ({host.name}) at http://{config.HTTP_HOST}:{config.HTTP_PORT}, "
        f"records in {store.directory}"
    )
    await uvicorn_server.serve()


async def start_iterm2(connection: iterm2.Connection):
    await serve(create_host("iterm2", connection=connection))


def main():
    """入口函数"""
    configure_logging(config.LOG_LEVEL)

    host_type = config.HOST_TYPE
    if host_type == "auto":
        host_type = detect_host_type()

    try:
        if host_type == "iterm2":
            iterm2.run_until_complete(start_iterm2)
        else:
            asyncio.run(serve(create_host(host_type)))
    except KeyboardInterrupt:
        logger.info("[Server] Stopped")


if __name__ == "__main__":
    main()
