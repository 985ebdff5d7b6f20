"""HTTP 控制接口

路由（sessions 与 workspaces 形式相同）:
    GET    /api/sessions                 列出已存储的名称
    GET    /api/sessions/{name}          读取记录
    POST   /api/sessions/{name}          捕获并存储
    POST   /api/sessions/{name}/restore  恢复已存储的记录
    DELETE /api/sessions/{name}          删除记录

恢复操作串行执行。
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import HostOperationFailed, NotFound, StructuralError
from ..store import SESSION, WORKSPACE, validate_name

if TYPE_CHECKING:
    from ..session import SessionManager
    from ..store import RecordStore
    from ..workspace import WorkspaceManager

logger = logging.getLogger(__name__)


class RecordList(BaseModel):
    """已存储的记录名称"""

    names: list[str]


class RecordSummary(BaseModel):
    """刚捕获的记录"""

    name: str
    timestamp: float
    panes: int
    surfaces: int = 1


class RestoreResponse(BaseModel):
    """恢复结果"""

    name: str
    ok: bool
    complete: bool
    report: dict


class DeleteResponse(BaseModel):
    success: bool
    message: str


class ControlServer:
    """FastAPI app driving a SessionManager / WorkspaceManager pair"""

    def __init__(
        self,
        sessions: "SessionManager",
        workspaces: "WorkspaceManager",
        store: "RecordStore",
    ):
        self.app = FastAPI(title="PaneKeeper")
        self.sessions = sessions
        self.workspaces = workspaces
        self.store = store
        self._restore_lock = asyncio.Lock()

        self._setup_error_handlers()
        self._setup_session_routes()
        self._setup_workspace_routes()

    def _setup_error_handlers(self):
        @self.app.exception_handler(NotFound)
        async def not_found(request: Request, exc: NotFound):
            return JSONResponse(status_code=404, content={"detail": str(exc)})

        @self.app.exception_handler(StructuralError)
        async def structural_error(request: Request, exc: StructuralError):
            logger.warning(f"[HTTP] Malformed record: {exc}")
            return JSONResponse(status_code=422, content={"detail": str(exc)})

        @self.app.exception_handler(HostOperationFailed)
        async def host_failed(request: Request, exc: HostOperationFailed):
            logger.error(f"[HTTP] Host operation failed: {exc}")
            return JSONResponse(status_code=503, content={"detail": str(exc)})

        @self.app.exception_handler(ValueError)
        async def bad_value(request: Request, exc: ValueError):
            return JSONResponse(status_code=400, content={"detail": str(exc)})

    def _setup_session_routes(self):
        @self.app.get("/api/sessions", response_model=RecordList)
        async def list_sessions():
            return RecordList(names=self.store.list_names(SESSION))

        @self.app.get("/api/sessions/{name}")
        async def get_session(name: str):
            return self.store.load_session(name).to_dict()

        @self.app.post("/api/sessions/{name}", response_model=RecordSummary)
        async def capture_session(name: str):
            validate_name(name)
            record = await self.sessions.capture(name)
            self.store.save_session(record)
            return RecordSummary(name=name, timestamp=record.timestamp, panes=record.leaf_count)

        @self.app.post("/api/sessions/{name}/restore", response_model=RestoreResponse)
        async def restore_session(name: str):
            record = self.store.load_session(name)
            async with self._restore_lock:
                report = await self.sessions.restore(record)
            return RestoreResponse(
                name=name, ok=report.ok, complete=report.complete, report=report.to_dict()
            )

        @self.app.delete("/api/sessions/{name}", response_model=DeleteResponse)
        async def delete_session(name: str):
            self.store.delete(SESSION, name)
            return DeleteResponse(success=True, message=f"session '{name}' deleted")

    def _setup_workspace_routes(self):
        @self.app.get("/api/workspaces", response_model=RecordList)
        async def list_workspaces():
            return RecordList(names=self.store.list_names(WORKSPACE))

        @self.app.get("/api/workspaces/{name}")
        async def get_workspace(name: str):
            return self.store.load_workspace(name).to_dict()

        @self.app.post("/api/workspaces/{name}", response_model=RecordSummary)
        async def capture_workspace(name: str):
            validate_name(name)
            record = await self.workspaces.capture(name)
            self.store.save_workspace(record)
            return RecordSummary(
                name=name, timestamp=record.timestamp, panes=record.leaf_count, surfaces=len(record.surfaces)
            )

        @self.app.post("/api/workspaces/{name}/restore", response_model=RestoreResponse)
        async def restore_workspace(name: str):
            record = self.store.load_workspace(name)
            async with self._restore_lock:
                report = await self.workspaces.restore(record)
            return RestoreResponse(
                name=name, ok=report.ok, complete=report.complete, report=report.to_dict()
            )

        @self.app.delete("/api/workspaces/{name}", response_model=DeleteResponse)
        async def delete_workspace(name: str):
            self.store.delete(WORKSPACE, name)
            return DeleteResponse(success=True, message=f"workspace '{name}' deleted")


def create_app(
    sessions: "SessionManager",
    workspaces: "WorkspaceManager",
    store: "RecordStore",
) -> FastAPI:
    """创建 FastAPI 应用"""
    return ControlServer(sessions, workspaces, store).app
