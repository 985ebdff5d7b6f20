"""单窗口的捕获与恢复"""

import time
from typing import TYPE_CHECKING

from .content.handlers import default_registry
from .errors import HostOperationFailed
from .layout.capture import CaptureWalker
from .layout.restore import ReconstructionWalker, RestoreReport
from .layout.tree import LayoutNode, validate
from .records import SessionRecord
from .telemetry import get_logger

if TYPE_CHECKING:
    from .content.protocol import HandlerRegistry
    from .host.base import ContentHost, Surface, SurfaceGeometry, WindowHost

logger = get_logger(__name__)


class SessionManager:
    """每次捕获和恢复一个窗口

    Usage:
        sessions = SessionManager(host, host)
        record = await sessions.capture("editing")
        ...
        report = await sessions.restore(record)
    """

    def __init__(
        self,
        window_host: "WindowHost",
        content_host: "ContentHost",
        registry: "HandlerRegistry | None" = None,
        settle_seconds: float | None = None,
    ):
        self.window_host = window_host
        self.content_host = content_host
        self.registry = registry or default_registry(content_host, settle_seconds=settle_seconds)
        self.capture_walker = CaptureWalker(window_host, self.registry)
        self.restore_walker = ReconstructionWalker(window_host, self.registry)

    async def _resolve_surface(self, surface: "Surface | None") -> "Surface":
        if surface is None:
            surface = await self.window_host.focused_surface()
        if surface is None:
            raise HostOperationFailed("No surface available")
        return surface

    async def capture(self, name: str, surface: "Surface | None" = None) -> SessionRecord:
        """Snapshot a surface (the focused one by default)."""
        surface = await self._resolve_surface(surface)
        geometry = await self.window_host.surface_geometry(surface)
        tree = await self.capture_walker.capture_surface(surface)

        record = SessionRecord(
            name=name,
            timestamp=time.time(),
            surface_width=geometry.width,
            surface_height=geometry.height,
            pixel_width=geometry.pixel_width,
            pixel_height=geometry.pixel_height,
            layout_tree=tree,
        )
        logger.info(f"[Session] Captured '{name}': {record.leaf_count} panes")
        return record

    async def restore(self, record: SessionRecord, surface: "Surface | None" = None) -> RestoreReport:
        """Restore a session record into a surface (the focused one by default).

        Raises:
            StructuralError: the record's tree is malformed
            HostOperationFailed: no surface, or the surface cannot be prepared
        """
        surface = await self._resolve_surface(surface)
        logger.info(f"[Session] Restoring '{record.name}'")
        return await self.restore_into(surface, record.geometry, record.layout_tree)

    async def restore_into(
        self,
        surface: "Surface",
        geometry: "SurfaceGeometry",
        tree: LayoutNode | None,
    ) -> RestoreReport:
        """Resize ``surface``, collapse it to one pane and rebuild ``tree`` in it."""
        if tree is not None:
            validate(tree)

        await self.window_host.resize_surface(surface, geometry)
        pane = await self.window_host.collapse_surface(surface)
        if tree is None:
            return RestoreReport()
        return await self.restore_walker.restore_tree(tree, pane)
