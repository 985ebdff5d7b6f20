"""多窗口工作区的捕获与恢复

恢复顺序:
1. 保留主窗口，关闭其余窗口，丢弃可恢复的内容
2. 将 dominant 快照恢复到主窗口（先移动，再调整大小）
3. 按顺序为其余快照各创建一个窗口并恢复
4. 置前并聚焦主窗口
"""

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .errors import HostOperationFailed, StructuralError
from .layout.restore import LeafOutcome, RestoreReport
from .layout.tree import iter_leaves, validate
from .records import SurfaceSnapshot, WorkspaceRecord
from .telemetry import get_logger, metrics

if TYPE_CHECKING:
    from .host.base import Surface
    from .session import SessionManager

logger = get_logger(__name__)


@dataclass
class WorkspaceReport:
    """按记录顺序排列的各窗口恢复报告"""

    surfaces: list[RestoreReport] = field(default_factory=list)
    dominant_index: int = 0
    created: int = 0
    discarded: int = 0

    def totals(self) -> RestoreReport:
        """把所有窗口的叶子结果合并为一份报告"""
        total = RestoreReport()
        for surface in self.surfaces:
            total.merge(surface)
        return total

    @property
    def ok(self) -> bool:
        return self.totals().ok

    @property
    def complete(self) -> bool:
        return self.totals().complete

    def to_dict(self) -> dict:
        return {
            "dominant_index": self.dominant_index,
            "created": self.created,
            "discarded": self.discarded,
            "surfaces": [r.to_dict() for r in self.surfaces],
        }


class WorkspaceManager:
    """捕获并恢复宿主的所有窗口"""

    def __init__(self, sessions: "SessionManager"):
        self.sessions = sessions
        self.window_host = sessions.window_host
        self.content_host = sessions.content_host

    async def capture(self, name: str) -> WorkspaceRecord:
        """快照所有实时窗口，当前聚焦的窗口标记为 dominant"""
        surfaces = await self.window_host.list_surfaces()
        if not surfaces:
            raise HostOperationFailed("No surfaces to capture")
        focused = await self.window_host.focused_surface()

        snapshots = []
        for surface in surfaces:
            geometry = await self.window_host.surface_geometry(surface)
            tree = await self.sessions.capture_walker.capture_surface(surface)
            snapshots.append(
                SurfaceSnapshot(
                    surface_width=geometry.width,
                    surface_height=geometry.height,
                    pixel_width=geometry.pixel_width,
                    pixel_height=geometry.pixel_height,
                    position_left=geometry.left,
                    position_top=geometry.top,
                    is_dominant=focused is not None and surface == focused,
                    layout_tree=tree,
                )
            )

        logger.info(f"[Workspace] Captured '{name}': {len(snapshots)} surfaces")
        return WorkspaceRecord(name=name, timestamp=time.time(), surfaces=snapshots)

    async def restore(self, record: WorkspaceRecord) -> WorkspaceReport:
        """Restore a workspace record.

        Raises:
            StructuralError: the record is malformed (checked before any change)
            HostOperationFailed: there is no primary surface to restore into
        """
        if not record.surfaces:
            raise StructuralError(f"Workspace '{record.name}' has no surfaces")
        for snapshot in record.surfaces:
            if snapshot.layout_tree is not None:
                validate(snapshot.layout_tree)

        primary = await self.window_host.primary_surface()
        if primary is None:
            raise HostOperationFailed("No primary surface")

        report = WorkspaceReport(dominant_index=record.dominant_index())
        report.discarded = await self._clear(primary)

        dominant = record.surfaces[report.dominant_index]
        logger.info(
            f"[Workspace] Restoring '{record.name}': {len(record.surfaces)} surfaces, "
            f"dominant #{report.dominant_index}"
        )

        # position first: resizing can push a top-left anchored surface off screen
        await self.window_host.move_surface(primary, dominant.position_left, dominant.position_top)
        reports: dict[int, RestoreReport] = {
            report.dominant_index: await self._restore_surface(primary, dominant)
        }

        for index, snapshot in enumerate(record.surfaces):
            if index == report.dominant_index:
                continue
            try:
                surface = await self.window_host.create_surface(snapshot.geometry)
            except Exception as e:
                logger.error(f"[Workspace] Surface #{index} could not be created: {e}")
                reports[index] = self._failed_report(snapshot, f"surface not created: {e}")
                continue
            report.created += 1
            reports[index] = await self._restore_surface(surface, snapshot)
            try:
                await self.window_host.make_visible(surface)
            except HostOperationFailed as e:
                logger.warning(f"[Workspace] Surface #{index} not made visible: {e}")

        report.surfaces = [reports[i] for i in range(len(record.surfaces))]
        totals = report.totals()
        logger.info(
            f"[Workspace] Restored '{record.name}': {len(totals.restored)} restored, "
            f"{len(totals.unavailable)} unavailable, {len(totals.failed)} failed"
        )
        await self._focus_primary(primary)
        metrics.inc("workspace.restore", {"ok": str(report.ok).lower()})
        metrics.gauge("workspace.surfaces", len(record.surfaces))
        return report

    async def _clear(self, primary: "Surface") -> int:
        """Destroy every surface but the primary and discard restorable content."""
        for surface in await self.window_host.list_surfaces():
            if surface != primary:
                await self.window_host.destroy_surface(surface)
        discarded = await self.content_host.discard_restorable()
        logger.debug(f"[Workspace] Clean slate: {discarded} content units discarded")
        return discarded

    async def _restore_surface(self, surface: "Surface", snapshot: SurfaceSnapshot) -> RestoreReport:
        try:
            return await self.sessions.restore_into(surface, snapshot.geometry, snapshot.layout_tree)
        except HostOperationFailed as e:
            logger.error(f"[Workspace] Surface restore failed: {e}")
            return self._failed_report(snapshot, str(e))

    def _failed_report(self, snapshot: SurfaceSnapshot, reason: str) -> RestoreReport:
        report = RestoreReport()
        if snapshot.layout_tree is not None:
            report.failed = [LeafOutcome(leaf.descriptor, reason) for leaf in iter_leaves(snapshot.layout_tree)]
        return report

    async def _focus_primary(self, primary: "Surface") -> None:
        await self.window_host.raise_surface(primary)
        await self.window_host.focus_surface(primary)

        # Window managers may refuse focus stealing; a brief always-on-top
        # toggle usually brings the surface forward. Best effort only.
        try:
            await self.window_host.set_always_on_top(primary, True)
            await self.window_host.redraw(primary)
            await self.window_host.set_always_on_top(primary, False)
        except Exception as e:
            logger.debug(f"[Workspace] Focus nudge skipped: {e}")
