"""内容 handler，每种内容类型一个"""

import asyncio
from typing import TYPE_CHECKING

from .. import config
from ..telemetry import get_logger
from .descriptors import (
    ContentKind,
    DirectoryListingDescriptor,
    FileDescriptor,
    IndexedDocumentDescriptor,
    NamedSurfaceDescriptor,
    PaginatedDocumentDescriptor,
)
from .protocol import ContentHandler, HandlerRegistry, LeafState, clamp_offset

if TYPE_CHECKING:
    from ..host.base import ContentHost, LiveContent, PaneHandle

logger = get_logger(__name__)


def _int_field(fields: dict, name: str, default: int = 0) -> int:
    value = fields.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class _PathHandler(ContentHandler):
    """Shared restore for path-backed kinds: reopen the path if it still exists"""

    async def restore(self, descriptor) -> "LiveContent | None":
        unit = await self.content_host.open(self.kind, descriptor.path)
        if unit is None:
            logger.info(f"[{self.kind.value}] Not available: {descriptor.path}")
        return unit

    async def _apply_cursor(self, unit, pane, offset: int) -> None:
        length = await self.content_host.content_length(unit)
        await self.content_host.set_cursor(unit, pane, clamp_offset(offset, length))


class FileHandler(_PathHandler):
    kind = ContentKind.FILE

    async def capture(self, unit) -> FileDescriptor | None:
        fields = await self.content_host.describe(unit)
        path = fields.get("path")
        if not path:
            return None
        return FileDescriptor(path=path, cursor_offset=_int_field(fields, "cursor_offset"))

    async def apply_post_layout_state(self, unit, pane, descriptor, state: LeafState) -> None:
        await self._apply_cursor(unit, pane, descriptor.cursor_offset)


class PaginatedDocumentHandler(_PathHandler):
    """Document viewers keep their own scroll state.

    Page, slice and scale are applied only once the pane is visible and
    sized, followed by a full redraw and a short settle delay.
    """

    kind = ContentKind.PAGINATED_DOCUMENT
    manages_scroll = True

    def __init__(self, content_host: "ContentHost", settle_seconds: float | None = None):
        super().__init__(content_host)
        self.settle_seconds = (
            config.RENDER_SETTLE_SECONDS if settle_seconds is None else settle_seconds
        )

    async def capture(self, unit) -> PaginatedDocumentDescriptor | None:
        fields = await self.content_host.describe(unit)
        path = fields.get("path")
        if not path:
            return None
        slice_ = fields.get("slice")
        scale = fields.get("scale")
        return PaginatedDocumentDescriptor(
            path=path,
            page=max(1, _int_field(fields, "page", 1)),
            slice=tuple(float(v) for v in slice_) if slice_ else None,
            scale=float(scale) if scale is not None else None,
        )

    async def apply_post_layout_state(self, unit, pane, descriptor, state: LeafState) -> None:
        await self.content_host.goto_page(
            unit, pane, descriptor.page, slice=descriptor.slice, scale=descriptor.scale
        )
        await self.content_host.redraw_content(pane)
        if self.settle_seconds > 0:
            await asyncio.sleep(self.settle_seconds)


class IndexedDocumentHandler(_PathHandler):
    kind = ContentKind.INDEXED_DOCUMENT

    async def capture(self, unit) -> IndexedDocumentDescriptor | None:
        fields = await self.content_host.describe(unit)
        path = fields.get("path")
        if not path:
            return None
        return IndexedDocumentDescriptor(
            path=path,
            section_index=_int_field(fields, "section_index"),
            cursor_offset=_int_field(fields, "cursor_offset"),
        )

    async def apply_post_layout_state(self, unit, pane, descriptor, state: LeafState) -> None:
        await self.content_host.goto_section(unit, pane, descriptor.section_index)
        await self._apply_cursor(unit, pane, descriptor.cursor_offset)


class DirectoryListingHandler(_PathHandler):
    kind = ContentKind.DIRECTORY_LISTING

    async def capture(self, unit) -> DirectoryListingDescriptor | None:
        fields = await self.content_host.describe(unit)
        path = fields.get("path")
        if not path:
            return None
        return DirectoryListingDescriptor(path=path, cursor_offset=_int_field(fields, "cursor_offset"))

    async def apply_post_layout_state(self, unit, pane, descriptor, state: LeafState) -> None:
        await self._apply_cursor(unit, pane, descriptor.cursor_offset)


class NamedSurfaceHandler(ContentHandler):
    """Named surfaces are looked up, not re-created.

    A surface kind with a registered producer (kind -> command) is
    regenerated when no live instance is found.
    """

    kind = ContentKind.NAMED_SURFACE

    def __init__(self, content_host: "ContentHost", producers: dict[str, str] | None = None):
        super().__init__(content_host)
        self.producers = dict(config.NAMED_SURFACE_PRODUCERS if producers is None else producers)

    async def capture(self, unit) -> NamedSurfaceDescriptor | None:
        fields = await self.content_host.describe(unit)
        name = fields.get("name")
        surface_kind = fields.get("surface_kind")
        if not name or not surface_kind:
            return None
        return NamedSurfaceDescriptor(name=name, surface_kind=surface_kind)

    async def restore(self, descriptor) -> "LiveContent | None":
        unit = await self.content_host.locate(descriptor.name, descriptor.surface_kind)
        if unit is not None:
            return unit

        command = self.producers.get(descriptor.surface_kind)
        if command is None:
            logger.info(
                f"[named_surface] '{descriptor.name}' not found and no producer "
                f"for kind '{descriptor.surface_kind}'"
            )
            return None

        logger.debug(f"[named_surface] Regenerating '{descriptor.name}' via {command!r}")
        return await self.content_host.produce(descriptor.surface_kind, command)


def default_registry(
    content_host: "ContentHost",
    producers: dict[str, str] | None = None,
    settle_seconds: float | None = None,
) -> HandlerRegistry:
    """为每种内容类型注册 handler 的注册表"""
    return HandlerRegistry(
        content_host,
        [
            FileHandler(content_host),
            PaginatedDocumentHandler(content_host, settle_seconds=settle_seconds),
            IndexedDocumentHandler(content_host),
            DirectoryListingHandler(content_host),
            NamedSurfaceHandler(content_host, producers=producers),
        ],
    )
