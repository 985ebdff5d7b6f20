"""内容描述符协议

每种内容类型有一个 handler，提供三种能力:

- capture(unit) -> descriptor | None
- restore(descriptor) -> live unit | None
- apply_post_layout_state(unit, pane, descriptor, leaf_state)

handler 在以 ContentKind 为键的显式注册表中查找；类型集合是封闭的。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..telemetry import get_logger
from .descriptors import ContentDescriptor, ContentKind

if TYPE_CHECKING:
    from ..host.base import ContentHost, LiveContent, PaneHandle
    from ..layout.tree import LeafNode

logger = get_logger(__name__)


def clamp_offset(offset: int, length: int) -> int:
    """Clamp a stored offset into [0, length]"""
    return max(0, min(offset, max(length, 0)))


@dataclass(frozen=True)
class LeafState:
    """与描述符一起存储的 pane 级状态"""

    hscroll: int = 0
    vscroll: int = 0
    viewport_start: int = 0
    cursor_offset: int = 0

    @classmethod
    def from_leaf(cls, leaf: "LeafNode") -> "LeafState":
        return cls(
            hscroll=leaf.hscroll,
            vscroll=leaf.vscroll,
            viewport_start=leaf.viewport_start,
            cursor_offset=leaf.cursor_offset,
        )


class ContentHandler(ABC):
    """单个内容类型的捕获/恢复契约

    Attributes:
        kind: Content kind served
        manages_scroll: True when the content keeps its own scroll state;
            the reconstruction walker then never applies raw pane offsets
    """

    kind: ContentKind
    manages_scroll: bool = False

    def __init__(self, content_host: "ContentHost"):
        self.content_host = content_host

    @abstractmethod
    async def capture(self, unit: "LiveContent") -> ContentDescriptor | None:
        """Build a descriptor; None when identifying info is missing.

        File existence is not checked here; it is re-checked on restore.
        """

    @abstractmethod
    async def restore(self, descriptor: ContentDescriptor) -> "LiveContent | None":
        """Materialize a live unit; None when the resource is gone"""

    async def apply_post_layout_state(
        self,
        unit: "LiveContent",
        pane: "PaneHandle",
        descriptor: ContentDescriptor,
        state: LeafState,
    ) -> None:
        """Apply kind-specific state once the unit is attached and sized"""
        return None


class HandlerRegistry:
    """ContentKind -> ContentHandler 映射"""

    def __init__(
        self,
        content_host: "ContentHost",
        handlers: "list[ContentHandler] | None" = None,
    ):
        self.content_host = content_host
        self._handlers: dict[ContentKind, ContentHandler] = {}
        for handler in handlers or []:
            self.register(handler)

    def register(self, handler: ContentHandler) -> None:
        """Register (or replace) the handler for ``handler.kind``"""
        if handler.kind in self._handlers:
            logger.debug(f"[Registry] Replacing handler for {handler.kind.value}")
        self._handlers[handler.kind] = handler

    def get(self, kind: ContentKind) -> ContentHandler | None:
        return self._handlers.get(kind)

    async def capture_content(self, unit: "LiveContent") -> ContentDescriptor | None:
        """Dispatch capture on the unit's kind.

        Returns:
            Descriptor, or None for unrecognized or unregistered kinds
        """
        if unit is None:
            return None
        kind = await self.content_host.kind_of(unit)
        if kind is None:
            return None
        handler = self._handlers.get(kind)
        if handler is None:
            logger.debug(f"[Registry] No handler for {kind.value}, unit skipped")
            return None
        return await handler.capture(unit)
