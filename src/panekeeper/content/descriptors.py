"""内容描述符

每种内容类型一个 frozen dataclass。描述符是日后重新打开内容所需的
最小可序列化标识。

序列化形式: {"kind": <tag>, ...fields}
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import ClassVar

from ..errors import StructuralError


class ContentKind(str, Enum):
    """可捕获内容类型的封闭集合"""

    FILE = "file"
    PAGINATED_DOCUMENT = "paginated_document"
    INDEXED_DOCUMENT = "indexed_document"
    DIRECTORY_LISTING = "directory_listing"
    NAMED_SURFACE = "named_surface"


@dataclass(frozen=True)
class FileDescriptor:
    kind: ClassVar[ContentKind] = ContentKind.FILE

    path: str
    cursor_offset: int = 0


@dataclass(frozen=True)
class PaginatedDocumentDescriptor:
    """Document viewer state; slice and scale are opaque viewer geometry."""

    kind: ClassVar[ContentKind] = ContentKind.PAGINATED_DOCUMENT

    path: str
    page: int = 1
    slice: tuple[float, float, float, float] | None = None
    scale: float | None = None


@dataclass(frozen=True)
class IndexedDocumentDescriptor:
    kind: ClassVar[ContentKind] = ContentKind.INDEXED_DOCUMENT

    path: str
    section_index: int = 0
    cursor_offset: int = 0


@dataclass(frozen=True)
class DirectoryListingDescriptor:
    kind: ClassVar[ContentKind] = ContentKind.DIRECTORY_LISTING

    path: str
    cursor_offset: int = 0


@dataclass(frozen=True)
class NamedSurfaceDescriptor:
    """Host-managed pane identified by name (e.g. a system monitor)."""

    kind: ClassVar[ContentKind] = ContentKind.NAMED_SURFACE

    name: str
    surface_kind: str


ContentDescriptor = (
    FileDescriptor
    | PaginatedDocumentDescriptor
    | IndexedDocumentDescriptor
    | DirectoryListingDescriptor
    | NamedSurfaceDescriptor
)

DESCRIPTOR_TYPES: dict[ContentKind, type] = {
    ContentKind.FILE: FileDescriptor,
    ContentKind.PAGINATED_DOCUMENT: PaginatedDocumentDescriptor,
    ContentKind.INDEXED_DOCUMENT: IndexedDocumentDescriptor,
    ContentKind.DIRECTORY_LISTING: DirectoryListingDescriptor,
    ContentKind.NAMED_SURFACE: NamedSurfaceDescriptor,
}


def descriptor_label(descriptor: ContentDescriptor) -> str:
    """用于日志和报告的简短标签"""
    if isinstance(descriptor, NamedSurfaceDescriptor):
        return descriptor.name
    return descriptor.path


def descriptor_to_dict(descriptor: ContentDescriptor) -> dict:
    """Serialize a descriptor to a tagged dict."""
    data = {"kind": descriptor.kind.value}
    data.update(asdict(descriptor))
    if data.get("slice") is not None:
        data["slice"] = list(data["slice"])
    return data


def descriptor_from_dict(data: dict) -> ContentDescriptor:
    """Deserialize a tagged dict.

    Raises:
        StructuralError: unknown kind, missing or unexpected fields
    """
    if not isinstance(data, dict):
        raise StructuralError(f"Descriptor must be a mapping, got {type(data).__name__}")
    try:
        kind = ContentKind(data.get("kind"))
    except ValueError:
        raise StructuralError(f"Unknown content kind: {data.get('kind')!r}") from None

    cls = DESCRIPTOR_TYPES[kind]
    allowed = {f.name for f in fields(cls)}
    values = {k: v for k, v in data.items() if k != "kind"}
    unexpected = set(values) - allowed
    if unexpected:
        raise StructuralError(f"Unexpected fields for {kind.value}: {sorted(unexpected)}")

    if values.get("slice") is not None:
        values["slice"] = tuple(float(v) for v in values["slice"])
    try:
        return cls(**values)
    except TypeError as e:
        raise StructuralError(f"Invalid {kind.value} descriptor: {e}") from e
