"""Content descriptors and the per-kind capture/restore protocol

Exports the descriptor types only; handlers live in
``panekeeper.content.protocol`` and ``panekeeper.content.handlers``.
"""

from .descriptors import (
    ContentDescriptor,
    ContentKind,
    DirectoryListingDescriptor,
    FileDescriptor,
    IndexedDocumentDescriptor,
    NamedSurfaceDescriptor,
    PaginatedDocumentDescriptor,
    descriptor_from_dict,
    descriptor_label,
    descriptor_to_dict,
)

__all__ = [
    "ContentDescriptor",
    "ContentKind",
    "DirectoryListingDescriptor",
    "FileDescriptor",
    "IndexedDocumentDescriptor",
    "NamedSurfaceDescriptor",
    "PaginatedDocumentDescriptor",
    "descriptor_from_dict",
    "descriptor_label",
    "descriptor_to_dict",
]
