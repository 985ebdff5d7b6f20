"""错误类型

- StructuralError: 树或记录结构不合法，整个恢复调用失败
- ContentUnavailable: 内容资源或生成命令缺失，仅影响单个叶子
- HostOperationFailed: 窗口宿主调用失败
- NotFound: 存储中没有该名称的记录
"""


class PaneKeeperError(Exception):
    """Base class for PaneKeeper errors."""


class StructuralError(PaneKeeperError):
    """A layout tree or record violates its structural invariants."""


class ContentUnavailable(PaneKeeperError):
    """The resource behind a content descriptor cannot be materialized."""


class HostOperationFailed(PaneKeeperError):
    """The windowing host rejected or failed an operation."""


class NotFound(PaneKeeperError):
    """A named record does not exist in the store."""

    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind} '{name}' not found")
        self.kind = kind
        self.name = name
