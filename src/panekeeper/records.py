"""快照记录

- SessionRecord: 单个窗口
- WorkspaceRecord: 有序的 SurfaceSnapshot 列表，最多一个 dominant

记录是普通 dataclass，带 dict 形式供存储和 HTTP 层使用。
``from_dict`` 会校验布局树。
"""

from dataclasses import dataclass, field

from .errors import StructuralError
from .host.base import SurfaceGeometry
from .layout.tree import LayoutNode, iter_leaves, node_from_dict, node_to_dict, validate


def _tree_to_dict(tree: LayoutNode | None) -> dict | None:
    return node_to_dict(tree) if tree is not None else None


def _tree_from_dict(data: dict | None) -> LayoutNode | None:
    if data is None:
        return None
    tree = node_from_dict(data)
    validate(tree)
    return tree


def _int(data: dict, key: str, default: int = 0) -> int:
    try:
        return int(data.get(key, default))
    except (TypeError, ValueError) as e:
        raise StructuralError(f"Invalid {key}: {data.get(key)!r}") from e


def _float(data: dict, key: str, default: float = 0.0) -> float:
    try:
        return float(data.get(key, default))
    except (TypeError, ValueError) as e:
        raise StructuralError(f"Invalid {key}: {data.get(key)!r}") from e


def _bool(data: dict, key: str, default: bool = False) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise StructuralError(f"Invalid {key}: {value!r}")
    return value


@dataclass
class SessionRecord:
    """单个窗口的快照"""

    name: str
    timestamp: float
    surface_width: int
    surface_height: int
    pixel_width: int = 0
    pixel_height: int = 0
    layout_tree: LayoutNode | None = None

    @property
    def geometry(self) -> SurfaceGeometry:
        return SurfaceGeometry(
            width=self.surface_width,
            height=self.surface_height,
            pixel_width=self.pixel_width,
            pixel_height=self.pixel_height,
        )

    @property
    def leaf_count(self) -> int:
        return sum(1 for _ in iter_leaves(self.layout_tree)) if self.layout_tree else 0

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "timestamp": self.timestamp,
            "surface_width": self.surface_width,
            "surface_height": self.surface_height,
            "pixel_width": self.pixel_width,
            "pixel_height": self.pixel_height,
            "layout_tree": _tree_to_dict(self.layout_tree),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionRecord":
        """Raises StructuralError on malformed data"""
        if not isinstance(data, dict) or "name" not in data:
            raise StructuralError("Session record must be a mapping with a name")
        return cls(
            name=str(data["name"]),
            timestamp=_float(data, "timestamp"),
            surface_width=_int(data, "surface_width"),
            surface_height=_int(data, "surface_height"),
            pixel_width=_int(data, "pixel_width"),
            pixel_height=_int(data, "pixel_height"),
            layout_tree=_tree_from_dict(data.get("layout_tree")),
        )


@dataclass
class SurfaceSnapshot:
    """工作区中的一个窗口"""

    surface_width: int
    surface_height: int
    pixel_width: int = 0
    pixel_height: int = 0
    position_left: int = 0
    position_top: int = 0
    is_dominant: bool = False
    layout_tree: LayoutNode | None = None

    @property
    def geometry(self) -> SurfaceGeometry:
        return SurfaceGeometry(
            width=self.surface_width,
            height=self.surface_height,
            pixel_width=self.pixel_width,
            pixel_height=self.pixel_height,
            left=self.position_left,
            top=self.position_top,
        )

    def to_dict(self) -> dict:
        return {
            "surface_width": self.surface_width,
            "surface_height": self.surface_height,
            "pixel_width": self.pixel_width,
            "pixel_height": self.pixel_height,
            "position_left": self.position_left,
            "position_top": self.position_top,
            "is_dominant": self.is_dominant,
            "layout_tree": _tree_to_dict(self.layout_tree),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SurfaceSnapshot":
        if not isinstance(data, dict):
            raise StructuralError("Surface snapshot must be a mapping")
        return cls(
            surface_width=_int(data, "surface_width"),
            surface_height=_int(data, "surface_height"),
            pixel_width=_int(data, "pixel_width"),
            pixel_height=_int(data, "pixel_height"),
            position_left=_int(data, "position_left"),
            position_top=_int(data, "position_top"),
            is_dominant=_bool(data, "is_dominant"),
            layout_tree=_tree_from_dict(data.get("layout_tree")),
        )


@dataclass
class WorkspaceRecord:
    """多个窗口的快照"""

    name: str
    timestamp: float
    surfaces: list[SurfaceSnapshot] = field(default_factory=list)

    def dominant_index(self) -> int:
        """dominant 窗口的下标；没有标记时取第一个"""
        for i, surface in enumerate(self.surfaces):
            if surface.is_dominant:
                return i
        return 0

    @property
    def leaf_count(self) -> int:
        return sum(
            sum(1 for _ in iter_leaves(s.layout_tree)) for s in self.surfaces if s.layout_tree
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "timestamp": self.timestamp,
            "surfaces": [s.to_dict() for s in self.surfaces],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkspaceRecord":
        """Raises StructuralError on malformed data or several dominant surfaces"""
        if not isinstance(data, dict) or "name" not in data:
            raise StructuralError("Workspace record must be a mapping with a name")
        surfaces = data.get("surfaces")
        if not isinstance(surfaces, list):
            raise StructuralError("Workspace surfaces must be a list")
        record = cls(
            name=str(data["name"]),
            timestamp=_float(data, "timestamp"),
            surfaces=[SurfaceSnapshot.from_dict(s) for s in surfaces],
        )
        dominant = sum(1 for s in record.surfaces if s.is_dominant)
        if dominant > 1:
            raise StructuralError(f"Workspace '{record.name}' has {dominant} dominant surfaces")
        return record
