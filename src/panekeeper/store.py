"""记录存储

每个命名记录一个 JSON 文件:
- <dir>/sessions/<name>.json
- <dir>/workspaces/<name>.json

文件带版本号和 payload 的 sha256 checksum；写入先落临时文件再 rename，
崩溃时不会留下半截记录。
"""

import hashlib
import json
import os
import re
import tempfile
import time
from pathlib import Path

from . import config
from .errors import NotFound, StructuralError
from .records import SessionRecord, WorkspaceRecord
from .telemetry import get_logger, metrics

logger = get_logger(__name__)

SESSION = "session"
WORKSPACE = "workspace"

_SUBDIRS = {SESSION: "sessions", WORKSPACE: "workspaces"}
_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def _calculate_checksum(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _encode(data: dict) -> bytes:
    return json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True).encode("utf-8")


def validate_name(name: str) -> str:
    """Check that a record name is usable as a file name.

    Raises:
        ValueError: empty name, path separators, or leading dot
    """
    if not isinstance(name, str) or not _NAME_RE.match(name):
        raise ValueError(f"Invalid record name: {name!r}")
    return name


class RecordStore:
    """基于文件的 session / workspace 记录存储"""

    def __init__(self, directory: Path | str | None = None, version: int = config.STORE_VERSION):
        self.directory = Path(directory) if directory is not None else config.STORE_DIR
        self.version = version

    def _path(self, kind: str, name: str) -> Path:
        if kind not in _SUBDIRS:
            raise ValueError(f"Unknown record kind: {kind!r}")
        return self.directory / _SUBDIRS[kind] / f"{validate_name(name)}.json"

    # === Sessions ===

    def save_session(self, record: SessionRecord) -> Path:
        return self._write(SESSION, record.name, record.to_dict())

    def load_session(self, name: str) -> SessionRecord:
        """Raises NotFound when absent, StructuralError when corrupt"""
        return SessionRecord.from_dict(self._read(SESSION, name))

    # === Workspaces ===

    def save_workspace(self, record: WorkspaceRecord) -> Path:
        return self._write(WORKSPACE, record.name, record.to_dict())

    def load_workspace(self, name: str) -> WorkspaceRecord:
        """Raises NotFound when absent, StructuralError when corrupt"""
        return WorkspaceRecord.from_dict(self._read(WORKSPACE, name))

    # === Listing ===

    def list_names(self, kind: str) -> list[str]:
        """Sorted record names of one kind"""
        if kind not in _SUBDIRS:
            raise ValueError(f"Unknown record kind: {kind!r}")
        folder = self.directory / _SUBDIRS[kind]
        if not folder.is_dir():
            return []
        return sorted(p.stem for p in folder.glob("*.json") if _NAME_RE.match(p.stem))

    def delete(self, kind: str, name: str) -> None:
        """Raises NotFound when absent"""
        path = self._path(kind, name)
        if not path.exists():
            raise NotFound(kind, name)
        os.unlink(path)
        logger.info(f"[Store] Deleted {kind} '{name}'")

    # === File IO ===

    def _write(self, kind: str, name: str, record: dict) -> Path:
        """Atomic write: temp file in the target directory, then rename."""
        path = self._path(kind, name)
        data = {
            "version": self.version,
            "saved_at": time.time(),
            "kind": kind,
            "record": record,
        }
        data["checksum"] = _calculate_checksum(_encode(data))
        payload = _encode(data)

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(prefix=f".{name}_", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(temp_path, path)
        except Exception:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            metrics.inc("store.error", {"op": "save"})
            raise

        logger.info(f"[Store] Saved {kind} '{name}' -> {path}")
        return path

    def _read(self, kind: str, name: str) -> dict:
        path = self._path(kind, name)
        if not path.exists():
            raise NotFound(kind, name)

        try:
            data = json.loads(path.read_bytes().decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            metrics.inc("store.error", {"op": "load", "reason": "json"})
            raise StructuralError(f"{kind} '{name}': invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise StructuralError(f"{kind} '{name}': not a record file")

        file_version = data.get("version", 1)
        if file_version != self.version:
            metrics.inc("store.error", {"op": "load", "reason": "version"})
            raise StructuralError(
                f"{kind} '{name}': version mismatch (file={file_version}, expected={self.version})"
            )

        stored_checksum = data.pop("checksum", None)
        if stored_checksum and _calculate_checksum(_encode(data)) != stored_checksum:
            metrics.inc("store.error", {"op": "load", "reason": "checksum"})
            raise StructuralError(f"{kind} '{name}': checksum mismatch")

        record = data.get("record")
        if not isinstance(record, dict):
            raise StructuralError(f"{kind} '{name}': missing record body")

        logger.debug(f"[Store] Loaded {kind} '{name}'")
        return record
