"""Filesystem access to a folder of Markdown notes."""

from __future__ import annotations

import os
import tempfile
import time
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List, Optional

# Change events this soon after our own write are echoes of it.
OWN_WRITE_WINDOW = 2.0


class Vault:
    """Read and write notes and attachments addressed by vault-relative paths.

    Paths use forward slashes regardless of platform. Link resolution mimics
    wiki-style embeds: a bare file name is looked up across the whole vault,
    preferring a file next to the note that links to it.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root).expanduser().resolve()
        self._index: Optional[Dict[str, List[str]]] = None
        self._own_writes: Dict[str, float] = {}

    def absolute(self, path: str) -> Path:
        return self.root / PurePosixPath(path.lstrip("/\\"))

    def relative(self, path: Path) -> str:
        return Path(path).resolve().relative_to(self.root).as_posix()

    def exists(self, path: str) -> bool:
        return self.absolute(path).is_file()

    def read_text(self, path: str) -> str:
        return self.absolute(path).read_text(encoding="utf-8")

    def read_bytes(self, path: str) -> bytes:
        return self.absolute(path).read_bytes()

    def write_text(self, path: str, content: str) -> None:
        self._write(path, content.encode("utf-8"))

    def write_bytes(self, path: str, data: bytes) -> None:
        self._write(path, data)
        self._index = None

    def recently_written(self, absolute_path: str, window: float = OWN_WRITE_WINDOW) -> bool:
        """Return True if ``absolute_path`` was written by this vault within ``window`` seconds."""

        written = self._own_writes.get(os.path.normpath(absolute_path))
        return written is not None and time.monotonic() - written <= window

    def _write(self, path: str, data: bytes) -> None:
        target = self.absolute(path)
        self._atomic_write(target, data)
        self._own_writes[os.path.normpath(str(target))] = time.monotonic()

    def created_at(self, path: str) -> datetime:
        stat = self.absolute(path).stat()
        timestamp = getattr(stat, "st_birthtime", None) or stat.st_mtime
        return datetime.fromtimestamp(timestamp)

    def markdown_files(self, folder: str = "") -> List[str]:
        base = self.absolute(folder) if folder else self.root
        if not base.is_dir():
            return []
        return sorted(self.relative(p) for p in self._walk(base) if p.suffix.lower() == ".md")

    def resolve_link(self, name: str, source_path: str) -> Optional[str]:
        """Return the vault path a bare link ``name`` points to from ``source_path``."""

        candidates = self._link_index().get(name.lower(), [])
        if not candidates:
            return None
        source_dir = PurePosixPath(source_path).parent.as_posix()
        for candidate in candidates:
            if PurePosixPath(candidate).parent.as_posix() == source_dir:
                return candidate
        return min(candidates, key=lambda p: (len(PurePosixPath(p).parts), p))

    def refresh(self) -> None:
        self._index = None

    def _link_index(self) -> Dict[str, List[str]]:
        if self._index is None:
            index: Dict[str, List[str]] = {}
            for path in self._walk(self.root):
                index.setdefault(path.name.lower(), []).append(self.relative(path))
            for paths in index.values():
                paths.sort()
            self._index = index
        return self._index

    def _walk(self, base: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(base):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for filename in filenames:
                if not filename.startswith("."):
                    yield Path(dirpath) / filename

    @staticmethod
    def _atomic_write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=".notewhisper-")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
