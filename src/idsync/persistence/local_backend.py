"""Local filesystem backend implementing IFileStore."""

from __future__ import annotations

from pathlib import Path

from idsync.core.exceptions import FileUnavailable


class LocalFileStore:
    """IFileStore rooted at a local directory (the snapshot folder)."""

    def __init__(self, root: str | Path = ".") -> None:
        self._root = Path(root)

    def _resolve(self, path: str) -> Path:
        return self._root / path

    def read(self, path: str) -> bytes:
        try:
            return self._resolve(path).read_bytes()
        except OSError as exc:
            raise FileUnavailable(path, str(exc)) from exc

    def write(self, path: str, data: bytes, content_type: str = "application/json") -> str:
        target = self._resolve(path)
        tmp = target.with_name(f".{target.name}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            tmp.replace(target)
        except OSError as exc:
            raise FileUnavailable(path, str(exc)) from exc
        return path

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()
