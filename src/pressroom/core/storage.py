"""File access for content documents."""

import logging
import posixpath
from pathlib import Path

logger = logging.getLogger(__name__)


class InvalidPath(ValueError):
    """Path is empty, absolute, or escapes the content root."""


class ContentStore:
    """Raw byte access to files under the content root.

    All paths are relative to ``base_path`` and use forward slashes,
    e.g. ``posts/2024/hello/index.md``.
    """

    def __init__(self, base_path: Path):
        self.base_path = base_path

    def safe_join(self, path: str) -> Path:
        """Resolve a content-relative path, rejecting traversal."""
        path = path.replace("\\", "/")
        if not path or path.startswith("/"):
            raise InvalidPath(f"invalid path: {path!r}")
        cleaned = posixpath.normpath(path)
        if cleaned == "." or ".." in cleaned.split("/"):
            raise InvalidPath(f"invalid path: {path!r}")
        return self.base_path / cleaned

    def exists(self, path: str) -> bool:
        return self.safe_join(path).is_file()

    def read_raw(self, path: str) -> bytes | None:
        """Get raw file content, or None if the file does not exist."""
        full = self.safe_join(path)
        if not full.is_file():
            return None
        return full.read_bytes()

    def write_raw(self, path: str, content: bytes) -> None:
        """Write a file, creating parent directories as needed."""
        full = self.safe_join(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        full.write_bytes(content)

    def delete(self, path: str) -> bool:
        """Delete a file. Returns True if deleted, False if not found.

        An emptied page-bundle directory is removed too, but top-level
        collection folders (``posts/``) are kept.
        """
        full = self.safe_join(path)
        if not full.is_file():
            return False
        full.unlink()

        parent = full.parent
        relative = parent.relative_to(self.base_path)
        if len(relative.parts) >= 2 and not any(parent.iterdir()):
            parent.rmdir()
            logger.info("Removed empty bundle directory %s", relative.as_posix())
        return True
