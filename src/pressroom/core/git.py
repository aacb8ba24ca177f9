"""Working tree and commit access through GitPython."""

import logging
import threading
from pathlib import Path

from git import Repo
from git.exc import GitCommandError

logger = logging.getLogger(__name__)


class GitRepository:
    """Blob and change-status source for a Git working tree.

    All paths are repository-relative with forward slashes. Safe to share
    between threads: every query runs its own git subprocess and none goes
    through the object database, whose ``cat-file --batch`` readers are
    not thread-safe.
    """

    def __init__(self, repo_path: Path):
        self.repo_path = repo_path
        self._repo: Repo | None = None
        self._repo_lock = threading.Lock()

    @property
    def repo(self) -> Repo:
        with self._repo_lock:
            if self._repo is None:
                self._repo = Repo(self.repo_path)
            return self._repo

    def read_working_tree(self, path: str) -> bytes | None:
        """Current on-disk bytes, or None if the file does not exist."""
        try:
            return (self.repo_path / path).read_bytes()
        except (FileNotFoundError, IsADirectoryError):
            return None

    def read_committed(self, path: str) -> bytes | None:
        """Bytes of ``path`` at HEAD, or None if it is not committed.

        Also None when HEAD is unborn or ``path`` names a directory.
        """
        status, stdout, _ = self.repo.git.cat_file(
            "blob",
            f"HEAD:{path}",
            with_extended_output=True,
            with_exceptions=False,
            stdout_as_string=False,
            strip_newline_in_stdout=False,
        )
        if status != 0:
            return None
        return stdout

    def list_changed_paths(self, pathspec: str = ".") -> set[str]:
        """Paths under ``pathspec`` that differ from HEAD, untracked included."""
        output = self.repo.git.status(
            "--porcelain", "-z", "--untracked-files=all", "--", pathspec
        )
        return _parse_porcelain_z(output)

    def is_changed(self, path: str) -> bool:
        """Whether a single path differs from HEAD."""
        return bool(self.list_changed_paths(path))

    def diff_no_index(self, old: Path, new: Path) -> str:
        """``git diff --no-index`` between two files. Empty when identical."""
        status, stdout, stderr = self.repo.git.diff(
            "--no-index",
            "--no-color",
            "--",
            str(old),
            str(new),
            with_extended_output=True,
            with_exceptions=False,
            strip_newline_in_stdout=False,
        )
        if status not in (0, 1):
            raise GitCommandError(["git", "diff", "--no-index"], status, stderr)
        return stdout


def _parse_porcelain_z(output: str) -> set[str]:
    """Parse ``git status --porcelain -z`` output into a set of paths.

    Entries are ``XY <path>``; renames and copies are followed by an extra
    entry holding the original path, which is skipped.
    """
    paths: set[str] = set()
    entries = iter(output.split("\0"))
    for entry in entries:
        if len(entry) < 4:
            continue
        status, path = entry[:2], entry[3:]
        paths.add(path)
        if status[0] in "RC":
            next(entries, None)
    return paths
