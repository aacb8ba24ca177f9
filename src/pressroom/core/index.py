"""Cached article listing with dirty flags.

The listing is expensive to build (one file read per document plus a
semantic comparison for every file Git reports as touched), so it is kept
in memory until a write invalidates it. Single-file saves update one entry
in place instead of re-walking the tree.

A single lock guards the cache. It is held for the whole rebuild, so
concurrent callers wait for the one rebuild in flight rather than starting
their own, and every caller sees either the old or the new list, never a
partial one. A rebuild cannot be cancelled once started.
"""

import logging
import posixpath
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Protocol

from pressroom.core.frontmatter import extract_title
from pressroom.core.models import ArticleSummary

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 20
DEFAULT_HEAD_LIMIT = 4096


class StatusSource(Protocol):
    def list_changed_paths(self, pathspec: str) -> set[str]: ...

    def is_changed(self, path: str) -> bool: ...


class DirtyChecker(Protocol):
    def is_semantically_dirty(self, path: str) -> bool: ...


class ArticleIndex:
    """Process-wide listing of content files.

    Paths in summaries are relative to ``content_root``. Status and dirty
    checks use repository-relative paths, formed by prefixing
    ``content_prefix``.
    """

    def __init__(
        self,
        content_root: Path,
        checker: DirtyChecker,
        status: StatusSource,
        *,
        content_prefix: str = "content",
        concurrency: int = DEFAULT_CONCURRENCY,
        head_limit: int = DEFAULT_HEAD_LIMIT,
        suffixes: tuple[str, ...] = (".md",),
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.content_root = content_root
        self.checker = checker
        self.status = status
        self.content_prefix = content_prefix.strip("/")
        self.concurrency = concurrency
        self.head_limit = head_limit
        self.suffixes = suffixes
        self._lock = threading.Lock()
        self._articles: list[ArticleSummary] | None = None

    @property
    def populated(self) -> bool:
        return self._articles is not None

    def repo_path(self, path: str) -> str:
        """Repository-relative path for a content-relative one."""
        if not self.content_prefix:
            return path
        return posixpath.join(self.content_prefix, path)

    def get_all(self) -> list[ArticleSummary]:
        """Return the listing, building it first if needed.

        Raises:
            FileNotFoundError: the content root does not exist.
        """
        with self._lock:
            if self._articles is None:
                self._articles = self._rebuild()
            return list(self._articles)

    def invalidate(self) -> None:
        """Drop the cached listing. The next ``get_all`` rebuilds it."""
        with self._lock:
            self._articles = None

    def update_one(self, path: str) -> None:
        """Refresh the entry for one content-relative path.

        Does nothing when the cache is empty. A file that no longer exists
        is removed from the listing.
        """
        start = time.perf_counter()
        with self._lock:
            if self._articles is None:
                return

            if not (self.content_root / path).is_file():
                self._articles = [a for a in self._articles if a.path != path]
            else:
                summary = self._summarize(path, changed=None)
                articles = list(self._articles)
                for i, article in enumerate(articles):
                    if article.path == path:
                        articles[i] = summary
                        break
                else:
                    articles.append(summary)
                self._articles = articles

        logger.info(
            "Updated index entry %s in %.3fs", path, time.perf_counter() - start
        )

    def _enumerate(self) -> list[str]:
        if not self.content_root.is_dir():
            raise FileNotFoundError(f"Content root not found: {self.content_root}")
        return sorted(
            p.relative_to(self.content_root).as_posix()
            for p in self.content_root.rglob("*")
            if p.suffix in self.suffixes and p.is_file()
        )

    def _rebuild(self) -> list[ArticleSummary]:
        start = time.perf_counter()
        paths = self._enumerate()

        try:
            changed = self.status.list_changed_paths(self.content_prefix or ".")
        except Exception:
            logger.warning(
                "Change status unavailable, marking all articles clean", exc_info=True
            )
            changed = set()

        with ThreadPoolExecutor(
            max_workers=self.concurrency, thread_name_prefix="article-index"
        ) as pool:
            articles = list(pool.map(lambda p: self._summarize(p, changed), paths))

        logger.info(
            "Rebuilt article index: %d articles in %.3fs",
            len(articles),
            time.perf_counter() - start,
        )
        return articles

    def _summarize(self, path: str, changed: set[str] | None) -> ArticleSummary:
        """Build one summary. Failures fall back to path title / clean."""
        try:
            with (self.content_root / path).open("rb") as f:
                head = f.read(self.head_limit)
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return ArticleSummary(path=path, title=path, is_dirty=False)
        title = extract_title(head.decode("utf-8", errors="ignore")) or path

        repo_path = self.repo_path(path)
        try:
            if changed is None:
                touched = self.status.is_changed(repo_path)
            else:
                touched = repo_path in changed
            is_dirty = touched and self.checker.is_semantically_dirty(repo_path)
        except Exception:
            logger.warning("Dirty check failed for %s", path, exc_info=True)
            is_dirty = False

        return ArticleSummary(path=path, title=title, is_dirty=is_dirty)
