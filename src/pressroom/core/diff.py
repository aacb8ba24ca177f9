"""Semantic comparison of content files.

Two questions are answered here:

* Is a file different from its last commit once formatting noise is
  ignored? (``DiffEngine.is_semantically_dirty``)
* What would the editor's pending change look like, either against the
  file on disk or, when disk already matches, against the last commit?
  (``DiffEngine.compute_diff``)

Both work on normalized byte streams so that key order, indentation,
number width, date spelling and omitted-default fields do not show up as
changes.
"""

import difflib
import logging
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Protocol

from pressroom.core.canonical import (
    canonical_json,
    canonicalize_mapping,
    fold_instants,
    stringify_key,
)
from pressroom.core.defaults import apply_defaults, normalize_list_fields, prune_empty
from pressroom.core.frontmatter import FrontMatterError, parse, serialize
from pressroom.core.git import GitRepository
from pressroom.core.models import CollectionSchema, DiffKind, DiffResult

logger = logging.getLogger(__name__)

SAVED_LABEL = "Saved (Normalized)"
EDITOR_LABEL = "Editor"
HEAD_LABEL = "HEAD (Normalized)"
CURRENT_LABEL = "Current (Normalized)"


class BlobSource(Protocol):
    def read_working_tree(self, path: str) -> bytes | None: ...

    def read_committed(self, path: str) -> bytes | None: ...


class SchemaSource(Protocol):
    def resolve(self, path: str) -> CollectionSchema | None: ...


class RenderedDiff(NamedTuple):
    """Diff text plus the identifiers the renderer used for each side."""

    text: str
    old_name: str
    new_name: str


class DiffRenderer(Protocol):
    def render(self, old: bytes, new: bytes) -> RenderedDiff: ...


class DifflibRenderer:
    """In-process unified diff."""

    def render(self, old: bytes, new: bytes) -> RenderedDiff:
        old_name = f"old-{uuid.uuid4().hex}"
        new_name = f"new-{uuid.uuid4().hex}"
        lines = difflib.unified_diff(
            old.decode("utf-8", errors="replace").splitlines(keepends=True),
            new.decode("utf-8", errors="replace").splitlines(keepends=True),
            fromfile=old_name,
            tofile=new_name,
        )
        return RenderedDiff("".join(lines), old_name, new_name)


class GitDiffRenderer:
    """Unified diff produced by ``git diff --no-index`` on temporary files."""

    def __init__(self, repository: GitRepository):
        self.repository = repository

    def render(self, old: bytes, new: bytes) -> RenderedDiff:
        with tempfile.TemporaryDirectory(prefix="pressroom-diff-") as tmp:
            old_path = Path(tmp) / "old"
            new_path = Path(tmp) / "new"
            old_path.write_bytes(old)
            new_path.write_bytes(new)
            text = self.repository.diff_no_index(old_path, new_path)
        # git prints paths without the leading slash, behind a/ and b/
        return RenderedDiff(
            text,
            old_path.as_posix().lstrip("/"),
            new_path.as_posix().lstrip("/"),
        )


@dataclass(frozen=True)
class CanonicalForm:
    """Comparable form of a document.

    ``front_matter`` is canonical JSON, or None when the document could not
    be parsed; in that case ``error`` is set and ``body`` holds the whole
    normalized text.
    """

    front_matter: bytes | None
    body: str
    error: FrontMatterError | None = None


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n")


def canonicalize_for_comparison(
    raw: bytes, schema: CollectionSchema | None = None
) -> CanonicalForm:
    """Reduce a document to its comparable form."""
    trimmed = raw.strip()
    if not trimmed:
        return CanonicalForm(b"", "")

    try:
        front_matter, body, _ = parse(trimmed)
    except FrontMatterError as e:
        text = normalize_line_endings(trimmed.decode("utf-8", errors="replace"))
        return CanonicalForm(None, text.strip(), e)

    tree = canonicalize_mapping(front_matter)
    apply_defaults(tree, schema)
    normalize_list_fields(tree, schema)
    return CanonicalForm(
        canonical_json(prune_empty(tree)),
        normalize_line_endings(body).strip(),
    )


def normalize_content(raw: bytes, schema: CollectionSchema | None = None) -> bytes:
    """Re-serialize a document the way a save from the editor would.

    Defaults from ``schema`` are filled in and every date is spelled as a
    UTC instant, so a native YAML timestamp on disk and the same date sent
    back by the editor as a string normalize to the same bytes. Content
    that cannot be parsed or re-serialized is only trimmed.
    """
    if not raw:
        return raw
    try:
        front_matter, body, fmt = parse(raw)
        prepared = {stringify_key(k): v for k, v in front_matter.items()}
        apply_defaults(prepared, schema, canonical=False)
        normalized = serialize(fold_instants(prepared), body, fmt)
    except FrontMatterError:
        return raw.strip() + b"\n"
    return normalized.strip() + b"\n"


def _normalize_raw(raw: bytes) -> bytes:
    return raw.replace(b"\r\n", b"\n").strip()


def _relabel(rendered: RenderedDiff, old_label: str, new_label: str) -> str:
    text = rendered.text
    for name, label in (
        (rendered.old_name, old_label),
        (rendered.new_name, new_label),
    ):
        for prefix in ("a/", "b/", ""):
            text = text.replace(prefix + name, label)
    return text


class DiffEngine:
    """Compares working tree, last commit and editor content."""

    def __init__(
        self,
        blobs: BlobSource,
        schemas: SchemaSource | None = None,
        renderer: DiffRenderer | None = None,
    ):
        self.blobs = blobs
        self.schemas = schemas
        self.renderer = renderer or DifflibRenderer()

    def resolve_schema(self, path: str) -> CollectionSchema | None:
        if self.schemas is None:
            return None
        return self.schemas.resolve(path)

    def is_semantically_dirty(self, path: str) -> bool:
        """Whether ``path`` differs from its last commit, ignoring formatting.

        Files that cannot be parsed on either side are compared as raw
        text, which may report formatting-only changes as dirty.
        """
        committed = self.blobs.read_committed(path) or b""
        current = self.blobs.read_working_tree(path) or b""
        schema = self.resolve_schema(path)

        head = canonicalize_for_comparison(committed, schema)
        disk = canonicalize_for_comparison(current, schema)

        if head.error is not None or disk.error is not None:
            logger.debug(
                "Falling back to raw comparison for %s: %s",
                path,
                head.error or disk.error,
            )
            return _normalize_raw(committed) != _normalize_raw(current)

        return head.front_matter != disk.front_matter or head.body != disk.body

    def compute_diff(self, saved: bytes, edited: bytes, path: str) -> DiffResult:
        """Diff the editor's content against disk, or else against HEAD.

        Args:
            saved: Current on-disk bytes (empty for a new file).
            edited: Bytes the editor would write.
            path: Repository-relative path, used for schema lookup and to
                  fetch the last committed version.
        """
        schema = self.resolve_schema(path)
        saved_normalized = normalize_content(saved, schema)
        edited_normalized = normalize_content(edited, schema)

        if saved_normalized != edited_normalized:
            rendered = self.renderer.render(saved_normalized, edited_normalized)
            return DiffResult(
                diff=_relabel(rendered, SAVED_LABEL, EDITOR_LABEL),
                type=DiffKind.UNSAVED,
            )

        committed = self.blobs.read_committed(path) or b""
        head_normalized = normalize_content(committed, schema)
        if head_normalized != edited_normalized:
            rendered = self.renderer.render(head_normalized, edited_normalized)
            return DiffResult(
                diff=_relabel(rendered, HEAD_LABEL, CURRENT_LABEL),
                type=DiffKind.GIT,
            )

        return DiffResult(diff="", type=DiffKind.NONE)
