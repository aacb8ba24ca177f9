"""Data models for Pressroom."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentFormat(str, Enum):
    """Front matter encoding of a content file."""

    YAML = "yaml"
    TOML = "toml"
    JSON = "json"
    UNKNOWN = "unknown"


class DiffKind(str, Enum):
    """Which comparison produced a diff."""

    UNSAVED = "unsaved"
    GIT = "git"
    NONE = "none"


class FieldDescriptor(BaseModel):
    """One field of a collection as declared in the CMS config."""

    model_config = ConfigDict(extra="allow")

    name: str
    widget: str = "string"
    default: Any = None

    @property
    def has_default(self) -> bool:
        return self.default is not None


class CollectionSchema(BaseModel):
    """A content type: where its files live and which fields they carry."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    folder: str = ""
    fields: list[FieldDescriptor] = Field(default_factory=list)


class CMSConfig(BaseModel):
    """Top level of the CMS admin config file."""

    model_config = ConfigDict(extra="allow")

    collections: list[CollectionSchema] = Field(default_factory=list)


class ArticleSummary(BaseModel):
    """Listing entry for one content file."""

    path: str
    title: str
    is_dirty: bool = False


class Article(BaseModel):
    """A content file as exchanged with the editor.

    Either ``frontmatter``/``body``/``format`` are set (structured edit) or
    only ``content`` (raw text for files without recognizable front matter).
    """

    path: str
    title: str = ""
    content: str | None = None
    frontmatter: dict[str, Any] | None = None
    body: str = ""
    format: DocumentFormat = DocumentFormat.UNKNOWN
    is_dirty: bool = False


class DiffResult(BaseModel):
    """Rendered diff and the comparison it came from."""

    diff: str = ""
    type: DiffKind = DiffKind.NONE
