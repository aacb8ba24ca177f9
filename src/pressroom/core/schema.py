"""Collection schemas from the CMS admin config."""

import logging
import posixpath
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from pressroom.core.models import CMSConfig, CollectionSchema

logger = logging.getLogger(__name__)


class CollectionRegistry:
    """Resolves which collection a content file belongs to.

    The config file lives in the working tree and may change under us
    (pulls, manual edits), so it is re-read on every lookup.
    """

    def __init__(self, config_path: Path):
        self.config_path = config_path

    def load_raw(self) -> dict[str, Any]:
        """Return the config file as a plain mapping."""
        data = yaml.safe_load(self.config_path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}

    def load(self) -> CMSConfig:
        """Return the parsed config."""
        return CMSConfig.model_validate(self.load_raw())

    def resolve(self, path: str) -> CollectionSchema | None:
        """Find the collection whose folder contains ``path``.

        Args:
            path: Repository-relative path with forward slashes,
                  e.g. ``content/posts/hello.md``.

        Returns:
            The first matching collection, or None if nothing matches or
            the config cannot be read.
        """
        try:
            config = self.load()
        except FileNotFoundError:
            return None
        except (OSError, yaml.YAMLError, ValidationError) as e:
            logger.warning("Cannot read CMS config %s: %s", self.config_path, e)
            return None

        path = _clean(path)
        for collection in config.collections:
            folder = _clean(collection.folder)
            if not folder:
                continue
            if path == folder or path.startswith(folder + "/"):
                return collection
        return None


def _clean(path: str) -> str:
    path = posixpath.normpath(path.replace("\\", "/"))
    return "" if path == "." else path.lstrip("/")
