"""Reading and writing content files with front matter.

Three conventions are recognized, checked in this order:

* YAML between ``---`` lines
* TOML between ``+++`` lines
* a bare JSON object making up the whole file (no body)

Serialization is not byte-preserving: keys are emitted in sorted order and
re-indented. The diff engine absorbs that noise when comparing versions.
"""

import json
import re
import tomllib
from datetime import date, datetime
from typing import Any

import tomli_w
import yaml

from pressroom.core.canonical import format_instant, stringify_key
from pressroom.core.models import DocumentFormat


class FrontMatterError(ValueError):
    """Base class for front matter codec failures."""


class UnrecognizedFormat(FrontMatterError):
    """Content does not start with any known front matter marker."""


class MalformedFrontMatter(FrontMatterError):
    """A front matter marker was found but its block did not parse."""


class UnsupportedFormat(FrontMatterError):
    """Serialization was requested for a format we cannot write."""


class SerializationError(FrontMatterError):
    """The encoder rejected the front matter values."""


YAML_PATTERN = re.compile(
    r"\A---\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)
TOML_PATTERN = re.compile(
    r"\A\+\+\+\r?\n(.*?)^\+\+\+[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)


def parse(content: bytes | str) -> tuple[dict[str, Any], str, DocumentFormat]:
    """Split a document into (front matter, body, format).

    Raises:
        UnrecognizedFormat: no marker matched.
        MalformedFrontMatter: a marker matched but the block is not a
            mapping in the matching syntax.
    """
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise UnrecognizedFormat(f"content is not valid UTF-8: {e}") from e
    else:
        text = content

    failure: Exception | None = None

    match = YAML_PATTERN.match(text)
    if match:
        try:
            fm = _load_yaml(match.group(1))
            return fm, text[match.end() :].strip(), DocumentFormat.YAML
        except (yaml.YAMLError, MalformedFrontMatter) as e:
            failure = e

    match = TOML_PATTERN.match(text)
    if match:
        try:
            fm = tomllib.loads(match.group(1))
            return fm, text[match.end() :].strip(), DocumentFormat.TOML
        except tomllib.TOMLDecodeError as e:
            failure = e

    if text.lstrip().startswith("{"):
        try:
            fm = json.loads(text)
        except json.JSONDecodeError as e:
            failure = e
        else:
            if isinstance(fm, dict):
                return fm, "", DocumentFormat.JSON
            failure = MalformedFrontMatter("JSON front matter is not an object")

    if failure is not None:
        raise MalformedFrontMatter(str(failure)) from failure
    raise UnrecognizedFormat("no front matter marker found")


def serialize(
    front_matter: dict[str, Any] | None,
    body: str,
    fmt: DocumentFormat | str,
) -> bytes:
    """Build a document from front matter, body and format.

    Raises:
        UnsupportedFormat: ``fmt`` is not yaml, toml or json.
        SerializationError: the values cannot be encoded in ``fmt``.
    """
    try:
        fmt = DocumentFormat(fmt)
    except ValueError:
        raise UnsupportedFormat(f"unsupported format: {fmt}") from None

    data = prepare_for_encoding(front_matter or {}, fmt)

    if fmt is DocumentFormat.YAML:
        try:
            block = yaml.safe_dump(
                data,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
                indent=2,
            )
        except yaml.YAMLError as e:
            raise SerializationError(str(e)) from e
        out = f"---\n{block}---\n"
    elif fmt is DocumentFormat.TOML:
        try:
            block = tomli_w.dumps(data)
        except (TypeError, ValueError) as e:
            raise SerializationError(str(e)) from e
        out = f"+++\n{block}+++\n"
    elif fmt is DocumentFormat.JSON:
        try:
            block = json.dumps(data, indent=2, ensure_ascii=False)
            return (block + "\n").encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(str(e)) from e
    else:
        raise UnsupportedFormat(f"unsupported format: {fmt.value}")

    if body:
        out += f"\n{body}\n"
    return out.encode("utf-8")


def prepare_for_encoding(value: Any, fmt: DocumentFormat) -> Any:
    """Fold a parsed tree into plain types the target encoder accepts.

    Map keys become strings and are sorted. Tuples become lists. Dates are
    kept native for YAML and TOML, and rendered as instants for JSON.
    TOML has no null, so ``None`` map entries are dropped there.
    """
    if isinstance(value, dict):
        out = {}
        for key in sorted(value, key=stringify_key):
            item = value[key]
            if item is None and fmt is DocumentFormat.TOML:
                continue
            out[stringify_key(key)] = prepare_for_encoding(item, fmt)
        return out
    if isinstance(value, (list, tuple)):
        return [prepare_for_encoding(item, fmt) for item in value]
    if isinstance(value, (datetime, date)) and fmt is DocumentFormat.JSON:
        return format_instant(value)
    return value


def extract_title(content: bytes | str) -> str | None:
    """Return the front matter ``title`` if it is a string."""
    try:
        fm, _, _ = parse(content)
    except FrontMatterError:
        return None
    title = fm.get("title")
    return title if isinstance(title, str) else None


def _load_yaml(block: str) -> dict[str, Any]:
    fm = yaml.safe_load(block)
    if fm is None:
        return {}
    if not isinstance(fm, dict):
        raise MalformedFrontMatter("YAML front matter is not a mapping")
    return fm
