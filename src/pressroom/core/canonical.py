"""Canonical front matter values.

Parsers hand back loosely typed trees: YAML may key maps by ints or bools,
numbers arrive as ``int`` or ``float``, and dates arrive either as native
``datetime``/``date`` objects or as ISO-8601 strings depending on which
encoder wrote the file. ``canonicalize`` folds all of that into a small
closed set of types so that two trees compare equal exactly when they mean
the same thing:

* ``None``, ``bool``, ``float``, ``str``
* ``list`` of canonical values
* ``dict`` with ``str`` keys and canonical values

Date/time instants are represented as UTC strings in RFC 3339 form
(``2024-01-02T03:04:05Z``), with a fractional part only when it is non-zero.

Known limitation: any string shaped like a timestamp or a bare
``YYYY-MM-DD`` date is treated as a date. A literal string that happens to
look like one is reformatted, so two different spellings of the same
instant compare equal even if the author meant them as text.
"""

import json
import re
from datetime import date, datetime, time, timezone
from typing import Any, Union

CanonicalValue = Union[
    None,
    bool,
    float,
    str,
    list["CanonicalValue"],
    dict[str, "CanonicalValue"],
]

INSTANT_PATTERN = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:?\d{2})?$"
)
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def format_instant(value: datetime | date) -> str:
    """Render a date or datetime as a UTC RFC 3339 string.

    Naive datetimes are taken to be UTC. Plain dates become midnight UTC.
    Sub-second precision is kept only when non-zero, with trailing zeros
    dropped.
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time(0, 0), tzinfo=timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)

    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_instant(text: str) -> datetime | None:
    """Parse a timestamp-looking string, or return None if it is not one."""
    if DATE_PATTERN.match(text):
        try:
            return datetime.combine(
                date.fromisoformat(text), time(0, 0), tzinfo=timezone.utc
            )
        except ValueError:
            return None

    match = INSTANT_PATTERN.match(text)
    if match is None:
        return None
    day, clock, fraction, offset = match.groups()
    # fromisoformat accepts at most microseconds
    fraction = (fraction or "")[:7]
    if offset is None or offset in ("Z", "z"):
        offset = "+00:00"
    elif ":" not in offset:
        offset = offset[:3] + ":" + offset[3:]
    try:
        return datetime.fromisoformat(f"{day}T{clock}{fraction}{offset}")
    except ValueError:
        return None


def canonicalize(value: Any) -> CanonicalValue:
    """Recursively fold a parsed front matter value into canonical form."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, (datetime, date)):
        return format_instant(value)
    if isinstance(value, str):
        instant = parse_instant(value)
        if instant is not None:
            return format_instant(instant)
        return value
    if isinstance(value, dict):
        return {stringify_key(k): canonicalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    return value


def fold_instants(value: Any) -> Any:
    """Rewrite native dates and timestamp-looking strings as instant strings.

    Unlike ``canonicalize`` every other value, numbers included, keeps its
    type, so the tree can still be written back in its own format.
    """
    if isinstance(value, (datetime, date)):
        return format_instant(value)
    if isinstance(value, str):
        instant = parse_instant(value)
        return format_instant(instant) if instant is not None else value
    if isinstance(value, dict):
        return {k: fold_instants(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [fold_instants(item) for item in value]
    return value


def canonicalize_mapping(mapping: dict | None) -> dict[str, CanonicalValue]:
    """Canonicalize a whole front matter block. ``None`` becomes ``{}``."""
    if mapping is None:
        return {}
    return {stringify_key(k): canonicalize(v) for k, v in mapping.items()}


def canonical_json(value: CanonicalValue) -> bytes:
    """Deterministic JSON encoding of a canonical tree."""
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")


def stringify_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)
