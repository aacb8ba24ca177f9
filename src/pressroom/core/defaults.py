"""Collection-aware front matter defaults.

A file that omits an optional field should compare equal to one that spells
the field out with its default value. These helpers bring both shapes to a
common form using the collection schema from the CMS config.
"""

from typing import Any

from pressroom.core.canonical import CanonicalValue, canonicalize
from pressroom.core.models import CollectionSchema

BODY_FIELD = "body"
LIST_WIDGET = "list"


class _Absent:
    """Marker for a value pruned away entirely."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def apply_defaults(
    front_matter: dict[str, Any] | None,
    schema: CollectionSchema | None,
    *,
    canonical: bool = True,
) -> None:
    """Insert schema defaults for missing keys, in place.

    The ``body`` field describes the document body, not a front matter
    key, and is skipped. With ``canonical=False`` defaults are inserted as
    written in the config (used when the result is written back out).
    """
    if front_matter is None or schema is None:
        return
    for field in schema.fields:
        if field.name == BODY_FIELD or not field.has_default:
            continue
        if field.name not in front_matter:
            front_matter[field.name] = (
                canonicalize(field.default) if canonical else field.default
            )


def normalize_list_fields(
    front_matter: dict[str, Any] | None,
    schema: CollectionSchema | None,
) -> None:
    """Force list-widget fields to canonical lists, in place.

    Missing or null becomes ``[]``. A scalar where a list was expected is
    wrapped in a one-element list.
    """
    if front_matter is None or schema is None:
        return
    for field in schema.fields:
        if field.widget != LIST_WIDGET:
            continue
        value = front_matter.get(field.name)
        if value is None:
            front_matter[field.name] = []
        elif isinstance(value, (list, tuple)):
            front_matter[field.name] = [canonicalize(item) for item in value]
        else:
            front_matter[field.name] = [canonicalize(value)]


def prune_empty(value: CanonicalValue) -> CanonicalValue | _Absent:
    """Strip empty strings, empty lists and nulls from a tree.

    Pruned map entries are removed from their parent. A map is never pruned
    itself, even when all its entries are gone, so a front matter block
    cannot vanish. List elements are never removed; maps inside lists are
    pruned in place.
    """
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            pruned = prune_empty(item)
            if pruned is not ABSENT:
                out[key] = pruned
        return out
    if isinstance(value, list):
        if not value:
            return ABSENT
        return [
            prune_empty(item) if isinstance(item, dict) else item for item in value
        ]
    if value is None or value == "":
        return ABSENT
    return value
