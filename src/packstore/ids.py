"""Object/type identifiers and reference tokens.

Identifiers are plain strings in the document. Older revisions of the format
wrote them with an ``o:`` / ``t:`` prefix; the parsers below strip it so such
documents resolve to the same ids.
"""
from __future__ import annotations

from typing import Any, Container, Dict, Iterable, Mapping, Optional, Tuple

ObjectId = str
TypeId = str

OBJECT_ID_PREFIX = "o:"
TYPE_ID_PREFIX = "t:"

REF_KEY = "ref"
TYPE_KEY = "type"
FULLNAME_KEY = "fullname"
ISA_KEY = "isa"


def _strip(value: Any, prefix: str) -> Optional[str]:
    if not isinstance(value, str) or not value:
        return None
    if value.startswith(prefix):
        value = value[len(prefix):]
    return value or None


def parse_object_id(value: Any) -> Optional[ObjectId]:
    return _strip(value, OBJECT_ID_PREFIX)


def parse_type_id(value: Any) -> Optional[TypeId]:
    return _strip(value, TYPE_ID_PREFIX)


def make_token(object_id: ObjectId, type_id: TypeId) -> Dict[str, str]:
    """Build a reference token ``{"ref": ..., "type": ...}``."""
    return {REF_KEY: object_id, TYPE_KEY: type_id}


def parse_token(token: Any) -> Optional[Tuple[ObjectId, Optional[TypeId]]]:
    """Split a reference token into ``(object_id, type_id)``.

    Returns None when ``token`` is not a mapping or has no usable ``ref``.
    The type id may be None; callers that need it treat that as malformed.
    """
    if not isinstance(token, Mapping):
        return None
    object_id = parse_object_id(token.get(REF_KEY))
    if object_id is None:
        return None
    return object_id, parse_type_id(token.get(TYPE_KEY))


def next_decimal(current: int, taken: Container[str]) -> Tuple[int, str]:
    """Advance a sequential counter to the next decimal id not in ``taken``."""
    while True:
        current += 1
        candidate = str(current)
        if candidate not in taken:
            return current, candidate


def highest_decimal(ids: Iterable[Any]) -> int:
    """Largest decimal id among ``ids`` (0 if there are none)."""
    best = 0
    for value in ids:
        if isinstance(value, str) and value.isdigit():
            best = max(best, int(value))
    return best
