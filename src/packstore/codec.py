from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from .config import FORMAT_VERSION, StoreConfig
from .errors import DocumentValidationError, DocumentVersionError
from .ids import ISA_KEY, REF_KEY, TYPE_KEY, parse_object_id, parse_type_id
from .schema import document_errors

logger = logging.getLogger(__name__)


def dumps(document: Mapping[str, Any], *, indent: Optional[int] = 2, sort_keys: bool = True) -> str:
    """Encode a packed document to JSON text."""
    return json.dumps(document, ensure_ascii=False, indent=indent, sort_keys=sort_keys)


def loads(text: str, *, validate: Optional[bool] = None, config: Optional[StoreConfig] = None) -> Dict[str, Any]:
    """Decode JSON text into a document, validating and migrating it to FORMAT_VERSION.

    ``validate`` defaults to ``config.validate_documents``.
    """
    cfg = config or StoreConfig()
    if validate is None:
        validate = cfg.validate_documents

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentValidationError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise DocumentValidationError("Document root must be a JSON object")

    if validate:
        errors = document_errors(data)
        if errors:
            raise DocumentValidationError("Document failed schema validation", errors)

    version = data.get("version", FORMAT_VERSION)
    if not isinstance(version, int):
        raise DocumentValidationError(f"Document version must be an integer, got {version!r}")
    return migrate_document(data, from_version=version, to_version=cfg.format_version)


def migrate_document(data: Dict[str, Any], from_version: int, to_version: int = FORMAT_VERSION) -> Dict[str, Any]:
    """Migrate a document between format versions, one step at a time."""
    if from_version == to_version:
        return data
    if from_version > to_version:
        raise DocumentVersionError(f"Document version {from_version} is newer than supported {to_version}.")

    for v in range(from_version, to_version):
        step = _MIGRATIONS.get(v)
        if step is None:
            raise DocumentVersionError(f"No migration from document version {v} to {v + 1}.")
        data = step(data)
        data["version"] = v + 1
        logger.info("Migrated document from version %d to %d", v, v + 1)
    return data


def _strip_token(value: Any) -> Any:
    """Recursively rewrite ``o:``/``t:`` prefixed ids inside field values."""
    if isinstance(value, list):
        return [_strip_token(v) for v in value]
    if not isinstance(value, dict):
        return value
    if REF_KEY in value and TYPE_KEY in value:
        out = dict(value)
        out[REF_KEY] = parse_object_id(value[REF_KEY]) or value[REF_KEY]
        out[TYPE_KEY] = parse_type_id(value[TYPE_KEY]) or value[TYPE_KEY]
        out.pop("typeName", None)
        return out
    return {k: _strip_token(v) for k, v in value.items()}


def _strip_type_info(info: Any) -> Any:
    if not isinstance(info, dict):
        return info
    out = dict(info)
    if TYPE_KEY in out:
        out[TYPE_KEY] = parse_type_id(out[TYPE_KEY]) or out[TYPE_KEY]
    out.pop("typeName", None)
    return out


def _migrate_v1_to_v2(data: Dict[str, Any]) -> Dict[str, Any]:
    # v1 wrote prefixed ids, debug type names and an always-present "types" table
    out = dict(data)
    out["root"] = _strip_token(data.get("root"))

    objects: Dict[str, Any] = {}
    for raw_id, fields in (data.get("objects") or {}).items():
        object_id = parse_object_id(raw_id) or raw_id
        if isinstance(fields, dict):
            fields = {k: (_strip_type_info(v) if k == ISA_KEY else _strip_token(v)) for k, v in fields.items()}
        objects[object_id] = fields
    out["objects"] = objects

    types = {(parse_type_id(k) or k): _strip_type_info(v) for k, v in (data.get("types") or {}).items()}
    if types:
        out["types"] = types
    else:
        out.pop("types", None)
    return out


_MIGRATIONS = {
    1: _migrate_v1_to_v2,
}
