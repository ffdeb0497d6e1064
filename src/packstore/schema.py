from __future__ import annotations

import logging
from typing import Any, Dict, List

from jsonschema import Draft202012Validator, exceptions as js_exceptions

logger = logging.getLogger(__name__)

DOCUMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "packstore document",
    "type": "object",
    "required": ["version", "root", "objects"],
    "properties": {
        "version": {"type": "integer", "minimum": 1},
        "root": {"$ref": "#/$defs/reference"},
        "objects": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {"isa": {"$ref": "#/$defs/typeInfo"}},
            },
        },
        "types": {
            "type": "object",
            "additionalProperties": {
                "allOf": [
                    {"$ref": "#/$defs/typeInfo"},
                    {"required": ["fullname"]},
                ]
            },
        },
    },
    "$defs": {
        "reference": {
            "type": "object",
            "required": ["ref", "type"],
            "properties": {
                "ref": {"type": "string", "minLength": 1},
                "type": {"type": "string", "minLength": 1},
            },
        },
        "typeInfo": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "type": {"type": "string", "minLength": 1},
                "fullname": {"type": "string"},
            },
        },
    },
}

_validator = Draft202012Validator(DOCUMENT_SCHEMA)


def document_errors(document: Any) -> List[js_exceptions.ValidationError]:
    """Return schema violations for ``document``, ordered by location."""
    errors = sorted(_validator.iter_errors(document), key=lambda e: list(map(str, e.absolute_path)))
    for err in errors:
        logger.debug("Document schema error at %s: %s", list(err.absolute_path), err.message)
    return errors
