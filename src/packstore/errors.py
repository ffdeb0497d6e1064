from __future__ import annotations

from typing import Optional, Sequence

from jsonschema import exceptions as js_exceptions


class PackstoreError(Exception):
    """Base exception for packstore errors."""


class PackBudgetExceeded(PackstoreError):
    """Raised when packing a graph exceeds the configured object or time budget."""

    def __init__(self, message: str, packed: int) -> None:
        super().__init__(message)
        self.packed = packed


class ConfigError(PackstoreError):
    """Raised when a StoreConfig value is invalid."""


class DocumentError(PackstoreError):
    """Base exception for document encode/decode failures."""


class DocumentValidationError(DocumentError):
    """Raised when document text is not valid JSON or violates the document schema."""

    def __init__(self, message: str, errors: Optional[Sequence[js_exceptions.ValidationError]] = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    def to_human(self) -> str:
        parts = [str(self)]
        for e in self.errors:
            path = "/".join(str(p) for p in e.absolute_path) or "<root>"
            parts.append(f" - at {path}: {e.message}")
        return "\n".join(parts)


class DocumentVersionError(DocumentError):
    """Raised when a document's format version cannot be migrated to the supported one."""
