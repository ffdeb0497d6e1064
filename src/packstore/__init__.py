"""Identity-preserving object-graph serializer.

This package provides:
- Packable, the contract domain objects implement to be stored
- ObjectStore, which packs a possibly cyclic object graph into one flat JSON
  document and unpacks it again, preserving object identity
- TypeRegistry/ObjectRegistry, the id tables behind the store, including
  built-in type ids and renamed type ids for older documents
- ObjectStoreBuilder for seeded or resumed sessions
- A JSON codec with schema validation and format version migration
"""
from importlib.metadata import PackageNotFoundError, version

from .builder import ObjectStoreBuilder
from .codec import dumps, loads, migrate_document
from .config import FORMAT_VERSION, StoreConfig
from .errors import (
    ConfigError,
    DocumentError,
    DocumentValidationError,
    DocumentVersionError,
    PackBudgetExceeded,
    PackstoreError,
)
from .ids import ObjectId, TypeId
from .logging_config import configure_logging
from .naming import qualified_name, resolve_qualified_name
from .object_registry import ObjectRegistry
from .packable import Packable
from .store import ObjectStore, default_factory
from .type_registry import TypeRegistry

try:
    __version__ = version("packstore")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "FORMAT_VERSION",
    "ObjectId",
    "TypeId",
    "Packable",
    "ObjectStore",
    "ObjectStoreBuilder",
    "ObjectRegistry",
    "TypeRegistry",
    "StoreConfig",
    "default_factory",
    "configure_logging",
    "qualified_name",
    "resolve_qualified_name",
    "dumps",
    "loads",
    "migrate_document",
    "PackstoreError",
    "PackBudgetExceeded",
    "ConfigError",
    "DocumentError",
    "DocumentValidationError",
    "DocumentVersionError",
]
