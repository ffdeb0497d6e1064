from __future__ import annotations

from typing import Any, Mapping, Optional

from .config import StoreConfig
from .ids import ObjectId, TypeId
from .naming import AliasPairs, TypeResolver, resolve_qualified_name, with_aliases
from .object_registry import ObjectRegistry
from .packable import Packable
from .store import ObjectStore
from .type_registry import TypeRegistry
from .utils import Pairs


class ObjectStoreBuilder:
    """Fluent construction of an ObjectStore with pre-seeded state.

    Built-in types and renames are construction-time configuration; seeded
    types and objects let a session resume where an earlier one stopped.
    """

    def __init__(self) -> None:
        self._builtin_types: Pairs[type, TypeId] | None = None
        self._types: Pairs[type, TypeId] | None = None
        self._type_renames: Pairs[TypeId, TypeId] | None = None
        self._objects: Pairs[ObjectId, Packable] | None = None
        self._document: Optional[Mapping[str, Any]] = None
        self._config: Optional[StoreConfig] = None
        self._resolver: Optional[TypeResolver] = None
        self._aliases: Optional[AliasPairs] = None

    def with_builtin_types(self, builtin_types: Pairs[type, TypeId]) -> "ObjectStoreBuilder":
        self._builtin_types = builtin_types
        return self

    def with_types(self, types: Pairs[type, TypeId]) -> "ObjectStoreBuilder":
        self._types = types
        return self

    def with_type_renames(self, type_renames: Pairs[TypeId, TypeId]) -> "ObjectStoreBuilder":
        self._type_renames = type_renames
        return self

    def with_objects(self, objects: Pairs[ObjectId, Packable]) -> "ObjectStoreBuilder":
        self._objects = objects
        return self

    def with_json_document(self, document: Mapping[str, Any]) -> "ObjectStoreBuilder":
        self._document = document
        return self

    def with_config(self, config: StoreConfig) -> "ObjectStoreBuilder":
        self._config = config
        return self

    def with_type_resolver(self, resolver: TypeResolver) -> "ObjectStoreBuilder":
        self._resolver = resolver
        return self

    def with_type_name_aliases(self, aliases: AliasPairs) -> "ObjectStoreBuilder":
        """Map superseded qualified class names to their current names for loading."""
        self._aliases = aliases
        return self

    def build(self) -> ObjectStore:
        """Create the store. A supplied document has its ``types`` table merged."""
        resolver = self._resolver or resolve_qualified_name
        if self._aliases is not None:
            resolver = with_aliases(resolver, self._aliases)

        store = ObjectStore(
            self._document,
            types=TypeRegistry(self._builtin_types, self._types, self._type_renames, resolver),
            objects=ObjectRegistry(self._objects),
            config=self._config,
        )
        if self._document is not None:
            store.load_types(self._document.get("types"))
        return store
