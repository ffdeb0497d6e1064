"""Pack/unpack engine.

An ObjectStore turns a graph of Packable objects into one flat document and
back. Every object gets an id before its contents are packed, and every object
is registered before its contents are unpacked; both are what make reference
cycles safe.

Document layout::

    {
      "version": 2,
      "root": {"ref": "1", "type": "<type id>"},
      "objects": {"1": {...fields..., "isa": {"type": "<type id>"}}, ...},
      "types": {"<type id>": {"type": "<type id>", "fullname": "mod:Class"}}
    }

``types`` lists non-built-in types only and is left out when there are none.
"""
from __future__ import annotations

import logging
from collections import deque
from time import monotonic
from typing import TYPE_CHECKING, Any, Callable, Deque, Dict, Mapping, Optional, Tuple, Type

from .config import StoreConfig
from .errors import PackBudgetExceeded
from .ids import ISA_KEY, OBJECT_ID_PREFIX, ObjectId, make_token, parse_token
from .object_registry import ObjectRegistry
from .packable import Packable
from .type_registry import TypeRegistry

if TYPE_CHECKING:  # pragma: no cover
    from .builder import ObjectStoreBuilder

logger = logging.getLogger(__name__)

Factory = Callable[[type], Optional[Packable]]


def default_factory(cls: type) -> Optional[Packable]:
    """Construct an empty instance with the class's no-argument constructor."""
    return cls()


class ObjectStore:
    """Single-use store for one pack or one unpack pass.

    Not thread-safe: the registries are mutated in place without locking.
    """

    def __init__(
        self,
        document: Optional[Mapping[str, Any]] = None,
        *,
        types: Optional[TypeRegistry] = None,
        objects: Optional[ObjectRegistry] = None,
        config: Optional[StoreConfig] = None,
    ) -> None:
        self.types = types if types is not None else TypeRegistry()
        self.objects = objects if objects is not None else ObjectRegistry()
        self.config = config or StoreConfig()
        self._document: Mapping[str, Any] = document if document is not None else {}
        # Set while pack() runs; make_reference feeds newly registered objects into it
        self._pending: Optional[Deque[Tuple[ObjectId, Packable]]] = None

    @classmethod
    def builder(cls) -> "ObjectStoreBuilder":
        from .builder import ObjectStoreBuilder

        return ObjectStoreBuilder()

    @classmethod
    def from_document(cls, document: Mapping[str, Any], config: Optional[StoreConfig] = None) -> "ObjectStore":
        """Create a store for unpacking ``document`` and merge its ``types`` table."""
        store = cls(document, config=config)
        store.load_types(document.get("types"))
        return store

    @property
    def document(self) -> Mapping[str, Any]:
        return self._document

    def load_types(self, types: Optional[Mapping[str, Any]]) -> int:
        return self.types.load(types)

    # Packing

    def make_reference(self, value: Packable) -> Dict[str, str]:
        """Register ``value`` (if new) and return its reference token."""
        is_new = value not in self.objects
        object_id = self.objects.register(value)
        if is_new and self._pending is not None:
            self._pending.append((object_id, value))
        return make_token(object_id, self.types.register(type(value)))

    def pack(self, root: Packable) -> Dict[str, Any]:
        """Pack the graph reachable from ``root`` into a new document.

        Exceptions raised by an object's ``pack`` propagate; the partial
        document is discarded. Raises PackBudgetExceeded when the configured
        object or time budget runs out.
        """
        pending: Deque[Tuple[ObjectId, Packable]] = deque(self.objects.items())
        self._pending = pending
        try:
            document: Dict[str, Any] = {
                "version": self.config.format_version,
                "root": self.make_reference(root),
            }
            document["objects"] = self._drain(pending)
        finally:
            self._pending = None

        types = {type_id: self.types.describe(cls, extended=True) for cls, type_id in self.types.assigned()}
        if types:
            document["types"] = types

        logger.debug("Packed %d objects and %d types", len(document["objects"]), len(types))
        return document

    def _drain(self, pending: Deque[Tuple[ObjectId, Packable]]) -> Dict[str, Any]:
        max_objects = self.config.max_objects
        deadline = None
        if self.config.time_budget is not None:
            deadline = monotonic() + self.config.time_budget

        packed: Dict[str, Any] = {}
        while pending:
            object_id, obj = pending.popleft()
            if object_id in packed:
                continue
            if max_objects is not None and len(packed) >= max_objects:
                raise PackBudgetExceeded(f"Object budget of {max_objects} exhausted while packing", len(packed))
            if deadline is not None and monotonic() > deadline:
                raise PackBudgetExceeded(
                    f"Time budget of {self.config.time_budget}s exhausted while packing", len(packed)
                )

            fields: Dict[str, Any] = {}
            obj.pack(self, fields)
            fields[ISA_KEY] = self.types.describe(type(obj))
            packed[object_id] = fields
        return packed

    # Unpacking

    def get_json(self, object_id: ObjectId, key: str, default: Any = None) -> Any:
        """Return field ``key`` packed for ``object_id``, or ``default`` if absent."""
        fields = self._fields(object_id)
        if fields is None:
            return default
        return fields.get(key, default)

    def has_json(self, object_id: ObjectId, key: str) -> bool:
        fields = self._fields(object_id)
        return fields is not None and key in fields

    def _fields(self, object_id: ObjectId) -> Optional[Mapping[str, Any]]:
        objects = self._document.get("objects")
        if not isinstance(objects, Mapping):
            return None
        fields = objects.get(object_id)
        if fields is None:
            # Unmigrated documents key their objects with the legacy prefix
            fields = objects.get(OBJECT_ID_PREFIX + object_id)
        return fields if isinstance(fields, Mapping) else None

    def unpack_reference(self, token: Any, instance: Packable, expected: Optional[Type[Any]] = None) -> Optional[Packable]:
        """Resolve ``token`` into a caller-supplied empty ``instance``.

        If the referenced id is new, ``instance`` is registered under it and
        then unpacked. If the id is already bound, the existing object is
        returned when it is an instance of ``expected`` (default: the class of
        ``instance``). Returns None for a malformed token or a conflicting
        binding.
        """
        parsed = parse_token(token)
        if parsed is None:
            return None
        object_id, _ = parsed

        if not self.objects.has_id(object_id):
            return self._place(object_id, instance)
        existing = self.objects.get(object_id)
        if isinstance(existing, expected or type(instance)):
            return existing
        logger.debug("Object %s is a %s, not the expected type", object_id, type(existing).__name__)
        return None

    def create_from_reference(
        self,
        token: Any,
        factory: Optional[Factory] = None,
        expected: Type[Any] = Packable,
    ) -> Optional[Packable]:
        """Resolve ``token``, constructing the object with ``factory`` if it is new.

        The token's type id is resolved through the type registry (built-in,
        assigned, then renamed ids). Returns None for a malformed token, an
        unknown type id, a factory that returns None, or an already-bound id
        whose object is not an instance of ``expected``.
        """
        parsed = parse_token(token)
        if parsed is None:
            return None
        object_id, type_id = parsed
        if type_id is None:
            return None

        cls = self.types.resolve(type_id)
        if cls is None:
            logger.debug("Unknown type id %s for object %s", type_id, object_id)
            return None

        if self.objects.has_id(object_id):
            existing = self.objects.get(object_id)
            return existing if isinstance(existing, expected) else None

        instance = (factory or default_factory)(cls)
        if instance is None:
            return None
        return self._place(object_id, instance)

    def unpack_root(self, factory: Optional[Factory] = None, expected: Type[Any] = Packable) -> Optional[Packable]:
        """Resolve the document's ``root`` reference."""
        return self.create_from_reference(self._document.get("root"), factory, expected)

    def _place(self, object_id: ObjectId, instance: Packable) -> Packable:
        # Registering before unpack lets back-references inside unpack find the placeholder
        self.objects.register_at(object_id, instance)
        instance.unpack(self, object_id)
        return instance
