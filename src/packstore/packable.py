from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:  # pragma: no cover
    from .ids import ObjectId
    from .store import ObjectStore


class Packable(ABC):
    """Capability contract for objects that can live in an ObjectStore document.

    ``pack`` writes the object's serializable state into ``output``. Fields that
    hold other Packables must be written as ``store.make_reference(other)``.

    ``unpack`` is called on an empty instance that is already registered under
    ``object_id``; it reads its fields back with ``store.get_json(object_id, key)``
    and resolves nested references with ``store.unpack_reference`` or
    ``store.create_from_reference``. Because the instance is registered before
    ``unpack`` runs, a nested reference back to this object resolves to ``self``.
    """

    @abstractmethod
    def pack(self, store: "ObjectStore", output: Dict[str, Any]) -> None:
        """Write serializable state into ``output``."""

    @abstractmethod
    def unpack(self, store: "ObjectStore", object_id: "ObjectId") -> None:
        """Restore state from the fields packed under ``object_id``."""
