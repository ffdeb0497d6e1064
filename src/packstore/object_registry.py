from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from .ids import ObjectId, highest_decimal, next_decimal
from .utils import Pairs, iter_pairs

logger = logging.getLogger(__name__)


class ObjectRegistry:
    """Bidirectional map between object instances and object ids.

    Objects are matched by identity, never by equality. The registry holds a
    strong reference to every registered object, so ``id(obj)`` stays unique
    for as long as the entry is current.
    """

    def __init__(self, objects: Pairs[ObjectId, Any] | None = None) -> None:
        self._objects: Dict[ObjectId, Any] = {}
        self._ids: Dict[int, ObjectId] = {}
        for object_id, obj in iter_pairs(objects):
            self.register_at(object_id, obj)
        self._counter = highest_decimal(self._objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __contains__(self, obj: Any) -> bool:
        return id(obj) in self._ids

    def get(self, object_id: ObjectId) -> Optional[Any]:
        return self._objects.get(object_id)

    def has_id(self, object_id: ObjectId) -> bool:
        return object_id in self._objects

    def id_of(self, obj: Any) -> Optional[ObjectId]:
        return self._ids.get(id(obj))

    def items(self) -> List[Tuple[ObjectId, Any]]:
        return list(self._objects.items())

    def register(self, obj: Any) -> ObjectId:
        """Return the id of ``obj``, minting the next sequential id if it is new."""
        object_id = self._ids.get(id(obj))
        if object_id is not None:
            return object_id
        self._counter, object_id = next_decimal(self._counter, self._objects)
        self._objects[object_id] = obj
        self._ids[id(obj)] = object_id
        return object_id

    def register_at(self, object_id: ObjectId, obj: Any) -> ObjectId:
        """Bind ``obj`` to ``object_id``, evicting whatever object held that id."""
        previous = self._objects.get(object_id)
        if previous is not None and previous is not obj:
            self._ids.pop(id(previous), None)
            logger.debug("Object id %s rebound from %s to %s", object_id, type(previous).__name__, type(obj).__name__)
        old_id = self._ids.get(id(obj))
        if old_id is not None and old_id != object_id:
            # An object lives under one id only
            del self._objects[old_id]
        self._objects[object_id] = obj
        self._ids[id(obj)] = object_id
        return object_id
