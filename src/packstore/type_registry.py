from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .ids import FULLNAME_KEY, TYPE_KEY, TypeId, highest_decimal, next_decimal, parse_type_id
from .naming import TypeResolver, qualified_name, resolve_qualified_name
from .utils import Pairs, iter_pairs

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Bidirectional map between classes and short type ids.

    Three tables are consulted:
    - built-in: pre-seeded ids that are stable across versions and never
      written to a document's ``types`` table
    - assigned: ids minted on first use (``"1"``, ``"2"``, ...) or merged from
      a loaded document
    - renames: superseded id -> current id, followed for a single hop
    """

    def __init__(
        self,
        builtin_types: Pairs[type, TypeId] | None = None,
        types: Pairs[type, TypeId] | None = None,
        renames: Pairs[TypeId, TypeId] | None = None,
        resolver: Optional[TypeResolver] = None,
    ) -> None:
        self._builtin: Dict[type, TypeId] = {}
        self._builtin_reverse: Dict[TypeId, type] = {}
        for cls, type_id in iter_pairs(builtin_types):
            self._builtin[cls] = type_id
            self._builtin_reverse[type_id] = cls

        self._renames: Dict[TypeId, TypeId] = dict(iter_pairs(renames))

        self._types: Dict[type, TypeId] = {}
        self._reverse: Dict[TypeId, type] = {}
        for cls, type_id in iter_pairs(types):
            self._fill(cls, type_id)

        self._resolver: TypeResolver = resolver or resolve_qualified_name
        self._counter = highest_decimal(self._reverse)

    # Lookup

    def register(self, cls: type) -> TypeId:
        """Return the id for ``cls``, minting a new one if it has never been seen."""
        type_id = self._builtin.get(cls)
        if type_id is not None:
            return type_id
        type_id = self._types.get(cls)
        if type_id is not None:
            return type_id

        type_id = self._next_id()
        self._types[cls] = type_id
        self._reverse[type_id] = cls
        logger.debug("Assigned type id %s to %s", type_id, qualified_name(cls))
        return type_id

    def resolve(self, type_id: TypeId) -> Optional[type]:
        cls = self._builtin_reverse.get(type_id) or self._reverse.get(type_id)
        if cls is not None:
            return cls
        renamed = self._renames.get(type_id)
        if renamed is None:
            return None
        return self._builtin_reverse.get(renamed) or self._reverse.get(renamed)

    def is_builtin(self, cls: type) -> bool:
        return cls in self._builtin

    def assigned(self) -> List[Tuple[type, TypeId]]:
        """Non-built-in classes with their ids, in registration order."""
        return list(self._types.items())

    def describe(self, cls: type, extended: bool = False) -> Dict[str, str]:
        """Build the TypeInfo for ``cls``, registering it if needed.

        Extended info adds the qualified class name for non-built-in types so a
        later load can re-resolve the class even when assigned ids differ.
        """
        info = {TYPE_KEY: self.register(cls)}
        if extended and not self.is_builtin(cls):
            info[FULLNAME_KEY] = qualified_name(cls)
        return info

    # Loading

    def load(self, types: Optional[Mapping[str, Any]]) -> int:
        """Merge a document's ``types`` table. Returns the number of entries merged.

        Entries whose id already resolves are skipped. Entries whose class name
        cannot be resolved are logged and dropped; objects of that type will not
        be constructible, the rest of the document stays loadable.
        """
        if not types:
            return 0

        merged = 0
        for raw_id, info in types.items():
            type_id = parse_type_id(raw_id)
            if type_id is None:
                logger.warning("Skipping type entry with invalid id %r", raw_id)
                continue
            if self.resolve(type_id) is not None:
                continue

            fullname = info.get(FULLNAME_KEY) if isinstance(info, Mapping) else None
            cls = self._resolver(fullname) if isinstance(fullname, str) else None
            if cls is None:
                logger.warning('Did not find type for type id %s: "%s".', type_id, fullname)
                continue

            # A class already claimed by another id keeps its forward mapping;
            # the incoming id still resolves to it.
            if cls not in self._types and cls not in self._builtin:
                self._types[cls] = type_id
            self._reverse[type_id] = cls
            self._counter = max(self._counter, highest_decimal([type_id]))
            merged += 1
        return merged

    # Internals

    def _fill(self, cls: type, type_id: TypeId) -> None:
        self._types[cls] = type_id
        self._reverse[type_id] = cls

    def _next_id(self) -> TypeId:
        self._counter, type_id = next_decimal(self._counter, _ClaimedIds(self))
        return type_id


class _ClaimedIds:
    """Type ids taken by built-in, assigned or renamed entries."""

    def __init__(self, registry: TypeRegistry) -> None:
        self._registry = registry

    def __contains__(self, type_id: object) -> bool:
        reg = self._registry
        return type_id in reg._builtin_reverse or type_id in reg._reverse or type_id in reg._renames
