from __future__ import annotations

import importlib
import logging
from typing import Callable, Iterable, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

TypeResolver = Callable[[str], Optional[type]]


def qualified_name(cls: type) -> str:
    """Return ``"<module>:<qualname>"`` for a class, the form written to ``fullname``."""
    return f"{cls.__module__}:{cls.__qualname__}"


def _walk(obj: object, dotted: str) -> object:
    for part in dotted.split("."):
        obj = getattr(obj, part)
    return obj


def resolve_qualified_name(name: str) -> Optional[type]:
    """Import the class named by ``name``.

    Accepts ``"pkg.module:Outer.Inner"`` as well as the plain dotted form
    ``"pkg.module.Outer"``, in which case the longest importable module prefix
    wins. Returns None for anything that does not name a class.
    """
    if not isinstance(name, str) or not name.strip():
        return None
    name = name.strip()

    if ":" in name:
        module_name, _, attr_path = name.partition(":")
        candidates = [(module_name, attr_path)]
    else:
        parts = name.split(".")
        candidates = [(".".join(parts[:i]), ".".join(parts[i:])) for i in range(len(parts) - 1, 0, -1)]

    for module_name, attr_path in candidates:
        if not module_name or not attr_path:
            continue
        try:
            module = importlib.import_module(module_name)
        except ImportError:
            continue
        except Exception:  # noqa: BLE001 module import side effects
            logger.debug("Importing %s raised while resolving %s", module_name, name, exc_info=True)
            continue
        try:
            obj = _walk(module, attr_path)
        except AttributeError:
            continue
        if isinstance(obj, type):
            return obj
    return None


AliasPairs = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def with_aliases(resolver: TypeResolver, aliases: AliasPairs) -> TypeResolver:
    """Wrap ``resolver`` so superseded qualified names map to their current name.

    The alias is tried first; the original name is used when there is no alias
    for it or the alias target does not resolve.
    """
    table = dict(aliases.items() if isinstance(aliases, Mapping) else aliases)

    def resolve(name: str) -> Optional[type]:
        target = table.get(name)
        if target is not None:
            cls = resolver(target)
            if cls is not None:
                return cls
            logger.debug("Alias %s -> %s did not resolve; trying original name", name, target)
        return resolver(name)

    return resolve
