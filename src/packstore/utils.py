from __future__ import annotations

from typing import Iterable, Iterator, Mapping, Tuple, TypeVar, Union

K = TypeVar("K")
V = TypeVar("V")

Pairs = Union[Mapping[K, V], Iterable[Tuple[K, V]]]


def iter_pairs(pairs: Pairs | None) -> Iterator[Tuple[K, V]]:
    """Iterate ``(key, value)`` pairs from a mapping or an iterable of pairs."""
    if pairs is None:
        return iter(())
    if isinstance(pairs, Mapping):
        return iter(pairs.items())
    return iter(pairs)
