"""Sorted collection of definitions with exact-match lookup."""
from bisect import bisect_left
from typing import Iterable, Iterator, List, Optional, Tuple

from .models import Definition, NamespacePath


class DefinitionStore:
    """All definitions known to a resolution run, sorted by namespace path.

    The store sorts on construction and never changes afterwards, so the
    sorted order that lookups rely on always holds. Build a new store (see
    ``merge``/``merged``) to add definitions from more files.
    """

    def __init__(self, definitions: Iterable[Definition] = ()):
        self._definitions: Tuple[Definition, ...] = tuple(
            sorted(definitions, key=lambda d: d.sort_key)
        )
        self._keys: List[NamespacePath] = [d.namespace for d in self._definitions]

    @classmethod
    def merged(cls, stores: Iterable['DefinitionStore']) -> 'DefinitionStore':
        definitions = []
        for store in stores:
            definitions.extend(store)
        return cls(definitions)

    def merge(self, other: Iterable[Definition]) -> 'DefinitionStore':
        return DefinitionStore(list(self._definitions) + list(other))

    def find(self, namespace: NamespacePath) -> Optional[Definition]:
        """First definition (by kind order) whose path equals ``namespace``."""
        namespace = tuple(namespace)
        index = bisect_left(self._keys, namespace)
        if index < len(self._keys) and self._keys[index] == namespace:
            return self._definitions[index]
        return None

    def contains(self, namespace: NamespacePath) -> bool:
        return self.find(namespace) is not None

    def find_all(self, namespace: NamespacePath) -> Tuple[Definition, ...]:
        """Every definition of ``namespace`` (a class may be reopened many times)."""
        namespace = tuple(namespace)
        index = bisect_left(self._keys, namespace)
        found = []
        while index < len(self._keys) and self._keys[index] == namespace:
            found.append(self._definitions[index])
            index += 1
        return tuple(found)

    def __contains__(self, namespace) -> bool:
        return self.contains(namespace)

    def __iter__(self) -> Iterator[Definition]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        return f"DefinitionStore({len(self._definitions)} definitions)"
