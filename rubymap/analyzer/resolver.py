"""Match a relation to the definition nested constant lookup would pick."""
from typing import List

from .models import NamespacePath, Relation, strip_sentinel
from .store import DefinitionStore


def candidates(relation: Relation) -> List[NamespacePath]:
    """Paths ``relation`` could name, most specific first.

    A root-qualified reference, or one made at the top level, can only mean
    itself. Otherwise each enclosing scope of the caller is tried from the
    innermost outwards, ending with the bare path at the global scope:

        caller A::B::C, raw D -> A::B::C::D, A::B::D, A::D, D
    """
    raw = tuple(relation.namespace)
    caller = tuple(relation.caller_namespace)

    if relation.absolute:
        return [strip_sentinel(raw)]

    possibilities = [caller[:size] + raw for size in range(len(caller), 0, -1)]
    possibilities.append(raw)
    return possibilities


def resolve(relation: Relation, store: DefinitionStore) -> NamespacePath:
    """Most specific candidate present in ``store``, else the global guess.

    Never fails: when nothing matches, the last (global) candidate is
    returned as a best effort.
    """
    possibilities = candidates(relation)
    for possibility in possibilities:
        if store.contains(possibility):
            return possibility
    return possibilities[-1]
