"""Per-scope local variable types.

A ``TypeScope`` is never mutated: binding a name returns a new scope, so each
lexical scope sees exactly the bindings made before it in source order.
"""
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from .models import InferredType, UNKNOWN_TYPE
from .path_builder import build_path
from .syntax import NodeKind, SyntaxNode, is_node


class TypeScope:
    """Immutable local-variable -> type table."""

    __slots__ = ('_types',)

    def __init__(self, types: Optional[Mapping[str, InferredType]] = None):
        self._types = MappingProxyType(dict(types or {}))

    def lookup(self, name: str) -> InferredType:
        """Type bound to ``name``, or ``UNKNOWN_TYPE`` when nothing is known."""
        return self._types.get(name, UNKNOWN_TYPE)

    def bind(self, name: str, inferred: InferredType) -> 'TypeScope':
        """Scope with ``name`` bound to ``inferred``.

        Binding an unknown type forgets the name, so a reassigned local
        falls back to ``UNKNOWN_TYPE``.
        """
        types = dict(self._types)
        if inferred.known:
            types[name] = inferred
        else:
            types.pop(name, None)
        return TypeScope(types)

    def __contains__(self, name: str) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __eq__(self, other) -> bool:
        if not isinstance(other, TypeScope):
            return NotImplemented
        return dict(self._types) == dict(other._types)

    def __hash__(self) -> int:
        return hash(frozenset(self._types.items()))

    def __repr__(self) -> str:
        return f"TypeScope({dict(self._types)!r})"


EMPTY_SCOPE = TypeScope()

# (local assignment node, walk context) -> type of the assigned value, or None
TypeInference = Callable[[SyntaxNode, object], Optional[InferredType]]


def no_type_inference(node: SyntaxNode, context) -> Optional[InferredType]:
    """Default inference: local assignments never record a type."""
    return None


def constructor_type_inference(node: SyntaxNode, context) -> Optional[InferredType]:
    """Infer ``x = Foo::Bar.new(...)`` as type ``Foo::Bar``.

    The type keeps the constant path as written, root sentinel included, so
    it resolves like the constant itself. Anything other than a ``.new``
    call on a constant yields no type.
    """
    if node.kind != NodeKind.LVASGN or len(node.children) < 2:
        return None

    value = node.children[1]
    if not is_node(value) or value.kind != NodeKind.SEND:
        return None

    if len(value.children) < 2:
        return None
    receiver, method = value.children[0], value.children[1]
    if method != 'new' or not is_node(receiver) or receiver.kind != NodeKind.CONST:
        return None

    path = build_path(receiver)
    if not path:
        return None
    return InferredType(path=path)
