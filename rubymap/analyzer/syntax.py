"""Syntax tree consumed by the walker.

The tree is a closed set of node kinds. Every grammar construct the walker
does not care about is folded into ``NodeKind.OTHER`` with its concrete
grammar type kept in ``tag``.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Tuple, Union


class NodeKind(Enum):
    """Node kinds the walker dispatches on."""
    MODULE = "module"
    CLASS = "class"
    DEF = "def"
    DEFS = "defs"
    CONST = "const"
    CBASE = "cbase"
    SEND = "send"
    LVAR = "lvar"
    LVASGN = "lvasgn"
    OTHER = "other"


@dataclass(frozen=True)
class SyntaxNode:
    """Immutable tree node: kind tag, ordered children and a 1-based line span.

    Children are other nodes, terminal scalars (identifier names as ``str``)
    or ``None`` for an absent optional child. Layout per kind:

        MODULE  (name, *body)
        CLASS   (name, superclass | None, *body)
        DEF     (method_name, *params_and_body)
        DEFS    (receiver, method_name, *params_and_body)
        CONST   (scope | None, name)
        CBASE   ()
        SEND    (receiver | None, method_name, *args)
        LVAR    (name,)
        LVASGN  (name, value)
    """
    kind: NodeKind
    children: Tuple[Union["SyntaxNode", str, None], ...] = ()
    start_line: int = 1
    end_line: int = 1
    tag: str = field(default="", compare=False)

    def __post_init__(self):
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line {self.end_line} precedes start_line {self.start_line}"
            )

    @property
    def first(self):
        """First child, or None for a childless node."""
        return self.children[0] if self.children else None

    def child_nodes(self) -> Iterator["SyntaxNode"]:
        """Yield only the children that are nodes (skips scalars and gaps)."""
        for child in self.children:
            if isinstance(child, SyntaxNode):
                yield child


def is_node(value) -> bool:
    """True if ``value`` is a tree node rather than a scalar or a gap."""
    return isinstance(value, SyntaxNode)
