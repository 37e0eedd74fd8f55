"""Turn chains of constant nodes into namespace paths."""
from typing import Optional, Union

from .models import NamespacePath, ROOT_SENTINEL
from .syntax import NodeKind, SyntaxNode, is_node


def build_path(node: Optional[Union[SyntaxNode, str]], prefix: NamespacePath = ()) -> NamespacePath:
    """Build the namespace path named by a (possibly nested) constant node.

    Segments are appended outermost first, so ``A::B::C`` yields
    ``("A", "B", "C")`` after ``prefix``. A root qualifier (``::A``) drops the
    prefix and starts the path with the root sentinel instead. Anything that
    is not a constant terminates the chain and leaves ``prefix`` as is.

    Args:
        node: Constant node, root-qualifier node, or anything else
        prefix: Segments to extend (the current namespace for definitions)

    Returns:
        Tuple of identifier segments
    """
    names = []
    current = node
    while is_node(current) and current.kind == NodeKind.CONST and current.children:
        name = current.children[-1]
        if isinstance(name, str):
            names.append(name)
        current = current.children[0]

    if is_node(current) and current.kind == NodeKind.CBASE:
        head = (ROOT_SENTINEL,)
    else:
        head = tuple(prefix)
    return head + tuple(reversed(names))
