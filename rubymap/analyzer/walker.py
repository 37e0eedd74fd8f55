"""Context-sensitive tree walk that collects definitions and references.

The walk threads an immutable ``WalkContext`` (current namespace, enclosing
method name, current call target, local type scope) down the tree and
returns everything it found as a ``WalkResult``. It never raises on odd tree
shapes: anything it does not recognize contributes nothing by itself and is
searched for nested definitions and references.
"""
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from .models import (
    Definition,
    DefinitionKind,
    NamespacePath,
    Relation,
    UNKNOWN_TYPE,
    strip_sentinel,
)
from .path_builder import build_path
from .syntax import NodeKind, SyntaxNode, is_node
from .type_scope import EMPTY_SCOPE, TypeInference, TypeScope, no_type_inference


@dataclass(frozen=True)
class WalkContext:
    """Scope state active at one point of the walk."""
    namespace: NamespacePath = ()
    def_name: str = ''
    target_method: str = ''
    types: TypeScope = field(default=EMPTY_SCOPE, compare=False)


# A node still to be walked, with the context it is walked in.
Pending = Tuple[SyntaxNode, WalkContext]


@dataclass(frozen=True)
class WalkResult:
    """Definitions and relations in traversal order."""
    definitions: Tuple[Definition, ...] = ()
    relations: Tuple[Relation, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.definitions or self.relations)


EMPTY_RESULT = WalkResult()


class _Collected:
    """Records gathered during one walk, in traversal order."""

    __slots__ = ('definitions', 'relations')

    def __init__(self):
        self.definitions = []
        self.relations = []

    def result(self) -> WalkResult:
        return WalkResult(tuple(self.definitions), tuple(self.relations))


class Walker:
    """Walk one file's syntax tree.

    The walk is pre-order and uses an explicit stack, so deeply nested
    expressions do not hit the interpreter's recursion limit.

    Args:
        file: Path recorded on every definition and relation
        type_inference: Hook deciding the type a local assignment binds
    """

    # Implicit-self calls that annotate the scope of their arguments instead
    # of being references themselves.
    PSEUDO_CALLS = ('const', 'raise')

    def __init__(self, file: str, type_inference: Optional[TypeInference] = None):
        self.file = file
        self.type_inference = type_inference or no_type_inference

    def walk(self, node: Optional[SyntaxNode], context: Optional[WalkContext] = None) -> WalkResult:
        """Walk ``node`` from the top level (or from ``context``)."""
        found = _Collected()
        stack = [(node, context or WalkContext())]
        while stack:
            current, current_context = stack.pop()
            if not is_node(current):
                continue
            pending = self._visit(current, current_context, found)
            stack.extend(reversed(pending))
        return found.result()

    def _visit(self, node: SyntaxNode, context: WalkContext, found: _Collected) -> List[Pending]:
        """Record what ``node`` contributes and return its children to walk."""
        kind = node.kind
        if kind == NodeKind.MODULE:
            return self._visit_definition(node, context, DefinitionKind.MODULE, found)
        if kind == NodeKind.CLASS:
            return self._visit_definition(node, context, DefinitionKind.CLASS, found)
        if kind == NodeKind.DEF:
            return self._visit_method(node, context, node.children[0] if node.children else '')
        if kind == NodeKind.DEFS:
            name = node.children[1] if len(node.children) > 1 else ''
            return self._visit_method(node, context, name)
        if kind == NodeKind.CONST:
            found.relations.append(self._relation(build_path(node), node, context))
            return []
        if kind == NodeKind.SEND:
            return self._visit_send(node, context, found)
        # LVASGN: the assigned type is recorded by _sequence, the value itself
        # is walked like any other subtree.
        return self._sequence(node.child_nodes(), context)

    def _sequence(self, children: Iterable, context: WalkContext) -> List[Pending]:
        """Pair siblings with their contexts, carrying local type bindings forward."""
        pending = []
        for child in children:
            if not is_node(child):
                continue
            pending.append((child, context))
            if child.kind == NodeKind.LVASGN and isinstance(child.first, str):
                context = self._bind_local(child, context)
        return pending

    def _bind_local(self, assignment: SyntaxNode, context: WalkContext) -> WalkContext:
        name = assignment.first
        inferred = self.type_inference(assignment, context)
        if inferred is None:
            if name not in context.types:
                return context
            # Reassigned to something of unknown type.
            inferred = UNKNOWN_TYPE
        return replace(context, types=context.types.bind(name, inferred))

    def _visit_definition(self, node: SyntaxNode, context: WalkContext,
                          kind: DefinitionKind, found: _Collected) -> List[Pending]:
        namespace = strip_sentinel(build_path(node.first, context.namespace))
        found.definitions.append(Definition(
            namespace=namespace,
            kind=kind,
            file=self.file,
            line=node.start_line,
            lines=node.end_line - node.start_line + 1,
        ))
        # def_name carries into the body: references in a class opened inside
        # a method keep that method as their origin.
        body_context = replace(context, namespace=namespace, types=EMPTY_SCOPE)
        return self._sequence(node.children[1:], body_context)

    def _visit_method(self, node: SyntaxNode, context: WalkContext, name) -> List[Pending]:
        method_context = replace(
            context,
            def_name=name if isinstance(name, str) else '',
            target_method='',
            types=EMPTY_SCOPE,
        )
        return self._sequence(node.children, method_context)

    def _visit_send(self, node: SyntaxNode, context: WalkContext, found: _Collected) -> List[Pending]:
        receiver = node.children[0] if node.children else None
        method = node.children[1] if len(node.children) > 1 else None
        arguments = node.children[2:]

        # No method name: nothing to record, only nested references.
        if not isinstance(method, str) or not method:
            return self._sequence(node.children, context)

        if receiver is None:
            if method in self.PSEUDO_CALLS:
                pseudo_context = replace(context, def_name=method, target_method='')
                return self._sequence(arguments, pseudo_context)
            return self._call_relation(context.namespace, node, context, method, arguments, found)

        if is_node(receiver) and receiver.kind == NodeKind.LVAR:
            variable_type = context.types.lookup(receiver.first)
            return self._call_relation(variable_type.path, node, context, method,
                                       (receiver,) + arguments, found)

        if is_node(receiver) and receiver.kind == NodeKind.SEND:
            return self._call_relation(UNKNOWN_TYPE.path, node, context, method,
                                       (receiver,) + arguments, found)

        # Constant (or literal) receiver: the constant reports itself.
        return self._sequence(node.children, replace(context, target_method=method))

    def _call_relation(self, namespace: NamespacePath, node: SyntaxNode, context: WalkContext,
                       method: str, operands, found: _Collected) -> List[Pending]:
        call_context = replace(context, target_method=method)
        found.relations.append(self._relation(namespace, node, call_context))
        return self._sequence(operands, call_context)

    def _relation(self, namespace: NamespacePath, node: SyntaxNode, context: WalkContext) -> Relation:
        return Relation(
            namespace=tuple(namespace),
            caller_namespace=context.namespace,
            def_name=context.def_name,
            target_method=context.target_method,
            file=self.file,
            line=node.start_line,
        )
