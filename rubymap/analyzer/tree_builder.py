"""Convert tree-sitter Ruby trees into ``SyntaxNode`` trees.

Tree-sitter does not tell a local variable read apart from a call to a
method with no arguments: both are ``identifier`` nodes. The builder keeps
track of which locals are declared at each point (parameters, assignments,
rescue and for-loop variables) so that ``foo.bar`` becomes a call on a local
variable only when ``foo`` was actually declared, and a call on the
implicit-self method ``foo`` otherwise. ``def``, ``class`` and ``module``
bodies start with no locals; blocks and lambdas see their enclosing ones.
"""
from typing import List, Optional, Set

from tree_sitter import Node, Tree

from .syntax import NodeKind, SyntaxNode

PARAMETER_TYPES = {'method_parameters', 'block_parameters', 'lambda_parameters'}
BLOCK_TYPES = {'block', 'do_block', 'lambda'}
SKIPPED_TYPES = {'comment', 'heredoc_end'}
# Nodes whose identifiers are method names rather than expressions.
OPAQUE_TYPES = {'alias', 'undef'}


class LocalScope:
    """Local variable names visible at one point of the source."""

    def __init__(self, parent: Optional['LocalScope'] = None):
        self.parent = parent
        self.names: Set[str] = set()

    def declare(self, name: str) -> None:
        self.names.add(name)

    def child(self) -> 'LocalScope':
        return LocalScope(self)

    def __contains__(self, name: str) -> bool:
        scope = self
        while scope is not None:
            if name in scope.names:
                return True
            scope = scope.parent
        return False


def _text(node: Optional[Node]) -> str:
    if node is None:
        return ''
    return node.text.decode('utf-8', errors='ignore')


def _span(node: Node) -> dict:
    return {
        'start_line': node.start_point[0] + 1,
        'end_line': node.end_point[0] + 1,
    }


class TreeBuilder:
    """Build the walker's syntax tree from a tree-sitter Ruby tree."""

    def build(self, tree: Tree | Node) -> SyntaxNode:
        """Convert a parsed tree (or any node of one).

        Args:
            tree: tree-sitter Tree or Node

        Returns:
            Root SyntaxNode
        """
        root = tree.root_node if isinstance(tree, Tree) else tree
        return self._convert(root, LocalScope())

    def _convert(self, node: Optional[Node], scope: LocalScope) -> Optional[SyntaxNode]:
        if node is None:
            return None

        node_type = node.type
        if node_type == 'module':
            return self._convert_module(node, scope)
        if node_type == 'class':
            return self._convert_class(node, scope)
        if node_type == 'method':
            return self._convert_method(node, scope)
        if node_type == 'singleton_method':
            return self._convert_singleton_method(node, scope)
        if node_type == 'singleton_class':
            return self._convert_singleton_class(node, scope)
        if node_type == 'constant':
            return SyntaxNode(NodeKind.CONST, (None, _text(node)), **_span(node))
        if node_type == 'scope_resolution':
            return self._convert_scope_resolution(node, scope)
        if node_type == 'call':
            return self._convert_call(node, scope)
        if node_type == 'identifier':
            return self._convert_identifier(node, scope)
        if node_type == 'assignment':
            return self._convert_assignment(node, scope)
        if node_type == 'operator_assignment':
            return self._convert_operator_assignment(node, scope)
        if node_type in PARAMETER_TYPES:
            return self._convert_parameters(node, scope)
        if node_type in BLOCK_TYPES:
            return self._other(node, self._children(node, scope.child()))
        if node_type == 'exception_variable':
            self._declare_all(node, scope)
            return self._other(node)
        if node_type == 'for':
            self._declare_all(node.child_by_field_name('pattern'), scope)
            return self._other(node, self._children(node, scope, exclude=('pattern',)))
        if node_type in OPAQUE_TYPES:
            return self._other(node)
        return self._other(node, self._children(node, scope))

    def _other(self, node: Node, children: tuple = ()) -> SyntaxNode:
        return SyntaxNode(NodeKind.OTHER, tuple(children), tag=node.type, **_span(node))

    def _children(self, node: Node, scope: LocalScope, exclude=()) -> tuple:
        """Convert named children, skipping comments and the given fields."""
        excluded = [node.child_by_field_name(name) for name in exclude]
        excluded = [child for child in excluded if child is not None]
        converted = []
        for child in node.named_children:
            if child.type in SKIPPED_TYPES or any(child == other for other in excluded):
                continue
            converted.append(self._convert(child, scope))
        return tuple(converted)

    def _body(self, node: Node, scope: LocalScope, exclude=()) -> List[SyntaxNode]:
        """Statements of a module/class/method body, spliced flat."""
        body = node.child_by_field_name('body')
        if body is None:
            return list(self._children(node, scope, exclude=exclude))
        if body.type == 'body_statement':
            return list(self._children(body, scope))
        return [self._convert(body, scope)]

    def _declare_all(self, node: Optional[Node], scope: LocalScope) -> None:
        """Declare every identifier under ``node`` as a local."""
        if node is None:
            return
        if node.type == 'identifier':
            scope.declare(_text(node))
            return
        for child in node.named_children:
            self._declare_all(child, scope)

    def _convert_module(self, node: Node, scope: LocalScope) -> SyntaxNode:
        name = self._convert(node.child_by_field_name('name'), scope)
        body = self._body(node, LocalScope(), exclude=('name',))
        return SyntaxNode(NodeKind.MODULE, (name, *body), **_span(node))

    def _convert_class(self, node: Node, scope: LocalScope) -> SyntaxNode:
        name = self._convert(node.child_by_field_name('name'), scope)
        superclass = None
        superclass_node = node.child_by_field_name('superclass')
        if superclass_node is not None:
            expressions = [c for c in superclass_node.named_children if c.type not in SKIPPED_TYPES]
            if expressions:
                superclass = self._convert(expressions[0], scope)
        body = self._body(node, LocalScope(), exclude=('name', 'superclass'))
        return SyntaxNode(NodeKind.CLASS, (name, superclass, *body), **_span(node))

    def _convert_singleton_class(self, node: Node, scope: LocalScope) -> SyntaxNode:
        value = self._convert(node.child_by_field_name('value'), scope)
        body = self._body(node, LocalScope(), exclude=('value',))
        return self._other(node, (value, *body))

    def _convert_method(self, node: Node, scope: LocalScope) -> SyntaxNode:
        method_scope = LocalScope()
        name = _text(node.child_by_field_name('name'))
        parameters = self._convert(node.child_by_field_name('parameters'), method_scope)
        body = self._body(node, method_scope, exclude=('name', 'parameters'))
        return SyntaxNode(NodeKind.DEF, (name, parameters, *body), **_span(node))

    def _convert_singleton_method(self, node: Node, scope: LocalScope) -> SyntaxNode:
        receiver = self._convert(node.child_by_field_name('object'), scope)
        method_scope = LocalScope()
        name = _text(node.child_by_field_name('name'))
        parameters = self._convert(node.child_by_field_name('parameters'), method_scope)
        body = self._body(node, method_scope, exclude=('object', 'name', 'parameters'))
        return SyntaxNode(NodeKind.DEFS, (receiver, name, parameters, *body), **_span(node))

    def _convert_scope_resolution(self, node: Node, scope: LocalScope) -> SyntaxNode:
        name_node = node.child_by_field_name('name')
        if name_node is None or name_node.type != 'constant':
            return self._other(node, self._children(node, scope))

        scope_node = node.child_by_field_name('scope')
        if scope_node is None:
            qualifier = SyntaxNode(NodeKind.CBASE, **_span(node))
        else:
            qualifier = self._convert(scope_node, scope)
        return SyntaxNode(NodeKind.CONST, (qualifier, _text(name_node)), **_span(node))

    def _convert_identifier(self, node: Node, scope: LocalScope) -> SyntaxNode:
        name = _text(node)
        if name in scope:
            return SyntaxNode(NodeKind.LVAR, (name,), **_span(node))
        return SyntaxNode(NodeKind.SEND, (None, name), **_span(node))

    def _convert_call(self, node: Node, scope: LocalScope) -> SyntaxNode:
        method_node = node.child_by_field_name('method')
        if method_node is not None and method_node.type == 'super':
            return self._other_tagged(node, 'super', self._children(node, scope, exclude=('method',)))

        receiver = self._convert(node.child_by_field_name('receiver'), scope)
        # `foo.()` has no method node; Ruby sends #call.
        method = _text(method_node) if method_node is not None else 'call'

        arguments = ()
        arguments_node = node.child_by_field_name('arguments')
        if arguments_node is not None:
            arguments = self._children(arguments_node, scope)

        send = SyntaxNode(NodeKind.SEND, (receiver, method, *arguments), **_span(node))

        block_node = node.child_by_field_name('block')
        if block_node is None:
            return send
        block = self._convert(block_node, scope)
        return SyntaxNode(NodeKind.OTHER, (send, *block.children), tag='block', **_span(node))

    def _convert_assignment(self, node: Node, scope: LocalScope) -> SyntaxNode:
        left = node.child_by_field_name('left')
        right = node.child_by_field_name('right')

        if left is not None and left.type == 'identifier':
            name = _text(left)
            scope.declare(name)
            return SyntaxNode(NodeKind.LVASGN, (name, self._convert(right, scope)), **_span(node))

        if left is not None and left.type == 'constant':
            return self._other_tagged(node, 'casgn', (None, _text(left), self._convert(right, scope)))

        if left is not None and left.type == 'scope_resolution':
            name_node = left.child_by_field_name('name')
            scope_node = left.child_by_field_name('scope')
            qualifier = (
                self._convert(scope_node, scope) if scope_node is not None
                else SyntaxNode(NodeKind.CBASE, **_span(left))
            )
            return self._other_tagged(node, 'casgn', (qualifier, _text(name_node), self._convert(right, scope)))

        if left is not None and left.type == 'left_assignment_list':
            targets = self._convert_assignment_targets(left, scope)
            return self._other_tagged(node, 'masgn', (*targets, self._convert(right, scope)))

        return self._other(node, (self._convert(left, scope), self._convert(right, scope)))

    def _convert_assignment_targets(self, node: Node, scope: LocalScope) -> List[SyntaxNode]:
        targets = []
        for child in node.named_children:
            if child.type == 'identifier':
                name = _text(child)
                scope.declare(name)
                targets.append(SyntaxNode(NodeKind.LVASGN, (name, None), **_span(child)))
            elif child.type in ('rest_assignment', 'destructured_left_assignment'):
                targets.extend(self._convert_assignment_targets(child, scope))
            else:
                targets.append(self._convert(child, scope))
        return targets

    def _convert_operator_assignment(self, node: Node, scope: LocalScope) -> SyntaxNode:
        left = node.child_by_field_name('left')
        right = node.child_by_field_name('right')
        if left is not None and left.type == 'identifier':
            name = _text(left)
            scope.declare(name)
            target = SyntaxNode(NodeKind.LVASGN, (name, None), **_span(left))
        else:
            target = self._convert(left, scope)
        return self._other(node, (target, self._convert(right, scope)))

    def _convert_parameters(self, node: Node, scope: LocalScope) -> SyntaxNode:
        """Declare parameter names; keep default values as expressions."""
        defaults = []
        for child in node.named_children:
            if child.type == 'identifier':
                scope.declare(_text(child))
                continue
            if child.type == 'destructured_parameter':
                self._declare_all(child, scope)
                continue
            name = child.child_by_field_name('name')
            if name is not None:
                scope.declare(_text(name))
            value = child.child_by_field_name('value')
            if value is not None:
                defaults.append(self._convert(value, scope))
        return self._other(node, defaults)

    def _other_tagged(self, node: Node, tag: str, children: tuple) -> SyntaxNode:
        return SyntaxNode(NodeKind.OTHER, tuple(children), tag=tag, **_span(node))
