"""Tests for namespace helpers, records and the local type scope."""
import pytest

from rubymap.analyzer.models import (
    UNKNOWN_TYPE,
    Definition,
    DefinitionKind,
    InferredType,
    Relation,
    is_absolute,
    is_ancestor_or_self,
    join_namespace,
    strip_sentinel,
)
from rubymap.analyzer.syntax import NodeKind, SyntaxNode
from rubymap.analyzer.type_scope import EMPTY_SCOPE, TypeScope
from rubymap.analyzer.walker import WalkContext


class TestNamespaceHelpers:
    """Path helpers."""

    def test_absolute(self):
        assert is_absolute(('', 'Foo'))
        assert not is_absolute(('Foo',))
        assert not is_absolute(())

    def test_strip_sentinel(self):
        assert strip_sentinel(('', 'A', 'B')) == ('A', 'B')
        assert strip_sentinel(('A',)) == ('A',)

    def test_join(self):
        assert join_namespace(('A', 'B')) == 'A.B'
        assert join_namespace(('A', 'B'), '::') == 'A::B'
        assert join_namespace(('', 'Foo')) == '.Foo'

    @pytest.mark.parametrize('candidate, path, expected', [
        (('A',), ('A', 'B'), True),
        (('A', 'B'), ('A', 'B'), True),
        (('A', 'B'), ('A',), False),
        (('B',), ('A', 'B'), False),
        ((), ('A',), False),
    ])
    def test_ancestor_or_self(self, candidate, path, expected):
        assert is_ancestor_or_self(candidate, path) is expected


class TestRecords:
    """Definition and Relation."""

    def test_relation_absolute_when_root_qualified(self):
        assert Relation(('', 'A'), ('X',), '', '', 'f.rb', 1).absolute

    def test_relation_absolute_at_top_level(self):
        assert Relation(('A',), (), '', '', 'f.rb', 1).absolute

    def test_relation_relative_inside_scope(self):
        assert not Relation(('A',), ('X',), '', '', 'f.rb', 1).absolute

    def test_records_are_hashable_values(self):
        first = Definition(('A',), DefinitionKind.CLASS, 'f.rb', 1, 2)
        second = Definition(('A',), DefinitionKind.CLASS, 'f.rb', 1, 2)
        assert first == second
        assert len({first, second}) == 1

    def test_dict_round_trip(self):
        relation = Relation(('', 'A'), ('X', 'Y'), 'run', 'call', 'f.rb', 9)
        assert Relation.from_dict(relation.to_dict()) == relation

    def test_unknown_type(self):
        assert UNKNOWN_TYPE.path == ('Untyped',)
        assert not UNKNOWN_TYPE.known
        assert InferredType(('Foo', 'Bar')).known


class TestTypeScope:
    """Immutable local variable types."""

    def test_unbound_name_is_unknown(self):
        assert EMPTY_SCOPE.lookup('x') is UNKNOWN_TYPE

    def test_bind_returns_new_scope(self):
        bound = EMPTY_SCOPE.bind('x', InferredType(('Foo',)))
        assert bound.lookup('x').path == ('Foo',)
        assert 'x' not in EMPTY_SCOPE
        assert len(bound) == 1

    def test_equality(self):
        foo = InferredType(('Foo',))
        assert TypeScope({'x': foo}) == EMPTY_SCOPE.bind('x', foo)

    def test_binding_unknown_type_forgets_the_name(self):
        bound = EMPTY_SCOPE.bind('x', InferredType(('Foo',)))
        rebound = bound.bind('x', UNKNOWN_TYPE)
        assert 'x' not in rebound
        assert rebound.lookup('x') is UNKNOWN_TYPE
        assert rebound == EMPTY_SCOPE

    def test_equal_scopes_hash_alike(self):
        foo = InferredType(('Foo',))
        assert hash(TypeScope({'x': foo})) == hash(EMPTY_SCOPE.bind('x', foo))
        assert len({EMPTY_SCOPE, TypeScope()}) == 1

    def test_scope_is_a_valid_context_default(self):
        assert WalkContext().types is EMPTY_SCOPE
        typed = WalkContext(namespace=('A',), types=EMPTY_SCOPE.bind('x', InferredType(('Foo',))))
        assert WalkContext(namespace=('A',)) == typed


class TestSyntaxNode:
    """Node invariants."""

    def test_line_order_is_checked(self):
        with pytest.raises(ValueError):
            SyntaxNode(NodeKind.OTHER, (), 5, 4)

    def test_child_nodes_skips_scalars(self):
        child = SyntaxNode(NodeKind.LVAR, ('x',))
        node = SyntaxNode(NodeKind.SEND, (None, 'call', child))
        assert list(node.child_nodes()) == [child]
