"""Tests for nested-constant resolution of relations."""
import pytest

from rubymap.analyzer.models import Definition, DefinitionKind, Relation
from rubymap.analyzer.resolver import candidates, resolve
from rubymap.analyzer.store import DefinitionStore


def relation(namespace, caller):
    return Relation(tuple(namespace), tuple(caller), '', '', 'app.rb', 1)


def store_of(*namespaces):
    return DefinitionStore(
        Definition(tuple(ns), DefinitionKind.CLASS, 'lib.rb', 1, 1) for ns in namespaces
    )


class TestCandidates:
    """Candidate order for a relative reference."""

    def test_innermost_scope_first(self):
        result = candidates(relation(['D'], ['A', 'B', 'C']))
        assert result == [
            ('A', 'B', 'C', 'D'),
            ('A', 'B', 'D'),
            ('A', 'D'),
            ('D',),
        ]

    def test_compound_reference(self):
        result = candidates(relation(['X', 'Y'], ['A']))
        assert result == [('A', 'X', 'Y'), ('X', 'Y')]

    def test_root_qualified_reference_is_single_candidate(self):
        assert candidates(relation(['', 'Foo'], ['A', 'B'])) == [('Foo',)]

    def test_top_level_reference_is_single_candidate(self):
        assert candidates(relation(['Foo'], [])) == [('Foo',)]

    def test_top_level_and_root_qualified(self):
        """::Foo.bar written at the top level."""
        rel = relation(['', 'Foo'], [])
        assert rel.absolute
        assert candidates(rel) == [('Foo',)]

    def test_last_candidate_is_the_bare_path(self):
        result = candidates(relation(['Q'], ['M', 'N']))
        assert result[-1] == ('Q',)


class TestResolve:
    """Picking the most specific defined candidate."""

    def test_most_specific_match_wins(self):
        store = store_of(['A', 'D'], ['A', 'B', 'D'], ['D'])
        assert resolve(relation(['D'], ['A', 'B', 'C']), store) == ('A', 'B', 'D')

    def test_qualified_reference_under_caller(self):
        """C::D.bar inside A::B picks A::B::C::D when it exists."""
        store = store_of(['A', 'B', 'C', 'D'], ['C', 'D'])
        assert resolve(relation(['C', 'D'], ['A', 'B']), store) == ('A', 'B', 'C', 'D')

    def test_outer_match(self):
        store = store_of(['A', 'D'])
        assert resolve(relation(['D'], ['A', 'B', 'C']), store) == ('A', 'D')

    def test_global_match(self):
        store = store_of(['D'], ['A'])
        assert resolve(relation(['D'], ['A', 'B']), store) == ('D',)

    def test_unknown_falls_back_to_global_guess(self):
        assert resolve(relation(['Missing'], ['A', 'B']), store_of()) == ('Missing',)

    def test_root_qualified_skips_nested_definitions(self):
        store = store_of(['A', 'Foo'], ['Foo'])
        assert resolve(relation(['', 'Foo'], ['A']), store) == ('Foo',)

    def test_root_qualified_unknown_drops_sentinel(self):
        assert resolve(relation(['', 'Foo'], []), store_of()) == ('Foo',)

    def test_self_reference_resolves_to_caller(self):
        store = store_of(['A'], ['A', 'B'])
        assert resolve(relation(['A', 'B'], ['A', 'B']), store) == ('A', 'B')

    @pytest.mark.parametrize('caller, expected', [
        (['Outer', 'Inner'], ('Outer', 'Inner', 'Config')),
        (['Outer'], ('Outer', 'Config')),
        (['Other'], ('Config',)),
    ])
    def test_resolution_depends_on_caller(self, caller, expected):
        store = store_of(['Config'], ['Outer', 'Config'], ['Outer', 'Inner', 'Config'])
        assert resolve(relation(['Config'], caller), store) == expected

    def test_resolution_is_deterministic(self):
        store = store_of(['A', 'D'], ['D'])
        rel = relation(['D'], ['A', 'B'])
        assert resolve(rel, store) == resolve(rel, store)
