"""Integration tests: real Ruby source through tree-sitter, the tree builder and the walker."""
import pytest

from rubymap.analyzer.file_analyzer import FileAnalyzer
from rubymap.analyzer.models import DefinitionKind, Relation
from rubymap.analyzer.parser import RubyParser, RubySyntaxError
from rubymap.analyzer.syntax import NodeKind
from rubymap.analyzer.tree_builder import LocalScope, TreeBuilder
from rubymap.analyzer.type_scope import constructor_type_inference


@pytest.fixture(scope='module')
def parser():
    return RubyParser()


def analyze(parser, source, **kwargs):
    analyzer = FileAnalyzer('app.rb', parser=parser, **kwargs)
    return analyzer, analyzer.parse_source(source.encode('utf-8'))


def pairs(result):
    """(namespace, target_method) of every relation."""
    return [(r.namespace, r.target_method) for r in result.relations]


class TestDefinitions:
    """Class and module declarations."""

    def test_nested_module_and_class(self, parser):
        source = (
            "module A\n"
            "  class B\n"
            "    def foo\n"
            "      C::D.bar\n"
            "    end\n"
            "  end\n"
            "end\n"
        )
        analyzer, result = analyze(parser, source)
        assert [(d.namespace, d.kind, d.line, d.lines) for d in result.definitions] == [
            (('A',), DefinitionKind.MODULE, 1, 7),
            (('A', 'B'), DefinitionKind.CLASS, 2, 5),
        ]
        assert result.relations == (
            Relation(('C', 'D'), ('A', 'B'), 'foo', 'bar', analyzer.file, 4),
        )

    def test_compound_class_name(self, parser):
        _, result = analyze(parser, "class Admin::User\nend\n")
        assert result.definitions[0].namespace == ('Admin', 'User')
        assert result.relations == ()

    def test_root_qualified_class_name(self, parser):
        _, result = analyze(parser, "module Outer\n  class ::Top\n  end\nend\n")
        assert result.definitions[1].namespace == ('Top',)

    def test_superclass(self, parser):
        _, result = analyze(parser, "class Admin < User\nend\n")
        assert pairs(result) == [(('User',), '')]
        assert result.relations[0].caller_namespace == ('Admin',)

    def test_definitions_record_absolute_file(self, parser):
        analyzer, result = analyze(parser, "class X\nend\n")
        assert result.definitions[0].file == analyzer.file
        assert analyzer.file.endswith('app.rb')


class TestReferences:
    """Constants, calls and receivers."""

    def test_root_qualified_call(self, parser):
        _, result = analyze(parser, "::Foo.bar\n")
        assert pairs(result) == [(('', 'Foo'), 'bar')]
        assert result.relations[0].caller_namespace == ()

    def test_parameter_is_a_local_variable(self, parser):
        source = (
            "class X\n"
            "  def run(item)\n"
            "    item.save\n"
            "    helper.save\n"
            "  end\n"
            "end\n"
        )
        _, result = analyze(parser, source)
        assert pairs(result) == [
            (('Untyped',), 'save'),
            (('Untyped',), 'save'),
            (('X',), 'helper'),
        ]

    def test_bare_method_call_is_implicit_self(self, parser):
        _, result = analyze(parser, "class X\n  def run\n    prepare(Config)\n  end\nend\n")
        assert pairs(result) == [(('X',), 'prepare'), (('Config',), 'prepare')]

    def test_raise_marks_its_argument(self, parser):
        source = (
            "class X\n"
            "  def check\n"
            "    raise ArgumentError, 'bad'\n"
            "  end\n"
            "end\n"
        )
        _, result = analyze(parser, source)
        assert len(result.relations) == 1
        relation = result.relations[0]
        assert relation.namespace == ('ArgumentError',)
        assert relation.def_name == 'raise'
        assert relation.target_method == ''

    def test_block_parameters_are_local_variables(self, parser):
        source = (
            "class X\n"
            "  def each_item\n"
            "    items.each do |item|\n"
            "      item.process\n"
            "    end\n"
            "  end\n"
            "end\n"
        )
        _, result = analyze(parser, source)
        self_calls = [r.target_method for r in result.relations if r.namespace == ('X',)]
        assert self_calls == ['items']
        assert (('Untyped',), 'process') in pairs(result)

    def test_assigned_local_is_a_variable(self, parser):
        source = (
            "class X\n"
            "  def run\n"
            "    repo = Store::Repo.new\n"
            "    repo.fetch\n"
            "  end\n"
            "end\n"
        )
        _, result = analyze(parser, source)
        assert pairs(result) == [(('Store', 'Repo'), 'new'), (('Untyped',), 'fetch')]

    def test_constructor_inference(self, parser):
        source = (
            "class X\n"
            "  def run\n"
            "    repo = Store::Repo.new\n"
            "    repo.fetch\n"
            "  end\n"
            "end\n"
        )
        _, result = analyze(parser, source, type_inference=constructor_type_inference)
        assert pairs(result) == [(('Store', 'Repo'), 'new'), (('Store', 'Repo'), 'fetch')]

    def test_constant_assignment_value_is_walked(self, parser):
        _, result = analyze(parser, "module M\n  LIMIT = Defaults::LIMIT\nend\n")
        assert pairs(result) == [(('Defaults', 'LIMIT'), '')]

    def test_comments_are_ignored(self, parser):
        _, result = analyze(parser, "# Foo::Bar.baz\nclass X # Y\nend\n")
        assert result.relations == ()


class TestSyntaxErrors:
    """Unparseable source."""

    def test_parse_source_raises(self, parser):
        with pytest.raises(RubySyntaxError) as excinfo:
            parser.parse_source(b"class Broken\n  def oops(\nend\n", 'broken.rb')
        assert excinfo.value.file_path == 'broken.rb'
        assert excinfo.value.line >= 1

    def test_syntax_error_is_a_value_error(self):
        assert issubclass(RubySyntaxError, ValueError)


class TestTreeBuilder:
    """Shape of the converted tree."""

    def test_program_root(self, parser):
        tree = parser.parse_source(b"class X\nend\n")
        root = TreeBuilder().build(tree)
        assert root.kind == NodeKind.OTHER
        assert root.tag == 'program'
        assert root.first.kind == NodeKind.CLASS

    def test_method_call_with_block_is_wrapped(self, parser):
        tree = parser.parse_source(b"list.map { |x| x }\n")
        root = TreeBuilder().build(tree)
        statement = root.first
        assert statement.tag == 'block'
        assert statement.first.kind == NodeKind.SEND
        assert statement.first.children[1] == 'map'

    def test_local_scope_lookup_reaches_parents(self):
        outer = LocalScope()
        outer.declare('a')
        inner = outer.child()
        inner.declare('b')
        assert 'a' in inner
        assert 'b' not in outer
