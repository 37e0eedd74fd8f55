"""JSON view of a dependency graph for the graph visualizer."""
import json
from typing import Dict

from ..analyzer.graph_builder import DependencyGraph
from ..analyzer.models import Definition, Relation, join_namespace


class JSONFormatter:
    """Render definitions and relations as one JSON document."""

    def __init__(self, graph: DependencyGraph, separator: str = ".", indent: int | None = None):
        self.graph = graph
        self.separator = separator
        self.indent = indent

    def as_dict(self) -> Dict:
        return {
            'definitions': [self.definition_as_json(d) for d in self.graph.definitions],
            'relations': [self.relation_as_json(r) for r in self.graph.relations],
        }

    def call(self) -> str:
        return json.dumps(self.as_dict(), indent=self.indent)

    def definition_as_json(self, definition: Definition) -> Dict:
        return {
            'type': definition.kind.value,
            'namespace': join_namespace(definition.namespace, self.separator),
            'circular': self.graph.is_circular(definition),
            'file': definition.file,
            'line': definition.line,
            'lines': definition.lines,
        }

    def relation_as_json(self, relation: Relation) -> Dict:
        return {
            'type': 'Relation',
            'namespace': join_namespace(relation.namespace, self.separator),
            'resolved_namespace': join_namespace(self.graph.resolve(relation), self.separator),
            'caller': join_namespace(relation.caller_namespace, self.separator),
            'def_name': relation.def_name,
            'target_method': relation.target_method,
            'file': relation.file,
            'circular': self.graph.is_circular(relation),
            'line': relation.line,
        }
