"""Circular-reference flags computed once over the assembled graph.

Definitions and relations stay immutable; whether one of them takes part in
a cycle is kept in a separate ``CircularFlags`` object produced by
``CycleMarker.finalize`` after every file has been walked.
"""
from typing import Dict, Iterable, Optional, Set, Union

import networkx as nx

from .models import Definition, NamespacePath, Relation, is_ancestor_or_self
from .resolver import resolve
from .store import DefinitionStore


class CircularFlags:
    """Which definitions and relations are part of a circular reference."""

    def __init__(self):
        self._definitions: Set[Definition] = set()
        self._relations: Set[Relation] = set()

    def mark(self, item: Union[Definition, Relation]) -> None:
        if isinstance(item, Definition):
            self._definitions.add(item)
        elif isinstance(item, Relation):
            self._relations.add(item)
        else:
            raise TypeError(f"Cannot mark {type(item).__name__} as circular")

    def is_circular(self, item: Union[Definition, Relation]) -> bool:
        if isinstance(item, Definition):
            return item in self._definitions
        if isinstance(item, Relation):
            return item in self._relations
        return False

    @property
    def definitions(self) -> Set[Definition]:
        return set(self._definitions)

    @property
    def relations(self) -> Set[Relation]:
        return set(self._relations)

    def __len__(self) -> int:
        return len(self._relations)


class CyclePolicy:
    """Decides whether a resolved edge ``caller -> target`` is circular."""

    name = ''

    def prepare(self, graph: nx.DiGraph) -> None:
        """Inspect the whole reference graph before edges are queried."""

    def is_circular(self, caller: NamespacePath, target: NamespacePath) -> bool:
        raise NotImplementedError


class StronglyConnectedPolicy(CyclePolicy):
    """Circular when the target references its way back to the caller."""

    name = 'scc'

    def __init__(self):
        self._component: Dict[NamespacePath, int] = {}

    def prepare(self, graph: nx.DiGraph) -> None:
        self._component = {}
        for index, component in enumerate(nx.strongly_connected_components(graph)):
            if len(component) > 1:
                for namespace in component:
                    self._component[namespace] = index

    def is_circular(self, caller: NamespacePath, target: NamespacePath) -> bool:
        component = self._component.get(caller)
        return component is not None and component == self._component.get(target)


class AncestryPolicy(CyclePolicy):
    """Circular when the target lexically encloses (or is) the caller."""

    name = 'ancestry'

    def is_circular(self, caller: NamespacePath, target: NamespacePath) -> bool:
        return is_ancestor_or_self(target, caller)


class CombinedPolicy(CyclePolicy):
    """Circular when any of the wrapped policies says so."""

    name = 'combined'

    def __init__(self, policies: Optional[Iterable[CyclePolicy]] = None):
        if policies is None:
            policies = (AncestryPolicy(), StronglyConnectedPolicy())
        self.policies = tuple(policies)

    def prepare(self, graph: nx.DiGraph) -> None:
        for policy in self.policies:
            policy.prepare(graph)

    def is_circular(self, caller: NamespacePath, target: NamespacePath) -> bool:
        return any(policy.is_circular(caller, target) for policy in self.policies)


POLICIES = {
    StronglyConnectedPolicy.name: StronglyConnectedPolicy,
    AncestryPolicy.name: AncestryPolicy,
    CombinedPolicy.name: CombinedPolicy,
}


def get_policy(name: str) -> CyclePolicy:
    """Fresh policy instance by name.

    Raises:
        ValueError: If no policy has that name
    """
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(
            f"Unknown cycle policy: {name!r} (expected one of {', '.join(sorted(POLICIES))})"
        ) from None


def build_reference_graph(relations: Iterable[Relation], store: DefinitionStore) -> nx.DiGraph:
    """Directed graph of resolved references: caller namespace -> target namespace.

    Edges carry a ``weight`` counting how many relations produced them.
    Top-level references (empty caller) and empty targets are left out.
    """
    graph = nx.DiGraph()
    for relation in relations:
        caller = tuple(relation.caller_namespace)
        target = resolve(relation, store)
        if not caller or not target:
            continue
        if graph.has_edge(caller, target):
            graph[caller][target]['weight'] += 1
        else:
            graph.add_edge(caller, target, weight=1)
    return graph


class CycleMarker:
    """Post-pass flagging relations (and their targets) that form cycles."""

    def __init__(self, policy: Union[CyclePolicy, str, None] = None):
        if policy is None:
            policy = StronglyConnectedPolicy()
        elif isinstance(policy, str):
            policy = get_policy(policy)
        self.policy = policy

    def finalize(self, relations: Iterable[Relation], store: DefinitionStore) -> CircularFlags:
        """Compute circular flags for the complete relation set.

        Must run after ``store`` holds every definition of the analysed
        files; each circular relation also marks every definition of the
        namespace it resolves to.
        """
        relations = list(relations)
        self.policy.prepare(build_reference_graph(relations, store))

        flags = CircularFlags()
        for relation in relations:
            caller = tuple(relation.caller_namespace)
            target = resolve(relation, store)
            if not caller or not target:
                continue
            if self.policy.is_circular(caller, target):
                flags.mark(relation)
                for definition in store.find_all(target):
                    flags.mark(definition)
        return flags
