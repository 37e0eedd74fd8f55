"""Records produced by the walker: class/module definitions and references."""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

# Ordered identifier segments. A leading "" marks a root-qualified path (::A::B).
NamespacePath = Tuple[str, ...]

ROOT_SENTINEL = ""


def is_absolute(path: NamespacePath) -> bool:
    """True if the path is root-qualified."""
    return len(path) > 0 and path[0] == ROOT_SENTINEL


def strip_sentinel(path: NamespacePath) -> NamespacePath:
    """Drop the leading root sentinel, if any."""
    if is_absolute(path):
        return path[1:]
    return path


def join_namespace(path: NamespacePath, separator: str = ".") -> str:
    """Render a path as text. The root sentinel shows as a leading separator."""
    return separator.join(path)


def is_ancestor_or_self(candidate: NamespacePath, path: NamespacePath) -> bool:
    """True if ``candidate`` is a non-empty prefix of ``path`` (or equal to it)."""
    if not candidate or len(candidate) > len(path):
        return False
    return path[:len(candidate)] == candidate


class DefinitionKind(Enum):
    """What kind of namespace a definition opens."""
    CLASS = "Class"
    MODULE = "Module"


@dataclass(frozen=True)
class InferredType:
    """Result of a local-variable type lookup: the class path a value has."""
    path: NamespacePath
    known: bool = True


UNKNOWN_TYPE = InferredType(path=("Untyped",), known=False)


@dataclass(frozen=True)
class Definition:
    """A class or module declaration site."""
    namespace: NamespacePath
    kind: DefinitionKind
    file: str
    line: int
    lines: int

    @property
    def sort_key(self) -> Tuple[NamespacePath, str]:
        return (self.namespace, self.kind.value)

    def to_dict(self) -> Dict:
        return {
            'namespace': list(self.namespace),
            'kind': self.kind.value,
            'file': self.file,
            'line': self.line,
            'lines': self.lines,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Definition':
        return cls(
            namespace=tuple(data['namespace']),
            kind=DefinitionKind(data['kind']),
            file=data['file'],
            line=data['line'],
            lines=data['lines'],
        )


@dataclass(frozen=True)
class Relation:
    """A constant mention or method call recorded inside some lexical scope.

    Attributes:
        namespace: Raw path as written (or the receiver's inferred type)
        caller_namespace: Namespace of the innermost enclosing definition
        def_name: Innermost enclosing method name, or a pseudo-call marker
        target_method: Method invoked on ``namespace`` ("" for a bare constant)
    """
    namespace: NamespacePath
    caller_namespace: NamespacePath
    def_name: str
    target_method: str
    file: str
    line: int

    @property
    def absolute(self) -> bool:
        return is_absolute(self.namespace) or not self.caller_namespace

    def to_dict(self) -> Dict:
        return {
            'namespace': list(self.namespace),
            'caller_namespace': list(self.caller_namespace),
            'def_name': self.def_name,
            'target_method': self.target_method,
            'file': self.file,
            'line': self.line,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Relation':
        return cls(
            namespace=tuple(data['namespace']),
            caller_namespace=tuple(data['caller_namespace']),
            def_name=data['def_name'],
            target_method=data['target_method'],
            file=data['file'],
            line=data['line'],
        )
