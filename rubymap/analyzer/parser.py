"""Tree-sitter parser for Ruby source files."""
from pathlib import Path
from typing import Iterator, Optional
from tree_sitter import Language, Node, Parser, Tree
import tree_sitter_ruby as tsruby


class RubySyntaxError(ValueError):
    """Raised when a file does not parse cleanly."""

    def __init__(self, file_path: str, line: int):
        self.file_path = file_path
        self.line = line
        super().__init__(f"Syntax error in {file_path} near line {line}")


class RubyParser:
    """Ruby parser using tree-sitter v0.22+ API."""

    SUPPORTED_EXTENSIONS = {'.rb', '.rake', '.ru', '.gemspec'}

    FILE_SIZE_LIMIT = 2 * 1024 * 1024

    def __init__(self, file_size_limit: int = FILE_SIZE_LIMIT):
        """Initialize parser.

        Args:
            file_size_limit: Largest file (in bytes) ``parse_file`` accepts

        Raises:
            ValueError: If the size limit is not positive
        """
        if file_size_limit <= 0:
            raise ValueError(f"file_size_limit must be positive, got {file_size_limit}")
        self.file_size_limit = file_size_limit
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Factory method using tree-sitter v0.22+ API.

        Returns:
            Configured Parser instance
        """
        return Parser(Language(tsruby.language()))

    def is_admissible(self, file_path: str | Path) -> bool:
        """Check a file may be analysed: a regular, non-symlink file under the size limit.

        Args:
            file_path: Path to check

        Returns:
            True if the file should be parsed
        """
        file_path = Path(file_path)
        try:
            return (
                not file_path.is_symlink()
                and file_path.is_file()
                and file_path.stat().st_size <= self.file_size_limit
            )
        except OSError:
            return False

    def parse_source(self, source_code: bytes, file_path: str = '<source>') -> Tree:
        """Parse Ruby source bytes.

        Args:
            source_code: Source to parse
            file_path: Name reported in syntax errors

        Returns:
            Parsed Tree

        Raises:
            RubySyntaxError: If the tree contains error or missing nodes
        """
        tree = self.parser.parse(source_code)
        if tree.root_node.has_error:
            raise RubySyntaxError(file_path, first_error_line(tree.root_node))
        return tree

    def parse_file(self, file_path: str | Path) -> Optional[Tree]:
        """Parse file and return tree-sitter Tree.

        Args:
            file_path: Path to source file to parse

        Returns:
            Parsed Tree object, or None if the file is not admissible or unreadable

        Raises:
            RubySyntaxError: If the file does not parse cleanly
        """
        file_path = Path(file_path)

        if not self.is_admissible(file_path):
            return None

        try:
            with open(file_path, 'rb') as f:
                source_code = f.read()
        except OSError:
            return None

        return self.parse_source(source_code, str(file_path))

    @classmethod
    def handles(cls, file_path: str | Path) -> bool:
        """True if the file extension is one this parser reads."""
        return Path(file_path).suffix.lower() in cls.SUPPORTED_EXTENSIONS


def _traverse(node: Node) -> Iterator[Node]:
    """Iteratively traverse tree using a stack and yield all nodes."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def first_error_line(root: Node) -> int:
    """1-based line of the first ERROR or missing node under ``root``."""
    for node in _traverse(root):
        if node.type == 'ERROR' or node.is_missing:
            return node.start_point[0] + 1
    return root.start_point[0] + 1
