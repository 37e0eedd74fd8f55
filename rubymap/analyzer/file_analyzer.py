"""Analyse one Ruby file: admit, parse, convert, walk."""
import logging
from pathlib import Path
from typing import Optional, Tuple

from .models import Definition, Relation
from .parser import RubyParser, RubySyntaxError
from .tree_builder import TreeBuilder
from .type_scope import TypeInference, constructor_type_inference, no_type_inference
from .walker import EMPTY_RESULT, Walker, WalkResult

logger = logging.getLogger(__name__)


class FileAnalyzer:
    """Definitions and relations found in a single file.

    A file that is not admitted (symlink, not a regular file, too large) or
    cannot be read contributes nothing. So does a file that does not parse or
    nests too deeply to convert; both are logged as warnings and never
    propagate.
    """

    def __init__(self, file_path: str | Path, parser: Optional[RubyParser] = None,
                 type_inference: Optional[TypeInference] = None):
        """Initialize analyzer.

        Args:
            file_path: Ruby file to analyse (recorded as an absolute path)
            parser: Parser to reuse across files; a default one is created if omitted
            type_inference: Local assignment type hook passed to the walker
        """
        self.file = str(Path(file_path).absolute())
        self.parser = parser or RubyParser()
        self.type_inference = type_inference or no_type_inference
        self.result: WalkResult = EMPTY_RESULT
        self.skipped = False

    @classmethod
    def from_config(cls, file_path: str | Path, config, parser: Optional[RubyParser] = None) -> 'FileAnalyzer':
        """Build an analyzer honouring the size limit and type inference settings."""
        if parser is None:
            parser = RubyParser(file_size_limit=config.file_size_limit)
        inference = constructor_type_inference if config.infer_types else no_type_inference
        return cls(file_path, parser=parser, type_inference=inference)

    @property
    def definitions(self) -> Tuple[Definition, ...]:
        return self.result.definitions

    @property
    def relations(self) -> Tuple[Relation, ...]:
        return self.result.relations

    def parse(self) -> WalkResult:
        """Run the analysis and remember its result.

        Returns:
            WalkResult, empty if the file was skipped
        """
        try:
            tree = self.parser.parse_file(self.file)
        except RubySyntaxError as e:
            logger.warning("Syntax error in %s (line %d), skipping", e.file_path, e.line)
            self.result = EMPTY_RESULT
            self.skipped = True
            return self.result

        if tree is None:
            logger.debug("Skipping %s: not an admissible, readable file", self.file)
            self.result = EMPTY_RESULT
            self.skipped = True
            return self.result

        try:
            self.result = self.walk_tree(tree)
        except RecursionError:
            logger.warning("Nesting too deep in %s, skipping", self.file)
            self.result = EMPTY_RESULT
            self.skipped = True
            return self.result

        self.skipped = False
        return self.result

    def parse_source(self, source_code: bytes) -> WalkResult:
        """Analyse in-memory source as if it were this file's contents.

        Raises:
            RubySyntaxError: If the source does not parse
        """
        tree = self.parser.parse_source(source_code, self.file)
        self.result = self.walk_tree(tree)
        return self.result

    def walk_tree(self, tree) -> WalkResult:
        syntax_tree = TreeBuilder().build(tree)
        return Walker(self.file, type_inference=self.type_inference).walk(syntax_tree)
