"""Project-wide dependency graph assembly.

Walks every Ruby file of a project, merges all definitions into one sorted
store and only then computes resolution-dependent facts (circular flags),
since a reference in one file may resolve to a class defined in another.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Set, Tuple

import networkx as nx

from ..config import get_config
from .cache import AnalysisCache
from .cycles import CircularFlags, CycleMarker, build_reference_graph
from .file_analyzer import FileAnalyzer
from .models import Definition, NamespacePath, Relation
from .parser import RubyParser
from .resolver import resolve
from .store import DefinitionStore
from .walker import WalkResult

logger = logging.getLogger(__name__)


@dataclass
class DependencyGraph:
    """Everything the formatter needs: definitions, relations and their flags."""
    store: DefinitionStore
    relations: Tuple[Relation, ...]
    flags: CircularFlags
    files: Tuple[str, ...] = ()
    skipped: Tuple[str, ...] = ()

    @property
    def definitions(self) -> Tuple[Definition, ...]:
        return tuple(self.store)

    def resolve(self, relation: Relation) -> NamespacePath:
        return resolve(relation, self.store)

    def is_circular(self, item) -> bool:
        return self.flags.is_circular(item)

    def circular_relations(self) -> List[Relation]:
        return [r for r in self.relations if self.flags.is_circular(r)]

    def to_networkx(self) -> nx.DiGraph:
        return build_reference_graph(self.relations, self.store)


class RubyGraphBuilder:
    """Build the dependency graph for a directory of Ruby files."""

    EXCLUDED_DIRS = {
        'vendor', 'bundle', '.bundle', 'node_modules',
        '.git', 'tmp', 'log', 'coverage',
    }

    def __init__(self, project_root: str | Path = ".", config=None, use_cache: bool = True):
        """Initialize graph builder.

        Args:
            project_root: Root directory (or single file) to analyze
            config: Config instance; the global one is used if omitted
            use_cache: Reuse per-file results from the SQLite cache
        """
        if config is None:
            config = get_config()
        self.config = config
        self.project_root = Path(project_root).absolute()
        self.parser = RubyParser(file_size_limit=config.file_size_limit)
        self.cache: Optional[AnalysisCache] = None
        if use_cache and self.project_root.is_dir():
            self.cache = AnalysisCache(
                self.project_root, config.cache_path, config.cache_fingerprint
            )

    def build_graph(self, file_patterns: Optional[List[str]] = None) -> DependencyGraph:
        """Build dependency graph for the entire project.

        Args:
            file_patterns: Glob patterns to include (defaults to Ruby sources)

        Returns:
            DependencyGraph with resolved circular flags
        """
        files = sorted(self._discover_files(file_patterns or ['**/*.rb']))

        results: List[WalkResult] = []
        skipped: List[str] = []
        try:
            for file_path in files:
                result, was_skipped = self._process_file(file_path)
                if was_skipped:
                    skipped.append(str(file_path))
                results.append(result)
        finally:
            if self.cache is not None:
                self.cache.close()
                self.cache = None

        return self.assemble(results, files=[str(f) for f in files], skipped=skipped)

    def assemble(self, results, files=(), skipped=()) -> DependencyGraph:
        """Merge per-file results and run the circular-reference pass once."""
        results = list(results)
        store = DefinitionStore(d for result in results for d in result.definitions)
        relations = tuple(r for result in results for r in result.relations)
        flags = CycleMarker(self.config.cycle_policy).finalize(relations, store)
        logger.debug(
            "Assembled %d definitions, %d relations, %d circular",
            len(store), len(relations), len(flags),
        )
        return DependencyGraph(
            store=store,
            relations=relations,
            flags=flags,
            files=tuple(files),
            skipped=tuple(skipped),
        )

    def _discover_files(self, patterns: List[str]) -> Set[Path]:
        """Discover all source files matching patterns.

        Args:
            patterns: Glob patterns to match

        Returns:
            Set of Path objects for all matching files
        """
        if self.project_root.is_file():
            return {self.project_root}

        excluded_dirs = self.EXCLUDED_DIRS | {self.config.cache_path}

        files = set()
        for pattern in patterns:
            files.update(self.project_root.glob(pattern))

        return {
            file_path for file_path in files
            if RubyParser.handles(file_path)
            and not any(excluded in file_path.relative_to(self.project_root).parts
                        for excluded in excluded_dirs)
        }

    def _process_file(self, file_path: Path) -> Tuple[WalkResult, bool]:
        """Analyse a single file, through the cache when enabled.

        Returns:
            (result, skipped) where skipped is True for files that were not
            admitted or did not parse. Skipped files are never cached.
        """
        if self.cache is not None:
            cached = self.cache.get_file_result(file_path)
            if cached is not None:
                logger.debug("Cache hit for %s", file_path)
                return cached, False

        analyzer = FileAnalyzer.from_config(file_path, self.config, parser=self.parser)
        result = analyzer.parse()

        if self.cache is not None and not analyzer.skipped:
            self.cache.set_file_result(file_path, result)
        return result, analyzer.skipped
