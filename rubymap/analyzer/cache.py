"""Analysis cache for repeat runs.

Stores each file's walk result (definitions and relations) in SQLite so an
unchanged file is not parsed again. Files are keyed by mtime + size plus a
fingerprint of the settings that change walk results, so toggling one of
those settings invalidates every entry.

Location: <cache dir>/analysis.db under the project root.
"""

import sqlite3
import json
from pathlib import Path
from typing import Dict, Optional, Tuple

from .models import Definition, Relation
from .walker import WalkResult


class AnalysisCache:
    """Per-file cache of definitions and relations."""

    def __init__(self, project_root: Path, cache_dir_name: str = '.rubymap_cache',
                 fingerprint: str = ''):
        """Initialize cache database.

        Args:
            project_root: Root directory of the project being analyzed
            cache_dir_name: Directory (under the root) holding the database
            fingerprint: Settings that affect results; entries stored under a
                different fingerprint are stale
        """
        self.project_root = Path(project_root)
        self.cache_dir = self.project_root / cache_dir_name
        self.cache_file = self.cache_dir / 'analysis.db'
        self.fingerprint = fingerprint

        self.cache_dir.mkdir(exist_ok=True)

        self.conn = sqlite3.connect(str(self.cache_file))
        self._init_database()

    def _init_database(self):
        """Create cache tables if they don't exist."""
        cursor = self.conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS file_metadata (
                file_path TEXT PRIMARY KEY,
                mtime REAL NOT NULL,
                size INTEGER NOT NULL,
                cache_key TEXT NOT NULL
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS file_results (
                file_path TEXT NOT NULL,
                definitions TEXT NOT NULL,
                relations TEXT NOT NULL,
                cache_key TEXT NOT NULL,
                PRIMARY KEY (file_path),
                FOREIGN KEY (file_path) REFERENCES file_metadata(file_path)
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_cache_key
            ON file_metadata(cache_key)
        ''')

        self.conn.commit()

    def _get_cache_key(self, file_path: Path) -> Optional[Tuple[float, int, str]]:
        """Generate cache key from file mtime, size and the fingerprint.

        Args:
            file_path: Path to file

        Returns:
            Tuple of (mtime, size, key) or None if file doesn't exist
        """
        try:
            stat = Path(file_path).stat()
        except OSError:
            return None
        return (stat.st_mtime, stat.st_size, f"{stat.st_mtime}:{stat.st_size}:{self.fingerprint}")

    def is_file_cached(self, file_path: Path) -> bool:
        """Check if file analysis is cached and still valid."""
        cache_key_data = self._get_cache_key(file_path)
        if not cache_key_data:
            return False
        _, _, cache_key = cache_key_data

        cursor = self.conn.cursor()
        cursor.execute('''
            SELECT cache_key FROM file_metadata
            WHERE file_path = ?
        ''', (str(file_path),))

        result = cursor.fetchone()
        if not result:
            return False

        return result[0] == cache_key

    def get_file_result(self, file_path: Path) -> Optional[WalkResult]:
        """Get the cached walk result for a file.

        Args:
            file_path: Path to file

        Returns:
            WalkResult, or None if not cached, stale or unreadable
        """
        if not self.is_file_cached(file_path):
            return None

        cursor = self.conn.cursor()
        cursor.execute('''
            SELECT definitions, relations FROM file_results
            WHERE file_path = ?
        ''', (str(file_path),))

        result = cursor.fetchone()
        if not result:
            return None

        try:
            definitions = tuple(Definition.from_dict(d) for d in json.loads(result[0]))
            relations = tuple(Relation.from_dict(r) for r in json.loads(result[1]))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            return None
        return WalkResult(definitions=definitions, relations=relations)

    def set_file_result(self, file_path: Path, result: WalkResult):
        """Cache a file's walk result.

        Args:
            file_path: Path to file
            result: Definitions and relations found in it
        """
        cache_key_data = self._get_cache_key(file_path)
        if not cache_key_data:
            return

        mtime, size, cache_key = cache_key_data

        cursor = self.conn.cursor()
        cursor.execute('''
            INSERT OR REPLACE INTO file_metadata (file_path, mtime, size, cache_key)
            VALUES (?, ?, ?, ?)
        ''', (str(file_path), mtime, size, cache_key))

        cursor.execute('''
            INSERT OR REPLACE INTO file_results (file_path, definitions, relations, cache_key)
            VALUES (?, ?, ?, ?)
        ''', (
            str(file_path),
            json.dumps([d.to_dict() for d in result.definitions]),
            json.dumps([r.to_dict() for r in result.relations]),
            cache_key,
        ))

        self.conn.commit()

    def invalidate_file(self, file_path: Path):
        """Invalidate cache for a specific file."""
        cursor = self.conn.cursor()
        cursor.execute('DELETE FROM file_results WHERE file_path = ?', (str(file_path),))
        cursor.execute('DELETE FROM file_metadata WHERE file_path = ?', (str(file_path),))
        self.conn.commit()

    def clear_cache(self):
        """Clear all cached data."""
        cursor = self.conn.cursor()
        cursor.execute('DELETE FROM file_results')
        cursor.execute('DELETE FROM file_metadata')
        self.conn.commit()

    def get_cache_stats(self) -> Dict[str, int]:
        """Get cache statistics."""
        cursor = self.conn.cursor()
        cursor.execute('SELECT COUNT(*) FROM file_metadata')
        total_files = cursor.fetchone()[0]

        definitions_cached = 0
        relations_cached = 0
        cursor.execute('SELECT definitions, relations FROM file_results')
        for definitions, relations in cursor.fetchall():
            try:
                definitions_cached += len(json.loads(definitions))
                relations_cached += len(json.loads(relations))
            except json.JSONDecodeError:
                continue

        return {
            'total_files': total_files,
            'definitions_cached': definitions_cached,
            'relations_cached': relations_cached,
        }

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
