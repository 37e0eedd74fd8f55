"""Configuration management for rubymap.

Loads environment variables and provides centralized config access.
"""
import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Version - Managed by tools/sync_version.py (DO NOT EDIT MANUALLY)
__version__ = "1.0.0"

CYCLE_POLICIES = ('scc', 'ancestry', 'combined')


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self, env_path: Path | None = None):
        """Initialize config by loading .env file.

        Args:
            env_path: .env file to load (defaults to the project root's)

        Raises:
            ValueError: If any configured value is invalid
        """
        if env_path is None:
            env_path = Path(__file__).parent.parent / ".env"
        load_dotenv(env_path)

        self._validate()

    def _validate(self):
        """Validate configured values up front.

        Raises:
            ValueError: On a non-positive size limit, an unknown cycle policy
                or an unknown log level
        """
        if self.file_size_limit <= 0:
            raise ValueError(
                f"RUBYMAP_FILE_SIZE_LIMIT must be positive, got {self.file_size_limit}"
            )
        if self.cycle_policy not in CYCLE_POLICIES:
            raise ValueError(
                f"RUBYMAP_CYCLE_POLICY must be one of {', '.join(CYCLE_POLICIES)}, "
                f"got {self.cycle_policy!r}"
            )
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"RUBYMAP_LOG_LEVEL is not a logging level: {self.log_level!r}")

    @property
    def file_size_limit(self) -> int:
        """Largest file (bytes) admitted for analysis. Defaults to 2 MiB.

        Raises:
            ValueError: If the variable is not an integer
        """
        raw = os.getenv("RUBYMAP_FILE_SIZE_LIMIT", str(2 * 1024 * 1024))
        try:
            return int(raw)
        except ValueError:
            raise ValueError(f"RUBYMAP_FILE_SIZE_LIMIT must be an integer, got {raw!r}") from None

    @property
    def cycle_policy(self) -> str:
        """Name of the circular-reference policy (scc, ancestry, combined)."""
        return os.getenv("RUBYMAP_CYCLE_POLICY", "scc").strip().lower()

    @property
    def infer_types(self) -> bool:
        """Whether `x = Foo.new` binds a type to local variable `x`."""
        return os.getenv("RUBYMAP_INFER_TYPES", "0").strip().lower() in ("1", "true", "yes", "on")

    @property
    def namespace_separator(self) -> str:
        """Separator used when rendering namespace paths as text."""
        return os.getenv("RUBYMAP_NAMESPACE_SEPARATOR", ".")

    @property
    def cache_path(self) -> str:
        """Cache directory name, created under the analysed project root."""
        return os.getenv("RUBYMAP_CACHE_PATH", ".rubymap_cache")

    @property
    def cache_fingerprint(self) -> str:
        """Version and settings that change analysis results, for cache keys."""
        return f"{__version__}:infer_types={int(self.infer_types)}"

    @property
    def log_level(self) -> str:
        return os.getenv("RUBYMAP_LOG_LEVEL", "WARNING").strip().upper()


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _config
    _config = None
