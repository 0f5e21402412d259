"""
Configuration - Centralized settings for recipe loading and indexing.

Uses environment variables with sensible defaults. All paths are resolved
to absolute paths for reliability.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Set


CACHE_FILE_NAME = "item.idx"
DB_FILE_NAME = "search.db"


@dataclass
class RecipeConfig:
    """
    Configuration for the recipe indexer.

    index_path is a directory holding both the search database and the
    fingerprint cache. Setting it to None keeps the search index in memory
    and skips fingerprint persistence.
    """

    # --- Paths ---
    recipes_path: Path = field(default_factory=lambda: Path.cwd() / "Recipes")
    index_path: Optional[Path] = field(default_factory=lambda: Path.cwd() / "search_idx")

    # --- Concurrency Limits ---
    loader_concurrency: int = 8     # Parallel document extraction

    # --- Supported File Types ---
    document_suffixes: Set[str] = field(default_factory=lambda: {".docx"})
    image_suffixes: Set[str] = field(default_factory=lambda: {".jpg", ".jpeg"})

    # --- Search ---
    search_limit: int = 20

    def __post_init__(self):
        """Ensure all paths are absolute. Nothing is created on disk here."""
        self.recipes_path = Path(self.recipes_path).expanduser().resolve()
        if self.index_path is not None:
            self.index_path = Path(self.index_path).expanduser().resolve()

    @property
    def cache_path(self) -> Optional[Path]:
        """Fingerprint cache file, or None for memory-only indexes."""
        if self.index_path is None:
            return None
        return self.index_path / CACHE_FILE_NAME

    @property
    def db_path(self) -> Optional[Path]:
        """Search database file, or None for memory-only indexes."""
        if self.index_path is None:
            return None
        return self.index_path / DB_FILE_NAME

    @classmethod
    def from_env(cls) -> "RecipeConfig":
        """
        Create config from environment variables.

        Supported env vars:
            RECIPECARD_RECIPES: Path to the recipe directory
            RECIPECARD_INDEX: Path for the search index ("" for memory-only)
            RECIPECARD_CONCURRENCY: Parallel document extractions
        """
        overrides = {}

        if recipes := os.environ.get("RECIPECARD_RECIPES"):
            overrides["recipes_path"] = Path(recipes)

        index = os.environ.get("RECIPECARD_INDEX")
        if index is not None:
            overrides["index_path"] = Path(index) if index else None

        if concurrency := os.environ.get("RECIPECARD_CONCURRENCY"):
            overrides["loader_concurrency"] = int(concurrency)

        return cls(**overrides)


# Singleton default config
_default_config: RecipeConfig | None = None


def get_config() -> RecipeConfig:
    """Get the default configuration (singleton)."""
    global _default_config
    if _default_config is None:
        _default_config = RecipeConfig.from_env()
    return _default_config


def set_config(config: RecipeConfig) -> None:
    """Override the default configuration (for testing)."""
    global _default_config
    _default_config = config
