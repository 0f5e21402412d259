"""
Orchestrator - Main entry point for recipe indexing.

Pipeline:
- Load: scan the recipe directory and parse every document in parallel
- Fingerprint: read the previous pass's content hashes
- Sync: index new/changed recipes, remove vanished ones
- Persist: write the updated hashes back
"""

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .config import get_config, RecipeConfig, set_config
from .errors import CorpusUnavailable, ErrorAction, handle_error
from .fingerprint import load_fingerprints
from .loader import CorpusLoader
from .models import Recipe, SyncStats
from .search_index import SearchIndex, SqliteSearchIndex
from .synchronizer import IndexSynchronizer


logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Wires the loader, the search index and the synchronizer together.

    The search index can be injected (tests, other engines); by default a
    SqliteSearchIndex is opened at config.db_path.
    """

    def __init__(
        self,
        config: Optional[RecipeConfig] = None,
        index: Optional[SearchIndex] = None,
    ):
        self.config = config or get_config()
        if config:
            set_config(config)

        self._loader = CorpusLoader(self.config)
        self._index: SearchIndex = index or SqliteSearchIndex(self.config.db_path)
        self._synchronizer: Optional[IndexSynchronizer] = None

    @property
    def index(self) -> SearchIndex:
        return self._index

    @property
    def recipes(self) -> dict[str, Recipe]:
        """Accepted recipes from the last pass, keyed by title."""
        if self._synchronizer is None:
            return {}
        return self._synchronizer.recipes

    async def run_sync(self, root: Optional[Path] = None) -> SyncStats:
        """
        Bring the search index up to date with the recipe directory.

        Raises:
            CorpusUnavailable: the recipe directory cannot be read
        """
        start_time = time.monotonic()

        load_result = await self._loader.load(root)

        cache_path = self.config.cache_path
        if self._synchronizer is None:
            self._synchronizer = IndexSynchronizer(self._index, self._initial_fingerprints())

        stats = self._synchronizer.sync(load_result.recipes, cache_path)
        stats.documents_failed = len(load_result.failures)
        stats.duration_seconds = time.monotonic() - start_time
        return stats

    def _initial_fingerprints(self) -> dict[str, bytes]:
        """Cached fingerprints, unless they describe an index that is gone."""
        cache_path = self.config.cache_path
        if cache_path is None:
            return {}

        fingerprints = load_fingerprints(cache_path)
        if fingerprints and self._index.is_new:
            logger.warning("Search index was recreated, reindexing everything")
            return {}
        return fingerprints

    def search(self, query: str, limit: Optional[int] = None) -> List[Recipe]:
        """Recipes from the last pass matching query, best first."""
        keys = self._index.search(query, limit or self.config.search_limit)
        recipes = self.recipes
        return [recipes[key] for key in keys if key in recipes]

    def close(self):
        """Clean up resources."""
        self._loader.close()
        self._index.close()


async def run_sync(
    root: Optional[Path] = None,
    config: Optional[RecipeConfig] = None,
) -> SyncStats:
    """
    Convenience function to run one sync pass.

    Usage:
        stats = await run_sync()
        print(stats)
    """
    orchestrator = Orchestrator(config)
    try:
        return await orchestrator.run_sync(root)
    finally:
        orchestrator.close()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="recipecard", description="Recipe card indexer")
    parser.add_argument("--recipes", "-r", help="Path to recipes")
    parser.add_argument("--index", "-i", help="Path for search index")
    parser.add_argument("--memory", action="store_true", help="Keep the search index in memory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("sync", help="Update the search index")
    search = commands.add_parser("search", help="Update the index, then search it")
    search.add_argument("query", nargs="+", help="Search terms")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s"
    )

    config = RecipeConfig.from_env()
    if args.recipes:
        config.recipes_path = Path(args.recipes)
    if args.memory:
        config.index_path = None
    elif args.index:
        config.index_path = Path(args.index)
    config.__post_init__()

    logger.debug(
        f"Options received: recipes={config.recipes_path} "
        f"index={config.index_path} verbose={args.verbose}"
    )

    orchestrator = Orchestrator(config)
    try:
        stats = asyncio.run(orchestrator.run_sync())
    except CorpusUnavailable as e:
        action = handle_error(e, config.recipes_path, "main")
        orchestrator.close()
        if action == ErrorAction.ABORT:
            return 1
        raise

    try:
        if args.command == "search":
            for recipe in orchestrator.search(" ".join(args.query)):
                print(f"{recipe.title}: {recipe.docx_path}")
        else:
            print(f"\n{stats}")
    finally:
        orchestrator.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
