"""
Synchronizer - Keep the search index in step with the recipe corpus.

Each recipe is fingerprinted; only new or changed recipes are written to
the index, and titles that disappeared from disk are removed. Running a
pass twice over an unchanged corpus touches the index zero times.
"""

import logging
import time
from pathlib import Path
from typing import Dict, Iterable, Optional

from .errors import IndexOperationFailed, PersistenceFailed, handle_error
from .fingerprint import compute_fingerprint, save_fingerprints
from .models import Recipe, SyncStats
from .search_index import SearchIndex


logger = logging.getLogger(__name__)


class IndexSynchronizer:
    """
    Reconciles recipes against a search index and a fingerprint cache.

    The synchronizer owns the fingerprint mapping it is given and mutates
    it in place; the index is only ever written through it.
    """

    def __init__(self, index: SearchIndex, fingerprints: Optional[Dict[str, bytes]] = None):
        self.index = index
        self.fingerprints: Dict[str, bytes] = fingerprints if fingerprints is not None else {}
        self.recipes: Dict[str, Recipe] = {}

    def sync(self, recipes: Iterable[Recipe], cache_path: Optional[Path] = None) -> SyncStats:
        """
        Run one synchronization pass.

        Args:
            recipes: Recipes in discovery order (first title wins)
            cache_path: Where to persist the fingerprints, None to skip

        Returns:
            Statistics about the pass
        """
        start_time = time.monotonic()
        stats = SyncStats()
        self.recipes = {}

        for recipe in recipes:
            stats.recipes_seen += 1
            if not self._accept(recipe):
                stats.recipes_skipped += 1
                continue
            self._sync_recipe(recipe, stats)

        self._remove_missing(stats)

        if cache_path is not None:
            stats.cache_saved = self._save(cache_path)
        else:
            logger.debug("No cache path configured, fingerprints not saved")

        stats.duration_seconds = time.monotonic() - start_time
        logger.info(f"Sync complete: {stats}")
        return stats

    def _accept(self, recipe: Recipe) -> bool:
        if not recipe.title:
            logger.error(f"Missing title: {recipe.docx_path}")
            return False

        existing = self.recipes.get(recipe.title)
        if existing is not None:
            logger.error(
                f"Duplicate recipe title {recipe.title!r}: "
                f"keeping {existing.docx_path}, skipping {recipe.docx_path}"
            )
            return False

        self.recipes[recipe.title] = recipe
        return True

    def _sync_recipe(self, recipe: Recipe, stats: SyncStats) -> None:
        title = recipe.title
        digest = compute_fingerprint(recipe)
        logger.debug(f"Hashed {title!r}: {digest.hex()}")

        cached = self.fingerprints.get(title)
        if cached == digest:
            stats.recipes_unchanged += 1
            return

        logger.info(f"Indexing {title!r} from {recipe.docx_path}")
        try:
            self.index.delete(title)
            self.index.index(title, recipe.to_document())
        except IndexOperationFailed as e:
            handle_error(e, recipe.docx_path, "sync")
            stats.errors += 1
            return

        self.fingerprints[title] = digest
        if cached is None:
            stats.recipes_indexed += 1
        else:
            stats.recipes_updated += 1

    def _remove_missing(self, stats: SyncStats) -> None:
        missing = [title for title in self.fingerprints if title not in self.recipes]
        for title in missing:
            logger.info(f"Removing missing recipe {title!r}")
            try:
                self.index.delete(title)
            except IndexOperationFailed as e:
                handle_error(e, None, "sync")
                stats.errors += 1
                continue
            del self.fingerprints[title]
            stats.recipes_removed += 1

    def _save(self, cache_path: Path) -> bool:
        try:
            save_fingerprints(self.fingerprints, cache_path)
        except PersistenceFailed as e:
            handle_error(e, cache_path, "sync")
            return False
        logger.info("Updated index data")
        return True
