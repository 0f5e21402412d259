"""
Loader - Parallel recipe extraction for a whole corpus.

Every discovered document is parsed on a thread pool. A document that
fails to parse is dropped from the result and reported, it never stops
the rest of the batch.
"""

import asyncio
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List

from .config import get_config, RecipeConfig
from .errors import ProcessingResult, handle_error
from .extractor import extract_recipe
from .models import FileInfo, LoadResult, Recipe
from .scanner import Scanner


logger = logging.getLogger(__name__)


class CorpusLoader:
    """
    Fan-out/fan-in recipe loader.

    One task per document, joined before returning. Results keep discovery
    order regardless of which task finishes first.
    """

    def __init__(self, config: RecipeConfig | None = None):
        self.config = config or get_config()
        self._scanner = Scanner(self.config)
        self._executor: ThreadPoolExecutor | None = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.loader_concurrency,
                thread_name_prefix="loader"
            )
        return self._executor

    async def load(self, root: Path | None = None) -> LoadResult:
        """
        Discover and parse every recipe document under root.

        Raises:
            CorpusUnavailable: root cannot be enumerated
        """
        start_time = time.monotonic()
        scan_result = await self._scanner.scan(root)
        result = await self.load_files(scan_result.files)
        result.duration_seconds = time.monotonic() - start_time
        return result

    async def load_files(self, files: List[FileInfo]) -> LoadResult:
        """Parse the given documents in parallel."""
        if not files:
            return LoadResult(recipes=[], outcomes=[])

        loop = asyncio.get_running_loop()
        executor = self._get_executor()

        tasks = [
            loop.run_in_executor(executor, self._extract_sync, file_info.path)
            for file_info in files
        ]

        results = await asyncio.gather(*tasks, return_exceptions=True)

        recipes: List[Recipe] = []
        outcomes: List[ProcessingResult] = []
        for file_info, result in zip(files, results):
            if isinstance(result, Recipe):
                recipes.append(result)
                outcomes.append(ProcessingResult.ok(file_info.path))
            else:
                action = handle_error(result, file_info.path, "extract_recipe")
                outcomes.append(ProcessingResult.failed(file_info.path, result, action))

        failed = len(outcomes) - len(recipes)
        logger.info(f"Loaded {len(recipes)} recipes ({failed} unreadable)")

        return LoadResult(recipes=recipes, outcomes=outcomes)

    def _extract_sync(self, path: Path) -> Recipe:
        """Synchronous extraction (runs in thread pool)."""
        return extract_recipe(path, self.config.image_suffixes)

    def close(self):
        """Shutdown the thread pool."""
        if self._executor:
            self._executor.shutdown(wait=False)
            self._executor = None


async def load_recipes(
    root: Path | None = None,
    config: RecipeConfig | None = None,
) -> LoadResult:
    """
    Convenience function to load a recipe corpus.

    Usage:
        result = await load_recipes(Path("Recipes"))
        print(f"{len(result.recipes)} recipes, {len(result.failures)} failed")
    """
    loader = CorpusLoader(config)
    try:
        return await loader.load(root)
    finally:
        loader.close()
