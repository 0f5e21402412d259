"""
Scanner - Discover recipe documents under the recipe directory.

Walks the tree depth-first in lexical order, so discovery order is stable
between runs. That order decides which document wins when two of them
carry the same title.
"""

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import AsyncGenerator, List

from .config import get_config, RecipeConfig
from .errors import CorpusUnavailable, handle_error
from .models import FileInfo, ScanResult


logger = logging.getLogger(__name__)


class Scanner:
    """
    Recipe document scanner.

    Yields FileInfo objects for each document found, hidden folders
    included. Only Word lock files are skipped.
    """

    def __init__(self, config: RecipeConfig | None = None):
        self.config = config or get_config()
        self._skipped = 0

    async def scan(self, root: Path | None = None) -> ScanResult:
        """
        Scan a directory and return all recipe documents.

        Args:
            root: Directory to scan (default: config.recipes_path)

        Raises:
            CorpusUnavailable: root is missing or not a directory
        """
        start_time = time.monotonic()
        self._skipped = 0
        files: List[FileInfo] = []

        async for file_info in self.scan_iter(root):
            files.append(file_info)

        duration = time.monotonic() - start_time
        logger.info(f"Found {len(files)} recipe documents in {duration:.1f}s")

        return ScanResult(
            files=files,
            skipped_count=self._skipped,
            duration_seconds=duration,
        )

    async def scan_iter(self, root: Path | None = None) -> AsyncGenerator[FileInfo, None]:
        """
        Iterate over recipe documents in discovery order.

        This is a streaming interface that yields files as they're found.
        """
        root = Path(root or self.config.recipes_path).absolute()

        if not root.is_dir():
            raise CorpusUnavailable(f"Not a directory {root}")

        logger.info(f"Getting recipes from {root}")
        async for file_info in self._scan_directory(root):
            yield file_info

    async def _scan_directory(self, directory: Path) -> AsyncGenerator[FileInfo, None]:
        """Recursively scan a single directory, entries sorted by name."""
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            handle_error(e, directory, "scan_directory")
            return

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    async for file_info in self._scan_directory(Path(entry.path)):
                        yield file_info
                elif entry.is_file() and self._is_document(entry.name):
                    if self._is_lock_file(entry.name):
                        self._skipped += 1
                        continue
                    yield FileInfo.from_path(Path(entry.path))
            except OSError as e:
                handle_error(e, Path(entry.path), "scan_entry")
                continue

            # Let other tasks run between entries on large trees
            await asyncio.sleep(0)

    def _is_lock_file(self, name: str) -> bool:
        """Word owner files (~$name.docx) left next to open documents."""
        return name.startswith("~$")

    def _is_document(self, name: str) -> bool:
        return name.lower().endswith(tuple(self.config.document_suffixes))


async def scan_recipes(
    root: Path | None = None,
    config: RecipeConfig | None = None,
) -> ScanResult:
    """
    Convenience function to scan a recipe directory.

    Usage:
        result = await scan_recipes(Path("Recipes"))
        for file in result.files:
            print(file.path)
    """
    scanner = Scanner(config)
    return await scanner.scan(root)
