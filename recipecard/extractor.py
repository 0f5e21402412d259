"""
Extractor - Recover a Recipe from a single .docx file.

Recipe documents have no real structure, only paragraphs. By convention
the title follows a line mentioning "recipe", and sections start with a
heading such as "Ingredients:".
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from .container import DEFAULT_IMAGE_SUFFIXES, read_container
from .models import Category, Recipe
from .text import iter_lines


logger = logging.getLogger(__name__)


TITLE_MARKER = "recipe"


class RecipeParser:
    """
    Line-by-line state machine filling in a Recipe.

    Starts out looking for the title. Once the title is set, every line is
    either a section heading or content for the current section.
    """

    def __init__(self, recipe: Recipe):
        self.recipe = recipe
        self._title_is_next = False
        self._current: Optional[Category] = None

    def feed(self, line: str) -> None:
        if not self.recipe.title:
            if self._title_is_next:
                self.recipe.title = line
            elif TITLE_MARKER in line.lower():
                self._title_is_next = True
            return

        category = Category.from_line(line)
        if category is not None:
            self._current = category
            return

        # Text before the first heading is dropped
        if self._current is None:
            return

        self.recipe.info.setdefault(self._current, []).append(line)


def find_scans(
    directory: Path,
    image_suffixes: Iterable[str] = DEFAULT_IMAGE_SUFFIXES,
) -> List[Path]:
    """List scanned images next to a recipe, sorted by path."""
    suffixes = tuple(s.lower() for s in image_suffixes)
    scans: List[Path] = []

    with os.scandir(directory) as entries:
        for entry in entries:
            if entry.is_dir():
                continue
            if entry.name.lower().endswith(suffixes):
                scans.append(Path(entry.path).absolute())

    return sorted(scans)


def extract_recipe(
    docx_path: Path,
    image_suffixes: Iterable[str] = DEFAULT_IMAGE_SUFFIXES,
) -> Recipe:
    """
    Parse one recipe document.

    A document without a title line or without any recognized section
    still produces a Recipe; it is simply empty.

    Raises:
        OSError: the file or its directory cannot be read
        MalformedContainer: the archive or its markup is broken
        MissingDocumentBody: the archive has no text body
    """
    docx_path = Path(docx_path).absolute()
    recipe = Recipe(docx_path=docx_path)
    recipe.scan_paths = find_scans(docx_path.parent, image_suffixes)

    with open(docx_path, "rb") as f:
        container = read_container(f, image_suffixes)

    recipe.image = container.image

    parser = RecipeParser(recipe)
    for line in iter_lines(container.text_stream):
        parser.feed(line)

    if recipe.title:
        logger.debug(f"Parsed {recipe.title!r} from {docx_path.name}")
    else:
        logger.debug(f"No title found in {docx_path}")

    return recipe
