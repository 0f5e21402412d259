"""
Test Configuration - Shared fixtures for recipe indexing tests.

Uses pytest fixtures to create isolated test environments and real .docx
containers (zip archives holding word/document.xml).
"""

import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Callable, Generator, List, Optional

import pytest

from recipecard.config import RecipeConfig, set_config

from docx_helpers import document_xml


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="recipecard_test_")
    # Resolve to handle macOS /var -> /private/var symlink
    resolved = Path(tmp).resolve()
    yield resolved
    shutil.rmtree(str(resolved), ignore_errors=True)


@pytest.fixture
def recipes_dir(temp_dir: Path) -> Path:
    path = temp_dir / "Recipes"
    path.mkdir()
    return path


@pytest.fixture
def test_config(temp_dir: Path, recipes_dir: Path) -> RecipeConfig:
    """Create an isolated test configuration."""
    config = RecipeConfig(
        recipes_path=recipes_dir,
        index_path=temp_dir / "search_idx",
        loader_concurrency=3,
    )
    set_config(config)
    return config


@pytest.fixture
def make_docx() -> Callable[..., Path]:
    """
    Factory writing a .docx file.

    Pass paragraphs for a regular document, or raw xml bytes. Set
    with_body=False to leave out word/document.xml entirely.
    """
    def _make(
        path: Path,
        paragraphs: Optional[List[str]] = None,
        xml: Optional[bytes] = None,
        image: Optional[bytes] = None,
        with_body: bool = True,
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr("[Content_Types].xml", "<Types/>")
            if image is not None:
                archive.writestr("word/media/image1.jpeg", image)
            if with_body:
                archive.writestr("word/document.xml", xml if xml is not None else document_xml(paragraphs or []))
        return path

    return _make
