"""
Data Models - Type definitions for the recipe pipeline.

These dataclasses represent the data flowing through the pipeline stages,
ensuring type safety and clear interfaces between modules.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
from enum import Enum

from .errors import ProcessingResult


class Category(Enum):
    """
    Recognized recipe sections.

    Declaration order is the display precedence, and also the order
    in which sections feed the recipe fingerprint.
    """
    SERVES = "serves"
    OVEN_TEMPERATURE = "oven temperature"
    INGREDIENTS = "ingredients"
    PREPARATION = "preparation"
    TIPS = "tips"

    @classmethod
    def from_line(cls, line: str) -> Optional["Category"]:
        """Match a heading line exactly, ignoring trailing colons and case."""
        try:
            return cls(line.rstrip(":").lower())
        except ValueError:
            return None


@dataclass
class FileInfo:
    """
    A document found by the scanner.

    Only what the directory entry gives us, without reading file content.
    """
    path: Path
    name: str
    extension: str

    @classmethod
    def from_path(cls, path: Path) -> "FileInfo":
        return cls(path=path, name=path.name, extension=path.suffix.lower())


@dataclass
class Recipe:
    """A recipe recovered from one document."""
    docx_path: Path
    title: str = ""
    info: Dict[Category, List[str]] = field(default_factory=dict)
    scan_paths: List[Path] = field(default_factory=list)
    image: Optional[bytes] = None

    def sections(self) -> List[tuple[Category, List[str]]]:
        """Present sections in precedence order."""
        return [
            (category, self.info[category])
            for category in Category
            if category in self.info
        ]

    def summary(self) -> str:
        """Render present sections as text, one blank line between them."""
        return "\n\n".join(
            category.value + "\n" + "\n".join(lines)
            for category, lines in self.sections()
        )

    def to_document(self) -> dict:
        """Build the mapping handed to the search index."""
        return {
            "title": self.title,
            "summary": self.summary(),
            "docx_path": str(self.docx_path),
            "scan_paths": [str(p) for p in self.scan_paths],
        }


@dataclass
class ScanResult:
    """Result of scanning the recipe directory."""
    files: List[FileInfo]
    skipped_count: int
    duration_seconds: float


@dataclass
class LoadResult:
    """
    Result of loading the corpus.

    recipes holds successfully extracted documents; outcomes holds one
    entry per discovered document, failures included. Both follow
    discovery order.
    """
    recipes: List[Recipe]
    outcomes: List[ProcessingResult]
    duration_seconds: float = 0.0

    @property
    def failures(self) -> List[ProcessingResult]:
        return [o for o in self.outcomes if not o.success]


@dataclass
class SyncStats:
    """Statistics from a synchronization pass."""
    recipes_seen: int = 0
    recipes_indexed: int = 0     # New titles
    recipes_updated: int = 0     # Changed content
    recipes_unchanged: int = 0
    recipes_removed: int = 0
    recipes_skipped: int = 0     # Missing or duplicate title
    documents_failed: int = 0    # Dropped during loading
    errors: int = 0
    cache_saved: bool = False
    duration_seconds: float = 0.0

    @property
    def mutations(self) -> int:
        return self.recipes_indexed + self.recipes_updated + self.recipes_removed

    def __str__(self) -> str:
        return (
            f"Synced {self.recipes_seen} recipes "
            f"({self.recipes_indexed} new, "
            f"{self.recipes_updated} updated, "
            f"{self.recipes_unchanged} unchanged, "
            f"{self.recipes_removed} removed, "
            f"{self.recipes_skipped} skipped, "
            f"{self.documents_failed} unreadable, "
            f"{self.errors} errors) "
            f"in {self.duration_seconds:.1f}s"
        )
