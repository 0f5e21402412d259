"""
recipecard - Recipe card extraction and incremental search indexing.

Modules:
    - config: Centralized configuration
    - container: .docx archive reader (text body + cover image)
    - text: Streaming XML-to-lines linearizer
    - extractor: Title/section state machine, sibling scan discovery
    - scanner: Recipe directory traversal
    - loader: Parallel per-document extraction
    - fingerprint: xxHash content digests and the on-disk cache
    - search_index: SQLite FTS5 search index
    - synchronizer: Insert/update/prune against the search index
    - orchestrator: Main entry point and CLI

Flow:
    Scan → Extract (parallel) → Fingerprint → Sync → Persist

Usage:
    from recipecard import Orchestrator

    orchestrator = Orchestrator()
    stats = await orchestrator.run_sync()
"""

from .orchestrator import Orchestrator

__all__ = ["Orchestrator"]
