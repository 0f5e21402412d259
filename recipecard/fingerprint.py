"""
Fingerprint - Content hashes that decide whether a recipe needs reindexing.

Uses xxHash (XXH3-128) over the recipe title and section lines. The cache
on disk is a flat run of records:

    <title>\\n<16 raw digest bytes>

with no length prefix, since the digest width is fixed.
"""

import logging
from pathlib import Path
from typing import Dict, Mapping

import xxhash

from .errors import CacheUnavailable, PersistenceFailed, handle_error
from .models import Recipe


logger = logging.getLogger(__name__)


DIGEST_SIZE = 16


def compute_fingerprint(recipe: Recipe) -> bytes:
    """
    Hash the title and every section line in precedence order.

    Sensitive to line order and section order, so any edit to indexed
    content changes the digest.
    """
    hasher = xxhash.xxh3_128()
    hasher.update(recipe.title.encode("utf-8"))
    for _, lines in recipe.sections():
        for line in lines:
            hasher.update(line.encode("utf-8"))
    return hasher.digest()


def _parse_records(data: bytes) -> Dict[str, bytes]:
    fingerprints: Dict[str, bytes] = {}
    pos = 0
    while pos < len(data):
        newline = data.find(b"\n", pos)
        if newline < 0:
            raise CacheUnavailable(f"truncated title at byte {pos}")

        digest = data[newline + 1:newline + 1 + DIGEST_SIZE]
        if len(digest) != DIGEST_SIZE:
            raise CacheUnavailable(f"truncated digest at byte {newline + 1}")

        try:
            title = data[pos:newline].decode("utf-8")
        except UnicodeDecodeError as e:
            raise CacheUnavailable(f"undecodable title at byte {pos}") from e

        fingerprints[title] = digest
        pos = newline + 1 + DIGEST_SIZE
    return fingerprints


def load_fingerprints(path: Path) -> Dict[str, bytes]:
    """
    Read the fingerprint cache.

    A missing or corrupt cache is not fatal: it comes back empty, which
    forces every recipe to be reindexed.
    """
    try:
        data = Path(path).read_bytes()
        fingerprints = _parse_records(data)
    except FileNotFoundError:
        logger.info(f"No previous item index at {path}")
        return {}
    except OSError as e:
        handle_error(CacheUnavailable(str(e)), path, "load_fingerprints")
        return {}
    except CacheUnavailable as e:
        handle_error(e, path, "load_fingerprints")
        return {}

    logger.debug(f"Got {len(fingerprints)} previous item indexes")
    return fingerprints


def save_fingerprints(fingerprints: Mapping[str, bytes], path: Path) -> None:
    """
    Overwrite the fingerprint cache.

    Not atomic: a crash mid-write leaves a truncated file, which the next
    load treats as an empty cache.

    Raises:
        PersistenceFailed: the file cannot be written
    """
    path = Path(path)
    records = []
    for title, digest in fingerprints.items():
        if "\n" in title:
            logger.warning(f"Not caching multi-line title {title!r}")
            continue
        if len(digest) != DIGEST_SIZE:
            raise PersistenceFailed(f"digest for {title!r} is {len(digest)} bytes")
        records.append(title.encode("utf-8") + b"\n" + digest)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as f:
            for record in records:
                f.write(record)
    except OSError as e:
        raise PersistenceFailed(str(e)) from e

    logger.debug(f"Saved {len(records)} item indexes to {path}")
