"""
Container - Pull the text body and cover image out of a .docx archive.

A .docx file is a zip of XML parts. Only two members matter here: the
main document part and the first embedded JPEG, if any.
"""

import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterable, Optional, Union

from .errors import MalformedContainer, MissingDocumentBody


logger = logging.getLogger(__name__)


# The one XML part that holds the visible text
DOCUMENT_ENTRY = "word/document.xml"

DEFAULT_IMAGE_SUFFIXES = frozenset({".jpg", ".jpeg"})

# Errors zipfile raises while decompressing a member
_READ_ERRORS = (zipfile.BadZipFile, zlib.error, NotImplementedError, EOFError, OSError)


@dataclass
class DocxContainer:
    """Raw artifacts captured from a document archive."""
    text_stream: bytes
    image: Optional[bytes] = None


def read_container(
    source: Union[str, Path, BinaryIO],
    image_suffixes: Iterable[str] = DEFAULT_IMAGE_SUFFIXES,
) -> DocxContainer:
    """
    Read the content stream and cover image from a document archive.

    Entries are visited once, in archive order, and the scan stops as
    soon as both artifacts are captured.

    Args:
        source: Path or seekable binary file object
        image_suffixes: Lowercase suffixes accepted for the cover image

    Raises:
        MalformedContainer: the archive cannot be opened or the content
            stream cannot be decompressed
        MissingDocumentBody: no content stream after a full scan
    """
    suffixes = tuple(s.lower() for s in image_suffixes)

    try:
        archive = zipfile.ZipFile(source)
    except zipfile.BadZipFile as e:
        raise MalformedContainer(f"not a zip archive: {e}") from e

    text_stream: Optional[bytes] = None
    image: Optional[bytes] = None

    with archive:
        for entry in archive.infolist():
            if text_stream is not None and image is not None:
                break

            name = entry.filename.lower()
            if image is None and suffixes and name.endswith(suffixes):
                try:
                    image = archive.read(entry)
                except _READ_ERRORS as e:
                    logger.warning(f"Skipping unreadable image {entry.filename}: {e}")
            elif text_stream is None and name == DOCUMENT_ENTRY:
                try:
                    text_stream = archive.read(entry)
                except _READ_ERRORS as e:
                    raise MalformedContainer(
                        f"cannot read {entry.filename}: {e}"
                    ) from e

    if text_stream is None:
        raise MissingDocumentBody(DOCUMENT_ENTRY)

    return DocxContainer(text_stream=text_stream, image=image)
