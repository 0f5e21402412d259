"""
Text - Turn the document XML into plain lines of text.

Streams the markup through an expat-backed parser with a custom target,
so no element tree is ever built. Everything before the <body> start tag
(document properties, namespace declarations, etc.) is ignored.
"""

import io
import logging
from typing import BinaryIO, Iterator, List, Union
from xml.etree.ElementTree import ParseError, XMLParser

from .errors import MalformedContentStream


logger = logging.getLogger(__name__)


CHUNK_SIZE = 65536


def _local_name(tag: str) -> str:
    """Strip the {namespace} prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


class _RunCollector:
    """
    Parser target that splits character data into runs.

    A run ends at every start tag, end tag, comment and processing
    instruction. Expat may deliver one run in several data() calls, so
    pieces are joined until the next boundary.
    """

    def __init__(self):
        self.in_body = False
        self._pieces: List[str] = []
        self._lines: List[str] = []

    def _flush(self) -> None:
        if not self._pieces:
            return
        if self.in_body:
            line = "".join(self._pieces).strip()
            if line:
                self._lines.append(line)
        self._pieces = []

    def start(self, tag, attrib):
        self._flush()
        if not self.in_body and _local_name(tag).lower() == "body":
            self.in_body = True

    def end(self, tag):
        self._flush()

    def data(self, text):
        self._pieces.append(text)

    def comment(self, text):
        self._flush()

    def pi(self, target, text=None):
        self._flush()

    def close(self):
        self._flush()

    def take_lines(self) -> List[str]:
        lines, self._lines = self._lines, []
        return lines


def iter_lines(stream: Union[bytes, BinaryIO]) -> Iterator[str]:
    """
    Yield each non-empty run of character data inside the document body.

    Lines come out after each chunk is parsed, so large documents are
    never held as a tree. A stream with no markup at all (empty or only
    whitespace) yields nothing.

    Raises:
        MalformedContentStream: the markup is not well-formed
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(stream)

    collector = _RunCollector()
    parser = XMLParser(target=collector)
    has_content = False

    try:
        while chunk := stream.read(CHUNK_SIZE):
            has_content = has_content or bool(chunk.strip())
            parser.feed(chunk)
            yield from collector.take_lines()
        if not has_content:
            logger.debug("Empty content stream")
            return
        parser.close()
        yield from collector.take_lines()
    except ParseError as e:
        raise MalformedContentStream(f"content stream is not well-formed: {e}") from e
