"""Reader for OpenSearch description documents.

Walks the document once, front to back, and fills in a Descriptor:

    <OpenSearchDescription xmlns="http://a9.com/-/spec/opensearch/1.1/">
        <ShortName>Web Search</ShortName>
        <Description>Use Example.com to search the Web.</Description>
        <Tags>example web</Tags>
        <Url type="text/html" template="http://example.com/?q={searchTerms}"/>
        <Url type="application/x-suggestions+json" method="post"
             template="http://example.com/suggest">
            <Param name="q" value="{searchTerms}"/>
        </Url>
        <Image>http://example.com/favicon.ico</Image>
    </OpenSearchDescription>

Unknown elements are skipped together with everything inside them.

For more information about the format see:
http://www.opensearch.org/Specifications/OpenSearch/1.1#OpenSearch_description_document
"""

import io
import logging
import os
import xml.etree.ElementTree as ET
from collections import deque
from pathlib import Path
from typing import IO, Union

from omnisearch.models import Descriptor, Parameter

logger = logging.getLogger(__name__)

OPENSEARCH_NS = "http://a9.com/-/spec/opensearch/1.1/"
ROOT_TAG = f"{{{OPENSEARCH_NS}}}OpenSearchDescription"

# Url types
SEARCH_TYPE = "text/html"
XHTML_TYPE = "application/xhtml+xml"
SUGGESTIONS_TYPE = "application/x-suggestions+json"

NOT_OPENSEARCH_MESSAGE = "The file is not an OpenSearch 1.1 file."
PREMATURE_END_MESSAGE = "Premature end of document."

ReadSource = Union[IO[bytes], IO[str], bytes, str, os.PathLike]


class ReaderError(ValueError):
    """Raised when a document is not a well formed OpenSearch description."""


def _local_name(tag: str) -> str:
    return tag.rpartition("}")[2]


class _Cursor:
    """Pull-based view over the start/end events of an XML stream.

    Parse errors are held back until every event that precedes them has
    been consumed, so the reader sees the document up to the point where
    it breaks.
    """

    def __init__(self, stream: IO, chunk_size: int = 8192):
        self._stream = stream
        self._chunk_size = chunk_size
        self._parser = ET.XMLPullParser(events=("start", "end"))
        self._pending: deque[tuple[str, ET.Element]] = deque()
        self._error: ET.ParseError | None = None
        self._exhausted = False
        self.event: str | None = None
        self.element: ET.Element | None = None

    def next(self) -> bool:
        """Move to the next event. Returns False at the end of input."""
        while not self._pending:
            if self._error is not None:
                raise self._error
            if self._exhausted:
                self.event = None
                self.element = None
                return False
            self._fill()

        self.event, self.element = self._pending.popleft()
        return True

    @property
    def exhausted(self) -> bool:
        """True once the whole stream has been handed to the parser."""
        return self._exhausted

    def is_start(self) -> bool:
        return self.event == "start"

    def is_end(self) -> bool:
        return self.event == "end"

    @property
    def name(self) -> str:
        return _local_name(self.element.tag) if self.element is not None else ""

    def attribute(self, name: str) -> str:
        return self.element.get(name, "") if self.element is not None else ""

    def _fill(self) -> None:
        chunk = self._stream.read(self._chunk_size)
        try:
            if chunk:
                self._parser.feed(chunk)
            else:
                self._exhausted = True
                self._parser.close()
        except ET.ParseError as e:
            self._error = e
        self._drain()

    def _drain(self) -> None:
        try:
            for event, element in self._parser.read_events():
                self._pending.append((event, element))
        except ET.ParseError as e:
            self._error = e


class OpenSearchReader:
    """Reads search engine descriptions in the OpenSearch format.

    read() always returns a Descriptor, even if the document is broken or
    doesn't conform to the format. Use has_error() / error_string to find
    out whether reading succeeded, and Descriptor.is_valid() to check that
    the document carried enough information to be usable.

    One reader can be used to read several documents, one by one.
    """

    def __init__(self):
        self.error: ReaderError | None = None
        self._cursor: _Cursor | None = None
        self._descriptor: Descriptor | None = None

    def has_error(self) -> bool:
        return self.error is not None

    @property
    def error_string(self) -> str:
        return str(self.error) if self.error else ""

    def read(self, source: ReadSource) -> Descriptor:
        """Read a description from a file object, bytes, text, or a path."""
        self.error = None
        self._descriptor = Descriptor()

        try:
            stream = self._open(source)
        except OSError as e:
            self.error = ReaderError(f"Cannot open {source}: {e.strerror or e}")
            logger.warning(self.error_string)
            return self._descriptor

        self._cursor = _Cursor(stream)
        try:
            self._read_document()
        except ReaderError as e:
            self.error = e
        except ET.ParseError as e:
            if self._cursor.exhausted:
                self.error = ReaderError(PREMATURE_END_MESSAGE)
            else:
                self.error = ReaderError(str(e))
        finally:
            if isinstance(source, (os.PathLike, bytes, str)):
                stream.close()
            self._cursor = None

        if self.error:
            logger.warning(f"Failed to read OpenSearch description: {self.error}")
        else:
            logger.info(f"Read OpenSearch description: {self._descriptor.name!r}")

        return self._descriptor

    @staticmethod
    def _open(source: ReadSource) -> IO:
        if isinstance(source, os.PathLike):
            return open(Path(source), "rb")
        if isinstance(source, bytes):
            return io.BytesIO(source)
        if isinstance(source, str):
            return io.StringIO(source)
        return source

    # =========================================================================
    # Document structure
    # =========================================================================

    def _read_document(self) -> None:
        cursor = self._cursor

        try:
            while cursor.next():
                if cursor.is_start():
                    break
            else:
                raise ReaderError(NOT_OPENSEARCH_MESSAGE)
        except ET.ParseError:
            raise ReaderError(NOT_OPENSEARCH_MESSAGE)

        if cursor.element.tag != ROOT_TAG:
            raise ReaderError(NOT_OPENSEARCH_MESSAGE)

        while True:
            if not cursor.next():
                raise ReaderError(PREMATURE_END_MESSAGE)

            # Children consume their own end events, so this is the root's
            if cursor.is_end():
                break

            name = cursor.name
            if name == "ShortName":
                self._descriptor.name = self._read_element_text()
            elif name == "Description":
                self._descriptor.description = self._read_element_text()
            elif name == "Url":
                self._read_url()
            elif name == "Image":
                self._descriptor.image_url = self._read_element_text()
            elif name == "Tags":
                self._descriptor.tags = [t for t in self._read_element_text().split(" ") if t]
            else:
                logger.debug(f"Skipping unknown element: {name}")
                self._skip_subtree()

    def _read_url(self) -> None:
        cursor = self._cursor
        descriptor = self._descriptor

        url_type = cursor.attribute("type")
        template = cursor.attribute("template")
        method = cursor.attribute("method")

        if not url_type or url_type == XHTML_TYPE:
            url_type = SEARCH_TYPE

        if not template:
            logger.debug("Skipping Url without a template")
            self._skip_subtree()
            return

        # The first Url of each type wins
        if url_type == SUGGESTIONS_TYPE and descriptor.suggestions_url_template:
            self._skip_subtree()
            return
        if url_type == SEARCH_TYPE and descriptor.search_url_template:
            self._skip_subtree()
            return

        parameters: list[Parameter] = []

        while True:
            if not cursor.next():
                raise ReaderError(PREMATURE_END_MESSAGE)
            if cursor.is_end():
                break

            if cursor.name in ("Param", "Parameter"):
                parameter = self._read_parameter()
                if parameter:
                    parameters.append(parameter)
            else:
                self._skip_subtree()

        if url_type == SUGGESTIONS_TYPE:
            descriptor.suggestions_url_template = template
            descriptor.suggestions_parameters = parameters
            descriptor.suggestions_method = method
        elif url_type == SEARCH_TYPE:
            descriptor.search_url_template = template
            descriptor.search_parameters = parameters
            descriptor.search_method = method
        else:
            logger.debug(f"Ignoring Url of type {url_type}")

    def _read_parameter(self) -> Parameter | None:
        key = self._cursor.attribute("name")
        value = self._cursor.attribute("value")
        self._skip_subtree()

        if not key or not value:
            logger.debug(f"Dropping incomplete parameter: name={key!r} value={value!r}")
            return None
        return (key, value)

    # =========================================================================
    # Cursor helpers
    # =========================================================================

    def _read_element_text(self) -> str:
        """Text of the current element, without the content of child elements."""
        element = self._cursor.element
        self._skip_subtree()

        parts = [element.text or ""]
        parts.extend(child.tail or "" for child in element)
        return "".join(parts)

    def _skip_subtree(self) -> None:
        """Consume events up to and including the end of the current element."""
        cursor = self._cursor
        depth = 1
        while depth:
            if not cursor.next():
                raise ReaderError(PREMATURE_END_MESSAGE)
            if cursor.is_start():
                depth += 1
            elif cursor.is_end():
                depth -= 1


def read_descriptor(source: ReadSource) -> Descriptor:
    """Read a description, raising ReaderError if the document is broken.

    The returned descriptor may still be invalid (see Descriptor.is_valid()).
    """
    reader = OpenSearchReader()
    descriptor = reader.read(source)
    if reader.error:
        raise reader.error
    return descriptor
