"""OmniSearch - search engines described in the OpenSearch format.

Read a description, build URLs and fetch contextual suggestions:

    from omnisearch import OpenSearchReader, OpenSearchEngine

    descriptor = OpenSearchReader().read(Path("wikipedia.xml"))
    descriptor.search_url("python")

See omnisearch/reader.py for the document format and omnisearch/engine.py
for network access.
"""

# Data models
from omnisearch.models import (
    GET,
    POST,
    Descriptor,
    Parameter,
    UrlTemplate,
)

# Reading descriptions
from omnisearch.reader import (
    OpenSearchReader,
    ReaderError,
    read_descriptor,
)

# Network access and search requests
from omnisearch.dispatch import (
    BrowserDelegate,
    SearchDelegate,
    SearchRequest,
    build_request,
)
from omnisearch.engine import OpenSearchEngine
from omnisearch.suggestions import decode_suggestions
from omnisearch.template import expand

__all__ = [
    # Data models
    "GET",
    "POST",
    "Descriptor",
    "Parameter",
    "UrlTemplate",
    # Reader
    "OpenSearchReader",
    "ReaderError",
    "read_descriptor",
    # Engine
    "OpenSearchEngine",
    "SearchDelegate",
    "BrowserDelegate",
    "SearchRequest",
    "build_request",
    "decode_suggestions",
    "expand",
]
