"""Search request construction and the delegates that perform them.

The engine only builds search requests. What happens with them (opening
a browser, fetching the result page, ...) is up to a SearchDelegate.
"""

import logging
import webbrowser
from abc import ABC, abstractmethod
from dataclasses import dataclass

from omnisearch.models import UrlTemplate

logger = logging.getLogger(__name__)


@dataclass
class SearchRequest:
    """A request built from a URL template for a search term."""

    url: str
    method: str  # HTTP verb, "GET" or "POST"
    body: bytes = b""

    @property
    def headers(self) -> dict[str, str]:
        if self.method == "POST":
            return {"Content-Type": "application/x-www-form-urlencoded"}
        return {}


def build_request(url_template: UrlTemplate, search_term: str) -> SearchRequest:
    """Build the request for a search term.

    GET requests carry the parameters in the URL, POST requests in the body.
    """
    return SearchRequest(
        url=url_template.url(search_term),
        method=url_template.http_method,
        body=url_template.body(search_term),
    )


class SearchDelegate(ABC):
    """Performs search requests on behalf of an engine.

    Example:
        class PrintingDelegate(SearchDelegate):
            def perform_search_request(self, request: SearchRequest) -> None:
                print(request.method, request.url)
    """

    @abstractmethod
    def perform_search_request(self, request: SearchRequest) -> None:
        """Perform or display the search request."""
        pass


class BrowserDelegate(SearchDelegate):
    """Opens search result pages in the default web browser.

    Browsers can only be pointed at a URL, so POST requests are refused.
    """

    def perform_search_request(self, request: SearchRequest) -> None:
        if request.method != "GET":
            raise ValueError(f"Cannot open a {request.method} request in a browser")
        logger.info(f"Opening search results: {request.url}")
        webbrowser.open(request.url)
