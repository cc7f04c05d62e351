"""Network side of a search engine: suggestions, images and search requests.

An OpenSearchEngine wraps one Descriptor and owns everything that talks to
the network on its behalf. It needs an httpx.AsyncClient for that; without
one, suggestions and remote images are disabled.

Results are delivered through callbacks:

    engine = OpenSearchEngine(descriptor, client=client)
    engine.on_suggestions(lambda suggestions: print(suggestions))
    engine.request_suggestions("fire")

At most one suggestion request is in flight per engine. Starting a new one
cancels the previous request, which then never reports a result.
"""

import asyncio
import base64
import io
import logging
from typing import Callable
from urllib.parse import unquote_to_bytes

import httpx
from PIL import Image, UnidentifiedImageError

from omnisearch.dispatch import SearchDelegate, SearchRequest, build_request
from omnisearch.models import Descriptor
from omnisearch.suggestions import decode_suggestions

logger = logging.getLogger(__name__)

SuggestionsCallback = Callable[[list[str]], None]
ImageChangedCallback = Callable[[], None]


def decode_data_url(url: str) -> bytes:
    """Payload of a data: URL."""
    header, _, payload = url[len("data:"):].partition(",")
    if header.endswith(";base64"):
        return base64.b64decode(payload)
    return unquote_to_bytes(payload)


class OpenSearchEngine:
    """A search engine backed by an OpenSearch description."""

    def __init__(
        self,
        descriptor: Descriptor | None = None,
        client: httpx.AsyncClient | None = None,
        delegate: SearchDelegate | None = None,
    ):
        self.descriptor = descriptor if descriptor is not None else Descriptor()
        self.client = client
        self.delegate = delegate

        self._suggestions_task: asyncio.Task | None = None
        self._image_task: asyncio.Task | None = None
        self._failed_image_url: str | None = None
        self._suggestions_callbacks: list[SuggestionsCallback] = []
        self._image_callbacks: list[ImageChangedCallback] = []

    async def __aenter__(self) -> "OpenSearchEngine":
        return self

    async def __aexit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"OpenSearchEngine(name={self.descriptor.name!r})"

    # =========================================================================
    # Notifications
    # =========================================================================

    def on_suggestions(self, callback: SuggestionsCallback) -> None:
        """Register a callback receiving each delivered suggestion list."""
        self._suggestions_callbacks.append(callback)

    def on_image_changed(self, callback: ImageChangedCallback) -> None:
        """Register a callback fired whenever the image changes."""
        self._image_callbacks.append(callback)

    def _emit_suggestions(self, suggestions: list[str]) -> None:
        for callback in list(self._suggestions_callbacks):
            callback(suggestions)

    def _emit_image_changed(self) -> None:
        for callback in list(self._image_callbacks):
            callback()

    # =========================================================================
    # Suggestions
    # =========================================================================

    @property
    def requesting_suggestions(self) -> bool:
        return self._suggestions_task is not None and not self._suggestions_task.done()

    def request_suggestions(self, search_term: str) -> asyncio.Task | None:
        """Request contextual suggestions for a search term.

        Must be called from a running event loop. Returns the task performing
        the request, or None if nothing was requested (empty term, no
        suggestions template, no client). Registered callbacks receive the
        suggestions once they arrive; malformed responses are dropped and
        report nothing.
        """
        if not search_term or not self.descriptor.provides_suggestions:
            return None

        if self.client is None:
            logger.debug(f"No HTTP client set for {self.descriptor.name!r}, suggestions disabled")
            return None

        self._cancel_suggestions()

        request = build_request(self.descriptor.suggestions, search_term)
        logger.debug(f"Requesting suggestions: {request.method} {request.url}")

        task = asyncio.get_running_loop().create_task(self._fetch_suggestions(request))
        self._suggestions_task = task
        return task

    def _cancel_suggestions(self) -> None:
        task = self._suggestions_task
        self._suggestions_task = None
        if task is not None and not task.done():
            logger.debug("Cancelling superseded suggestion request")
            task.cancel()

    async def _fetch_suggestions(self, request: SearchRequest) -> list[str] | None:
        try:
            response = await self.client.request(
                request.method,
                request.url,
                content=request.body or None,
                headers=request.headers,
            )
        except Exception as e:
            logger.warning(f"Suggestion request failed for {self.descriptor.name!r}: {e}")
            self._detach_suggestions()
            return None

        # A superseded request has been detached and must stay silent
        if self._suggestions_task is not asyncio.current_task():
            return None
        self._suggestions_task = None

        suggestions = decode_suggestions(response.content)
        if suggestions is None:
            logger.debug(f"Dropped suggestion response (HTTP {response.status_code})")
            return None

        self._emit_suggestions(suggestions)
        return suggestions

    def _detach_suggestions(self) -> None:
        if self._suggestions_task is asyncio.current_task():
            self._suggestions_task = None

    # =========================================================================
    # Search
    # =========================================================================

    def request_search_results(self, search_term: str) -> None:
        """Hand the search request for a term to the delegate.

        Does nothing without a delegate or for an empty term.
        """
        if self.delegate is None or not search_term:
            return

        request = build_request(self.descriptor.search, search_term)
        self.delegate.perform_search_request(request)

    # =========================================================================
    # Image
    # =========================================================================

    @property
    def image(self) -> Image.Image | None:
        """The engine's image.

        The first access starts loading the image from image_url if it isn't
        known yet. Remote images arrive later and are announced through
        on_image_changed(); until then None is returned.
        """
        if self.descriptor.image is None:
            self._load_image()
        return self.descriptor.image

    def set_image(self, image: Image.Image) -> None:
        self.descriptor.set_image(image)
        self._emit_image_changed()

    def _load_image(self) -> None:
        url = self.descriptor.image_url
        if not url or url == self._failed_image_url or self._image_task is not None:
            return

        if url.startswith("data:"):
            try:
                data = decode_data_url(url)
            except ValueError as e:
                logger.warning(f"Invalid image data URL for {self.descriptor.name!r}: {e}")
                self._failed_image_url = url
                return
            self._store_image(url, data)
            return

        if self.client is None:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, image not loaded")
            return

        self._image_task = loop.create_task(self._fetch_image(url))

    async def _fetch_image(self, url: str) -> None:
        try:
            response = await self.client.get(url, follow_redirects=True)
        except Exception as e:
            logger.warning(f"Failed to fetch image {url}: {e}")
            return
        finally:
            if self._image_task is asyncio.current_task():
                self._image_task = None

        if not response.content:
            return
        self._store_image(url, response.content)

    def _store_image(self, url: str, data: bytes) -> None:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Could not decode image for {self.descriptor.name!r}: {e}")
            # Not retried until image_url changes
            self._failed_image_url = url
            return

        self.descriptor.image = image
        self._emit_image_changed()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Cancel pending network requests. Their results are never reported."""
        self._cancel_suggestions()
        if self._image_task is not None and not self._image_task.done():
            self._image_task.cancel()
        self._image_task = None
