"""Core data models for OmniSearch."""

import base64
import io
from dataclasses import dataclass, field

from PIL import Image

from omnisearch.template import add_query_items, encode_parameters, expand


# =============================================================================
# Constants
# =============================================================================


GET = "get"
POST = "post"

# Accepted method names mapped to the HTTP verb sent on the wire
REQUEST_METHODS = {
    GET: "GET",
    POST: "POST",
}

Parameter = tuple[str, str]


# =============================================================================
# Data Models
# =============================================================================


class UrlTemplate:
    """A URL template with its parameters and request method.

    Parameters keep their insertion order, which is the order they end up
    in the query string (GET) or the request body (POST).
    """

    def __init__(
        self,
        template: str = "",
        parameters: list[Parameter] | None = None,
        method: str = GET,
    ):
        self.template = template
        self.parameters = list(parameters or [])
        self._method = GET
        self.method = method

    @property
    def method(self) -> str:
        """HTTP request method, "get" or "post"."""
        return self._method

    @method.setter
    def method(self, value: str) -> None:
        # Unsupported methods are ignored and the previous value is kept
        method = (value or "").lower()
        if method not in REQUEST_METHODS:
            return
        self._method = method

    @property
    def http_method(self) -> str:
        return REQUEST_METHODS[self._method]

    def is_empty(self) -> bool:
        return not self.template

    def url(self, search_term: str) -> str:
        """Build the URL for a search term.

        Returns an empty string if no template is set. Parameters are only
        added to the query string for GET requests.
        """
        if not self.template:
            return ""

        url = expand(search_term, self.template)
        if self._method != POST:
            url = add_query_items(url, encode_parameters(search_term, self.parameters))
        return url

    def body(self, search_term: str) -> bytes:
        """Request body for POST requests, empty for GET."""
        if self._method != POST:
            return b""
        return encode_parameters(search_term, self.parameters).encode("utf-8")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UrlTemplate):
            return NotImplemented
        return (
            self.template == other.template
            and self.parameters == other.parameters
            and self._method == other._method
        )

    def __repr__(self) -> str:
        return (
            f"UrlTemplate(template={self.template!r}, "
            f"parameters={self.parameters!r}, method={self._method!r})"
        )


@dataclass(eq=False)
class Descriptor:
    """A search engine described in the OpenSearch format.

    Holds the metadata (name, description, image, tags) and two URL
    templates: one pointing at search results, and an optional one used
    to request contextual suggestions.

    A descriptor is usable once it has a name and a search template, see
    is_valid().
    """

    name: str = ""
    description: str = ""
    image_url: str = ""
    tags: list[str] = field(default_factory=list)
    search: UrlTemplate = field(default_factory=UrlTemplate)
    suggestions: UrlTemplate = field(default_factory=UrlTemplate)
    image: Image.Image | None = field(default=None, repr=False)

    # Flat accessors mirroring the document vocabulary

    @property
    def search_url_template(self) -> str:
        return self.search.template

    @search_url_template.setter
    def search_url_template(self, value: str) -> None:
        self.search.template = value

    @property
    def search_parameters(self) -> list[Parameter]:
        return self.search.parameters

    @search_parameters.setter
    def search_parameters(self, value: list[Parameter]) -> None:
        self.search.parameters = list(value)

    @property
    def search_method(self) -> str:
        return self.search.method

    @search_method.setter
    def search_method(self, value: str) -> None:
        self.search.method = value

    @property
    def suggestions_url_template(self) -> str:
        return self.suggestions.template

    @suggestions_url_template.setter
    def suggestions_url_template(self, value: str) -> None:
        self.suggestions.template = value

    @property
    def suggestions_parameters(self) -> list[Parameter]:
        return self.suggestions.parameters

    @suggestions_parameters.setter
    def suggestions_parameters(self, value: list[Parameter]) -> None:
        self.suggestions.parameters = list(value)

    @property
    def suggestions_method(self) -> str:
        return self.suggestions.method

    @suggestions_method.setter
    def suggestions_method(self, value: str) -> None:
        self.suggestions.method = value

    @property
    def provides_suggestions(self) -> bool:
        """True if the engine has a suggestions URL template."""
        return not self.suggestions.is_empty()

    def search_url(self, search_term: str) -> str:
        """Search URL for a term, or "" without a search template."""
        return self.search.url(search_term)

    def suggestions_url(self, search_term: str) -> str:
        """Suggestions URL for a term, or "" without a suggestions template."""
        return self.suggestions.url(search_term)

    def is_valid(self) -> bool:
        """A descriptor needs at least a name and a search URL template."""
        return bool(self.name) and not self.search.is_empty()

    def set_image(self, image: Image.Image) -> None:
        """Set the image explicitly.

        Without an image URL a data URL holding the PNG encoded image is
        stored as the image URL.
        """
        if not self.image_url:
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
            encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
            self.image_url = f"data:image/png;base64,{encoded}"
        self.image = image

    def __eq__(self, other: object) -> bool:
        # Methods, tags and the image are not compared
        if not isinstance(other, Descriptor):
            return NotImplemented
        return (
            self.name == other.name
            and self.description == other.description
            and self.image_url == other.image_url
            and self.search.template == other.search.template
            and self.suggestions.template == other.suggestions.template
            and self.search.parameters == other.search.parameters
            and self.suggestions.parameters == other.suggestions.parameters
        )

    def __lt__(self, other: "Descriptor") -> bool:
        if not isinstance(other, Descriptor):
            return NotImplemented
        return self.name < other.name
