"""URL template expansion for OpenSearch descriptions.

Templates follow the OpenSearch 1.1 URL template syntax:
http://www.opensearch.org/Specifications/OpenSearch/1.1#OpenSearch_URL_template_syntax

Supported parameters and what they are replaced with:

    {count}           "20"
    {startIndex}      "0"
    {startPage}       "0"
    {language}        the current language tag, e.g. "en-US"
    {inputEncoding}   "UTF-8"
    {outputEncoding}  "UTF-8"
    {*:source}        the application name
    {searchTerms}     the string supplied by the user

Anything else is left untouched.
"""

import locale
import logging
import re
from urllib.parse import quote, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

DEFAULT_APPLICATION_NAME = "omnisearch"
DEFAULT_LANGUAGE = "en-US"

# {source}, {source?}, {google:source}, {moz:source?}
SOURCE_RE = re.compile(r"\{([^}]*:|)source\??\}")

_FIXED_PARAMETERS = [
    ("{count}", "20"),
    ("{startIndex}", "0"),
    ("{startPage}", "0"),
]

_application_name = DEFAULT_APPLICATION_NAME
_language: str | None = None


def set_application_name(name: str) -> None:
    """Set the name substituted for {source} parameters."""
    global _application_name
    _application_name = name


def application_name() -> str:
    return _application_name


def set_language(language: str | None) -> None:
    """Override the locale-derived language tag. None restores the default."""
    global _language
    _language = language


def current_language() -> str:
    """Current language as an RFC 3066 style tag (underscore becomes hyphen)."""
    if _language:
        return _language.replace("_", "-")

    code = locale.getlocale()[0]
    if not code or code in ("C", "POSIX"):
        return DEFAULT_LANGUAGE
    return code.replace("_", "-")


def expand(search_term: str, template: str, encode: bool = True) -> str:
    """Expand the template parameters in `template` for `search_term`.

    Each parameter is replaced globally before the next one is looked at.
    With `encode` the search term is percent-encoded first, which is what
    URL call sites want; otherwise it is inserted verbatim.
    """
    result = template
    for placeholder, value in _FIXED_PARAMETERS:
        result = result.replace(placeholder, value)
    result = result.replace("{language}", current_language())
    result = result.replace("{inputEncoding}", "UTF-8")
    result = result.replace("{outputEncoding}", "UTF-8")
    result = SOURCE_RE.sub(lambda _: _application_name, result)

    term = quote(search_term, safe="") if encode else search_term
    return result.replace("{searchTerms}", term)


def encode_parameters(search_term: str, parameters: list[tuple[str, str]]) -> str:
    """Serialize parameters as an url-encoded key=value&... string.

    Values are expanded against the search term first.
    """
    pairs = [(key, expand(search_term, value, encode=False)) for key, value in parameters]
    return urlencode(pairs, quote_via=quote)


def add_query_items(url: str, query: str) -> str:
    """Append an encoded query string to a URL, keeping any existing query."""
    if not query:
        return url

    try:
        parts = urlsplit(url)
    except ValueError as e:
        # Unparseable netloc such as "http://[bad/"; append to the raw text
        logger.debug(f"Cannot split URL {url!r}: {e}")
        return url + ("&" if "?" in url else "?") + query

    merged = f"{parts.query}&{query}" if parts.query else query
    return urlunsplit((parts.scheme, parts.netloc, parts.path, merged, parts.fragment))
