"""Decoding of OpenSearch suggestion responses.

A suggestion response is a JSON array whose second element is the list
of suggested queries:

    ["fire", ["firefox", "first choice", "mozilla firefox"]]

Further elements (descriptions, URLs) may follow and are ignored.
See http://www.opensearch.org/Specifications/OpenSearch/Extensions/Suggestions/1.1
"""

import json
import logging

logger = logging.getLogger(__name__)


def decode_suggestions(body: str | bytes) -> list[str] | None:
    """Decode a suggestion response body.

    Returns the list of suggestions (possibly empty), or None when the body
    is empty or doesn't have the expected shape.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    body = body.strip()
    if not body:
        return None

    # Coarse check before handing the body to the JSON decoder
    if not body.startswith("[") or not body.endswith("]"):
        logger.debug("Suggestion response is not a JSON array")
        return None

    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        logger.debug(f"Malformed suggestion response: {e}")
        return None

    if not isinstance(data, list) or len(data) < 2:
        return None

    suggestions = data[1]
    if not isinstance(suggestions, list):
        return None
    if not all(isinstance(s, str) for s in suggestions):
        logger.debug("Suggestion list contains non-string entries")
        return None

    return suggestions
