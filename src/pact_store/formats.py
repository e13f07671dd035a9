"""Body and query-string helpers shared by the models and the codec."""

from __future__ import annotations

import copy
import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import parse_qsl, quote_plus

logger = logging.getLogger(__name__)

_JSON_CONTENT_TYPE = re.compile(r"^application/(?:[\w.+-]+\+)?json\b", re.IGNORECASE)


class HttpPart(Protocol):
    """Anything carrying headers and an optional raw body."""

    headers: dict[str, str]
    body: Any


def content_type(headers: Mapping[str, str]) -> str | None:
    """Return the Content-Type header value, matching the name case-insensitively."""
    for name, value in headers.items():
        if name.lower() == "content-type":
            return value
    return None


def is_json_content_type(value: str | None) -> bool:
    return bool(value) and _JSON_CONTENT_TYPE.match(value.strip()) is not None


def parse_body(part: HttpPart) -> Any:
    """Return the body value to embed in a pact document.

    JSON bodies are embedded as structure. A JSON body that decodes to a
    plain string is double-encoded JSON and is kept as the raw string.
    A body that is already structure (loaded from a pact file) is embedded
    unchanged.
    """
    body = part.body
    if body is not None and not isinstance(body, str):
        return copy.deepcopy(body)
    if body is None or not is_json_content_type(content_type(part.headers)):
        return body

    try:
        parsed = json.loads(body)
    except ValueError:
        logger.warning("Body declared as JSON could not be parsed; keeping it as a string")
        return body

    if isinstance(parsed, str):
        return body
    return parsed


def map_to_query_str(query: Mapping[str, list[str]]) -> str:
    """Render a query mapping as ``k=v&k=v``.

    Keys keep their given order, each value of a multi-valued key is
    repeated as its own pair, and values are form-encoded.
    """
    return "&".join(f"{key}={quote_plus(value)}" for key, values in query.items() for value in values)


def parse_query_str(query: str) -> dict[str, list[str]]:
    """Inverse of :func:`map_to_query_str`."""
    result: dict[str, list[str]] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        result.setdefault(key, []).append(value)
    return result
