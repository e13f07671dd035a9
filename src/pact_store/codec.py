"""Conversion between pacts and their canonical JSON documents."""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pact_store.config import SPEC_VERSION_KEY, PactDefaults
from pact_store.exceptions import DecodeError
from pact_store.formats import map_to_query_str, parse_body
from pact_store.models import (
    Consumer,
    Message,
    MessagePact,
    Pact,
    PactSpecVersion,
    Provider,
    RequestResponseInteraction,
    RequestResponsePact,
)

logger = logging.getLogger(__name__)

__all__ = ["PactCodec", "map_to_query_str", "parse_body"]


class PactCodec:
    """Encode pacts to canonical JSON and decode pact files.

    Args:
        defaults: Metadata layered under every encoded pact. Resolved once
            per process when omitted.
    """

    def __init__(self, defaults: PactDefaults | None = None) -> None:
        self.defaults = defaults or PactDefaults.resolve()

    def to_document(self, pact: Pact, spec_version: PactSpecVersion | None = None) -> dict[str, Any]:
        """Return the structural document for *pact* with metadata defaults applied.

        The specification version entry records *spec_version* (the default
        specification version when omitted). Keys in the pact's own metadata
        win over the defaults, one level deep for nested entries, so the
        specification and tool version entries are always present.
        """
        version = spec_version or PactSpecVersion.from_string(self.defaults.spec_version)
        document = pact.to_map(version)
        metadata = self.defaults.metadata()
        metadata[SPEC_VERSION_KEY] = {"version": version.value}
        for key, value in (document.get("metadata") or {}).items():
            default = metadata.get(key)
            if isinstance(value, Mapping) and isinstance(default, dict):
                metadata[key] = {**default, **value}
            else:
                metadata[key] = copy.deepcopy(value)
        document["metadata"] = metadata
        return document

    def encode(self, pact: Pact, spec_version: PactSpecVersion | None = None) -> bytes:
        return self.encode_document(self.to_document(pact, spec_version))

    def encode_document(self, document: Mapping[str, Any]) -> bytes:
        """Render a structural document as pretty-printed UTF-8 JSON."""
        return (json.dumps(document, indent=2, ensure_ascii=False) + "\n").encode("utf-8")

    def decode(self, data: bytes | str, path: Path | None = None) -> dict[str, Any]:
        """Parse a pact file's contents into its structural document.

        Raises:
            DecodeError: If the data is not valid JSON or not a JSON object
        """
        try:
            text = data.decode("utf-8") if isinstance(data, bytes) else data
            document = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(f"Malformed pact JSON: {exc}", path) from exc

        if not isinstance(document, dict):
            raise DecodeError(
                f"Pact document must be a JSON object, got {type(document).__name__}", path
            )
        return document

    def load_pact(self, document: Mapping[str, Any], path: Path | None = None) -> Pact:
        """Build a Pact from a decoded document.

        Documents with a ``messages`` key load as message pacts, everything
        else as request/response pacts.

        Raises:
            DecodeError: If the consumer or provider name is missing, or an
                interaction or message is not a JSON object
        """
        try:
            consumer = Consumer.from_map(document["consumer"])
            provider = Provider.from_map(document["provider"])
        except (KeyError, TypeError) as exc:
            raise DecodeError("Pact document is missing a consumer or provider name", path) from exc

        metadata = document.get("metadata")
        metadata = dict(metadata) if isinstance(metadata, dict) else {}

        logger.debug("Loading pact %s -> %s", consumer.name, provider.name)
        try:
            if "messages" in document:
                return MessagePact(
                    consumer=consumer,
                    provider=provider,
                    metadata=metadata,
                    messages=[Message.from_map(item) for item in document.get("messages") or []],
                )

            return RequestResponsePact(
                consumer=consumer,
                provider=provider,
                metadata=metadata,
                interactions=[
                    RequestResponseInteraction.from_map(item) for item in document.get("interactions") or []
                ],
            )
        except (AttributeError, TypeError, ValueError) as exc:
            raise DecodeError(f"Invalid interaction in pact document: {exc}", path) from exc
