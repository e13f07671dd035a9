"""Merging of pact documents.

``merge()`` works on decoded documents and performs no I/O. Checks run in a
fixed order and the first failing one decides the result:

1. compatibility (same provider, one interaction kind per document,
   no request/response interactions into a message file)
2. pact specification version
3. message pact into a request/response file
4. combination with first-seen deduplication
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pact_store.config import SPEC_VERSION_KEY
from pact_store.models import RequestResponseInteraction

logger = logging.getLogger(__name__)


class PactKind(str, Enum):
    REQUEST_RESPONSE = "interactions"
    MESSAGE = "messages"


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a merge: the merged document, or the reason it failed."""

    ok: bool
    document: dict[str, Any] | None = None
    message: str = ""

    @classmethod
    def success(cls, document: dict[str, Any]) -> "MergeResult":
        return cls(ok=True, document=document)

    @classmethod
    def conflict(cls, message: str) -> "MergeResult":
        return cls(ok=False, message=message)


def document_kinds(document: Mapping[str, Any]) -> set[PactKind]:
    """Interaction kinds present in a document (empty for a bare document)."""
    return {kind for kind in PactKind if kind.value in document}


def spec_version_of(document: Mapping[str, Any]) -> str | None:
    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        return None
    spec = metadata.get(SPEC_VERSION_KEY)
    if not isinstance(spec, dict):
        return None
    version = spec.get("version")
    return str(version) if version else None


def _name_of(document: Mapping[str, Any], party: str) -> str | None:
    value = document.get(party)
    return value.get("name") if isinstance(value, dict) else None


def unique_by(items: Iterable[Any], key: Callable[[Any], Hashable]) -> list[Any]:
    """Drop items whose key was already seen, keeping the first occurrence."""
    seen: set[Hashable] = set()
    result = []
    for item in items:
        item_key = key(item)
        if item_key in seen:
            continue
        seen.add(item_key)
        result.append(item)
    return result


def _message_key(message: Any) -> Hashable:
    if not isinstance(message, dict):
        return repr(message)
    description = message.get("description")
    if isinstance(description, Hashable):
        return description
    return json.dumps(description, sort_keys=True, default=str)


def _interaction_key(interaction: Any) -> Hashable:
    if isinstance(interaction, dict):
        return RequestResponseInteraction.identity(interaction)
    return repr(interaction)


def _check_compatible(existing: Mapping[str, Any], incoming: Mapping[str, Any], target: str) -> str | None:
    existing_provider = _name_of(existing, "provider")
    incoming_provider = _name_of(incoming, "provider")
    if existing_provider != incoming_provider:
        return (
            f"Could not merge pact into '{target}': provider '{incoming_provider}' "
            f"does not match the file's provider '{existing_provider}'"
        )

    existing_kinds = document_kinds(existing)
    incoming_kinds = document_kinds(incoming)
    for label, kinds in (("file", existing_kinds), ("pact", incoming_kinds)):
        if len(kinds) > 1:
            return (
                f"Could not merge pact into '{target}': the {label} contains both "
                "request/response interactions and messages"
            )

    if PactKind.MESSAGE in existing_kinds and PactKind.REQUEST_RESPONSE in incoming_kinds:
        return (
            f"Could not merge pact into '{target}': file is a message pact "
            "(it contains messages, not request/response interactions)"
        )
    return None


def _check_spec_version(existing: Mapping[str, Any], incoming: Mapping[str, Any], target: str) -> str | None:
    version = spec_version_of(existing)
    pact_version = spec_version_of(incoming)
    if version and pact_version and version != pact_version:
        return (
            f"Could not merge pact into '{target}': pact specification version is "
            f"{pact_version}, while the file is version {version}"
        )
    return None


def _check_category(existing: Mapping[str, Any], incoming: Mapping[str, Any], target: str) -> str | None:
    if PactKind.MESSAGE in document_kinds(incoming) and PactKind.REQUEST_RESPONSE.value in existing:
        return (
            f"Could not merge pact into '{target}': file is not a message pact "
            "(it contains request/response interactions)"
        )
    return None


def merge(
    existing: Mapping[str, Any],
    incoming: Mapping[str, Any],
    path: Path | str | None = None,
) -> MergeResult:
    """Merge *incoming* into *existing*.

    The merged document takes consumer, provider and metadata from
    *incoming*. Interactions or messages are the existing ones followed by
    the incoming ones, with later duplicates dropped: for messages the key is
    the description, so content already in the file is kept over new content
    with the same description.

    Args:
        existing: Document currently on disk
        incoming: Document being written
        path: Target file, used in conflict messages only

    Returns:
        MergeResult; neither input is modified.
    """
    target = str(path) if path is not None else "<pact>"

    for check in (_check_compatible, _check_spec_version, _check_category):
        reason = check(existing, incoming, target)
        if reason is not None:
            logger.debug("Merge rejected: %s", reason)
            return MergeResult.conflict(reason)

    kinds = document_kinds(incoming) or document_kinds(existing) or {PactKind.REQUEST_RESPONSE}
    kind = next(iter(kinds))
    key = _message_key if kind is PactKind.MESSAGE else _interaction_key

    combined = list(existing.get(kind.value) or []) + list(incoming.get(kind.value) or [])
    merged_items = unique_by(copy.deepcopy(combined), key)

    merged = copy.deepcopy(dict(incoming))
    merged[kind.value] = merged_items
    logger.debug(
        "Merged %d existing and %d incoming %s into %d",
        len(existing.get(kind.value) or []),
        len(incoming.get(kind.value) or []),
        kind.value,
        len(merged_items),
    )
    return MergeResult.success(merged)
