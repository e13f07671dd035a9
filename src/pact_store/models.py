"""Pact data model.

Every type that can appear in a pact document implements ``to_map()``,
returning the generic structural form (dict, list, str, number, bool, None)
for a given pact specification version. ``from_map()`` rebuilds the model
from a decoded document and accepts both the V2 and V3 shapes.
"""

from __future__ import annotations

import copy
import json
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Protocol

from pact_store.formats import map_to_query_str, parse_body, parse_query_str


class PactSpecVersion(str, Enum):
    """Pact specification versions a document can be written as."""

    V1 = "1.0.0"
    V1_1 = "1.1.0"
    V2 = "2.0.0"
    V3 = "3.0.0"

    @classmethod
    def from_string(cls, value: str) -> "PactSpecVersion":
        for member in cls:
            if member.value == value or member.name == value.upper():
                return member
        raise ValueError(f"Unknown pact specification version: {value}")

    def at_least(self, other: "PactSpecVersion") -> bool:
        order = list(type(self))
        return order.index(self) >= order.index(other)


class SupportsToMap(Protocol):
    """Conversion contract for values embedded in a pact document."""

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]: ...


def to_maps(items: Iterable[SupportsToMap], spec_version: PactSpecVersion) -> list[dict[str, Any]]:
    return [item.to_map(spec_version) for item in items]


@dataclass(frozen=True)
class Consumer:
    name: str

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "Consumer":
        return cls(name=str(data["name"]))


@dataclass(frozen=True)
class Provider:
    name: str

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        return {"name": self.name}

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "Provider":
        return cls(name=str(data["name"]))


@dataclass
class ProviderState:
    name: str
    params: dict[str, Any] = field(default_factory=dict)

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        result: dict[str, Any] = {"name": self.name}
        if self.params:
            result["params"] = copy.deepcopy(self.params)
        return result

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "ProviderState":
        params = data.get("params")
        return cls(name=str(data.get("name", "")), params=dict(params) if isinstance(params, dict) else {})


def _provider_states_to_map(
    states: list[ProviderState], spec_version: PactSpecVersion
) -> dict[str, Any]:
    if not states:
        return {}
    if spec_version.at_least(PactSpecVersion.V3):
        return {"providerStates": to_maps(states, spec_version)}
    return {"providerState": states[0].name}


def _provider_states_from_map(data: Mapping[str, Any]) -> list[ProviderState]:
    states = data.get("providerStates")
    if isinstance(states, list):
        return [ProviderState.from_map(state) for state in states if isinstance(state, dict)]
    legacy = data.get("providerState") or data.get("provider_state")
    if isinstance(legacy, str) and legacy:
        return [ProviderState(name=legacy)]
    return []


def _body_from_map(value: Any) -> Any:
    # Bodies already embedded as structure stay structure
    return copy.deepcopy(value)


def _query_from_map(value: Any) -> dict[str, list[str]]:
    if isinstance(value, str):
        return parse_query_str(value)
    if isinstance(value, dict):
        return {
            str(key): [str(item) for item in values] if isinstance(values, list) else [str(values)]
            for key, values in value.items()
        }
    return {}


@dataclass
class Request:
    method: str = "GET"
    path: str = "/"
    query: dict[str, list[str]] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    matching_rules: dict[str, Any] = field(default_factory=dict)

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        result: dict[str, Any] = {"method": self.method.upper(), "path": self.path}
        if self.headers:
            result["headers"] = dict(self.headers)
        if self.query:
            if spec_version.at_least(PactSpecVersion.V3):
                result["query"] = {key: list(values) for key, values in self.query.items()}
            else:
                result["query"] = map_to_query_str(self.query)
        if self.body is not None:
            result["body"] = parse_body(self)
        if self.matching_rules:
            result["matchingRules"] = copy.deepcopy(self.matching_rules)
        return result

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "Request":
        return cls(
            method=str(data.get("method", "GET")).upper(),
            path=str(data.get("path", "/")),
            query=_query_from_map(data.get("query")),
            headers={str(k): str(v) for k, v in (data.get("headers") or {}).items()},
            body=_body_from_map(data.get("body")),
            matching_rules=copy.deepcopy(data.get("matchingRules") or {}),
        )


@dataclass
class Response:
    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    matching_rules: dict[str, Any] = field(default_factory=dict)

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        result: dict[str, Any] = {"status": self.status}
        if self.headers:
            result["headers"] = dict(self.headers)
        if self.body is not None:
            result["body"] = parse_body(self)
        if self.matching_rules:
            result["matchingRules"] = copy.deepcopy(self.matching_rules)
        return result

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "Response":
        return cls(
            status=int(data.get("status", 200)),
            headers={str(k): str(v) for k, v in (data.get("headers") or {}).items()},
            body=_body_from_map(data.get("body")),
            matching_rules=copy.deepcopy(data.get("matchingRules") or {}),
        )


@dataclass
class RequestResponseInteraction:
    description: str
    request: Request = field(default_factory=Request)
    response: Response = field(default_factory=Response)
    provider_states: list[ProviderState] = field(default_factory=list)

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        result: dict[str, Any] = {"description": self.description}
        result.update(_provider_states_to_map(self.provider_states, spec_version))
        result["request"] = self.request.to_map(spec_version)
        result["response"] = self.response.to_map(spec_version)
        return result

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "RequestResponseInteraction":
        return cls(
            description=str(data.get("description", "")),
            request=Request.from_map(data.get("request") or {}),
            response=Response.from_map(data.get("response") or {}),
            provider_states=_provider_states_from_map(data),
        )

    @staticmethod
    def identity(data: Mapping[str, Any]) -> tuple[str, ...]:
        """Identity of an encoded interaction, used to deduplicate on merge.

        Two interactions are the same when they share description, provider
        states, request method, path and query, whichever spec version
        shape they were written in.
        """
        states = tuple(state.name for state in _provider_states_from_map(data))
        request = data.get("request")
        if not isinstance(request, dict):
            request = {}
        query = _query_from_map(request.get("query"))
        return (
            str(data.get("description", "")),
            json.dumps(states),
            str(request.get("method", "GET")).upper(),
            str(request.get("path", "/")),
            json.dumps(query, sort_keys=True),
        )


@dataclass
class Message:
    description: str
    contents: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)
    provider_states: list[ProviderState] = field(default_factory=list)
    matching_rules: dict[str, Any] = field(default_factory=dict)

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        result: dict[str, Any] = {"description": self.description}
        result.update(_provider_states_to_map(self.provider_states, spec_version))
        result["contents"] = copy.deepcopy(self.contents)
        if self.metadata:
            result["metaData"] = copy.deepcopy(self.metadata)
        if self.matching_rules:
            result["matchingRules"] = copy.deepcopy(self.matching_rules)
        return result

    @classmethod
    def from_map(cls, data: Mapping[str, Any]) -> "Message":
        return cls(
            description=str(data.get("description", "")),
            contents=copy.deepcopy(data.get("contents")),
            metadata=copy.deepcopy(data.get("metaData") or data.get("metadata") or {}),
            provider_states=_provider_states_from_map(data),
            matching_rules=copy.deepcopy(data.get("matchingRules") or {}),
        )


@dataclass
class Pact(ABC):
    """A consumer/provider contract; exactly one interaction variant."""

    collection_key: ClassVar[str]

    consumer: Consumer
    provider: Provider
    metadata: dict[str, Any] = field(default_factory=dict)

    @abstractmethod
    def _collection_to_map(self, spec_version: PactSpecVersion) -> list[dict[str, Any]]:
        raise NotImplementedError

    def to_map(self, spec_version: PactSpecVersion = PactSpecVersion.V3) -> dict[str, Any]:
        return {
            "consumer": self.consumer.to_map(spec_version),
            "provider": self.provider.to_map(spec_version),
            self.collection_key: self._collection_to_map(spec_version),
            "metadata": copy.deepcopy(self.metadata),
        }


@dataclass
class RequestResponsePact(Pact):
    collection_key: ClassVar[str] = "interactions"

    interactions: list[RequestResponseInteraction] = field(default_factory=list)

    def _collection_to_map(self, spec_version: PactSpecVersion) -> list[dict[str, Any]]:
        return to_maps(self.interactions, spec_version)


@dataclass
class MessagePact(Pact):
    collection_key: ClassVar[str] = "messages"

    messages: list[Message] = field(default_factory=list)

    def _collection_to_map(self, spec_version: PactSpecVersion) -> list[dict[str, Any]]:
        if not spec_version.at_least(PactSpecVersion.V3):
            raise ValueError(
                f"Message pacts only support version 3+, cannot write pact specification version {spec_version.value}"
            )
        return to_maps(self.messages, spec_version)
