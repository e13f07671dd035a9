"""Pact builders shared across the test suite."""

from __future__ import annotations

from pact_store.models import (
    Consumer,
    Message,
    MessagePact,
    Provider,
    ProviderState,
    Request,
    RequestResponseInteraction,
    RequestResponsePact,
    Response,
)

TOOL_VERSION = "1.2.3-test"


def make_message_pact(*messages: Message, consumer: str = "web", provider: str = "orders") -> MessagePact:
    return MessagePact(consumer=Consumer(consumer), provider=Provider(provider), messages=list(messages))


def make_interaction(description: str, path: str = "/orders", status: int = 200) -> RequestResponseInteraction:
    return RequestResponseInteraction(
        description=description,
        provider_states=[ProviderState("orders exist")],
        request=Request(method="get", path=path, query={"page": ["1"]}),
        response=Response(
            status=status,
            headers={"Content-Type": "application/json"},
            body='{"orders": [{"id": 1}]}',
        ),
    )


def make_http_pact(
    *interactions: RequestResponseInteraction, consumer: str = "web", provider: str = "orders"
) -> RequestResponsePact:
    return RequestResponsePact(
        consumer=Consumer(consumer), provider=Provider(provider), interactions=list(interactions)
    )


def message_document(*descriptions: str, version: str | None = "3.0.0", provider: str = "orders") -> dict:
    """Decoded message pact document with one message per description."""
    document: dict = {
        "consumer": {"name": "web"},
        "provider": {"name": provider},
        "messages": [{"description": d, "contents": {"id": d}} for d in descriptions],
        "metadata": {},
    }
    if version is not None:
        document["metadata"]["pact-specification"] = {"version": version}
    return document
