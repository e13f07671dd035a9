"""pact-store: persist consumer/provider pact files and merge concurrent writes.

Usage:
    from pact_store import PactFileStore, MessagePact, Message, Consumer, Provider

    pact = MessagePact(Consumer("web"), Provider("orders"), messages=[Message("order created")])
    PactFileStore().write(pact, "target/pacts")
"""

from pact_store.version import get_version

__version__ = get_version()

from pact_store.codec import PactCodec  # noqa: E402
from pact_store.config import PactDefaults, StoreSettings, load_settings  # noqa: E402
from pact_store.exceptions import (  # noqa: E402
    DecodeError,
    LockError,
    MergeConflictError,
    PactIOError,
    PactStoreError,
)
from pact_store.merge import MergeResult, merge  # noqa: E402
from pact_store.models import (  # noqa: E402
    Consumer,
    Message,
    MessagePact,
    Pact,
    PactSpecVersion,
    Provider,
    ProviderState,
    Request,
    RequestResponseInteraction,
    RequestResponsePact,
    Response,
)
from pact_store.store import PactFileStore  # noqa: E402

__all__ = [
    "__version__",
    "Consumer",
    "DecodeError",
    "LockError",
    "MergeConflictError",
    "MergeResult",
    "Message",
    "MessagePact",
    "Pact",
    "PactCodec",
    "PactDefaults",
    "PactFileStore",
    "PactIOError",
    "PactSpecVersion",
    "PactStoreError",
    "Provider",
    "ProviderState",
    "Request",
    "RequestResponseInteraction",
    "RequestResponsePact",
    "Response",
    "StoreSettings",
    "load_settings",
    "merge",
]
