from __future__ import annotations

from pathlib import Path

import pytest

from pact_store.codec import PactCodec
from pact_store.config import PactDefaults, StoreSettings
from pact_store.store import PactFileStore

from tests.utils import TOOL_VERSION


@pytest.fixture()
def defaults() -> PactDefaults:
    return PactDefaults(tool_version=TOOL_VERSION)


@pytest.fixture()
def codec(defaults: PactDefaults) -> PactCodec:
    return PactCodec(defaults)


@pytest.fixture()
def pact_dir(tmp_path: Path) -> Path:
    return tmp_path / "pacts"


@pytest.fixture()
def settings(pact_dir: Path) -> StoreSettings:
    return StoreSettings(pact_dir=pact_dir, lock_timeout=5.0)


@pytest.fixture()
def store(codec: PactCodec, settings: StoreSettings) -> PactFileStore:
    return PactFileStore(codec=codec, settings=settings)
