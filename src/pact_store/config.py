"""Default pact metadata and store settings.

``PactDefaults`` is resolved once per process and handed to the codec
explicitly. ``StoreSettings`` come from ``[tool.pact-store]`` in the
project's ``pyproject.toml`` with environment variables taking precedence.
"""

from __future__ import annotations

import copy
import logging
import os
import tomllib
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pact_store.version import get_version

logger = logging.getLogger(__name__)

SPEC_VERSION_KEY = "pact-specification"
DEFAULT_SPEC_VERSION = "3.0.0"
TOOL_NAME = "pact-store"

PACT_DIR_ENV_VAR = "PACT_STORE_DIR"
LOCK_TIMEOUT_ENV_VAR = "PACT_STORE_LOCK_TIMEOUT"
ATOMIC_WRITES_ENV_VAR = "PACT_STORE_ATOMIC_WRITES"


@dataclass(frozen=True)
class PactDefaults:
    """Metadata stamped into every written pact unless the pact overrides it."""

    spec_version: str = DEFAULT_SPEC_VERSION
    tool_name: str = TOOL_NAME
    tool_version: str = ""

    @classmethod
    def resolve(cls) -> "PactDefaults":
        """Defaults for this process, with the tool version looked up once."""
        return _resolved_defaults()

    def metadata(self) -> dict[str, Any]:
        """Return a fresh copy of the default metadata mapping."""
        return copy.deepcopy(
            {
                SPEC_VERSION_KEY: {"version": self.spec_version},
                self.tool_name: {"version": self.tool_version},
            }
        )


@lru_cache(maxsize=1)
def _resolved_defaults() -> PactDefaults:
    return PactDefaults(tool_version=get_version())


class StoreSettings(BaseModel):
    """Settings for :class:`pact_store.store.PactFileStore`."""

    model_config = ConfigDict(frozen=True)

    pact_dir: Path = Field(
        default=Path("target/pacts"),
        description="Directory pact files are written to when no directory is given",
    )
    lock_timeout: float = Field(
        default=10.0,
        description="Seconds to wait for the pact file lock; negative waits forever",
    )
    atomic_writes: bool = Field(
        default=True,
        description="Write through a temporary file and rename it over the target",
    )


def _read_pyproject_section(project_root: Path) -> dict[str, Any]:
    pyproject = project_root / "pyproject.toml"
    if not pyproject.is_file():
        return {}

    with open(pyproject, "rb") as handle:
        data = tomllib.load(handle)

    tool = data.get("tool")
    section = tool.get(TOOL_NAME) if isinstance(tool, dict) else None
    if not isinstance(section, dict):
        return {}
    return {key.replace("-", "_"): value for key, value in section.items()}


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if value := os.environ.get(PACT_DIR_ENV_VAR):
        overrides["pact_dir"] = value
    if value := os.environ.get(LOCK_TIMEOUT_ENV_VAR):
        overrides["lock_timeout"] = value
    if value := os.environ.get(ATOMIC_WRITES_ENV_VAR):
        overrides["atomic_writes"] = value
    return overrides


def load_settings(project_root: Path | None = None) -> StoreSettings:
    """Load settings from ``pyproject.toml`` and the environment.

    Args:
        project_root: Directory holding ``pyproject.toml`` (defaults to cwd)

    Raises:
        pydantic.ValidationError: If a configured value is invalid
        tomllib.TOMLDecodeError: If ``pyproject.toml`` is malformed
    """
    root = project_root or Path.cwd()
    values = _read_pyproject_section(root)
    values.update(_env_overrides())
    settings = StoreSettings.model_validate(values)
    logger.debug("Loaded pact-store settings: %s", settings)
    return settings
