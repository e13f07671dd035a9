"""Version lookup for the metadata stamped into written pacts.

Tries the installed package metadata first, then the ``pyproject.toml`` of a
source checkout. Returns an empty string when neither is available so that a
missing version never blocks writing a pact.
"""

from __future__ import annotations

import logging
import tomllib
from importlib.metadata import PackageNotFoundError, version as metadata_version
from pathlib import Path

logger = logging.getLogger(__name__)

DISTRIBUTION_NAME = "pact-store"


def _default_pyproject() -> Path:
    # src/pact_store/version.py -> repository root
    return Path(__file__).resolve().parents[2] / "pyproject.toml"


def read_version_from_pyproject(pyproject: Path | None = None) -> str | None:
    """Return ``project.version`` from *pyproject*, or None if unavailable."""
    path = pyproject or _default_pyproject()
    if not path.is_file():
        return None

    try:
        with open(path, "rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("Could not read version from %s: %s", path, exc)
        return None

    project = data.get("project")
    if not isinstance(project, dict):
        return None
    value = project.get("version")
    return value if isinstance(value, str) and value else None


def get_version() -> str:
    """Return the pact-store version string, or ``""`` if it cannot be found."""
    try:
        return metadata_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        pass
    except Exception as exc:
        logger.warning("Could not load %s package metadata: %s", DISTRIBUTION_NAME, exc)

    fallback = read_version_from_pyproject()
    if fallback is not None:
        return fallback

    logger.warning("Could not determine %s version; metadata will carry an empty version", DISTRIBUTION_NAME)
    return ""
