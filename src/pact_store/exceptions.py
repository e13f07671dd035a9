"""Exception hierarchy for pact persistence and merging."""

from __future__ import annotations

from pathlib import Path


class PactStoreError(Exception):
    """Base exception for pact-store errors."""
    pass


class DecodeError(PactStoreError, ValueError):
    """A pact document could not be parsed or loaded."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class MergeConflictError(PactStoreError):
    """Two pact documents cannot be merged.

    Raised for a pact specification version mismatch, a provider mismatch,
    or an interaction category mismatch. The target file is left untouched.
    """

    def __init__(self, reason: str, path: Path | None = None):
        self.reason = reason
        self.path = path
        super().__init__(reason)


class LockError(PactStoreError):
    """The lock guarding a pact file could not be acquired."""

    def __init__(self, path: Path, timeout: float | None = None, message: str | None = None):
        self.path = path
        self.timeout = timeout
        if message is None:
            message = (
                f"Cannot acquire lock on pact file '{path}' within {timeout}s. "
                "Another process may be writing it."
            )
        super().__init__(message)


class PactIOError(PactStoreError):
    """Creating the pact directory or writing the pact file failed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to write pact file '{path}': {reason}")
