"""Cross-process lock keyed by a pact file path.

The lock lives in a sidecar ``<pact file>.lock`` so that it can be taken
before the pact file exists and survives the pact file being replaced by
an atomic rename.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from filelock import FileLock, Timeout

from pact_store.exceptions import LockError

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"


def lock_path_for(pact_file: Path) -> Path:
    resolved = pact_file.resolve()
    return resolved.with_name(resolved.name + LOCK_SUFFIX)


@contextmanager
def pact_lock(pact_file: Path, timeout: float = 10.0) -> Iterator[Path]:
    """Hold an exclusive lock on *pact_file* for the duration of the block.

    Args:
        pact_file: Pact file to guard; its directory must exist
        timeout: Seconds to wait for the lock; negative waits forever

    Yields:
        The lock file path.

    Raises:
        LockError: If the lock is not acquired within *timeout* or the
            lock file cannot be opened
    """
    lock_path = lock_path_for(pact_file)
    lock = FileLock(str(lock_path), timeout=timeout)

    try:
        lock.acquire()
    except Timeout as exc:
        raise LockError(pact_file, timeout) from exc
    except OSError as exc:
        raise LockError(pact_file, timeout, f"Cannot lock pact file '{pact_file}': {exc}") from exc

    logger.debug("Acquired lock %s", lock_path)
    try:
        yield lock_path
    finally:
        lock.release()
        logger.debug("Released lock %s", lock_path)
