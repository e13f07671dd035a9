"""Lock-protected read-merge-write of pact files.

Every write to ``<consumer>-<provider>.json`` happens under the file's lock,
including the check for whether the file already exists, so concurrent
writers for the same pair are serialized and each one merges on top of the
previous ones.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
import threading
from pathlib import Path

from pact_store.codec import PactCodec
from pact_store.config import StoreSettings, load_settings
from pact_store.exceptions import MergeConflictError, PactIOError
from pact_store.lock import pact_lock
from pact_store.merge import merge
from pact_store.models import Pact, PactSpecVersion

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o666

_umask_lock = threading.Lock()


def new_file_mode() -> int:
    """Mode a newly created file gets under the current process umask."""
    # os.umask can only be read by setting it
    with _umask_lock:
        umask = os.umask(0o022)
        os.umask(umask)
    return DEFAULT_FILE_MODE & ~umask


def pact_file_name(consumer: str, provider: str) -> str:
    return f"{consumer}-{provider}.json"


class PactFileStore:
    """Persist pacts into a directory, merging with existing pact files.

    Args:
        codec: Codec used to encode and decode documents
        settings: Store settings; loaded from the environment when omitted
    """

    def __init__(self, codec: PactCodec | None = None, settings: StoreSettings | None = None) -> None:
        self.codec = codec or PactCodec()
        self.settings = settings or load_settings()

    def file_for_pact(self, pact: Pact, pact_dir: Path | str | None = None) -> Path:
        """Return the target path for *pact*, independent of the spec version."""
        directory = Path(pact_dir) if pact_dir is not None else self.settings.pact_dir
        return directory / pact_file_name(pact.consumer.name, pact.provider.name)

    def write(
        self,
        pact: Pact,
        pact_dir: Path | str | None = None,
        spec_version: PactSpecVersion | None = None,
    ) -> Path:
        """Write *pact*, merging it into the existing file if there is one.

        Args:
            pact: Pact to persist
            pact_dir: Target directory (created if missing); defaults to
                ``settings.pact_dir``
            spec_version: Specification version to write; the configured
                default (3.0.0) when omitted

        Returns:
            Path of the written pact file.

        Raises:
            MergeConflictError: The existing file cannot be merged; it is
                left unchanged
            DecodeError: The existing file is not valid pact JSON
            LockError: The file lock could not be acquired
            PactIOError: The directory or file could not be written
        """
        pact_file = self.file_for_pact(pact, pact_dir)
        self._ensure_directory(pact_file.parent)
        document = self.codec.to_document(pact, spec_version)

        with pact_lock(pact_file, timeout=self.settings.lock_timeout):
            if pact_file.exists():
                existing = self.codec.decode(self._read_bytes(pact_file), pact_file)
                result = merge(existing, document, pact_file)
                if not result.ok:
                    raise MergeConflictError(result.message, pact_file)
                self._write_bytes(pact_file, self.codec.encode_document(result.document))
                logger.info("Merged pact into %s", pact_file)
            else:
                self._write_bytes(pact_file, self.codec.encode_document(document))
                logger.info("Created pact file %s", pact_file)

        return pact_file

    def read(self, pact_file: Path | str) -> Pact:
        """Load the pact stored in *pact_file*.

        Raises:
            DecodeError: The file is not a valid pact document
            PactIOError: The file cannot be read
        """
        path = Path(pact_file)
        return self.codec.load_pact(self.codec.decode(self._read_bytes(path), path), path)

    def _ensure_directory(self, directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PactIOError(directory, f"cannot create directory: {exc}") from exc

    def _read_bytes(self, path: Path) -> bytes:
        try:
            return path.read_bytes()
        except OSError as exc:
            raise PactIOError(path, f"cannot read file: {exc}") from exc

    def _write_bytes(self, path: Path, data: bytes) -> None:
        if not self.settings.atomic_writes:
            try:
                path.write_bytes(data)
            except OSError as exc:
                raise PactIOError(path, str(exc)) from exc
            return

        # Temp file in the same directory so the rename stays on one filesystem
        try:
            fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        except OSError as exc:
            raise PactIOError(path, str(exc)) from exc

        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else new_file_mode()
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_path, mode)
            os.replace(tmp_path, path)
        except OSError as exc:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PactIOError(path, str(exc)) from exc
