"""Durable byte storage for uploaded files."""
from __future__ import annotations
import hashlib
from pathlib import Path
from typing import BinaryIO, Protocol
from intake.domain.models import StoredFile
from intake.logging import logger
from intake.storage.files import storage_key

_CHUNK_SIZE = 1 << 20


class BlobStore(Protocol):
    def write(self, name: str, stream: BinaryIO) -> StoredFile:
        """Persist *stream* under a key derived from *name*; raise OSError on failure."""
        ...


class LocalBlobStore:
    """Writes each upload to its own file under ``base_dir``.

    Every write opens an independent handle, so concurrent requests never
    share state. A failed write may leave a partial file behind.
    """

    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def write(self, name: str, stream: BinaryIO) -> StoredFile:
        self._base_dir.mkdir(parents=True, exist_ok=True)
        target = self._base_dir / storage_key(name)
        digest = hashlib.sha256()
        size = 0
        with target.open("wb") as dst:
            while chunk := stream.read(_CHUNK_SIZE):
                dst.write(chunk)
                digest.update(chunk)
                size += len(chunk)
        logger.info(f"Stored {name!r} as {target.name} ({size} bytes)")
        return StoredFile(
            original_name=name,
            storage_path=str(target),
            size_bytes=size,
            content_hash=digest.hexdigest(),
        )
