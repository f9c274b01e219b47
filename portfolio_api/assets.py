"""
Asset store for uploaded binaries (CV PDFs and project images).

The store validates uploads against a per-kind policy, writes them under a
generated unique name, and removes them again when the owning record lets go
of them. Cleanup is best-effort: storage and metadata are allowed to drift,
and a missing file is never an error when deleting.
"""

from __future__ import annotations

import logging
import os
import random
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Optional, Sequence

from portfolio_api.errors import (
    FileTooLarge,
    InvalidFileType,
    NotFound,
    StorageInconsistency,
    TooManyFiles,
)
from portfolio_api.storage import StorageClient

logger = logging.getLogger(__name__)

MIB = 1024 * 1024
STREAM_CHUNK_SIZE = 64 * 1024

_SAFE_FILENAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class AssetKind(Enum):
    CV = "cv"
    PROJECT_IMAGE = "project_image"


@dataclass(frozen=True)
class AssetPolicy:
    directory: str
    prefix: str
    max_bytes: int
    max_files: int
    content_type: str
    match_prefix: bool = False

    def allows(self, content_type: Optional[str]) -> bool:
        value = (content_type or "").split(";")[0].strip().lower()
        if self.match_prefix:
            return value.startswith(self.content_type)
        return value == self.content_type


POLICIES: dict[AssetKind, AssetPolicy] = {
    AssetKind.CV: AssetPolicy(
        directory="cv",
        prefix="cv",
        max_bytes=10 * MIB,
        max_files=1,
        content_type="application/pdf",
    ),
    AssetKind.PROJECT_IMAGE: AssetPolicy(
        directory="projects",
        prefix="project",
        max_bytes=5 * MIB,
        max_files=5,
        content_type="image/",
        match_prefix=True,
    ),
}


@dataclass(frozen=True)
class IncomingFile:
    """An upload as received, independent of the HTTP layer."""

    filename: str
    content_type: Optional[str]
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class StoredAsset:
    filename: str
    storage_path: str
    content_type: Optional[str] = None
    size: Optional[int] = None


@dataclass
class AssetStream:
    size: int
    chunks: Iterator[bytes]


def _iter_chunks(fileobj: Any, chunk_size: int) -> Iterator[bytes]:
    try:
        while True:
            chunk = fileobj.read(chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        fileobj.close()


class AssetStore:
    """Validates, stores, replaces and removes uploaded assets."""

    def __init__(self, storage: StorageClient):
        self.storage = storage

    @staticmethod
    def policy(kind: AssetKind) -> AssetPolicy:
        return POLICIES[kind]

    def _generate_filename(self, policy: AssetPolicy, original_name: str) -> str:
        ext = os.path.splitext(original_name or "")[1].lower()
        if ext and not _SAFE_FILENAME.match("x" + ext):
            ext = ""
        millis = time.time_ns() // 1_000_000
        suffix = random.randint(0, 10**9)
        return f"{policy.prefix}-{millis}-{suffix}{ext}"

    def validate(self, file: IncomingFile, kind: AssetKind) -> None:
        policy = self.policy(kind)
        if not policy.allows(file.content_type):
            if kind is AssetKind.CV:
                raise InvalidFileType("Only PDF files are allowed for CV")
            raise InvalidFileType("Only image files are allowed")
        if file.size > policy.max_bytes:
            raise FileTooLarge(
                f"File exceeds the {policy.max_bytes // MIB}MB limit"
            )

    def accept(self, file: IncomingFile, kind: AssetKind) -> StoredAsset:
        """Validate ``file`` and persist it under a new unique name."""
        self.validate(file, kind)
        policy = self.policy(kind)
        filename = self._generate_filename(policy, file.filename)
        storage_path = f"{policy.directory}/{filename}"
        while self.storage.exists(storage_path):
            filename = self._generate_filename(policy, file.filename)
            storage_path = f"{policy.directory}/{filename}"
        self.storage.put_bytes(storage_path, file.data, file.content_type or "")
        logger.info("Stored %s asset %s (%d bytes)", kind.value, storage_path, file.size)
        return StoredAsset(
            filename=filename,
            storage_path=storage_path,
            content_type=file.content_type,
            size=file.size,
        )

    def accept_batch(
        self, files: Sequence[IncomingFile], kind: AssetKind
    ) -> list[StoredAsset]:
        """
        Accept several uploads of one kind.

        Every file is validated before any is written. If a write fails
        part-way, the files already written for this batch are released.
        """
        policy = self.policy(kind)
        if len(files) > policy.max_files:
            raise TooManyFiles(f"At most {policy.max_files} files per upload")
        for file in files:
            self.validate(file, kind)

        stored: list[StoredAsset] = []
        try:
            for file in files:
                stored.append(self.accept(file, kind))
        except Exception:
            self.release(stored)
            raise
        return stored

    def replace(
        self,
        old: Optional[StoredAsset],
        new_file: IncomingFile,
        kind: AssetKind,
        on_stored: Optional[Callable[[StoredAsset], Any]] = None,
    ) -> StoredAsset:
        """
        Store ``new_file`` and then release ``old``.

        Phase one writes the new asset and, when given, calls ``on_stored``
        to persist the new reference. If that callback raises, the new asset
        is released and ``old`` is left in place. Phase two removes the old
        bytes best-effort; a failure there leaves an orphaned blob, never a
        dangling reference.
        """
        new_asset = self.accept(new_file, kind)
        if on_stored is not None:
            try:
                on_stored(new_asset)
            except Exception:
                self.release([new_asset])
                raise
        if old is not None:
            self.release([old])
        return new_asset

    def remove(self, asset: StoredAsset) -> bool:
        """Delete the asset's bytes. Returns False if they were already gone."""
        removed = self.storage.delete(asset.storage_path)
        if not removed:
            logger.debug("Asset %s already absent", asset.storage_path)
        return removed

    def release(self, assets: Sequence[StoredAsset]) -> list[StoredAsset]:
        """
        Best-effort removal of ``assets``.

        Returns the assets that could not be removed; failures are logged and
        never raised, so cleanup cannot fail the enclosing operation.
        """
        failed: list[StoredAsset] = []
        for asset in assets:
            try:
                self.remove(asset)
            except Exception:
                logger.warning(
                    "Failed to remove asset %s", asset.storage_path, exc_info=True
                )
                failed.append(asset)
        return failed

    def exists(self, asset: StoredAsset) -> bool:
        return self.storage.exists(asset.storage_path)

    def locate(self, kind: AssetKind, filename: str) -> StoredAsset:
        """Build a reference for a public filename of the given kind."""
        if not _SAFE_FILENAME.match(filename or ""):
            raise NotFound("File not found")
        policy = self.policy(kind)
        return StoredAsset(
            filename=filename, storage_path=f"{policy.directory}/{filename}"
        )

    def stream(
        self, asset: StoredAsset, chunk_size: int = STREAM_CHUNK_SIZE
    ) -> AssetStream:
        """
        Open the asset for sequential reading.

        The caller sets content type, length and disposition before consuming
        ``chunks``.
        """
        try:
            size = self.storage.size(asset.storage_path)
            fileobj = self.storage.open(asset.storage_path)
        except FileNotFoundError as exc:
            logger.warning("Asset %s is referenced but missing", asset.storage_path)
            raise StorageInconsistency() from exc
        return AssetStream(size=size, chunks=_iter_chunks(fileobj, chunk_size))
