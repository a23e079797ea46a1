# server/core/artifacts.py

import logging
import time
import uuid
from pathlib import Path
from typing import Protocol

from core.errors import NotFound, UploadFailed


logger = logging.getLogger(__name__)


class ArtifactError(Exception):
    """Raised by a sink when it cannot store an artifact."""


class ArtifactSink(Protocol):
    def put(self, data: bytes, filename: str) -> str: ...

    def get(self, ref: str) -> bytes: ...

    def delete(self, ref: str) -> None: ...


def _artifact_name(filename: str) -> str:
    # <epoch ms>-<random><original extension>
    suffix = Path(filename or "").suffix.lower()
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{suffix}"


class LocalArtifactSink:
    """
    Stores uploads as flat files under one directory.
    References are bare file names relative to that directory.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _resolve(self, ref: str) -> Path:
        path = (self.root / ref).resolve()
        if path.parent != self.root.resolve():
            raise NotFound("File not found.")
        return path

    def put(self, data: bytes, filename: str) -> str:
        ref = _artifact_name(filename)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with (self.root / ref).open("wb") as buffer:
                buffer.write(data)
        except OSError as e:
            raise ArtifactError(str(e)) from e
        return ref

    def get(self, ref: str) -> bytes:
        path = self._resolve(ref)
        if not path.is_file():
            raise NotFound("File not found.")
        return path.read_bytes()

    def delete(self, ref: str) -> None:
        path = self._resolve(ref)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise ArtifactError(str(e)) from e


class MemoryArtifactSink:
    def __init__(self):
        self.objects: dict[str, bytes] = {}

    def put(self, data: bytes, filename: str) -> str:
        ref = _artifact_name(filename)
        self.objects[ref] = data
        return ref

    def get(self, ref: str) -> bytes:
        if ref not in self.objects:
            raise NotFound("File not found.")
        return self.objects[ref]

    def delete(self, ref: str) -> None:
        self.objects.pop(ref, None)


def build_sink(settings) -> ArtifactSink:
    if settings.artifact_backend == "local":
        return LocalArtifactSink(settings.uploads_dir)
    if settings.artifact_backend == "memory":
        return MemoryArtifactSink()
    raise ValueError(f"Unknown artifact backend: {settings.artifact_backend}")


def put_with_retry(
    sink: ArtifactSink,
    data: bytes,
    filename: str,
    attempts: int = 3,
    backoff: float = 0.2,
) -> str:
    """
    Store `data`, retrying failed attempts with exponential backoff.
    Raises UploadFailed once `attempts` are used up.
    """
    attempts = max(attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            return sink.put(data, filename)
        except ArtifactError as e:
            logger.warning("Upload attempt %d/%d failed: %s", attempt, attempts, e)
            if attempt < attempts:
                time.sleep(backoff * 2 ** (attempt - 1))

    logger.error("Giving up on upload of %r after %d attempts", filename, attempts)
    raise UploadFailed()


def discard(sink: ArtifactSink, ref: str) -> None:
    """
    Best-effort removal of an artifact whose database record was never written.
    Failures are logged; the caller is already handling the original error.
    """
    try:
        sink.delete(ref)
    except (ArtifactError, NotFound):
        logger.exception("Could not remove orphaned artifact %s", ref)
    else:
        logger.info("Removed orphaned artifact %s", ref)
