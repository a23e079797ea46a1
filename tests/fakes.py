# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from core.artifacts import ArtifactError, MemoryArtifactSink
from core.notifier import Notice


@dataclass
class RecordingNotifier:
    """Collects notices instead of mailing them."""

    sent: list[Notice] = field(default_factory=list)

    def send(self, notice: Notice) -> None:
        self.sent.append(notice)


class BrokenNotifier:
    def __init__(self) -> None:
        self.calls = 0

    def send(self, notice: Notice) -> None:
        self.calls += 1
        raise ConnectionRefusedError("smtp down")


class FlakySink(MemoryArtifactSink):
    """Fails the first `failures` puts, then behaves like the memory sink."""

    def __init__(self, failures: int) -> None:
        super().__init__()
        self.failures = failures
        self.attempts = 0

    def put(self, data: bytes, filename: str) -> str:
        self.attempts += 1
        if self.attempts <= self.failures:
            raise ArtifactError("bucket unavailable")
        return super().put(data, filename)


@dataclass
class FixedClock:
    now: datetime

    def __call__(self) -> datetime:
        return self.now
