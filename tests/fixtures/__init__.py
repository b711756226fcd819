"""Shared test doubles."""

from .fakes import FakeClock, InMemoryBlobStorage, RecordingPublisher

__all__ = ["FakeClock", "InMemoryBlobStorage", "RecordingPublisher"]
