"""Shared test doubles — re-export memory backends."""

from __future__ import annotations

from orderflow.backends.memory_backend import (
    MemoryMessageQueue,
    MemoryObjectStore,
    MemoryOrchestrationBackend,
)

ROLE_ARN = "arn:aws:iam::123456789012:role/orderflow-sfn-role"


class RecordingSleep:
    """Stand-in for time.sleep that records requested delays."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


__all__ = [
    "ROLE_ARN",
    "MemoryMessageQueue",
    "MemoryObjectStore",
    "MemoryOrchestrationBackend",
    "RecordingSleep",
]
