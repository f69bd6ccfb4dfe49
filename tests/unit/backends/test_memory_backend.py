"""Tests for the in-memory fakes used across the suite."""

from __future__ import annotations

import pytest

from orderflow.core.exceptions import BackendError, QueueError, StorageError
from orderflow.core.protocols import IMessageQueue, IObjectStore, IOrchestrationBackend
from tests.fakes import MemoryMessageQueue, MemoryObjectStore, MemoryOrchestrationBackend


def test_fakes_satisfy_protocols():
    assert isinstance(MemoryOrchestrationBackend(), IOrchestrationBackend)
    assert isinstance(MemoryObjectStore(), IObjectStore)
    assert isinstance(MemoryMessageQueue(), IMessageQueue)


class TestOrchestration:
    def test_start_unknown_definition(self):
        with pytest.raises(BackendError):
            MemoryOrchestrationBackend().start("arn:nope", "x", "{}")

    def test_script_last_entry_repeats(self, backend, order_definition):
        handle = backend.register("sm", order_definition.to_json(), "role")
        backend.script("RUNNING", "FAILED")
        execution = backend.start(handle, "e1", '{"orderId": "o", "items": [], "total": 1}')
        assert [backend.describe(execution).status for _ in range(4)] == [
            "RUNNING", "FAILED", "FAILED", "FAILED",
        ]

    def test_duplicate_execution_name(self, backend, order_definition):
        handle = backend.register("sm", order_definition.to_json(), "role")
        backend.start(handle, "e1", "{}")
        with pytest.raises(BackendError, match="already exists"):
            backend.start(handle, "e1", "{}")


class TestObjectStore:
    def test_put_get_copy_delete(self):
        store = MemoryObjectStore()
        store.put("a/1.txt", "one")
        store.copy("a/1.txt", "b/1.txt")
        assert store.get("b/1.txt") == b"one"
        assert store.list("a/") == ["a/1.txt"]
        assert store.delete("a/1.txt") is True
        with pytest.raises(StorageError):
            store.get("a/1.txt")


class TestQueue:
    def test_received_message_invisible_until_timeout(self):
        now = [0.0]
        queue = MemoryMessageQueue(clock=lambda: now[0])
        queue.send("hello")

        first = queue.receive(visibility_timeout=10)
        assert [m.body for m in first] == ["hello"]
        assert queue.receive() == []

        now[0] = 11.0
        again = queue.receive()
        assert [m.body for m in again] == ["hello"]
        queue.delete(again[0].receipt_handle)
        assert len(queue) == 0

    def test_stale_receipt_rejected(self):
        now = [0.0]
        queue = MemoryMessageQueue(clock=lambda: now[0])
        queue.send("m")
        stale = queue.receive(visibility_timeout=1)[0].receipt_handle
        now[0] = 5.0
        queue.receive()
        with pytest.raises(QueueError):
            queue.delete(stale)

    def test_empty_message_rejected(self):
        with pytest.raises(QueueError):
            MemoryMessageQueue().send("")
