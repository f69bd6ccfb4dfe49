"""Protocol interfaces for the collaborators the orchestration core calls into.

Structural typing only: production adapters live in ``orderflow.backends``
and the in-memory fakes satisfy the same Protocols for tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from orderflow.models.execution import QueueMessage, StatusObservation


# ---------------------------------------------------------------------------
# Orchestration backend
# ---------------------------------------------------------------------------

@runtime_checkable
class IOrchestrationBackend(Protocol):
    """Step Functions style backend: create, start, describe, stop."""

    def register(self, name: str, definition: str, role_arn: str) -> str | None: ...

    def start(self, definition_handle: str, launch_name: str, input_json: str) -> str | None: ...

    def describe(self, execution_handle: str) -> StatusObservation: ...

    def stop(self, execution_handle: str, error: str = "", cause: str = "") -> None: ...

    def describe_definition(self, definition_handle: str) -> dict[str, Any]: ...


# ---------------------------------------------------------------------------
# Object store
# ---------------------------------------------------------------------------

@runtime_checkable
class IObjectStore(Protocol):
    """S3-compatible object storage interface."""

    def put(self, key: str, data: bytes | str, content_type: str = "text/plain") -> str: ...

    def get(self, key: str) -> bytes: ...

    def list(self, prefix: str = "") -> list[str]: ...

    def delete(self, key: str) -> bool: ...

    def copy(self, src: str, dst: str, source_bucket: str | None = None) -> str: ...


# ---------------------------------------------------------------------------
# Message queue
# ---------------------------------------------------------------------------

@runtime_checkable
class IMessageQueue(Protocol):
    """SQS-compatible at-least-once queue interface."""

    def send(self, body: str) -> str: ...

    def receive(
        self, max_messages: int | None = None, wait_seconds: int | None = None,
        visibility_timeout: int | None = None,
    ) -> list[QueueMessage]: ...

    def delete(self, receipt_handle: str) -> None: ...
