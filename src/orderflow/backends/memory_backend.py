"""In-memory backends for unit tests — dict-backed fakes."""

from __future__ import annotations

import itertools
import json
import time
import uuid
from collections import deque
from typing import Any, Callable

from orderflow.core.exceptions import BackendError, QueueError, StorageError
from orderflow.models.execution import QueueMessage, StatusObservation
from orderflow.models.workflow import WorkflowDefinition

_ACCOUNT = "123456789012"


class MemoryOrchestrationBackend:
    """Dict-backed IOrchestrationBackend.

    Executions run the stored document's Pass states to compute their output.
    ``script`` queues the statuses the next started execution reports, one per
    ``describe``; the last entry repeats once the script runs out. Without a
    script an execution reports SUCCEEDED straight away.
    """

    def __init__(self, region: str = "us-east-1") -> None:
        self._region = region
        self._seq = itertools.count(1)
        self.definitions: dict[str, dict[str, Any]] = {}
        self.executions: dict[str, dict[str, Any]] = {}
        self.register_calls: list[str] = []
        self.start_calls: list[tuple[str, str, str]] = []
        self.describe_calls: list[str] = []
        self.stop_calls: list[tuple[str, str, str]] = []
        self.return_definition_handle = True
        self.return_execution_handle = True
        self.stop_error: Exception | None = None
        self._pending_script: list[StatusObservation | str] = []

    def script(self, *observations: StatusObservation | str) -> None:
        self._pending_script = list(observations)

    def register(self, name: str, definition: str, role_arn: str) -> str | None:
        self.register_calls.append(name)
        if not self.return_definition_handle:
            return None
        arn = f"arn:aws:states:{self._region}:{_ACCOUNT}:stateMachine:{name}"
        self.definitions[arn] = {"name": name, "definition": definition, "roleArn": role_arn}
        return arn

    def start(self, definition_handle: str, launch_name: str, input_json: str) -> str | None:
        self.start_calls.append((definition_handle, launch_name, input_json))
        if definition_handle not in self.definitions:
            raise BackendError(f"State machine does not exist: {definition_handle}")
        if not self.return_execution_handle:
            return None

        sm_name = self.definitions[definition_handle]["name"]
        arn = f"arn:aws:states:{self._region}:{_ACCOUNT}:execution:{sm_name}:{launch_name}"
        if arn in self.executions:
            raise BackendError(f"Execution already exists: {arn}")

        definition = WorkflowDefinition.from_document(self.definitions[definition_handle]["definition"])
        output = definition.simulate(json.loads(input_json))
        self.executions[arn] = {
            "input": input_json,
            "output": json.dumps(output),
            "script": deque(self._pending_script or ["SUCCEEDED"]),
            "stopped": None,
        }
        self._pending_script = []
        return arn

    def describe(self, execution_handle: str) -> StatusObservation:
        self.describe_calls.append(execution_handle)
        if execution_handle not in self.executions:
            raise BackendError(f"Execution does not exist: {execution_handle}")
        execution = self.executions[execution_handle]
        if execution["stopped"] is not None:
            return execution["stopped"]

        script: deque = execution["script"]
        entry = script.popleft() if len(script) > 1 else script[0]
        if isinstance(entry, StatusObservation):
            return entry
        if entry == "SUCCEEDED":
            return StatusObservation(status=entry, output=execution["output"])
        return StatusObservation(status=entry)

    def stop(self, execution_handle: str, error: str = "", cause: str = "") -> None:
        self.stop_calls.append((execution_handle, error, cause))
        if self.stop_error is not None:
            raise self.stop_error
        if execution_handle not in self.executions:
            raise BackendError(f"Execution does not exist: {execution_handle}")
        self.executions[execution_handle]["stopped"] = StatusObservation(
            status="ABORTED", error=error, cause=cause,
        )

    def describe_definition(self, definition_handle: str) -> dict[str, Any]:
        if definition_handle not in self.definitions:
            raise BackendError(f"State machine does not exist: {definition_handle}")
        return dict(self.definitions[definition_handle])


class MemoryObjectStore:
    """Dict-backed IObjectStore for unit tests."""

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}

    def put(self, key: str, data: bytes | str, content_type: str = "text/plain") -> str:
        self._objects[key] = data.encode("utf-8") if isinstance(data, str) else data
        return key

    def get(self, key: str) -> bytes:
        try:
            return self._objects[key]
        except KeyError:
            raise StorageError(f"No such key {key!r}") from None

    def list(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._objects if k.startswith(prefix))

    def delete(self, key: str) -> bool:
        self._objects.pop(key, None)
        return True

    def copy(self, src: str, dst: str, source_bucket: str | None = None) -> str:
        self._objects[dst] = self.get(src)
        return dst


class MemoryMessageQueue:
    """List-backed IMessageQueue with visibility timeouts on a pluggable clock."""

    def __init__(self, default_visibility_timeout: int = 30,
                 clock: Callable[[], float] = time.monotonic, *,
                 max_messages: int = 10) -> None:
        self._default_visibility = default_visibility_timeout
        self._max_messages = max_messages
        self._clock = clock
        # message_id -> [body, receipt_handle, invisible_until]
        self._messages: dict[str, list[Any]] = {}

    def send(self, body: str) -> str:
        if not body:
            raise QueueError("Cannot send an empty message")
        message_id = str(uuid.uuid4())
        self._messages[message_id] = [body, None, 0.0]
        return message_id

    def receive(
        self, max_messages: int | None = None, wait_seconds: int | None = None,
        visibility_timeout: int | None = None,
    ) -> list[QueueMessage]:
        now = self._clock()
        timeout = self._default_visibility if visibility_timeout is None else visibility_timeout
        limit = self._max_messages if max_messages is None else max_messages
        received: list[QueueMessage] = []
        for message_id, entry in self._messages.items():
            if len(received) >= limit:
                break
            if entry[2] > now:
                continue
            entry[1] = uuid.uuid4().hex
            entry[2] = now + timeout
            received.append(QueueMessage(message_id=message_id, receipt_handle=entry[1], body=entry[0]))
        return received

    def delete(self, receipt_handle: str) -> None:
        for message_id, entry in self._messages.items():
            if entry[1] == receipt_handle:
                del self._messages[message_id]
                return
        raise QueueError(f"Unknown receipt handle {receipt_handle!r}")

    def __len__(self) -> int:
        return len(self._messages)
