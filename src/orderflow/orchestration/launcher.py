"""ExecutionLauncher: input validation and execution start."""

from __future__ import annotations

import itertools
import json
import logging
import re
import time
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Callable

from orderflow.core.exceptions import InvalidExecutionInput, LaunchFailed
from orderflow.core.protocols import IOrchestrationBackend
from orderflow.models.execution import Execution
from orderflow.models.workflow import RegisteredDefinition, WorkflowDefinition

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 80  # Step Functions execution name limit
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


class _DecimalEncoder(json.JSONEncoder):
    """Encode Decimal values as int or float for JSON serialization."""

    def default(self, o: Any) -> Any:
        if isinstance(o, Decimal):
            if not o.is_finite():
                raise ValueError(f"Out of range decimal value: {o}")
            return int(o) if o == int(o) else float(o)
        return super().default(o)


def encode_input(record: Mapping[str, Any]) -> str:
    """Serialize an execution input as compact JSON, rejecting non-finite numbers."""
    try:
        return json.dumps(
            dict(record), cls=_DecimalEncoder, separators=(",", ":"), allow_nan=False,
        )
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidExecutionInput(
            None, f"Invalid order data: input is not JSON serializable: {exc}"
        ) from exc


def validate_input(definition: WorkflowDefinition, record: Any) -> None:
    """Raise InvalidExecutionInput naming the first missing field in declared order."""
    if not isinstance(record, Mapping):
        raise InvalidExecutionInput(
            None, f"Invalid order data: expected an object, got {type(record).__name__}"
        )
    for field in definition.required_input_fields:
        if record.get(field) is None:
            raise InvalidExecutionInput(field)
    start = definition.stages[definition.start_at]
    for field in record:
        if field not in start.transform.produced_fields:
            raise InvalidExecutionInput(
                field, f"Invalid order data: field {field!r} is not carried by stage {start.name!r}"
            )


class ExecutionLauncher:
    """Starts executions with launch names unique per call."""

    def __init__(
        self,
        backend: IOrchestrationBackend,
        *,
        name_prefix: str = "execution",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._backend = backend
        self._name_prefix = name_prefix
        self._clock = clock
        self._seq = itertools.count(1)

    def launch_name(self, correlation_key: str) -> str:
        suffix = f"-{int(self._clock() * 1000)}-{next(self._seq)}"
        head = f"{self._name_prefix}-"
        budget = MAX_NAME_LENGTH - len(head) - len(suffix)
        key = _UNSAFE_NAME_CHARS.sub("-", correlation_key).strip("-")[:budget] or "run"
        return f"{head}{key}{suffix}"

    def start(
        self,
        registered: RegisteredDefinition,
        record: Any,
        *,
        correlation_key: str | None = None,
    ) -> Execution:
        definition = registered.definition
        validate_input(definition, record)

        if correlation_key is None:
            fields = definition.required_input_fields
            correlation_key = str(record[fields[0]]) if fields else "run"

        input_json = encode_input(record)
        payload = dict(record)
        name = self.launch_name(correlation_key)
        handle = self._backend.start(registered.handle, name, input_json)
        if not handle:
            raise LaunchFailed(f"Backend returned no execution handle for {name!r}")

        logger.info(
            "Started execution",
            extra={"execution_name": name, "execution_handle": handle,
                   "definition_handle": registered.handle},
        )
        return Execution(handle=handle, name=name, input=payload)
