"""Execution, status and monitoring result models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, Field

from orderflow.core.exceptions import OrderFlowError
from orderflow.core.types import JsonDict


class ExecutionStatus(StrEnum):
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    ABORTED = "ABORTED"

    @property
    def is_terminal(self) -> bool:
        return self is not ExecutionStatus.RUNNING


class MonitorOutcome(StrEnum):
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    ABORTED = "ABORTED"
    POLLING_EXHAUSTED = "POLLING_EXHAUSTED"  # monitor-local, never a backend state
    POSTCONDITION_VIOLATION = "POSTCONDITION_VIOLATION"


class StatusObservation(BaseModel):
    """One ``describe`` answer from the backend, as reported."""

    status: str
    output: Optional[str] = None
    error: str = ""
    cause: str = ""


class Execution(BaseModel):
    """One run of a registered definition.

    Status is whatever the backend last reported; ``observe`` returns an
    updated copy and refuses to touch an execution that is already terminal.
    """

    model_config = {"frozen": True}

    handle: str
    name: str
    input: JsonDict
    status: ExecutionStatus = ExecutionStatus.RUNNING
    output: Any = None
    error: str = ""
    cause: str = ""

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def observe(
        self, status: ExecutionStatus, *, output: Any = None, error: str = "", cause: str = ""
    ) -> Execution:
        if self.is_terminal:
            raise OrderFlowError(f"Execution {self.handle} is already terminal ({self.status})")
        return self.model_copy(
            update={
                "status": status,
                "output": output if status is ExecutionStatus.SUCCEEDED else None,
                "error": error,
                "cause": cause,
            }
        )


class Violation(BaseModel):
    field: str
    reason: str


class MonitorResult(BaseModel):
    """Classified end state of one monitored execution."""

    outcome: MonitorOutcome
    execution: Execution
    attempts: int
    last_status: ExecutionStatus
    output: Any = None
    violation: Optional[Violation] = None
    stop_requested: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome is MonitorOutcome.SUCCEEDED


class WorkflowRunReport(BaseModel):
    """Structured result of one register -> launch -> monitor run."""

    phase: str
    outcome: Optional[str] = None
    definition_handle: str = ""
    execution_handle: str = ""
    attempts: int = 0
    output: Any = None
    error: str = ""
    error_type: str = ""
    details: JsonDict = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.outcome == MonitorOutcome.SUCCEEDED


class QueueMessage(BaseModel):
    """A message received from the queue, with the handle needed to ack it."""

    message_id: str
    receipt_handle: str
    body: str
