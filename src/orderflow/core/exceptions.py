"""orderflow exception hierarchy."""

from __future__ import annotations


class OrderFlowError(Exception):
    """Base exception for all orderflow errors."""


class MalformedDefinition(OrderFlowError):
    """A workflow definition is structurally invalid."""


class RegistrationFailed(OrderFlowError):
    """The backend did not return a definition handle, or it does not round-trip."""


class InvalidExecutionInput(OrderFlowError):
    """The execution input is missing a required field."""

    def __init__(self, field: str | None, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"Invalid order data: missing required field {field!r}")


class LaunchFailed(OrderFlowError):
    """The backend did not return an execution handle."""


class PostconditionViolation(OrderFlowError):
    """A SUCCEEDED execution produced output that fails the terminal-stage check."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Postcondition failed on {field!r}: {reason}")


class BackendError(OrderFlowError):
    """An orchestration backend call failed."""


class UnexpectedExecutionStatus(BackendError):
    """The backend reported a status outside the known execution states."""

    def __init__(self, execution_handle: str, status: str) -> None:
        self.execution_handle = execution_handle
        self.status = status
        super().__init__(f"Execution {execution_handle} reported unknown status {status!r}")


class StorageError(OrderFlowError):
    """Object store operation failed."""


class QueueError(OrderFlowError):
    """Message queue operation failed."""
