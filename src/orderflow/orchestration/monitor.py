"""ExecutionMonitor: bounded status polling and outcome classification.

The monitor only observes. Each ``describe`` call counts as one attempt; while
the backend reports RUNNING the monitor sleeps ``poll_interval`` between
attempts, and it stops at the first terminal status. If ``max_attempts``
polls all report RUNNING it returns POLLING_EXHAUSTED and asks the backend,
once and best-effort, to stop the execution.

On SUCCEEDED the optional postcondition runs exactly once against the parsed
output; a failed check is reported as POSTCONDITION_VIOLATION, never as
FAILED.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from orderflow.core.exceptions import OrderFlowError, PostconditionViolation, UnexpectedExecutionStatus
from orderflow.core.protocols import IOrchestrationBackend
from orderflow.models.execution import (
    Execution,
    ExecutionStatus,
    MonitorOutcome,
    MonitorResult,
    StatusObservation,
    Violation,
)
from orderflow.orchestration.postconditions import Postcondition

logger = logging.getLogger(__name__)

_TERMINAL_OUTCOMES: dict[ExecutionStatus, MonitorOutcome] = {
    ExecutionStatus.SUCCEEDED: MonitorOutcome.SUCCEEDED,
    ExecutionStatus.FAILED: MonitorOutcome.FAILED,
    ExecutionStatus.TIMED_OUT: MonitorOutcome.TIMED_OUT,
    ExecutionStatus.ABORTED: MonitorOutcome.ABORTED,
}


def parse_output(raw: str | None) -> Any:
    """Decode backend output as JSON, keeping the raw string if it is not JSON."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


class ExecutionMonitor:
    """Polls one execution at a time until it is terminal or the budget runs out."""

    def __init__(
        self,
        backend: IOrchestrationBackend,
        *,
        poll_interval: float = 1.0,
        max_attempts: int = 30,
        postcondition: Postcondition | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        if poll_interval < 0:
            raise ValueError(f"poll_interval must be >= 0, got {poll_interval}")
        self._backend = backend
        self._poll_interval = poll_interval
        self._max_attempts = max_attempts
        self._postcondition = postcondition
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def monitor(self, execution: Execution) -> MonitorResult:
        if execution.is_terminal:
            raise OrderFlowError(f"Execution {execution.handle} is already {execution.status}")

        attempts = 0
        while attempts < self._max_attempts:
            attempts += 1
            observation = self._backend.describe(execution.handle)
            status = self._classify(execution.handle, observation)
            logger.debug(
                "Execution status",
                extra={"execution_handle": execution.handle, "status": str(status),
                       "attempt": attempts},
            )
            if status is not ExecutionStatus.RUNNING:
                return self._finish(execution, observation, status, attempts)
            if attempts < self._max_attempts:
                self._sleep(self._poll_interval)

        return self._exhausted(execution, attempts)

    @staticmethod
    def _classify(handle: str, observation: StatusObservation) -> ExecutionStatus:
        try:
            return ExecutionStatus(observation.status)
        except ValueError:
            raise UnexpectedExecutionStatus(handle, observation.status) from None

    def _finish(
        self,
        execution: Execution,
        observation: StatusObservation,
        status: ExecutionStatus,
        attempts: int,
    ) -> MonitorResult:
        output = parse_output(observation.output)
        execution = execution.observe(
            status, output=output, error=observation.error, cause=observation.cause,
        )

        if status is not ExecutionStatus.SUCCEEDED:
            logger.warning(
                "Execution ended without success",
                extra={"execution_handle": execution.handle, "status": str(status),
                       "error": observation.error, "cause": observation.cause},
            )
            return MonitorResult(
                outcome=_TERMINAL_OUTCOMES[status], execution=execution,
                attempts=attempts, last_status=status,
            )

        if self._postcondition is not None:
            try:
                self._postcondition.check(output)
            except PostconditionViolation as exc:
                logger.warning(
                    "Execution succeeded but output failed postcondition",
                    extra={"execution_handle": execution.handle, "field": exc.field,
                           "reason": exc.reason},
                )
                return MonitorResult(
                    outcome=MonitorOutcome.POSTCONDITION_VIOLATION, execution=execution,
                    attempts=attempts, last_status=status, output=output,
                    violation=Violation(field=exc.field, reason=exc.reason),
                )

        logger.info(
            "Execution succeeded",
            extra={"execution_handle": execution.handle, "attempts": attempts},
        )
        return MonitorResult(
            outcome=MonitorOutcome.SUCCEEDED, execution=execution,
            attempts=attempts, last_status=status, output=output,
        )

    def _exhausted(self, execution: Execution, attempts: int) -> MonitorResult:
        logger.warning(
            "Execution still running after polling budget, requesting stop",
            extra={"execution_handle": execution.handle, "attempts": attempts},
        )
        try:
            self._backend.stop(
                execution.handle,
                error="PollingExhausted",
                cause=f"Monitor gave up after {attempts} attempts",
            )
        except Exception as exc:
            # Stop is advisory; the exhaustion is the result the caller gets.
            logger.warning(
                "Failed to stop execution",
                extra={"execution_handle": execution.handle, "error": str(exc)},
            )
        return MonitorResult(
            outcome=MonitorOutcome.POLLING_EXHAUSTED, execution=execution,
            attempts=attempts, last_status=ExecutionStatus.RUNNING, stop_requested=True,
        )
