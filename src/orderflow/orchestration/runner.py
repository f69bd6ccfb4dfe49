"""WorkflowRunner: register -> launch -> monitor for one workflow instance."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

from orderflow.core.config import AppSettings
from orderflow.core.exceptions import InvalidExecutionInput, OrderFlowError
from orderflow.core.protocols import IOrchestrationBackend
from orderflow.models.execution import MonitorOutcome, WorkflowRunReport
from orderflow.models.workflow import RegisteredDefinition, WorkflowDefinition
from orderflow.orchestration.launcher import ExecutionLauncher
from orderflow.orchestration.monitor import ExecutionMonitor
from orderflow.orchestration.postconditions import Postcondition
from orderflow.orchestration.registry import DefinitionRegistry

logger = logging.getLogger(__name__)


class WorkflowRunner:
    """Drives one linear pipeline, strictly sequentially.

    The registered definition is kept for the runner's lifetime so repeated
    runs of the same definition launch against one state machine.
    """

    def __init__(
        self,
        backend: IOrchestrationBackend,
        settings: AppSettings | None = None,
        *,
        postcondition: Postcondition | None = None,
        verify_registration: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if settings is None:
            settings = AppSettings()
        self._registry = DefinitionRegistry(
            backend, role_arn=settings.sfn.role_arn, name_prefix=settings.sfn.name_prefix,
        )
        self._launcher = ExecutionLauncher(backend)
        self._monitor = ExecutionMonitor(
            backend,
            poll_interval=settings.monitor.poll_interval_seconds,
            max_attempts=settings.monitor.max_attempts,
            postcondition=postcondition,
            sleep=sleep,
        )
        self._verify = verify_registration
        self._registered: RegisteredDefinition | None = None

    @property
    def registered(self) -> RegisteredDefinition | None:
        return self._registered

    def register(self, definition: WorkflowDefinition) -> RegisteredDefinition:
        if self._registered is None or self._registered.definition != definition:
            registered = self._registry.register(definition)
            if self._verify:
                self._registry.verify(registered)
            self._registered = registered
        return self._registered

    def run(
        self,
        definition: WorkflowDefinition,
        record: Any,
        *,
        correlation_key: str | None = None,
    ) -> WorkflowRunReport:
        phase = "registration"
        definition_handle = ""
        execution_handle = ""
        try:
            registered = self.register(definition)
            definition_handle = registered.handle

            phase = "launch"
            execution = self._launcher.start(registered, record, correlation_key=correlation_key)
            execution_handle = execution.handle

            phase = "monitor"
            result = self._monitor.monitor(execution)
        except OrderFlowError as exc:
            logger.error(
                "Workflow run failed",
                extra={"phase": phase, "error_type": type(exc).__name__, "error": str(exc)},
            )
            details: dict[str, Any] = {}
            if isinstance(exc, InvalidExecutionInput):
                details["field"] = exc.field
            return WorkflowRunReport(
                phase=phase,
                definition_handle=definition_handle,
                execution_handle=execution_handle,
                error=str(exc),
                error_type=type(exc).__name__,
                details=details,
            )

        details = {"stop_requested": result.stop_requested, "last_status": str(result.last_status)}
        error = result.execution.error
        if result.violation is not None:
            details["violation"] = result.violation.model_dump()
            error = f"{result.violation.field}: {result.violation.reason}"
        elif result.outcome is MonitorOutcome.POLLING_EXHAUSTED:
            error = f"Execution still RUNNING after {result.attempts} attempts"
        if result.execution.cause:
            details["cause"] = result.execution.cause

        return WorkflowRunReport(
            phase=phase,
            outcome=str(result.outcome),
            definition_handle=definition_handle,
            execution_handle=execution_handle,
            attempts=result.attempts,
            output=result.output,
            error=error,
            details=details,
        )
