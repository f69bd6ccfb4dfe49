"""Definition registration, execution launch and status monitoring."""

from __future__ import annotations

from orderflow.orchestration.launcher import ExecutionLauncher
from orderflow.orchestration.monitor import ExecutionMonitor
from orderflow.orchestration.postconditions import Postcondition, ShippedOrderPostcondition
from orderflow.orchestration.registry import DefinitionRegistry
from orderflow.orchestration.runner import WorkflowRunner

__all__ = [
    "DefinitionRegistry",
    "ExecutionLauncher",
    "ExecutionMonitor",
    "Postcondition",
    "ShippedOrderPostcondition",
    "WorkflowRunner",
]
