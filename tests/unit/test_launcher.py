"""Tests for ExecutionLauncher input validation and launch naming."""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from orderflow.core.exceptions import InvalidExecutionInput, LaunchFailed
from orderflow.models.execution import ExecutionStatus
from orderflow.orchestration.launcher import MAX_NAME_LENGTH, ExecutionLauncher
from orderflow.orchestration.registry import DefinitionRegistry
from tests.fakes import ROLE_ARN


@pytest.fixture
def registered(backend, order_definition):
    return DefinitionRegistry(backend, role_arn=ROLE_ARN).register(order_definition)


@pytest.fixture
def launcher(backend):
    return ExecutionLauncher(backend, clock=lambda: 1700000000.0)


class TestValidation:
    def test_reports_first_missing_field_in_declared_order(self, launcher, registered, backend):
        with pytest.raises(InvalidExecutionInput) as exc_info:
            launcher.start(registered, {"items": ["x"]})
        assert exc_info.value.field == "orderId"
        assert backend.start_calls == []

    @pytest.mark.parametrize(
        "record, missing",
        [
            ({}, "orderId"),
            ({"orderId": "o"}, "items"),
            ({"total": 100}, "orderId"),
            ({"orderId": "o", "items": ["a"]}, "total"),
            ({"orderId": "o", "total": 100}, "items"),
            ({"items": ["a"], "total": 100}, "orderId"),
            ({"orderId": "o", "items": ["a"], "total": None}, "total"),
        ],
    )
    def test_missing_fields(self, launcher, registered, backend, record, missing):
        with pytest.raises(InvalidExecutionInput, match="Invalid order data") as exc_info:
            launcher.start(registered, record)
        assert exc_info.value.field == missing
        assert backend.start_calls == []

    @pytest.mark.parametrize("record", [None, "order", ["orderId"]])
    def test_non_mapping_input(self, launcher, registered, backend, record):
        with pytest.raises(InvalidExecutionInput) as exc_info:
            launcher.start(registered, record)
        assert exc_info.value.field is None
        assert backend.start_calls == []

    def test_zero_total_is_present(self, launcher, registered):
        execution = launcher.start(registered, {"orderId": "o", "items": [], "total": 0})
        assert execution.status is ExecutionStatus.RUNNING

    def test_field_the_start_stage_would_drop(self, launcher, registered, backend, order):
        with pytest.raises(InvalidExecutionInput, match="not carried") as exc_info:
            launcher.start(registered, {**order, "customer": "c-1"})
        assert exc_info.value.field == "customer"
        assert backend.start_calls == []

    def test_field_overwritten_by_start_stage_is_accepted(self, launcher, registered, order):
        execution = launcher.start(registered, {**order, "status": "NEW"})
        assert execution.input["status"] == "NEW"

    @pytest.mark.parametrize(
        "total", [Decimal("NaN"), Decimal("Infinity"), Decimal("-Infinity"), float("nan"), float("inf")],
    )
    def test_non_finite_total(self, launcher, registered, backend, total):
        with pytest.raises(InvalidExecutionInput, match="not JSON serializable") as exc_info:
            launcher.start(registered, {"orderId": "o", "items": ["a"], "total": total})
        assert exc_info.value.field is None
        assert backend.start_calls == []

    def test_unserializable_value(self, launcher, registered, backend):
        with pytest.raises(InvalidExecutionInput, match="not JSON serializable"):
            launcher.start(registered, {"orderId": "o", "items": {"a", "b"}, "total": 1})
        assert backend.start_calls == []


class TestStart:
    def test_returns_running_execution(self, launcher, registered, order):
        execution = launcher.start(registered, order)
        assert execution.handle.startswith("arn:aws:states:")
        assert execution.input == order
        assert execution.status is ExecutionStatus.RUNNING
        assert execution.output is None

    def test_submits_compact_json(self, launcher, registered, backend, order):
        launcher.start(registered, order)
        _, _, input_json = backend.start_calls[0]
        assert input_json == json.dumps(order, separators=(",", ":"))

    def test_decimal_total_serialised_as_number(self, launcher, registered, backend):
        launcher.start(registered, {"orderId": "o", "items": ["a"], "total": Decimal("999.99")})
        _, _, input_json = backend.start_calls[0]
        assert json.loads(input_json)["total"] == 999.99

    def test_repeated_launches_get_distinct_names(self, launcher, registered, backend, order):
        first = launcher.start(registered, order)
        second = launcher.start(registered, order)
        assert first.name != second.name
        assert first.handle != second.handle
        assert len(backend.start_calls) == 2

    def test_name_uses_order_id(self, launcher, registered, order):
        execution = launcher.start(registered, order)
        assert execution.name == "execution-order-1-1700000000000-1"

    def test_correlation_key_override(self, launcher, registered, order):
        execution = launcher.start(registered, order, correlation_key="batch 7/x")
        assert execution.name.startswith("execution-batch-7-x-")

    def test_launch_failed_without_handle(self, launcher, registered, backend, order):
        backend.return_execution_handle = False
        with pytest.raises(LaunchFailed):
            launcher.start(registered, order)


class TestLaunchName:
    def test_long_key_truncated_to_limit(self, launcher):
        name = launcher.launch_name("x" * 200)
        assert len(name) <= MAX_NAME_LENGTH
        assert name.endswith("-1700000000000-1")

    def test_unsafe_only_key_falls_back(self, launcher):
        assert launcher.launch_name("///").startswith("execution-run-")

    def test_sequence_increments(self, launcher):
        assert launcher.launch_name("k").endswith("-1")
        assert launcher.launch_name("k").endswith("-2")
