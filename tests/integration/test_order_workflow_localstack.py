"""Integration tests for the order workflow against LocalStack."""

from __future__ import annotations

import pytest

from orderflow.backends.sfn_backend import StepFunctionsBackend
from orderflow.models.execution import MonitorOutcome
from orderflow.orchestration.runner import WorkflowRunner
from orderflow.pipelines.orders import build_order_definition, order_postcondition
from tests.integration.conftest import skip_no_localstack


@skip_no_localstack
class TestOrderWorkflowIntegration:
    @pytest.fixture
    def runner(self, localstack_settings):
        backend = StepFunctionsBackend(
            region=localstack_settings.sfn.region,
            endpoint_url=localstack_settings.sfn.endpoint_url,
        )
        return WorkflowRunner(
            backend, localstack_settings,
            postcondition=order_postcondition(), verify_registration=True,
        )

    def test_order_ships(self, runner):
        report = runner.run(
            build_order_definition(),
            {"orderId": "test-123", "items": ["item1", "item2"], "total": 100.0},
        )
        assert report.outcome == MonitorOutcome.SUCCEEDED
        assert report.output["status"] == "SHIPPED"
        assert report.output["trackingNumber"]

    def test_invalid_input_never_launches(self, runner):
        report = runner.run(build_order_definition(), {"orderId": "test-123", "items": ["x"]})
        assert report.phase == "launch"
        assert report.details["field"] == "total"
