"""Step Functions backend implementing IOrchestrationBackend."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from orderflow.core.exceptions import BackendError
from orderflow.models.execution import StatusObservation


class StepFunctionsBackend:
    """Production IOrchestrationBackend backed by AWS Step Functions."""

    def __init__(self, region: str = "us-east-1", endpoint_url: str | None = None) -> None:
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("stepfunctions", **kwargs)

    def register(self, name: str, definition: str, role_arn: str) -> str | None:
        try:
            resp = self._client.create_state_machine(
                name=name, definition=definition, roleArn=role_arn,
            )
        except (BotoCoreError, ClientError) as exc:
            raise BackendError(f"CreateStateMachine failed for {name!r}: {exc}") from exc
        return resp.get("stateMachineArn")

    def start(self, definition_handle: str, launch_name: str, input_json: str) -> str | None:
        try:
            resp = self._client.start_execution(
                stateMachineArn=definition_handle, name=launch_name, input=input_json,
            )
        except (BotoCoreError, ClientError) as exc:
            raise BackendError(f"StartExecution failed for {launch_name!r}: {exc}") from exc
        return resp.get("executionArn")

    def describe(self, execution_handle: str) -> StatusObservation:
        try:
            resp = self._client.describe_execution(executionArn=execution_handle)
        except (BotoCoreError, ClientError) as exc:
            raise BackendError(f"DescribeExecution failed for {execution_handle!r}: {exc}") from exc
        return StatusObservation(
            status=resp.get("status", "UNKNOWN"),
            output=resp.get("output"),
            error=resp.get("error", ""),
            cause=resp.get("cause", ""),
        )

    def stop(self, execution_handle: str, error: str = "", cause: str = "") -> None:
        kwargs: dict[str, Any] = {"executionArn": execution_handle}
        if error:
            kwargs["error"] = error
        if cause:
            kwargs["cause"] = cause
        try:
            self._client.stop_execution(**kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise BackendError(f"StopExecution failed for {execution_handle!r}: {exc}") from exc

    def describe_definition(self, definition_handle: str) -> dict[str, Any]:
        try:
            resp = self._client.describe_state_machine(stateMachineArn=definition_handle)
        except (BotoCoreError, ClientError) as exc:
            raise BackendError(f"DescribeStateMachine failed for {definition_handle!r}: {exc}") from exc
        return {
            "name": resp.get("name"),
            "definition": resp.get("definition"),
            "roleArn": resp.get("roleArn"),
            "status": resp.get("status"),
        }
