"""Integration test fixtures — LocalStack Step Functions, S3, SQS."""

from __future__ import annotations

import os

import boto3
import pytest

from orderflow.core.config import AppSettings, MonitorConfig, S3Config, SQSConfig, StepFunctionsConfig

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
LOCALSTACK_ROLE_ARN = "arn:aws:iam::000000000000:role/orderflow-sfn-role"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("stepfunctions", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
        client.list_state_machines()
        return True
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_settings():
    """AppSettings pointing every backend at LocalStack."""
    return AppSettings(
        sfn=StepFunctionsConfig(endpoint_url=LOCALSTACK_URL, role_arn=LOCALSTACK_ROLE_ARN),
        monitor=MonitorConfig(poll_interval_seconds=1.0, max_attempts=30),
        s3=S3Config(bucket="orderflow-inttest", endpoint_url=LOCALSTACK_URL),
        sqs=SQSConfig(endpoint_url=LOCALSTACK_URL),
    )
