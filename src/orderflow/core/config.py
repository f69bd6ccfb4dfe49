"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class StepFunctionsConfig(BaseSettings):
    """Step Functions orchestration backend configuration."""

    model_config = {"env_prefix": "ORDERFLOW_SFN_"}

    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    role_arn: str = "arn:aws:iam::123456789012:role/orderflow-sfn-role"
    name_prefix: str = "order-processing"


class MonitorConfig(BaseSettings):
    """Execution polling configuration."""

    model_config = {"env_prefix": "ORDERFLOW_MONITOR_"}

    poll_interval_seconds: float = 1.0
    max_attempts: int = 30


class S3Config(BaseSettings):
    """S3 object store configuration."""

    model_config = {"env_prefix": "ORDERFLOW_S3_"}

    bucket: str = "orderflow-artifacts"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class SQSConfig(BaseSettings):
    """SQS queue configuration."""

    model_config = {"env_prefix": "ORDERFLOW_SQS_"}

    queue_url: str = ""
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    wait_time_seconds: int = 1
    max_messages: int = 10


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "ORDERFLOW_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    sfn: StepFunctionsConfig = StepFunctionsConfig()
    monitor: MonitorConfig = MonitorConfig()
    s3: S3Config = S3Config()
    sqs: SQSConfig = SQSConfig()
