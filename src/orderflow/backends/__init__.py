"""Pluggable AWS backends behind Protocol interfaces."""

from __future__ import annotations

from orderflow.backends.s3_backend import S3ObjectStore
from orderflow.backends.sfn_backend import StepFunctionsBackend
from orderflow.backends.sqs_backend import SQSMessageQueue
from orderflow.core.config import AppSettings


def create_backends(settings: AppSettings | None = None):
    """Create wired-up backends from application settings.

    Returns:
        Tuple of (orchestration, object_store, queue). ``queue`` is None when
        no queue URL is configured.
    """
    if settings is None:
        settings = AppSettings()

    orchestration = StepFunctionsBackend(
        region=settings.sfn.region,
        endpoint_url=settings.sfn.endpoint_url,
    )

    object_store = S3ObjectStore(
        bucket=settings.s3.bucket,
        region=settings.s3.region,
        endpoint_url=settings.s3.endpoint_url,
    )

    queue = None
    if settings.sqs.queue_url:
        queue = SQSMessageQueue(
            queue_url=settings.sqs.queue_url,
            region=settings.sqs.region,
            endpoint_url=settings.sqs.endpoint_url,
            max_messages=settings.sqs.max_messages,
            wait_seconds=settings.sqs.wait_time_seconds,
        )

    return orchestration, object_store, queue
