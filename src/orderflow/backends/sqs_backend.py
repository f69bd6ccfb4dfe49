"""SQS queue backend implementing IMessageQueue."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from orderflow.core.exceptions import QueueError
from orderflow.models.execution import QueueMessage


class SQSMessageQueue:
    """Production IMessageQueue backed by one SQS queue."""

    def __init__(self, queue_url: str, region: str = "us-east-1",
                 endpoint_url: str | None = None, *,
                 max_messages: int = 10, wait_seconds: int = 1) -> None:
        self._queue_url = queue_url
        self._max_messages = max_messages
        self._wait_seconds = wait_seconds
        self._region = region
        self._endpoint_url = endpoint_url
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("sqs", **kwargs)

    def send(self, body: str) -> str:
        if not body:
            raise QueueError("Cannot send an empty message")
        try:
            resp = self._client.send_message(QueueUrl=self._queue_url, MessageBody=body)
        except (BotoCoreError, ClientError) as exc:
            raise QueueError(f"SQS send failed: {exc}") from exc
        message_id = resp.get("MessageId")
        if not message_id:
            raise QueueError("SQS send returned no message id")
        return message_id

    def receive(
        self, max_messages: int | None = None, wait_seconds: int | None = None,
        visibility_timeout: int | None = None,
    ) -> list[QueueMessage]:
        kwargs: dict[str, Any] = {
            "QueueUrl": self._queue_url,
            "MaxNumberOfMessages": self._max_messages if max_messages is None else max_messages,
            "WaitTimeSeconds": self._wait_seconds if wait_seconds is None else wait_seconds,
        }
        if visibility_timeout is not None:
            kwargs["VisibilityTimeout"] = visibility_timeout
        try:
            resp = self._client.receive_message(**kwargs)
        except (BotoCoreError, ClientError) as exc:
            raise QueueError(f"SQS receive failed: {exc}") from exc
        return [
            QueueMessage(
                message_id=msg["MessageId"],
                receipt_handle=msg["ReceiptHandle"],
                body=msg.get("Body", ""),
            )
            for msg in resp.get("Messages", [])
        ]

    def delete(self, receipt_handle: str) -> None:
        try:
            self._client.delete_message(QueueUrl=self._queue_url, ReceiptHandle=receipt_handle)
        except (BotoCoreError, ClientError) as exc:
            raise QueueError(f"SQS delete failed: {exc}") from exc
