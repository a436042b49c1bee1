"""Amazon SQS backend implementing IJobQueue."""

from __future__ import annotations

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from sheetflow.core.exceptions import TransportError
from sheetflow.models.job import QueueMessage
from sheetflow.queue.codec import to_wire

logger = logging.getLogger(__name__)

# SQS rejects ReceiveMessage with MaxNumberOfMessages outside 1-10
SQS_MAX_BATCH = 10

# Visibility held on a message between the receipt check and the delete
DELETE_GUARD_SECONDS = 30


class SQSJobQueue:
    """Production IJobQueue backed by SQS.

    boto3 clients are thread-safe, so one instance can serve concurrent
    enqueue calls from the API and a worker loop in the same process.
    """

    def __init__(self, queue_name: str, region: str = "us-east-1",
                 endpoint_url: str | None = None, wait_time_seconds: int = 0) -> None:
        self._queue_name = queue_name
        self._region = region
        self._endpoint_url = endpoint_url
        self._wait_time_seconds = wait_time_seconds
        self._queue_url: str | None = None
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("sqs", **kwargs)

    @property
    def queue_name(self) -> str:
        return self._queue_name

    def _url(self) -> str:
        if self._queue_url is None:
            try:
                resp = self._client.get_queue_url(QueueName=self._queue_name)
            except (ClientError, BotoCoreError) as exc:
                raise TransportError(f"SQS queue {self._queue_name!r} lookup failed: {exc}") from exc
            self._queue_url = resp["QueueUrl"]
        return self._queue_url

    def ensure_exists(self) -> None:
        try:
            resp = self._client.create_queue(QueueName=self._queue_name)
        except (ClientError, BotoCoreError) as exc:
            raise TransportError(f"SQS create_queue {self._queue_name!r} failed: {exc}") from exc
        self._queue_url = resp["QueueUrl"]
        logger.debug("Queue ready name=%s url=%s", self._queue_name, self._queue_url)

    def enqueue(self, body: bytes) -> str:
        url = self._url()
        try:
            resp = self._client.send_message(QueueUrl=url, MessageBody=to_wire(body))
        except (ClientError, BotoCoreError) as exc:
            raise TransportError(f"SQS send to {self._queue_name!r} failed: {exc}") from exc
        return resp["MessageId"]

    def receive_batch(self, max_messages: int, visibility_timeout: int) -> list[QueueMessage]:
        url = self._url()
        try:
            resp = self._client.receive_message(
                QueueUrl=url,
                MaxNumberOfMessages=max(1, min(max_messages, SQS_MAX_BATCH)),
                VisibilityTimeout=visibility_timeout,
                WaitTimeSeconds=self._wait_time_seconds,
                AttributeNames=["ApproximateReceiveCount"],
            )
        except (ClientError, BotoCoreError) as exc:
            raise TransportError(f"SQS receive from {self._queue_name!r} failed: {exc}") from exc

        return [
            QueueMessage(
                message_id=msg["MessageId"],
                receipt=msg["ReceiptHandle"],
                body=msg["Body"],
                dequeue_count=int(msg.get("Attributes", {}).get("ApproximateReceiveCount", 1)),
            )
            for msg in resp.get("Messages", [])
        ]

    def delete(self, message_id: str, receipt: str) -> None:
        """Delete a message held under ``receipt``.

        DeleteMessage alone accepts handles for messages that are already
        gone, so the receipt is first checked with ChangeMessageVisibility,
        which SQS rejects (``ReceiptHandleIsInvalid``/``MessageNotInflight``)
        once the message was deleted or is no longer in flight.
        """
        url = self._url()
        try:
            self._client.change_message_visibility(
                QueueUrl=url, ReceiptHandle=receipt, VisibilityTimeout=DELETE_GUARD_SECONDS,
            )
            self._client.delete_message(QueueUrl=url, ReceiptHandle=receipt)
        except (ClientError, BotoCoreError) as exc:
            raise TransportError(
                f"SQS delete of message_id={message_id!r} failed: {exc}"
            ) from exc
