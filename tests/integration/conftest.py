"""Integration test fixtures: LocalStack SQS."""

from __future__ import annotations

import os
import uuid

import boto3
import pytest

# Default LocalStack endpoint
LOCALSTACK_URL = os.environ.get("LOCALSTACK_URL", "http://localhost:4566")
QUEUE_PREFIX = "file-processing-inttest"


def _localstack_available() -> bool:
    """Check if LocalStack is reachable."""
    try:
        client = boto3.client("sqs", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)
        client.list_queues()
        return True
    except Exception:
        return False


skip_no_localstack = pytest.mark.skipif(
    not _localstack_available(),
    reason="LocalStack not available",
)


@pytest.fixture(scope="session")
def localstack_sqs():
    """SQS client pointing at LocalStack."""
    return boto3.client("sqs", region_name="us-east-1", endpoint_url=LOCALSTACK_URL)


@pytest.fixture
def queue_name(localstack_sqs):
    """A fresh queue name per test, deleted afterwards."""
    name = f"{QUEUE_PREFIX}-{uuid.uuid4().hex[:8]}"
    yield name
    try:
        url = localstack_sqs.get_queue_url(QueueName=name)["QueueUrl"]
    except localstack_sqs.exceptions.QueueDoesNotExist:
        return
    localstack_sqs.delete_queue(QueueUrl=url)
