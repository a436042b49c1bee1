"""Tests for the queue bootstrap script."""

from __future__ import annotations

import sys
from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from sheetflow.queue.codec import decode_job

# Make scripts/ importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "scripts"))

from create_queue import create_queue, enqueue_files  # noqa: E402


@pytest.fixture
def sqs():
    with mock_aws():
        yield boto3.client("sqs", region_name="us-east-1")


class TestCreateQueue:
    def test_creates_queue(self, sqs):
        url = create_queue(sqs, name="file-processing-test")
        assert url.endswith("/file-processing-test")
        assert len(sqs.list_queues()["QueueUrls"]) == 1

    def test_idempotent_skips_existing(self, sqs):
        first = create_queue(sqs, name="file-processing-test")
        second = create_queue(sqs, name="file-processing-test")
        assert first == second
        assert len(sqs.list_queues()["QueueUrls"]) == 1

    def test_prefix_match_is_not_a_hit(self, sqs):
        create_queue(sqs, name="file-processing-dlq")
        create_queue(sqs, name="file-processing")
        assert len(sqs.list_queues()["QueueUrls"]) == 2

    def test_sets_visibility_timeout(self, sqs):
        url = create_queue(sqs, name="vt-test", visibility_timeout=45)
        attrs = sqs.get_queue_attributes(QueueUrl=url, AttributeNames=["VisibilityTimeout"])
        assert attrs["Attributes"]["VisibilityTimeout"] == "45"


class TestEnqueueFiles:
    def test_enqueues_decodable_jobs(self, sqs):
        url = create_queue(sqs, name="file-processing-test")
        assert enqueue_files(sqs, url, ["uploads/a.csv", "uploads/b.xlsx"]) == 2
        msgs = sqs.receive_message(QueueUrl=url, MaxNumberOfMessages=10)["Messages"]
        names = sorted(decode_job(m["Body"]).original_name for m in msgs)
        assert names == ["a.csv", "b.xlsx"]
