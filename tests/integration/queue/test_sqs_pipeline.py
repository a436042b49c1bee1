"""Integration tests for the SQS-backed pipeline against LocalStack."""

from __future__ import annotations

import time

import pytest

from sheetflow.ingestion.dispatcher import IngestionDispatcher
from sheetflow.models.job import FileHandle
from sheetflow.queue.sqs_backend import SQSJobQueue
from sheetflow.services.producer import QueueProducer
from sheetflow.workers.queue_worker import QueueWorker
from tests.integration.conftest import LOCALSTACK_URL, skip_no_localstack


@skip_no_localstack
class TestSQSPipeline:
    @pytest.fixture
    def queue(self, queue_name):
        q = SQSJobQueue(queue_name=queue_name, region="us-east-1", endpoint_url=LOCALSTACK_URL)
        q.ensure_exists()
        return q

    def test_upload_to_processed(self, queue, tmp_path):
        path = tmp_path / "1-1.csv"
        path.write_text("h1,h2\n1,2\n3,4\n5,6\n")
        QueueProducer(queue).enqueue_job(FileHandle(original_name="a.csv", stored_path=str(path)))

        worker = QueueWorker(queue, IngestionDispatcher(), batch_size=10, poll_interval=0)
        assert worker.run_once() == 1
        assert worker.get_stats()["processed"] == 1
        assert queue.receive_batch(10, 0) == []

    def test_failed_job_is_redelivered(self, queue, tmp_path):
        QueueProducer(queue).enqueue_job(
            FileHandle(original_name="a.csv", stored_path=str(tmp_path / "missing.csv"))
        )
        worker = QueueWorker(queue, IngestionDispatcher(), visibility_timeout=1, poll_interval=0)
        worker.run_once()
        assert worker.get_stats()["failed"] == 1

        time.sleep(1.5)
        [msg] = queue.receive_batch(1, 30)
        assert msg.dequeue_count == 2
