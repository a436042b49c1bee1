"""Create the SheetFlow file-processing queue and optionally enqueue existing files.

Usage:
    python scripts/create_queue.py --endpoint-url http://localhost:4566
    python scripts/create_queue.py --enqueue uploads/report.csv
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import boto3

from sheetflow.models.job import JobDescriptor
from sheetflow.queue.codec import encode_job, to_wire

DEFAULT_QUEUE_NAME = "file-processing"


def create_queue(sqs: Any, name: str = DEFAULT_QUEUE_NAME, visibility_timeout: int = 30) -> str:
    """Create the queue if missing and return its URL. Idempotent."""
    existing = sqs.list_queues(QueueNamePrefix=name).get("QueueUrls", [])
    for url in existing:
        if url.rsplit("/", 1)[-1] == name:
            print(f"  Queue {name} already exists, skipping")
            return url
    resp = sqs.create_queue(
        QueueName=name,
        Attributes={"VisibilityTimeout": str(visibility_timeout)},
    )
    print(f"  Created queue {name}")
    return resp["QueueUrl"]


def enqueue_files(sqs: Any, queue_url: str, paths: list[str]) -> int:
    """Enqueue already-stored files as jobs, using the file name as the original name."""
    count = 0
    for raw in paths:
        path = Path(raw)
        job = JobDescriptor(
            original_name=path.name,
            filename=path.name,
            path=str(path),
            uploaded_at=datetime.now(timezone.utc),
        )
        sqs.send_message(QueueUrl=queue_url, MessageBody=to_wire(encode_job(job)))
        count += 1
    print(f"  Enqueued {count} files")
    return count


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the SheetFlow SQS queue")
    parser.add_argument("--endpoint-url", default=None, help="SQS endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--queue-name", default=DEFAULT_QUEUE_NAME, help="Queue name")
    parser.add_argument("--visibility-timeout", type=int, default=30, help="Default visibility timeout (s)")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    parser.add_argument("--enqueue", nargs="*", default=[], help="Stored files to enqueue")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    sqs = boto3.client("sqs", **kwargs)

    print("Creating queue...")
    url = create_queue(sqs, name=args.queue_name, visibility_timeout=args.visibility_timeout)

    if args.enqueue:
        print("Enqueuing files...")
        enqueue_files(sqs, url, args.enqueue)

    print("Done!")


if __name__ == "__main__":
    main()
