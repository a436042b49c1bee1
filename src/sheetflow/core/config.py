"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class QueueConfig(BaseSettings):
    """Job queue transport and worker polling configuration."""

    model_config = {"env_prefix": "SHEETFLOW_QUEUE_"}

    backend: Literal["sqs", "memory"] = "sqs"
    name: str = "file-processing"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    poll_interval: float = 5.0  # seconds between polls
    visibility_timeout: int = 30  # seconds a received message stays hidden
    batch_size: int = 1
    wait_time_seconds: int = 0  # SQS long polling, 0-20


class UploadConfig(BaseSettings):
    """Upload intake limits and storage location."""

    model_config = {"env_prefix": "SHEETFLOW_UPLOAD_"}

    upload_dir: str = "./uploads"
    # Only formats with a registered parser; legacy .xls is refused at intake
    allowed_extensions: list[str] = [".xlsx", ".xlsm", ".csv"]
    max_files: int = 20
    max_file_size: int = 2 * 1024 * 1024 * 1024  # 2 GiB


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "SHEETFLOW_"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    queue: QueueConfig = QueueConfig()
    upload: UploadConfig = UploadConfig()
