"""Configuration settings for cronsync."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Scheduler
    scheduler_timezone: str = "UTC"
    scheduler_job_defaults: dict = {
        "coalesce": True,
        "max_instances": 1,
        "misfire_grace_time": 30
    }

    # Dispatch
    dispatch_url: Optional[str] = None  # Worker to trigger over HTTP, if any
    http_timeout: int = 30

    # Logging
    log_level: str = "INFO"
    log_file: str = ""
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_prefix = "CRONSYNC_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
