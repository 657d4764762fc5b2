"""
Configuration settings for the Datastore Layout Benchmark.

Uses Pydantic Settings to load environment variables for the target Datastore
project, logging, and benchmark defaults.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Datastore
    gcloud_dataset_id: Optional[str] = Field(None, alias="GCLOUD_DATASET_ID")
    datastore_namespace: Optional[str] = Field(None, alias="DATASTORE_NAMESPACE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Benchmark defaults
    benchmark_num_users: int = Field(10, alias="BENCHMARK_NUM_USERS", ge=0)
    benchmark_records_per_user: int = Field(10, alias="BENCHMARK_RECORDS_PER_USER", ge=0)
    benchmark_do_write: bool = Field(True, alias="BENCHMARK_DO_WRITE")
    benchmark_seed: Optional[int] = Field(None, alias="BENCHMARK_SEED")
    benchmark_backend: str = Field("datastore", alias="BENCHMARK_BACKEND")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
