"""
Configuration for bucketfs.

Non-secret configuration may be loaded from a YAML file; environment
variables (``BUCKETFS_`` prefix, ``__`` for nesting) take precedence.
Credentials are expected to come from the environment.
"""

import os
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = "/etc/bucketfs/config.yaml"


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from the YAML file named by BUCKETFS_CONFIG_FILE."""
    config_path = Path(os.environ.get("BUCKETFS_CONFIG_FILE", DEFAULT_CONFIG_PATH))
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Storage Configuration Models ---


class StorageBackend(StrEnum):
    """Supported object store backends."""

    S3 = "s3"
    FILESYSTEM = "filesystem"


class S3Config(BaseModel):
    """S3-compatible object store connection."""

    bucket: str = Field(default="", description="Bucket holding every file")
    region: str = Field(default="us-east-1", description="AWS region")
    prefix: str = Field(default="", description="Key prefix within the bucket")
    endpoint_url: str = Field(
        default="",
        description="Custom endpoint URL (LocalStack, MinIO). Empty means AWS.",
    )
    access_key_id: str = Field(
        default="",
        description="Access key. Empty falls back to the SDK credential chain.",
    )
    secret_access_key: SecretStr = Field(default=SecretStr(""))
    force_path_style: bool = Field(
        default=False,
        description="Address buckets as endpoint/bucket/key instead of bucket.endpoint/key",
    )


class FilesystemConfig(BaseModel):
    """Local directory standing in for a bucket (development and CI)."""

    root_dir: str = Field(
        default="/var/lib/bucketfs/storage",
        description="Directory that plays the role of the bucket",
    )


class StorageConfig(BaseModel):
    """Storage configuration."""

    backend: StorageBackend = Field(
        default=StorageBackend.S3,
        description="Object store backend: s3 or filesystem",
    )
    s3: S3Config = Field(default_factory=S3Config)
    filesystem: FilesystemConfig = Field(default_factory=FilesystemConfig)


# --- Main Settings ---


class Settings(BaseSettings):
    """Process-wide settings, fixed once constructed."""

    model_config = SettingsConfigDict(
        env_prefix="BUCKETFS_",
        env_nested_delimiter="__",
        extra="ignore",
        frozen=True,
    )

    debug: bool = Field(default=False, description="Force DEBUG logging")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="JSON logging in production")
    default_encoding: str = Field(
        default="utf-8",
        description="Encoding used by read_file/write_file when the caller gives none",
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
