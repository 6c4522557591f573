"""
Configuration for the S3 bucket proxy.

Example YAML configuration:
```yaml
bind: ":8080"
bind_type: tcp
buckets:
  - name: my-public-assets
    region: us-east-1
    path: /assets
  - name: docs-bucket
    region: eu-west-1
    path: /docs
    key_prefix: site/
    recursive: false
```
"""

import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .storage.base import DEFAULT_PAGE_SIZE

log = logging.getLogger(__name__)


class BucketConfig(BaseModel):
    """A bucket served under a URL path."""

    name: str = Field(
        description="Bucket name"
    )
    region: str = Field(
        default="us-east-1",
        description="Bucket region"
    )
    path: str = Field(
        default="/",
        description="URL path the bucket is mounted at"
    )
    key_prefix: str = Field(
        default="",
        description="Key prefix inside the bucket that maps to the mount root"
    )
    endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom S3 endpoint (MinIO, SeaweedFS); uses S3_ENDPOINT_URL if not set"
    )
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        gt=0,
        le=1000,
        description="Maximum keys per listing request"
    )
    recursive: bool = Field(
        default=True,
        description="List every key under a directory instead of only direct children"
    )

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("bucket name must not be empty")
        return value.strip()

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, value: str) -> str:
        stripped = value.strip().strip("/")
        return f"/{stripped}" if stripped else "/"


class ProxyConfig(BaseModel):
    """Top-level proxy configuration."""

    bind: str = Field(
        default=":8080",
        description="Bind address (host:port, or a socket path for unix)"
    )
    bind_type: str = Field(
        default="tcp",
        description="Bind address type: tcp or unix"
    )
    buckets: List[BucketConfig] = Field(
        default_factory=list,
        description="Buckets to serve"
    )

    @field_validator("bind_type")
    @classmethod
    def _known_bind_type(cls, value: str) -> str:
        value = value.lower()
        if value not in ("tcp", "unix"):
            raise ValueError(f"unsupported bind type {value!r}, expected tcp or unix")
        return value

    @model_validator(mode="after")
    def _unique_mounts(self) -> "ProxyConfig":
        seen = set()
        for bucket in self.buckets:
            if bucket.path in seen:
                raise ValueError(f"duplicate mount path {bucket.path!r}")
            seen.add(bucket.path)
        return self

    def uvicorn_bind_options(self) -> dict:
        """Translate ``bind``/``bind_type`` into uvicorn keyword arguments."""
        if self.bind_type == "unix":
            return {"uds": self.bind}
        host, sep, port = self.bind.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"invalid tcp bind address {self.bind!r}, expected host:port")
        return {"host": host.strip("[]") or "0.0.0.0", "port": int(port)}


def load_config(path: str | Path) -> ProxyConfig:
    """Load and validate a YAML configuration file."""
    config_path = Path(path)
    raw = yaml.safe_load(config_path.read_text()) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration in {config_path} must be a mapping")
    config = ProxyConfig.model_validate(raw)
    log.info("Loaded configuration from %s (%d buckets)", config_path, len(config.buckets))
    return config
