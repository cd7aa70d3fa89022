"""Pydantic models describing the sync job configuration."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

_TIME_UNIT_PATTERN = re.compile(r"^\d+(d|h|m|s|ms|micros|nanos)$")


class StoreConfig(BaseModel):
    """Connection settings for the search store."""

    url: str = "https://localhost:9200"
    username: str | None = None
    password: str | None = None
    api_key: str | None = None
    verify_certs: bool = True
    ca_certs: Path | None = None
    connect_timeout: float = 5.0
    read_timeout: float = 120.0
    max_connections: int = 100
    keepalive_expiry: float = 120.0

    @field_validator("url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("ca_certs", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @model_validator(mode="after")
    def _validate_connection(self) -> "StoreConfig":
        if self.connect_timeout <= 0 or self.read_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if self.max_connections < 1:
            raise ValueError("max_connections must be >= 1")
        if self.keepalive_expiry < 0:
            raise ValueError("keepalive_expiry must be >= 0")
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be configured together")
        return self


class ExtractionConfig(BaseModel):
    """Which collections to read and write, and how to walk them."""

    source_index: str = "kibana_sample_data_ecommerce"
    destination_index: str = "customer"
    page_size: int = Field(default=1000, ge=1, le=10000)
    scroll_ttl: str = "1m"
    progress_interval: int = Field(default=500, ge=1)
    write_workers: int = Field(default=1, ge=1)

    @field_validator("source_index", "destination_index")
    @classmethod
    def _non_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("index name cannot be empty")
        return value

    @field_validator("scroll_ttl")
    @classmethod
    def _validate_ttl(cls, value: str) -> str:
        value = value.strip()
        if not _TIME_UNIT_PATTERN.match(value):
            raise ValueError(f"scroll_ttl must look like '1m' or '30s', got {value!r}")
        return value


class LoggingConfig(BaseModel):
    log_dir: Path = Field(default=Path("logs"))
    verbose: bool = False

    @field_validator("log_dir", mode="before")
    @classmethod
    def _coerce_dir(cls, value: Any) -> Path:
        return Path(value)

    def resolved_log_dir(self, base_dir: Path) -> Path:
        if self.log_dir.is_absolute():
            return self.log_dir
        return (base_dir / self.log_dir).resolve()


class SyncConfig(BaseModel):
    """Top-level configuration document."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def masked(self) -> dict[str, Any]:
        """Return a JSON-ready dump with credentials hidden."""

        payload = self.model_dump(mode="json")
        for key in ("password", "api_key"):
            if payload["store"].get(key):
                payload["store"][key] = "******"
        return payload


__all__ = ["ExtractionConfig", "LoggingConfig", "StoreConfig", "SyncConfig"]
