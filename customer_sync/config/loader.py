"""Configuration loading helpers for customer-sync."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import SyncConfig

CONFIG_FILENAME = "config.yaml"
HOME_ENV = "CUSTOMER_SYNC_HOME"

# Environment variable -> store field; applied after the file is read.
STORE_ENV_OVERRIDES = {
    "CUSTOMER_SYNC_STORE_URL": "url",
    "CUSTOMER_SYNC_STORE_USERNAME": "username",
    "CUSTOMER_SYNC_STORE_PASSWORD": "password",
    "CUSTOMER_SYNC_STORE_API_KEY": "api_key",
}


def _read_file(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    try:
        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot parse configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the project root and the config file inside it."""

    project_root: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.project_root.mkdir(parents=True, exist_ok=True)

    def config_path(self) -> Path:
        return self.project_root / CONFIG_FILENAME


class ConfigRepository:
    """Read, validate and persist the sync configuration."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()

    def load_config(self, path: Path | None = None) -> SyncConfig:
        path = path or self.locator.config_path()
        payload = _read_file(path) if path.exists() else {}
        _apply_env_overrides(payload)
        try:
            return SyncConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {path}:\n{exc}") from exc

    def save_config(self, config: SyncConfig, path: Path | None = None) -> Path:
        path = path or self.locator.config_path()
        _write_file(path, config.model_dump(mode="json", exclude_none=True))
        return path

    def write_default(self, force: bool = False) -> Path:
        path = self.locator.config_path()
        if path.exists() and not force:
            raise FileExistsError(f"Configuration already exists: {path}")
        return self.save_config(SyncConfig(), path)

    def log_dir(self, config: SyncConfig) -> Path:
        return config.logging.resolved_log_dir(self.locator.project_root)


def _apply_env_overrides(payload: dict) -> None:
    store = payload.get("store")
    if store is None:
        store = payload["store"] = {}
    elif not isinstance(store, dict):
        # let validation report the malformed section
        return
    for env_name, field in STORE_ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            store[field] = value


__all__ = ["CONFIG_FILENAME", "ConfigLocator", "ConfigRepository", "STORE_ENV_OVERRIDES"]
