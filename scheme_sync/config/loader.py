"""Configuration loading helpers for scheme-sync."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import SyncConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
CONFIG_FILENAME = "sync_config.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
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
    """Resolve important paths from project root."""

    project_root: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("SCHEME_SYNC_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.logs_dir = (root / "logs").resolve()

    def config_path(self) -> Path:
        return self.project_root / CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None, path: Path | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self.path = path or self.locator.config_path()
        self._cache: SyncConfig | None = None

    def load(self) -> SyncConfig:
        if self._cache is not None:
            return self._cache
        if self.path.exists():
            if self.path.suffix not in CONFIG_EXTENSIONS:
                raise ValueError(f"Unsupported configuration format: {self.path}")
            config = SyncConfig.model_validate(_read_file(self.path))
        else:
            config = SyncConfig()
        self._cache = config
        return config

    def save(self, config: SyncConfig) -> Path:
        _write_file(self.path, config.model_dump(mode="json"))
        self._cache = config
        return self.path

    def resolve(self, path: Path) -> Path:
        """Anchor a configured path at the project root."""

        return self.load().settings.resolve(path, self.locator.project_root)


__all__ = ["CONFIG_EXTENSIONS", "CONFIG_FILENAME", "ConfigLocator", "ConfigRepository"]
