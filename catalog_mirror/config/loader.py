"""Configuration loading helpers for catalog-mirror."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from .models import MirrorConfig

CONFIG_FILENAMES = ("catalog_mirror.yaml", "catalog_mirror.yml", "catalog_mirror.json")

HOME_ENV = "CATALOG_MIRROR_HOME"
EXPORT_PATH_ENV = "CATALOG_MIRROR_EXPORT_PATH"
BASE_URL_ENV = "CATALOG_MIRROR_BASE_URL"
TOKEN_ENV = "CATALOG_MIRROR_TOKEN"


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
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the project root, config file and logs directory."""

    project_root: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root
        self.logs_dir = (root / "logs").resolve()

    def config_path(self) -> Path:
        for name in CONFIG_FILENAMES:
            candidate = self.project_root / name
            if candidate.exists():
                return candidate
        return self.project_root / CONFIG_FILENAMES[0]

    def resolve(self, path: Path) -> Path:
        """Anchor a relative path at the project root."""

        if path.is_absolute():
            return path
        return (self.project_root / path).resolve()


class ConfigRepository:
    """Load, override and persist :class:`MirrorConfig`."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: MirrorConfig | None = None

    def load_config(self) -> MirrorConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.config_path()
        payload = _read_file(path) if path.exists() else {}
        config = MirrorConfig.model_validate(self._apply_env(payload))
        config.export_path = self.locator.resolve(config.export_path)
        self._cache = config
        return config

    def save_config(self, config: MirrorConfig) -> Path:
        path = self.locator.config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_file(path, config.model_dump(mode="json"))
        self._cache = None
        return path

    @staticmethod
    def _apply_env(payload: dict) -> dict:
        merged = dict(payload)
        remote = dict(merged.get("remote") or {})
        if os.environ.get(EXPORT_PATH_ENV):
            merged["export_path"] = os.environ[EXPORT_PATH_ENV]
        if os.environ.get(BASE_URL_ENV):
            remote["base_url"] = os.environ[BASE_URL_ENV]
        if os.environ.get(TOKEN_ENV):
            remote["token"] = os.environ[TOKEN_ENV]
        merged["remote"] = remote
        return merged


__all__ = [
    "BASE_URL_ENV",
    "CONFIG_FILENAMES",
    "ConfigLocator",
    "ConfigRepository",
    "EXPORT_PATH_ENV",
    "HOME_ENV",
    "TOKEN_ENV",
]
