"""Pydantic models describing catalog-mirror configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from ..resources import ResourceRegistry

DEFAULT_EXPORT_ORDER: list[str] = [
    "channels",
    "locales",
    "currencies",
    "measure_families",
    "attributes",
    "attribute_groups",
    "association_types",
    "categories",
    "families",
    "products",
    "product_models",
    "reference_entities",
]

DEFAULT_IMPORT_ORDER: list[str] = [
    "association_types",
    "channels",
    "attributes",
    "attribute_options",
    "attribute_groups",
    "families",
    "family_variants",
    "categories",
]


class RemoteConfig(BaseModel):
    """Connection settings for the catalog REST API."""

    base_url: str = "http://localhost:8080"
    token: str = ""
    timeout: float = 30.0
    page_limit: int = Field(default=100, ge=1, le=100)
    verify_ssl: bool = True

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be > 0")
        return value


class MirrorConfig(BaseModel):
    """Top-level settings: where mirrors live, what to sync, and in which order."""

    export_path: Path = Field(default=Path("."))
    remote: RemoteConfig = Field(default_factory=RemoteConfig)
    export_order: list[str] = Field(default_factory=lambda: list(DEFAULT_EXPORT_ORDER))
    import_order: list[str] = Field(default_factory=lambda: list(DEFAULT_IMPORT_ORDER))

    @field_validator("export_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        if value in (None, ""):
            return Path(".")
        return Path(value).expanduser()

    @model_validator(mode="after")
    def _validate_orders(self) -> "MirrorConfig":
        registry = ResourceRegistry()
        unknown = [
            name for name in (*self.export_order, *self.import_order) if name not in registry
        ]
        if unknown:
            raise ValueError(f"Unknown resource types: {', '.join(unknown)}")
        for name in self.export_order:
            if registry.get(name).nested:
                raise ValueError(f"export_order entry {name} is exported through its parent")
        for name in self.import_order:
            if not registry.get(name).importable:
                raise ValueError(f"import_order entry {name} cannot be imported")
        return self


__all__ = ["DEFAULT_EXPORT_ORDER", "DEFAULT_IMPORT_ORDER", "MirrorConfig", "RemoteConfig"]
