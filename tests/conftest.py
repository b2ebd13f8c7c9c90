"""Shared fixtures: a scripted remote catalog and a temporary mirror store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Sequence

import pytest

from catalog_mirror.config import ConfigLocator, ConfigRepository
from catalog_mirror.engine import MirrorStore
from catalog_mirror.resources import ResourceRegistry


class FakeCatalogClient:
    """In-memory stand-in for :class:`CatalogClient`.

    ``listings`` maps request paths to either the payload ``list`` returns or an
    exception to raise. Unknown paths list as ``[]``.
    """

    def __init__(
        self,
        listings: dict[str, Any] | None = None,
        update_errors: dict[str, Exception] | None = None,
        statuses: list[dict] | None = None,
    ) -> None:
        self.listings = listings or {}
        self.update_errors = update_errors or {}
        self.statuses = statuses or []
        self.list_calls: list[str] = []
        self.updates: list[tuple[str, list[dict]]] = []
        self.closed = False

    async def list(self, path: str) -> Any:
        self.list_calls.append(path)
        payload = self.listings.get(path, [])
        if isinstance(payload, Exception):
            raise payload
        # Hand out copies so injected fields don't leak back into the script.
        return json.loads(json.dumps(payload))

    async def batch_update(self, path: str, records: Sequence[dict]) -> list[dict]:
        if path in self.update_errors:
            raise self.update_errors[path]
        self.updates.append((path, [dict(record) for record in records]))
        return list(self.statuses)

    async def __aenter__(self) -> "FakeCatalogClient":
        return self

    async def __aexit__(self, *_exc_info) -> None:
        self.closed = True


@pytest.fixture
def fake_client() -> Callable[..., FakeCatalogClient]:
    def _builder(**kwargs: Any) -> FakeCatalogClient:
        return FakeCatalogClient(**kwargs)

    return _builder


@pytest.fixture
def mirror_store(tmp_path: Path) -> MirrorStore:
    return MirrorStore(tmp_path / "mirror")


@pytest.fixture
def registry() -> ResourceRegistry:
    return ResourceRegistry()


@pytest.fixture
def read_lines() -> Callable[[MirrorStore, str], list[dict]]:
    def _read(store: MirrorStore, name: str) -> list[dict]:
        text = store.path_for(name).read_text(encoding="utf-8")
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    return _read


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigRepository:
    for name in (
        "CATALOG_MIRROR_HOME",
        "CATALOG_MIRROR_EXPORT_PATH",
        "CATALOG_MIRROR_BASE_URL",
        "CATALOG_MIRROR_TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)
    return ConfigRepository(ConfigLocator(project_root=tmp_path))
