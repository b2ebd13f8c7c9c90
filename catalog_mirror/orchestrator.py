"""Export and import orchestration between the remote catalog and the mirror store."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Protocol, Sequence

import structlog

from .engine import MirrorStore, has_group_keys, iter_batches
from .errors import NotFoundError, ReadOnlyResourceError, ResourceScopeError
from .resources import ResourceRegistry, ResourceType, is_missing_key

OK = "ok"
FAILED = "failed"
SKIPPED = "skipped"


class RemoteCatalog(Protocol):
    async def list(self, path: str) -> Any: ...

    async def batch_update(self, path: str, records: Sequence[dict]) -> list[dict]: ...


@dataclass(slots=True)
class SyncResult:
    """Outcome of one export or import of a resource type."""

    resource: str
    operation: str
    status: str = OK
    error: Exception | None = None
    counts: dict[str, int] = field(default_factory=dict)
    batches: int = 0
    rejected: int = 0

    @property
    def ok(self) -> bool:
        return self.status != FAILED

    @property
    def total(self) -> int:
        return sum(self.counts.values())


class _Run:
    """Mutable tallies for a single top-level operation."""

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()
        self.batches = 0
        self.rejected = 0

    def result(self, resource: str, operation: str, **kwargs: Any) -> SyncResult:
        return SyncResult(
            resource=resource,
            operation=operation,
            counts=dict(self.counts),
            batches=self.batches,
            rejected=self.rejected,
            **kwargs,
        )


class ExportOrchestrator:
    """List remote collections and write them, with their dependents, to the store."""

    def __init__(
        self,
        client: RemoteCatalog,
        store: MirrorStore,
        registry: ResourceRegistry | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.registry = registry or ResourceRegistry()
        self.logger = logger or structlog.get_logger("catalog_mirror.export")

    async def export_many(self, names: Iterable[str]) -> list[SyncResult]:
        return [await self.export_resource(name) for name in names]

    async def export_resource(self, name: str) -> SyncResult:
        log = self.logger.bind(resource=name)
        log.info("export_started")
        run = _Run()
        try:
            resource = self.registry.get(name)
            if resource.nested:
                raise ResourceScopeError(
                    f"{name} is exported through its parent, not on its own"
                )
            self._invalidate_derived(resource)
            await self._export(resource, {}, append=False, run=run)
        except Exception as exc:  # noqa: BLE001
            log.error("export_failed", error=str(exc), error_type=type(exc).__name__)
            return run.result(name, "export", status=FAILED, error=exc)
        log.info("export_finished", counts=dict(run.counts))
        return run.result(name, "export")

    def _invalidate_derived(self, resource: ResourceType) -> None:
        for derived in self.registry.descendants(resource):
            if self.store.delete_if_exists(derived.filename):
                self.logger.info(
                    "derived_file_deleted", resource=resource.name, filename=derived.filename
                )

    async def _export(
        self,
        resource: ResourceType,
        scope: Mapping[str, object],
        *,
        append: bool,
        run: _Run,
    ) -> None:
        records = await self._fetch(resource, scope)
        if records is None:
            self.logger.info("nothing_to_export", resource=resource.name, **scope)
            return
        opener = self.store.open_for_append if append else self.store.open_for_write
        children = self.registry.children_of(resource)
        with opener(resource.filename) as sink:
            for record in records:
                # Some endpoints omit the parent code from child payloads.
                for key, value in scope.items():
                    if is_missing_key(record.get(key)):
                        record[key] = value
                sink.write(record)
                run.counts[resource.name] += 1
                if not children:
                    continue
                sink.flush()
                identity = record.get(resource.identity_field)
                for link, child in children:
                    if not link.applies_to(record):
                        continue
                    if is_missing_key(identity):
                        self.logger.warning(
                            "cascade_skipped_missing_identity",
                            resource=resource.name,
                            child=child.name,
                        )
                        continue
                    child_scope = {**scope, link.parent_field: identity}
                    await self._export(child, child_scope, append=True, run=run)

    async def _fetch(self, resource: ResourceType, scope: Mapping[str, object]) -> list | None:
        path = resource.path(scope)
        try:
            records = await self.client.list(path)
        except NotFoundError:
            if not resource.optional:
                raise
            self.logger.info("optional_collection_missing", resource=resource.name, path=path)
            records = []
        self.logger.debug(
            "collection_listed",
            resource=resource.name,
            path=path,
            size=len(records) if isinstance(records, list) else None,
        )
        if not isinstance(records, (list, tuple)):
            return None
        return list(records)


class ImportOrchestrator:
    """Replay mirror files to the remote, one update call per foreign-key batch."""

    def __init__(
        self,
        client: RemoteCatalog,
        store: MirrorStore,
        registry: ResourceRegistry | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.registry = registry or ResourceRegistry()
        self.logger = logger or structlog.get_logger("catalog_mirror.import")

    async def import_many(self, names: Iterable[str]) -> list[SyncResult]:
        return [await self.import_resource(name) for name in names]

    async def import_resource(self, name: str) -> SyncResult:
        log = self.logger.bind(resource=name)
        log.info("import_started")
        run = _Run()
        try:
            resource = self.registry.get(name)
            if not resource.importable:
                raise ReadOnlyResourceError(f"{name} has no update endpoint")
            records = self.store.read_all(resource.filename)
            if not records:
                log.info("import_empty")
                return run.result(name, "import")
            if resource.nested:
                if not has_group_keys(records, resource.parent_keys):
                    log.warning("import_skipped_missing_key", keys=list(resource.parent_keys))
                    return run.result(name, "import", status=SKIPPED)
                for batch in iter_batches(records, resource.parent_keys):
                    await self._upload(resource, batch.scope, batch.records, run)
            else:
                await self._upload(resource, {}, records, run)
        except Exception as exc:  # noqa: BLE001
            log.error("import_failed", error=str(exc), error_type=type(exc).__name__)
            return run.result(name, "import", status=FAILED, error=exc)
        log.info("import_finished", batches=run.batches, records=run.counts.get(name, 0))
        return run.result(name, "import")

    async def _upload(
        self,
        resource: ResourceType,
        scope: Mapping[str, object],
        records: list[dict],
        run: _Run,
    ) -> None:
        path = resource.path(scope)
        payload = self._payload(resource, records)
        statuses = await self.client.batch_update(path, payload)
        rejected = [
            status for status in statuses if int(status.get("status_code") or 0) >= 400
        ]
        run.batches += 1
        run.counts[resource.name] += len(records)
        run.rejected += len(rejected)
        self.logger.info(
            "batch_uploaded", resource=resource.name, path=path, size=len(records), **scope
        )
        for status in rejected:
            self.logger.warning(
                "record_rejected",
                resource=resource.name,
                code=status.get(resource.identity_field) or status.get("identifier"),
                status_code=status.get("status_code"),
                message=status.get("message"),
            )

    @staticmethod
    def _payload(resource: ResourceType, records: list[dict]) -> list[dict]:
        if not (resource.nested and resource.strip_parent_keys):
            return records
        return [
            {key: value for key, value in record.items() if key not in resource.parent_keys}
            for record in records
        ]


__all__ = [
    "ExportOrchestrator",
    "FAILED",
    "ImportOrchestrator",
    "OK",
    "RemoteCatalog",
    "SKIPPED",
    "SyncResult",
]
