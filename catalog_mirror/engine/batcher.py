"""Partition ordered records into contiguous runs sharing a foreign key."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby
from typing import Iterable, Iterator, Sequence

from ..resources import is_missing_key


@dataclass(slots=True)
class Batch:
    """Maximal run of consecutive records with the same key."""

    key_fields: tuple[str, ...]
    key: tuple[object, ...]
    records: list[dict] = field(default_factory=list)

    @property
    def scope(self) -> dict[str, object]:
        return dict(zip(self.key_fields, self.key))

    def __len__(self) -> int:
        return len(self.records)


def _normalise_fields(key_fields: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(key_fields, str):
        return (key_fields,)
    return tuple(key_fields)


def has_group_keys(records: Iterable[dict], key_fields: str | Sequence[str]) -> bool:
    """Return ``True`` when every record carries a non-empty value for each key field."""

    fields = _normalise_fields(key_fields)
    return not any(is_missing_key(record.get(name)) for record in records for name in fields)


def iter_batches(records: Sequence[dict], key_fields: str | Sequence[str]) -> Iterator[Batch]:
    """Yield one batch per contiguous run of equal keys, in encounter order.

    Runs are defined by adjacency only: ``A, B, A`` gives three batches. Input
    is expected to be clustered already. If any record lacks a key field
    nothing is yielded.
    """

    fields = _normalise_fields(key_fields)
    if not has_group_keys(records, fields):
        return

    def key_of(record: dict) -> tuple[object, ...]:
        return tuple(record[name] for name in fields)

    for key, run in groupby(records, key=key_of):
        yield Batch(key_fields=fields, key=key, records=list(run))


__all__ = ["Batch", "has_group_keys", "iter_batches"]
