"""Exception hierarchy shared by the store, client and orchestrators."""

from __future__ import annotations

from pathlib import Path


class CatalogMirrorError(Exception):
    """Base class for every error raised by catalog-mirror."""


class TransportError(CatalogMirrorError):
    """A remote call failed (network, auth, HTTP status or undecodable body)."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class NotFoundError(TransportError):
    """The remote answered 404 for the requested collection."""


class MalformedMirrorError(CatalogMirrorError):
    """A mirror file line is not a JSON object."""

    def __init__(self, path: Path, line_number: int, reason: str) -> None:
        super().__init__(f"{path}:{line_number}: {reason}")
        self.path = path
        self.line_number = line_number


class MirrorFileMissingError(CatalogMirrorError):
    """Import was requested for a mirror file that was never exported."""


class UnknownResourceError(CatalogMirrorError, KeyError):
    """No resource type is registered under the given name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ResourceScopeError(CatalogMirrorError):
    """A nested resource type was exported without its parent."""


class ReadOnlyResourceError(CatalogMirrorError):
    """The remote offers no update endpoint for this resource type."""


__all__ = [
    "CatalogMirrorError",
    "MalformedMirrorError",
    "MirrorFileMissingError",
    "NotFoundError",
    "ReadOnlyResourceError",
    "ResourceScopeError",
    "TransportError",
    "UnknownResourceError",
]
