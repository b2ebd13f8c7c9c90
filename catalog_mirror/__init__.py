"""catalog-mirror: line-delimited JSON mirrors of a catalog REST API."""

from .engine import CatalogClient, MirrorStore
from .orchestrator import ExportOrchestrator, ImportOrchestrator, SyncResult
from .resources import DEFAULT_RESOURCES, ChildLink, ResourceRegistry, ResourceType

__all__ = [
    "CatalogClient",
    "ChildLink",
    "DEFAULT_RESOURCES",
    "ExportOrchestrator",
    "ImportOrchestrator",
    "MirrorStore",
    "ResourceRegistry",
    "ResourceType",
    "SyncResult",
]

__version__ = "0.1.0"
