"""Engine components: remote client → mirror store ↔ batcher."""

from .batcher import Batch, has_group_keys, iter_batches
from .client import CatalogClient
from .store import MirrorStore, MirrorWriter

__all__ = [
    "Batch",
    "CatalogClient",
    "MirrorStore",
    "MirrorWriter",
    "has_group_keys",
    "iter_batches",
]
