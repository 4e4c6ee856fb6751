"""Pipeline result cache and its persistence backends."""

from clip_repurposer.cache.pipeline_cache import CachedPipelineSnapshot, PipelineCache
from clip_repurposer.cache.store import (
    DirectoryStore,
    InMemoryStore,
    KeyValueStore,
    StoreError,
)

__all__ = [
    "CachedPipelineSnapshot",
    "DirectoryStore",
    "InMemoryStore",
    "KeyValueStore",
    "PipelineCache",
    "StoreError",
]
