"""Time-boxed cache of the last pipeline result per project.

WHY: Re-opening a project would otherwise re-fetch the transcript and
recompute its statistics and stage flags on every reload, which is slow
and makes the UI flicker. A short-lived snapshot bridges the gap until
fresh server-side state arrives.

HOW: Snapshots are serialised to JSON and kept in a KeyValueStore under
``pipeline-cache:<project id>``. load() parses the entry, validates it
against a JSON schema, and checks its age against the TTL; stale entries
are deleted on the spot. save() stamps the current time and overwrites.

RULES:
- TTL defaults to 5 minutes (PIPELINE_CACHE_TTL_S)
- An entry is stale when now - cached_at > TTL (exactly TTL is still fresh)
- Missing, corrupt, schema-invalid, or stale entries all load as None
- Every store or decode error is logged and swallowed — the cache is an
  optimisation, never a source of truth
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional

import jsonschema

from clip_repurposer.cache.store import KeyValueStore
from clip_repurposer.config import PIPELINE_CACHE_TTL_S

logger = logging.getLogger(__name__)

KEY_PREFIX = "pipeline-cache:"

SNAPSHOT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["transcript", "derivedStats", "stageFlags", "cachedAt"],
    "properties": {
        "derivedStats": {"type": "object"},
        "stageFlags": {
            "type": "object",
            "additionalProperties": {"type": "boolean"},
        },
        "cachedAt": {"type": "integer", "minimum": 0},
    },
}


@dataclass
class CachedPipelineSnapshot:
    """Aggregate processing result for one project.

    RULES:
    - transcript: any JSON-serialisable transcript payload (segments, content)
    - derived_stats: JSON object of statistics (see core.transcript.TranscriptStats)
    - stage_flags: pipeline stage name → completed flag
    - cached_at_ms: epoch milliseconds, stamped by PipelineCache.save()
    """

    transcript: Any
    derived_stats: Dict[str, Any] = field(default_factory=dict)
    stage_flags: Dict[str, bool] = field(default_factory=dict)
    cached_at_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transcript": self.transcript,
            "derivedStats": self.derived_stats,
            "stageFlags": self.stage_flags,
            "cachedAt": self.cached_at_ms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CachedPipelineSnapshot:
        return cls(
            transcript=data["transcript"],
            derived_stats=dict(data["derivedStats"]),
            stage_flags=dict(data["stageFlags"]),
            cached_at_ms=int(data["cachedAt"]),
        )


class PipelineCache:
    """Best-effort snapshot cache keyed by project id.

    RULES:
    - clock returns epoch seconds (defaults to time.time); tests inject a fake
    - load() and save() never raise because of the store
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_s: float = PIPELINE_CACHE_TTL_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._ttl_ms = int(ttl_s * 1000)
        self._clock = clock

    @staticmethod
    def key_for(project_id: str) -> str:
        return KEY_PREFIX + project_id

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def load(self, project_id: str) -> Optional[CachedPipelineSnapshot]:
        """Return the project's snapshot if one exists and is still fresh."""
        key = self.key_for(project_id)
        try:
            raw = self._store.get(key)
        except Exception:
            logger.warning("Pipeline cache read failed for %s", project_id, exc_info=True)
            return None
        if raw is None:
            return None

        try:
            data = json.loads(raw)
            jsonschema.validate(instance=data, schema=SNAPSHOT_SCHEMA)
            snapshot = CachedPipelineSnapshot.from_dict(data)
        except (ValueError, jsonschema.ValidationError) as exc:
            logger.warning("Discarding unreadable pipeline cache for %s: %s", project_id, exc)
            self._delete(key)
            return None

        age_ms = self._now_ms() - snapshot.cached_at_ms
        if age_ms > self._ttl_ms:
            logger.debug("Pipeline cache for %s expired %dms ago", project_id, age_ms - self._ttl_ms)
            self._delete(key)
            return None

        return snapshot

    def save(
        self,
        project_id: str,
        snapshot: CachedPipelineSnapshot,
    ) -> CachedPipelineSnapshot:
        """Stamp and store a snapshot, replacing any previous one.

        Returns the stamped snapshot even when the store write fails.
        """
        stamped = replace(snapshot, cached_at_ms=self._now_ms())
        try:
            self._store.set(self.key_for(project_id), json.dumps(stamped.to_dict()))
        except Exception:
            logger.warning("Pipeline cache write failed for %s", project_id, exc_info=True)
        return stamped

    def invalidate(self, project_id: str) -> None:
        """Drop a project's snapshot, e.g. when reprocessing starts."""
        self._delete(self.key_for(project_id))

    def _delete(self, key: str) -> None:
        try:
            self._store.delete(key)
        except Exception:
            logger.warning("Pipeline cache delete failed for %s", key, exc_info=True)
