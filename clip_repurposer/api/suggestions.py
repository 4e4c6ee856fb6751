"""Parse clip suggestions returned by the clip-suggestion step.

The suggestion step asks a language model for 3–5 clip moments and gets
back free text that should contain one JSON object shaped like
``{"clips": [{"title", "startTime", "endTime", "hook", "platforms", "score"}]}``,
often wrapped in a markdown code fence.

RULES:
- The first ``{...}`` span in the reply is taken as the JSON payload
- An unparseable reply yields an empty list, never an exception
- Entries failing validation (bad times, score out of range) are skipped
- Every returned clip starts in the idle render state
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List

from pydantic import ValidationError

from clip_repurposer.api.models import ClipSuggestion
from clip_repurposer.core.clip import Clip, ClipSpec

logger = logging.getLogger(__name__)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def parse_clip_suggestions(raw_text: str) -> List[Clip]:
    """Extract idle clips from a clip-suggestion reply."""
    match = _JSON_OBJECT_RE.search(raw_text or "")
    if not match:
        logger.warning("Clip suggestion reply contained no JSON object")
        return []

    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        logger.warning("Could not parse clip suggestion JSON: %s", exc)
        return []

    entries: Any = payload.get("clips") if isinstance(payload, dict) else None
    if not isinstance(entries, list):
        return []

    clips = []
    for index, entry in enumerate(entries):
        try:
            suggestion = ClipSuggestion.model_validate(entry)
            spec = ClipSpec(
                title=suggestion.title,
                hook=suggestion.hook,
                start_time=suggestion.start_time,
                end_time=suggestion.end_time,
                platforms=frozenset(suggestion.platforms),
                score=suggestion.score,
            )
        except (ValidationError, ValueError) as exc:
            logger.warning("Skipping clip suggestion %d: %s", index, exc)
            continue
        clips.append(Clip(spec=spec))

    return clips
