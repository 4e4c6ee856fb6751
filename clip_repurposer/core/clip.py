"""Clip model: one candidate short clip and its render lifecycle.

WHY: Every render outcome — success, explicit failure, timeout, or the
simulated fallback — must resolve through one place the UI can read.
Keeping the state machine on the clip itself (rather than in the
orchestrator) means an out-of-order call is caught immediately instead
of silently corrupting what the user sees.

HOW: ClipSpec is the immutable description of the excerpt (title, hook,
time range, platforms, score). Clip wraps a spec with mutable render
state and exposes exactly two transitions: submit_render() and
resolve_render().

RULES:
- idle | failed | done → rendering via submit_render(job_id)
- rendering → done | failed via resolve_render(outcome)
- Any other transition raises InvalidTransitionError — never ignored
- render_url is set only in done; failure_reason only in failed
- A clip owns its render state exclusively; nothing is shared across clips
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional

from clip_repurposer.core.timecode import parse_clip_time

logger = logging.getLogger(__name__)

MIN_SCORE = 0
MAX_SCORE = 10


class InvalidTransitionError(RuntimeError):
    """Raised when a clip's render state machine is driven out of order."""


class RenderState(str, enum.Enum):
    """Render lifecycle of a clip.

    Inherits from str so values serialize cleanly to JSON.
    """

    IDLE = "idle"
    RENDERING = "rendering"
    DONE = "done"
    FAILED = "failed"


_SUBMITTABLE = frozenset({RenderState.IDLE, RenderState.FAILED, RenderState.DONE})


@dataclass(frozen=True)
class RenderOutcome:
    """Terminal result reported for a render job."""

    state: RenderState
    url: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def done(cls, url: str) -> RenderOutcome:
        return cls(state=RenderState.DONE, url=url)

    @classmethod
    def failed(cls, reason: str) -> RenderOutcome:
        return cls(state=RenderState.FAILED, reason=reason)


@dataclass(frozen=True)
class ClipSpec:
    """Description of one candidate clip.

    RULES:
    - start_time / end_time are clip-time strings (mm:ss or hh:mm:ss)
    - start must be strictly before end once parsed
    - score is an integer 0–10
    - platforms are lower-cased tags such as "tiktok", "reels", "shorts"
    """

    title: str
    hook: str
    start_time: str
    end_time: str
    platforms: FrozenSet[str] = frozenset()
    score: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "platforms", frozenset(p.strip().lower() for p in self.platforms)
        )
        if self.start_s >= self.end_s:
            raise ValueError(
                "Clip '{}' must start before it ends ({} >= {})".format(
                    self.title, self.start_time, self.end_time
                )
            )
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(
                "Clip '{}' score {} is outside {}-{}".format(
                    self.title, self.score, MIN_SCORE, MAX_SCORE
                )
            )

    @property
    def start_s(self) -> int:
        return parse_clip_time(self.start_time)

    @property
    def end_s(self) -> int:
        return parse_clip_time(self.end_time)

    @property
    def duration_s(self) -> int:
        return self.end_s - self.start_s


@dataclass
class Clip:
    """A clip spec plus its render state.

    RULES:
    - clip_id: hex UUID, unique and immutable after creation
    - render_state starts as IDLE
    - render_job_id is present once a render has been submitted
    """

    spec: ClipSpec
    clip_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    render_state: RenderState = RenderState.IDLE
    render_job_id: Optional[str] = None
    render_url: Optional[str] = None
    failure_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.render_state in (RenderState.DONE, RenderState.FAILED)

    def submit_render(self, job_id: str) -> None:
        """Enter RENDERING for a newly submitted render job.

        Raises:
            InvalidTransitionError: If the clip is already rendering.
        """
        if self.render_state not in _SUBMITTABLE:
            raise InvalidTransitionError(
                "Cannot submit a render for clip {} while it is {} (job {})".format(
                    self.clip_id, self.render_state.value, self.render_job_id
                )
            )
        if not job_id:
            raise ValueError("A render job id is required")

        self.render_state = RenderState.RENDERING
        self.render_job_id = job_id
        self.render_url = None
        self.failure_reason = None
        logger.info("Clip %s rendering as job %s", self.clip_id, job_id)

    def resolve_render(self, outcome: RenderOutcome) -> None:
        """Leave RENDERING with a terminal outcome.

        Raises:
            InvalidTransitionError: If the clip is not rendering, or the
                outcome is not a terminal state.
        """
        if self.render_state is not RenderState.RENDERING:
            raise InvalidTransitionError(
                "Cannot resolve a render for clip {} while it is {}".format(
                    self.clip_id, self.render_state.value
                )
            )

        if outcome.state is RenderState.DONE:
            if not outcome.url:
                raise ValueError("A done outcome requires a result URL")
            self.render_state = RenderState.DONE
            self.render_url = outcome.url
        elif outcome.state is RenderState.FAILED:
            self.render_state = RenderState.FAILED
            self.failure_reason = outcome.reason or "render failed"
        else:
            raise InvalidTransitionError(
                "Render outcome must be done or failed, got {}".format(outcome.state.value)
            )

        logger.info(
            "Clip %s job %s resolved %s",
            self.clip_id, self.render_job_id, self.render_state.value,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.clip_id,
            "title": self.spec.title,
            "hook": self.spec.hook,
            "startTime": self.spec.start_time,
            "endTime": self.spec.end_time,
            "platforms": sorted(self.spec.platforms),
            "score": self.spec.score,
            "renderStatus": self.render_state.value,
            "renderId": self.render_job_id,
            "renderUrl": self.render_url,
            "failureReason": self.failure_reason,
        }
