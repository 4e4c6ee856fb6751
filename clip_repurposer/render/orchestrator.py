"""Render orchestration: submission, simulated fallback, and bounded polling.

WHY: Rendering is asynchronous and slow (tens of seconds to minutes), and
the render service is not always reachable. Something has to package a
clip's caption data into a render request, hand it to the renderer, and
keep asking until the job finishes — without ever leaving the clip in a
state the user cannot act on.

HOW: RenderOrchestrator owns one asyncio task per clip. After a
successful submission the task runs a single control loop: sleep the
poll interval, query status, resolve the clip on a terminal status,
otherwise count the attempt. When submission itself fails, the task
instead waits a fixed delay and resolves the clip with a placeholder
URL (degraded demo mode). Everything runs on the caller's event loop;
no threads.

RULES:
- Font size comes from RenderConfig.font_size(style.size); the highlight
  colour is always RenderConfig.accent_color
- Success = status "succeeded" or "done" with a URL; "failed" is terminal
- A status query error is logged and retried; it does not use an attempt
- After max_poll_attempts in-progress answers the clip resolves
  failed("timeout"), unless fail_on_exhaustion is False (left rendering)
- Submission failure never yields failed — it yields a simulated done
- A second submission for a clip already being submitted is rejected before
  the backend is contacted
- Re-submitting a clip cancels its previous loop; a loop only resolves
  the clip while clip.render_job_id still equals its own job id
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Awaitable, Callable, Dict, Optional, Protocol, Sequence, Set

from clip_repurposer.api.models import (
    CaptionStyleBody,
    PhraseBody,
    RenderRequestBody,
    RenderStatus,
    WordBody,
)
from clip_repurposer.config import PLATFORM_CONFIGS, RenderConfig
from clip_repurposer.core.clip import (
    Clip,
    InvalidTransitionError,
    RenderOutcome,
    RenderState,
)
from clip_repurposer.core.ir import CaptionPhrase, CaptionStyle, ResolvedTranscript, TimedWord
from clip_repurposer.core.segmenter import captions_for_clip

logger = logging.getLogger(__name__)

SIMULATED_JOB_PREFIX = "simulated-"
TIMEOUT_REASON = "timeout"

SleepFunc = Callable[[float], Awaitable[None]]


class RenderBackend(Protocol):
    """The external render collaborator, as the orchestrator sees it."""

    async def submit(self, request: RenderRequestBody) -> str:
        """Submit a render and return its job id; raise on rejection."""

    async def status(self, job_id: str) -> RenderStatus:
        """Return the current status of a render job; raise on query failure."""


def build_render_request(
    clip: Clip,
    words: Sequence[TimedWord],
    style: CaptionStyle,
    platform: str,
    config: RenderConfig,
    phrases: Sequence[CaptionPhrase] = (),
    video_url: Optional[str] = None,
) -> RenderRequestBody:
    """Package a clip's captions and style into a render request.

    Raises:
        ValueError: If the platform has no output configuration.
    """
    if platform not in PLATFORM_CONFIGS:
        raise ValueError(
            "Unsupported render platform '{}'. Expected one of: {}".format(
                platform, ", ".join(sorted(PLATFORM_CONFIGS))
            )
        )

    return RenderRequestBody(
        platform=platform,
        start_time=float(clip.spec.start_s),
        end_time=float(clip.spec.end_s),
        words=[WordBody(word=w.text, start=w.start_s, end=w.end_s) for w in words],
        captions=[PhraseBody(start=p.start_s, end=p.end_s, text=p.text) for p in phrases],
        caption_style=CaptionStyleBody(
            font_family=style.font_family,
            font_size=config.font_size(style.size),
            text_color=style.text_color,
            highlight_color=config.accent_color,
            background_color=style.background_color,
            position=style.position,
            animation=style.animation,
        ),
        video_url=video_url,
        title=clip.spec.title,
    )


class RenderOrchestrator:
    """Drives clips from submission to a terminal render state.

    RULES:
    - Use as: async with RenderOrchestrator(backend) as orchestrator: ...
      (or call aclose() when done) so no polling task outlives its loop
    - sleep is injectable; tests pass a fake that does not wait
    - At most one polling task per clip at any time
    """

    def __init__(
        self,
        backend: RenderBackend,
        config: Optional[RenderConfig] = None,
        sleep: SleepFunc = asyncio.sleep,
        video_url: Optional[str] = None,
    ) -> None:
        self._backend = backend
        self._config = config or RenderConfig()
        self._sleep = sleep
        self._video_url = video_url
        self._tasks: Dict[str, asyncio.Task] = {}
        self._submitting: Set[str] = set()

    async def __aenter__(self) -> RenderOrchestrator:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        await self.aclose()

    @property
    def config(self) -> RenderConfig:
        return self._config

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit_render(
        self,
        clip: Clip,
        words: Sequence[TimedWord],
        style: CaptionStyle,
        platform: str,
        phrases: Sequence[CaptionPhrase] = (),
    ) -> str:
        """Submit a render for a clip and start tracking it.

        Returns:
            The render job id (``simulated-…`` when the renderer was unavailable).

        Raises:
            InvalidTransitionError: If the clip is already rendering or has a
                submission in flight.
            ValueError: If the platform or caption size is unknown.
        """
        if clip.clip_id in self._submitting:
            raise InvalidTransitionError(
                "Clip {} already has a render submission in flight".format(clip.clip_id)
            )
        if clip.render_state is RenderState.RENDERING:
            raise InvalidTransitionError(
                "Clip {} is already rendering as job {}".format(
                    clip.clip_id, clip.render_job_id
                )
            )

        request = build_render_request(
            clip, words, style, platform, self._config,
            phrases=phrases, video_url=self._video_url,
        )

        self._submitting.add(clip.clip_id)
        try:
            job_id = await self._backend.submit(request)
        except Exception as exc:
            job_id = SIMULATED_JOB_PREFIX + uuid.uuid4().hex
            simulated = True
            logger.warning(
                "Render submission for clip %s failed (%s); simulating render %s",
                clip.clip_id, exc, job_id,
            )
        else:
            simulated = False
        finally:
            self._submitting.discard(clip.clip_id)

        clip.submit_render(job_id)
        if simulated:
            self._start(clip, self._simulate(clip, job_id))
        else:
            self._start(clip, self._poll(clip, job_id))
        return job_id

    async def submit_clip(
        self,
        clip: Clip,
        transcript: ResolvedTranscript,
        style: CaptionStyle,
        platform: str,
    ) -> str:
        """Segment captions for the clip's range, then submit the render."""
        captions = captions_for_clip(transcript, clip.spec.start_s, clip.spec.end_s)
        logger.info(
            "Clip %s: %d words, %d phrases via %s captions",
            clip.clip_id, len(captions.words), len(captions.phrases), captions.strategy,
        )
        return await self.submit_render(
            clip, captions.words, style, platform, phrases=captions.phrases,
        )

    # ------------------------------------------------------------------
    # Task bookkeeping
    # ------------------------------------------------------------------

    def is_polling(self, clip: Clip) -> bool:
        task = self._tasks.get(clip.clip_id)
        return task is not None and not task.done()

    async def wait(self, clip: Clip) -> None:
        """Wait until the clip's current render task has finished."""
        task = self._tasks.get(clip.clip_id)
        if task is not None:
            await asyncio.wait([task])

    async def aclose(self) -> None:
        """Cancel every outstanding render task and wait for them to exit."""
        tasks = [t for t in self._tasks.values() if not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    def _start(self, clip: Clip, coro: Awaitable[None]) -> None:
        previous = self._tasks.get(clip.clip_id)
        if previous is not None and not previous.done():
            logger.info("Cancelling previous render loop for clip %s", clip.clip_id)
            previous.cancel()

        task = asyncio.ensure_future(coro)
        self._tasks[clip.clip_id] = task
        task.add_done_callback(lambda t, clip_id=clip.clip_id: self._forget(clip_id, t))

    def _forget(self, clip_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(clip_id) is task:
            del self._tasks[clip_id]
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "Render task for clip %s crashed", clip_id, exc_info=task.exception()
            )

    # ------------------------------------------------------------------
    # Loops
    # ------------------------------------------------------------------

    async def _poll(self, clip: Clip, job_id: str) -> None:
        """Poll one render job until it is terminal or attempts run out."""
        config = self._config
        attempts = 0

        while attempts < config.max_poll_attempts:
            await self._sleep(config.poll_interval_s)
            if clip.render_job_id != job_id:
                logger.info("Job %s superseded on clip %s; stop polling", job_id, clip.clip_id)
                return

            try:
                status = await self._backend.status(job_id)
            except Exception:
                logger.exception("Status check for render job %s failed", job_id)
                continue

            if status.is_success:
                self._resolve(clip, job_id, RenderOutcome.done(status.url))
                return

            if status.is_failed:
                self._resolve(
                    clip, job_id,
                    RenderOutcome.failed(status.error_message or "render failed"),
                )
                return

            attempts += 1
            logger.debug(
                "Render job %s is %s (attempt %d/%d)",
                job_id, status.status, attempts, config.max_poll_attempts,
            )

        if config.fail_on_exhaustion:
            logger.warning(
                "Render job %s still unfinished after %d checks; marking clip %s failed",
                job_id, attempts, clip.clip_id,
            )
            self._resolve(clip, job_id, RenderOutcome.failed(TIMEOUT_REASON))
        else:
            logger.warning(
                "Render job %s still unfinished after %d checks; polling stopped, "
                "clip %s left rendering",
                job_id, attempts, clip.clip_id,
            )

    async def _simulate(self, clip: Clip, job_id: str) -> None:
        await self._sleep(self._config.simulated_delay_s)
        self._resolve(clip, job_id, RenderOutcome.done(self._config.placeholder_url))

    def _resolve(self, clip: Clip, job_id: str, outcome: RenderOutcome) -> None:
        if clip.render_job_id != job_id or clip.render_state is not RenderState.RENDERING:
            logger.info(
                "Ignoring %s outcome for stale job %s on clip %s",
                outcome.state.value, job_id, clip.clip_id,
            )
            return
        clip.resolve_render(outcome)
