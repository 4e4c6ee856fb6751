"""Shared test fixtures for the clip_repurposer test suite.

WHY: Segmenter, orchestrator, and cache tests all need the same small
transcript and a way to run polling loops without real delays.
Centralizing fixtures here keeps every module on the same sample data.

HOW: Pytest fixtures provide a word-level transcript (the canonical
"I think this works. Really great" sample), a legacy timestamped
transcript, an idle clip, and a fake sleep that records delays and
yields to the event loop instead of waiting.

RULES:
- Word timing matches the worked example: two phrases over [0, 3]
- The fake sleep never waits on the wall clock
"""

from __future__ import annotations

import asyncio
from typing import List

import pytest

from clip_repurposer.core.clip import Clip, ClipSpec
from clip_repurposer.core.ir import TimedWord, TranscriptSegment


SAMPLE_WORDS: List[TimedWord] = [
    TimedWord("I", 0.0, 0.4),
    TimedWord("think", 0.4, 0.8),
    TimedWord("this", 0.8, 1.0),
    TimedWord("works.", 1.0, 1.5),
    TimedWord("Really", 2.0, 2.4),
    TimedWord("great", 2.4, 2.9),
]

LEGACY_CONTENT = (
    "[00:00] Welcome back to the show.\n"
    "[00:04] Today we talk about clips.\n"
    "[00:10] Short video is everywhere.\n"
    "[00:15] Let's get into it.\n"
)


class SleepRecorder:
    """Stand-in for asyncio.sleep that records delays and only yields."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


@pytest.fixture
def sample_segments():
    """Word-level transcript split over two segments."""
    return [
        TranscriptSegment(
            text="I think this works.",
            start_s=0.0,
            end_s=1.5,
            words=list(SAMPLE_WORDS[:4]),
        ),
        TranscriptSegment(
            text="Really great",
            start_s=2.0,
            end_s=2.9,
            words=list(SAMPLE_WORDS[4:]),
        ),
    ]


@pytest.fixture
def legacy_segments():
    """Segments from a transcript stored before word timing existed."""
    return [
        TranscriptSegment(text="Welcome back to the show.", start_s=0.0, end_s=4.0),
        TranscriptSegment(text="Today we talk about clips.", start_s=4.0, end_s=10.0),
    ]


@pytest.fixture
def legacy_content():
    return LEGACY_CONTENT


@pytest.fixture
def clip():
    """An idle clip covering the first three seconds."""
    return Clip(spec=ClipSpec(
        title="It works",
        hook="The moment it finally worked",
        start_time="00:00",
        end_time="00:03",
        platforms=frozenset({"tiktok", "reels"}),
        score=8,
    ))


@pytest.fixture
def fake_sleep():
    return SleepRecorder()
