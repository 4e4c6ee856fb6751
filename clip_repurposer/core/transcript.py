"""Transcript helpers: parsing, legacy content, and derived statistics.

WHY: The transcription step stores three things per project — the
segments (with word timing when available), a human-readable
"[MM:SS] text" rendition, and a handful of quality statistics. The
legacy content feeds caption strategy B, and the statistics are what
the pipeline cache keeps alongside the transcript.

HOW: segments_from_dicts() parses the collaborator's JSON, build_timestamped_content()
renders one marker line per segment, and derive_stats() counts words,
filler phrases, and segments.

RULES:
- Filler phrases are matched whole-word and case-insensitively against
  the timestamped content, the same text a reader sees
- word_count counts timed words; it is 0 for legacy transcripts
- duration_s is the end of the last segment (0.0 for an empty transcript)
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Iterable, Sequence

from clip_repurposer.config import FILLER_WORDS
from clip_repurposer.core.ir import TranscriptSegment
from clip_repurposer.core.timecode import format_timestamp


@dataclass
class TranscriptStats:
    """Derived statistics for one transcript."""

    word_count: int
    filler_count: int
    segment_count: int
    has_word_timing: bool
    duration_s: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def segments_from_dicts(raw_segments: Iterable[dict[str, Any]]) -> list[TranscriptSegment]:
    """Parse the transcription collaborator's segment dicts."""
    return [TranscriptSegment.from_dict(s) for s in raw_segments]


def build_timestamped_content(segments: Sequence[TranscriptSegment]) -> str:
    """Render segments as ``[MM:SS] text`` lines.

    Uses the segment's own timestamp label when present, otherwise formats
    its start time.
    """
    lines = []
    for segment in segments:
        label = segment.timestamp or format_timestamp(segment.start_s)
        lines.append("[{}] {}\n".format(label, segment.text))
    return "".join(lines)


def count_fillers(content: str, fillers: Sequence[str] = FILLER_WORDS) -> int:
    """Count whole-word, case-insensitive occurrences of filler phrases."""
    total = 0
    for filler in fillers:
        # Fillers ending in punctuation ("so,") need a non-word lookahead.
        suffix = r"\b" if filler[-1].isalnum() else r"(?=\W|$)"
        pattern = re.compile(r"\b" + re.escape(filler) + suffix, re.IGNORECASE)
        total += len(pattern.findall(content))
    return total


def derive_stats(
    segments: Sequence[TranscriptSegment],
    content: str | None = None,
) -> TranscriptStats:
    """Compute transcript statistics for the pipeline snapshot.

    Args:
        segments: Parsed transcript segments.
        content: Timestamped content; built from segments when omitted.
    """
    if content is None:
        content = build_timestamped_content(segments)

    word_count = sum(len(s.words) for s in segments)
    return TranscriptStats(
        word_count=word_count,
        filler_count=count_fillers(content),
        segment_count=len(segments),
        has_word_timing=word_count > 0,
        duration_s=segments[-1].end_s if segments else 0.0,
    )
