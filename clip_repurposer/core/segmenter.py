"""Caption segmentation for a clip's time range.

WHY: A render needs two views of the speech inside a clip: a flat list
of timed words (for word-by-word karaoke highlighting) and grouped
phrases (for classic subtitles). Transcripts stored before word timing
existed only carry "[MM:SS] text" markers, so a coarser fallback must
produce phrases from those markers instead.

HOW: Two strategies, chosen once per transcript:
  A (word level) — flatten segment words, keep those overlapping the clip,
    and group them into phrases closed by sentence punctuation (after at
    least 4 words) or by reaching 7 words.
  B (legacy)     — scan timestamp markers, give each marker the span up to
    the next marker (5 s for the last one), keep overlapping spans, and
    clip their bounds to the clip range.
resolve_transcript() picks the variant from the data shape;
captions_for_clip() dispatches on it.

RULES:
- A word overlaps [start_s, end_s] when word.end >= start_s and word.start <= end_s
- A phrase never holds more than 7 words
- Phrase text is the words concatenated in order, whitespace-trimmed
- Strategy A is used iff the first segment has a non-empty word list
- Strategies are never merged within one clip
- Inputs are never mutated
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from clip_repurposer.config import LEGACY_SEGMENT_DURATION_S
from clip_repurposer.core.ir import (
    CaptionPhrase,
    LegacyTimestampTranscript,
    ResolvedTranscript,
    TimedWord,
    TranscriptSegment,
    WordLevelTranscript,
)
from clip_repurposer.core.timecode import parse_clip_time

logger = logging.getLogger(__name__)

MIN_WORDS_BEFORE_PUNCTUATION_BREAK = 4
MAX_WORDS_PER_PHRASE = 7

STRATEGY_WORD_LEVEL = "word_level"
STRATEGY_LEGACY = "legacy"

# Punctuation that closes a phrase once it holds enough words.
_SENTENCE_END = (".", "?", "!")

# "[MM:SS] text up to the next marker"; hour-qualified markers are accepted too.
_MARKER_RE = re.compile(r"\[(\d{1,3}:\d{2}(?::\d{2})?)\]\s*([^\[]+)")


@dataclass
class ClipCaptions:
    """Caption data for one clip, as produced by a single strategy."""

    strategy: str
    words: list[TimedWord] = field(default_factory=list)
    phrases: list[CaptionPhrase] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Strategy A: word level
# ---------------------------------------------------------------------------


def extract_words(
    start_s: float,
    end_s: float,
    segments: Iterable[TranscriptSegment],
) -> list[TimedWord]:
    """Return every word overlapping ``[start_s, end_s]``, in transcript order.

    An empty result means no segment carries word-level data (or none of
    it falls in range); callers treat that as a signal, not an error.
    """
    return [
        word
        for segment in segments
        for word in segment.words
        if word.end_s >= start_s and word.start_s <= end_s
    ]


def extract_phrases(
    start_s: float,
    end_s: float,
    segments: Iterable[TranscriptSegment],
) -> list[CaptionPhrase]:
    """Group the clip's words into caption phrases.

    A phrase closes when it holds at least 4 words and the latest word ends
    in ``.``, ``?`` or ``!``, or when it reaches 7 words. Leftover words are
    flushed as a final phrase.
    """
    return group_phrases(extract_words(start_s, end_s, segments))


def group_phrases(words: Sequence[TimedWord]) -> list[CaptionPhrase]:
    """Apply the phrase-closing rules to an already-filtered word list."""
    phrases: list[CaptionPhrase] = []
    buffer: list[TimedWord] = []

    for word in words:
        buffer.append(word)
        ends_sentence = word.text.rstrip().endswith(_SENTENCE_END)
        if (
            len(buffer) >= MIN_WORDS_BEFORE_PUNCTUATION_BREAK and ends_sentence
        ) or len(buffer) >= MAX_WORDS_PER_PHRASE:
            phrases.append(_make_phrase(buffer))
            buffer = []

    if buffer:
        phrases.append(_make_phrase(buffer))

    return phrases


def _make_phrase(words: list[TimedWord]) -> CaptionPhrase:
    return CaptionPhrase(
        start_s=words[0].start_s,
        end_s=words[-1].end_s,
        text="".join(w.text for w in words).strip(),
    )


# ---------------------------------------------------------------------------
# Strategy B: legacy timestamp markers
# ---------------------------------------------------------------------------


def extract_legacy_phrases(
    start_s: float,
    end_s: float,
    content: str,
) -> list[CaptionPhrase]:
    """Build phrases from ``[MM:SS] text`` markers overlapping the clip.

    Each marker spans until the next marker; the final marker gets a
    5-second span. Kept spans are clipped to ``[start_s, end_s]``.
    """
    markers = [
        (parse_clip_time(match.group(1)), match.group(2).strip())
        for match in _MARKER_RE.finditer(content)
    ]

    phrases: list[CaptionPhrase] = []
    for i, (marker_s, text) in enumerate(markers):
        if i + 1 < len(markers):
            segment_end = float(markers[i + 1][0])
        else:
            segment_end = float(marker_s + LEGACY_SEGMENT_DURATION_S)
        segment_start = float(marker_s)

        if segment_end >= start_s and segment_start <= end_s:
            phrases.append(CaptionPhrase(
                start_s=max(segment_start, start_s),
                end_s=min(segment_end, end_s),
                text=text,
            ))

    return phrases


# ---------------------------------------------------------------------------
# Strategy selection
# ---------------------------------------------------------------------------


def resolve_transcript(
    segments: Sequence[TranscriptSegment],
    content: str = "",
) -> ResolvedTranscript:
    """Decide once which caption strategy a transcript supports.

    Word-level data is detected from the first segment only; a transcript
    whose first segment has no words is treated as legacy throughout.
    """
    if segments and segments[0].words:
        return WordLevelTranscript(segments=tuple(segments))
    return LegacyTimestampTranscript(content=content)


def captions_for_clip(
    transcript: ResolvedTranscript,
    start_s: float,
    end_s: float,
) -> ClipCaptions:
    """Produce caption data for a clip range using the transcript's strategy."""
    if isinstance(transcript, WordLevelTranscript):
        words = extract_words(start_s, end_s, transcript.segments)
        return ClipCaptions(
            strategy=STRATEGY_WORD_LEVEL,
            words=words,
            phrases=group_phrases(words),
        )

    if isinstance(transcript, LegacyTimestampTranscript):
        phrases = extract_legacy_phrases(start_s, end_s, transcript.content)
        logger.debug(
            "No word timing available; %d legacy phrases for %.1fs-%.1fs",
            len(phrases), start_s, end_s,
        )
        return ClipCaptions(strategy=STRATEGY_LEGACY, phrases=phrases)

    raise TypeError("Unsupported transcript variant: {!r}".format(transcript))
