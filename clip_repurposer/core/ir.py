"""Intermediate representation dataclasses for transcripts and captions.

WHY: The transcription collaborator hands over loosely-shaped dicts
(segments with optional word lists, plus timestamped plain text). The
segmenter, orchestrator, and cache all need the same well-typed view of
that data, so the shapes live here, decoupled from any one consumer.

HOW: Small dataclasses form the vocabulary:
  TimedWord                 — one transcript word with start/end seconds
  CaptionPhrase             — a displayable run of 1–7 words with combined timing
  TranscriptSegment         — one transcription segment, optionally carrying words
  WordLevelTranscript       — tagged variant: segments with word timing
  LegacyTimestampTranscript — tagged variant: "[MM:SS] text" content only
  CaptionStyle              — read-only caption styling for a render request

RULES:
- All times are float seconds
- TimedWord and CaptionPhrase are frozen; end_s >= start_s is enforced
- The two transcript variants are resolved once at the boundary and
  never merged (see segmenter.resolve_transcript)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from clip_repurposer.config import (
    CAPTION_ANIMATIONS,
    CAPTION_POSITIONS,
    CAPTION_SIZES,
    DEFAULT_ANIMATION,
    DEFAULT_BACKGROUND_COLOR,
    DEFAULT_FONT_FAMILY,
    DEFAULT_POSITION,
    DEFAULT_SIZE,
    DEFAULT_TEXT_COLOR,
    RENDER_ACCENT_COLOR,
)


@dataclass(frozen=True)
class TimedWord:
    """A single transcript word with its spoken interval.

    RULES:
    - text keeps whatever spacing the transcriber produced (e.g. " works.")
    - start_s / end_s are absolute offsets into the recording
    """

    text: str
    start_s: float
    end_s: float

    def __post_init__(self) -> None:
        if self.end_s < self.start_s:
            raise ValueError(
                "Word '{}' ends ({}) before it starts ({})".format(
                    self.text, self.end_s, self.start_s
                )
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TimedWord:
        """Parse a word dict from the transcription collaborator.

        Whisper-style payloads use ``word``; others use ``text``.
        """
        text = data["word"] if "word" in data else data["text"]
        return cls(text=text, start_s=float(data["start"]), end_s=float(data["end"]))

    def to_dict(self) -> dict[str, Any]:
        return {"word": self.text, "start": self.start_s, "end": self.end_s}


@dataclass(frozen=True)
class CaptionPhrase:
    """A grouped run of words shown together as a classic subtitle."""

    start_s: float
    end_s: float
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"start": self.start_s, "end": self.end_s, "text": self.text}


@dataclass
class TranscriptSegment:
    """One segment as produced by the transcription collaborator.

    WHY: Whisper returns coarse segments and, when word timestamps are
    requested, a word list that is later attached to each segment. Older
    transcripts were stored before word timing existed and carry none.

    RULES:
    - words is empty when the transcript predates word-level timing
    - timestamp is the "MM:SS" label of start_s, when the source supplied one
    """

    text: str
    start_s: float
    end_s: float
    words: list[TimedWord] = field(default_factory=list)
    timestamp: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TranscriptSegment:
        return cls(
            text=data.get("text", "").strip(),
            start_s=float(data.get("start", 0.0)),
            end_s=float(data.get("end", 0.0)),
            words=[TimedWord.from_dict(w) for w in data.get("words") or []],
            timestamp=data.get("timestamp"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "text": self.text,
            "start": self.start_s,
            "end": self.end_s,
            "words": [w.to_dict() for w in self.words],
        }
        if self.timestamp is not None:
            data["timestamp"] = self.timestamp
        return data


@dataclass(frozen=True)
class WordLevelTranscript:
    """Transcript whose segments carry word-level timing (caption strategy A)."""

    segments: tuple[TranscriptSegment, ...]


@dataclass(frozen=True)
class LegacyTimestampTranscript:
    """Transcript known only as "[MM:SS] text" content (caption strategy B)."""

    content: str


ResolvedTranscript = Union[WordLevelTranscript, LegacyTimestampTranscript]


@dataclass(frozen=True)
class CaptionStyle:
    """Caption styling chosen by the user for one render.

    WHY: The renderer needs font, colours, placement, size, and animation
    for the caption layer. The style is a plain value object so one style
    can be reused across every clip of a project.

    RULES:
    - position: top | center | bottom
    - size: small | medium | large (mapped to pixels by RenderConfig)
    - animation: fade | slide | pop | karaoke
    - highlight_color is kept for display, but render requests always use
      the configured accent colour for the active word
    """

    font_family: str = DEFAULT_FONT_FAMILY
    text_color: str = DEFAULT_TEXT_COLOR
    highlight_color: str = RENDER_ACCENT_COLOR
    background_color: str = DEFAULT_BACKGROUND_COLOR
    position: str = DEFAULT_POSITION
    size: str = DEFAULT_SIZE
    animation: str = DEFAULT_ANIMATION

    def __post_init__(self) -> None:
        _check_choice("position", self.position, CAPTION_POSITIONS)
        _check_choice("size", self.size, CAPTION_SIZES)
        _check_choice("animation", self.animation, CAPTION_ANIMATIONS)


def _check_choice(name: str, value: str, allowed: frozenset[str]) -> None:
    if value not in allowed:
        raise ValueError(
            "Invalid caption {} '{}'. Expected one of: {}".format(
                name, value, ", ".join(sorted(allowed))
            )
        )
