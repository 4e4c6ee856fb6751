"""Unit tests for transcript helpers and derived statistics."""

import pytest

from clip_repurposer.core.ir import TimedWord, TranscriptSegment
from clip_repurposer.core.transcript import (
    build_timestamped_content,
    count_fillers,
    derive_stats,
    segments_from_dicts,
)


class TestSegmentsFromDicts:
    def test_parses_words_with_either_key(self):
        segments = segments_from_dicts([
            {
                "text": "Hello there",
                "start": 0,
                "end": 1.2,
                "words": [
                    {"word": "Hello", "start": 0, "end": 0.5},
                    {"text": " there", "start": 0.5, "end": 1.2},
                ],
            },
        ])
        assert len(segments) == 1
        assert [w.text for w in segments[0].words] == ["Hello", " there"]
        assert segments[0].words[1] == TimedWord(" there", 0.5, 1.2)

    def test_segment_without_words(self):
        segments = segments_from_dicts([{"text": "Hi", "start": 3, "end": 4}])
        assert segments[0].words == []


class TestBuildTimestampedContent:
    def test_one_marker_line_per_segment(self, legacy_segments):
        content = build_timestamped_content(legacy_segments)
        assert content == (
            "[00:00] Welcome back to the show.\n"
            "[00:04] Today we talk about clips.\n"
        )

    def test_segment_timestamp_label_wins(self):
        segment = TranscriptSegment(text="Hi", start_s=61, end_s=62, timestamp="01:01")
        assert build_timestamped_content([segment]) == "[01:01] Hi\n"

    def test_empty(self):
        assert build_timestamped_content([]) == ""


class TestCountFillers:
    """count_fillers() matches whole words, ignoring case."""

    def test_simple_fillers(self):
        assert count_fillers("Um, I was, uh, thinking") == 2

    def test_whole_word_only(self):
        # "umbrella" and "likely" must not count
        assert count_fillers("The umbrella is likely wet") == 0

    def test_multi_word_filler(self):
        assert count_fillers("It was, you know, fine. You know?") == 2

    def test_filler_with_trailing_comma(self):
        assert count_fillers("So, here we go. so, again. So it goes") == 2

    def test_custom_list(self):
        assert count_fillers("right right RIGHT", fillers=("right",)) == 3


class TestDeriveStats:
    def test_word_level_stats(self, sample_segments):
        stats = derive_stats(sample_segments)
        assert stats.word_count == 6
        assert stats.segment_count == 2
        assert stats.has_word_timing is True
        assert stats.filler_count == 0
        assert stats.duration_s == pytest.approx(2.9)

    def test_legacy_stats(self, legacy_segments):
        stats = derive_stats(legacy_segments)
        assert stats.word_count == 0
        assert stats.has_word_timing is False
        assert stats.duration_s == pytest.approx(10.0)

    def test_uses_given_content(self, legacy_segments):
        stats = derive_stats(legacy_segments, content="[00:00] um like basically\n")
        assert stats.filler_count == 3

    def test_empty_transcript(self):
        stats = derive_stats([])
        assert stats.to_dict() == {
            "word_count": 0,
            "filler_count": 0,
            "segment_count": 0,
            "has_word_timing": False,
            "duration_s": 0.0,
        }
