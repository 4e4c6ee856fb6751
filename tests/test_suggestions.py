"""Tests for clip-suggestion reply parsing."""

import json

from clip_repurposer.api.suggestions import parse_clip_suggestions
from clip_repurposer.core.clip import RenderState


def _reply(clips):
    return "Here are the best moments:\n```json\n{}\n```\nEnjoy!".format(
        json.dumps({"clips": clips})
    )


GOOD_CLIP = {
    "title": "The turning point",
    "startTime": "01:10",
    "endTime": "01:55",
    "hook": "Nobody expected this",
    "platforms": ["TikTok", "shorts"],
    "score": 9,
}


class TestParseClipSuggestions:
    def test_fenced_json_parsed_into_idle_clips(self):
        clips = parse_clip_suggestions(_reply([GOOD_CLIP]))

        assert len(clips) == 1
        clip = clips[0]
        assert clip.spec.title == "The turning point"
        assert clip.spec.start_s == 70
        assert clip.spec.end_s == 115
        assert clip.spec.platforms == frozenset({"tiktok", "shorts"})
        assert clip.spec.score == 9
        assert clip.render_state is RenderState.IDLE

    def test_optional_fields_default(self):
        clips = parse_clip_suggestions(
            json.dumps({"clips": [{"title": "Bare", "startTime": "00:00", "endTime": "00:30"}]})
        )
        assert clips[0].spec.hook == ""
        assert clips[0].spec.platforms == frozenset()
        assert clips[0].spec.score == 0

    def test_invalid_entries_skipped(self):
        bad_time = dict(GOOD_CLIP, startTime="later")
        backwards = dict(GOOD_CLIP, startTime="02:00", endTime="01:00")
        bad_score = dict(GOOD_CLIP, score=42)
        missing_title = {k: v for k, v in GOOD_CLIP.items() if k != "title"}

        clips = parse_clip_suggestions(
            _reply([bad_time, GOOD_CLIP, backwards, bad_score, missing_title])
        )
        assert [c.spec.title for c in clips] == ["The turning point"]

    def test_invalid_json_returns_empty(self):
        assert parse_clip_suggestions('{"clips": [oops}') == []

    def test_no_json_returns_empty(self):
        assert parse_clip_suggestions("Sorry, I could not find any clips.") == []

    def test_empty_reply_returns_empty(self):
        assert parse_clip_suggestions("") == []

    def test_missing_clips_key_returns_empty(self):
        assert parse_clip_suggestions('{"moments": []}') == []
