"""Clip Repurposer — transcript-to-clip caption and render pipeline.

WHY: Long-form recordings are repurposed into short, caption-styled clips
for TikTok, Reels, and Shorts. The hard parts are turning word-level
transcript timing into caption data, and tracking external render jobs
whose latency is unpredictable. This package owns exactly those parts.

HOW: Four stages, each independently testable — segment (core: time
codec, caption segmenter, clip model), render (orchestrator driving an
external renderer through a bounded polling loop), transport (async HTTP
render client), and cache (time-boxed pipeline snapshots per project).

RULES:
- The clip model is the single surface through which render outcomes resolve
- Word-level captions are preferred; the legacy timestamp strategy is a
  fallback chosen once per transcript, never merged with word-level data
- The pipeline cache is an optimisation only — absence always means recompute
"""

__version__ = "0.1.0"
