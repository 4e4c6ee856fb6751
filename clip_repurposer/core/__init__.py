"""Core caption and clip modules.

WHY: The core package contains the pure, I/O-free heart of the pipeline —
the time codec, the IR dataclasses, the caption segmenter, transcript
helpers, and the clip state machine. Everything else builds on these.

HOW: ir.py defines the data structures, timecode.py parses clip times,
segmenter.py turns transcripts into caption words and phrases,
transcript.py derives legacy content and stats, clip.py owns the render
lifecycle of a single clip.

RULES:
- No network or disk access anywhere in this package
- IR dataclasses are the contract between segmenter, orchestrator, and cache
"""
