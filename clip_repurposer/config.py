"""Configuration constants, render defaults, and .env loading.

WHY: Centralizes all configurable values so they are easy to find,
update, and override. Platform dimensions, font-size tables, filler
words, and polling limits are plain data structures — not buried in
logic — so the orchestrator, client, and cache read one source.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level dicts and scalars, each overridable via environment
variables. RenderConfig bundles the orchestrator knobs into one explicit
value object whose defaults come from these constants.

RULES:
- FONT_SIZES maps caption size names to pixel font sizes (60/80/100)
- The active-word highlight colour is RENDER_ACCENT_COLOR, never user style
- Poll interval × max attempts bounds total polling time
- API key is loaded from .env via python-dotenv, never hardcoded
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load .env from the project root (where the process is started from)
load_dotenv()

# ---------------------------------------------------------------------------
# Caption style tables
# ---------------------------------------------------------------------------

FONT_SIZES: dict[str, int] = {
    "small": 60,
    "medium": 80,
    "large": 100,
}
"""Caption size name → pixel font size sent to the renderer."""

CAPTION_POSITIONS: frozenset[str] = frozenset({"top", "center", "bottom"})
CAPTION_SIZES: frozenset[str] = frozenset(FONT_SIZES)
CAPTION_ANIMATIONS: frozenset[str] = frozenset({"fade", "slide", "pop", "karaoke"})

DEFAULT_FONT_FAMILY = "Montserrat"
DEFAULT_TEXT_COLOR = "#FFFFFF"
DEFAULT_BACKGROUND_COLOR = "rgba(0,0,0,0.6)"
DEFAULT_POSITION = "bottom"
DEFAULT_SIZE = "medium"
DEFAULT_ANIMATION = "pop"

# ---------------------------------------------------------------------------
# Platform output dimensions
# ---------------------------------------------------------------------------

PLATFORM_CONFIGS: dict[str, dict[str, int]] = {
    "tiktok": {"width": 1080, "height": 1920, "fps": 30},
    "reels": {"width": 1080, "height": 1920, "fps": 30},
    "shorts": {"width": 1080, "height": 1920, "fps": 30},
    "landscape": {"width": 1920, "height": 1080, "fps": 30},
}

# ---------------------------------------------------------------------------
# Transcript statistics
# ---------------------------------------------------------------------------

FILLER_WORDS: tuple[str, ...] = (
    "um", "uh", "like", "you know", "basically", "actually", "so,", "well,",
)
"""Filler phrases counted (case-insensitive, whole word) in derived stats."""

LEGACY_SEGMENT_DURATION_S = 5
"""Duration given to the final, unterminated marker in legacy transcripts."""

# ---------------------------------------------------------------------------
# Render service and polling defaults
# ---------------------------------------------------------------------------

RENDER_BASE_URL = os.getenv("RENDER_BASE_URL", "http://localhost:54321/functions/v1")
RENDER_ACCENT_COLOR = os.getenv("RENDER_ACCENT_COLOR", "#FFD700")
RENDER_POLL_INTERVAL_S = float(os.getenv("RENDER_POLL_INTERVAL_S", "5"))
RENDER_MAX_POLL_ATTEMPTS = int(os.getenv("RENDER_MAX_POLL_ATTEMPTS", "60"))
RENDER_SIMULATED_DELAY_S = float(os.getenv("RENDER_SIMULATED_DELAY_S", "3"))
RENDER_PLACEHOLDER_URL = os.getenv(
    "RENDER_PLACEHOLDER_URL",
    "https://storage.googleapis.com/gtv-videos-bucket/sample/ForBiggerFun.mp4",
)
RENDER_FAIL_ON_EXHAUSTION = os.getenv("RENDER_FAIL_ON_EXHAUSTION", "true").lower() == "true"

# ---------------------------------------------------------------------------
# Pipeline cache defaults
# ---------------------------------------------------------------------------

PIPELINE_CACHE_TTL_S = float(os.getenv("PIPELINE_CACHE_TTL_S", "300"))
PIPELINE_CACHE_DIR = os.getenv("PIPELINE_CACHE_DIR", ".clip_cache")


@dataclass(frozen=True)
class RenderConfig:
    """Explicit configuration for the render orchestrator.

    WHY: The accent colour, font-size table, and polling limits used to be
    hard-coded globals. Passing one immutable value object makes every
    knob visible at the call site and lets tests shrink delays to zero.

    RULES:
    - poll_interval_s: delay before every status check (default 5)
    - max_poll_attempts: in-progress checks allowed before giving up (default 60)
    - simulated_delay_s / placeholder_url: degraded-mode render when submission fails
    - accent_color: fixed active-word highlight colour
    - fail_on_exhaustion: True resolves the clip failed("timeout") when attempts
      run out; False leaves it rendering (legacy behaviour)
    """

    poll_interval_s: float = RENDER_POLL_INTERVAL_S
    max_poll_attempts: int = RENDER_MAX_POLL_ATTEMPTS
    simulated_delay_s: float = RENDER_SIMULATED_DELAY_S
    placeholder_url: str = RENDER_PLACEHOLDER_URL
    accent_color: str = RENDER_ACCENT_COLOR
    fail_on_exhaustion: bool = RENDER_FAIL_ON_EXHAUSTION

    def font_size(self, size: str) -> int:
        """Map a caption size name to its pixel font size."""
        try:
            return FONT_SIZES[size]
        except KeyError:
            raise ValueError(
                "Unknown caption size '{}'. Expected one of: {}".format(
                    size, ", ".join(sorted(FONT_SIZES))
                )
            ) from None


def load_api_key() -> str:
    """Load the render service API key from the environment.

    WHY: The key authenticates every render submission and status query.
    Loading it from the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ValueError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("RENDER_API_KEY", "").strip()
    if not key:
        raise ValueError(
            "Render API key not configured. "
            "Add RENDER_API_KEY to the .env file in the app folder."
        )
    return key
