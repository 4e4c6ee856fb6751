"""Pydantic models for the render service and clip-suggestion payloads.

WHY: The render function and the clip-suggestion step both exchange JSON
with external services. Pydantic models make the wire shapes explicit,
validate what comes back at runtime, and keep camelCase field names at
the boundary while Python code uses snake_case.

HOW: Request bodies are built from IR objects and dumped with
``model_dump(by_alias=True, exclude_none=True)``. Responses are parsed
with ``model_validate``. RenderStatus is the plain dataclass the
orchestrator consumes, so the orchestrator never touches pydantic.

RULES:
- All models use Field(description=...) for self-documenting schemas
- Aliases match the render function's camelCase JSON exactly
- Unknown response fields are ignored
- Success markers from the renderer are "succeeded" and "done"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_STATUSES = frozenset({"succeeded", "done"})
FAILED_STATUS = "failed"


@dataclass(frozen=True)
class RenderStatus:
    """Normalised answer to a render status query.

    RULES:
    - status is the renderer's raw vocabulary (queued, rendering, succeeded, ...)
    - url is only meaningful for success statuses
    - error_message is only meaningful for "failed"
    """

    status: str
    url: Optional[str] = None
    error_message: Optional[str] = None
    progress: Optional[float] = None

    @property
    def is_success(self) -> bool:
        return self.status in SUCCESS_STATUSES and bool(self.url)

    @property
    def is_failed(self) -> bool:
        return self.status == FAILED_STATUS


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Render request
# ---------------------------------------------------------------------------


class WordBody(_WireModel):
    """One timed word as the renderer expects it."""

    word: str = Field(description="Word text as transcribed.")
    start: float = Field(description="Absolute start time in seconds.")
    end: float = Field(description="Absolute end time in seconds.")


class PhraseBody(_WireModel):
    """One caption phrase for classic subtitle display."""

    start: float = Field(description="Absolute start time in seconds.")
    end: float = Field(description="Absolute end time in seconds.")
    text: str = Field(description="Phrase text.")


class CaptionStyleBody(_WireModel):
    """Resolved caption style (size already mapped to pixels)."""

    font_family: str = Field(alias="fontFamily", description="Caption font family.")
    font_size: int = Field(alias="fontSize", description="Caption font size in pixels.")
    text_color: str = Field(alias="textColor", description="Caption text colour.")
    highlight_color: str = Field(
        alias="highlightColor", description="Active-word highlight colour."
    )
    background_color: str = Field(
        alias="backgroundColor", description="Caption background colour."
    )
    position: str = Field(description="Vertical placement: top, center or bottom.")
    animation: str = Field(description="Caption animation: fade, slide, pop or karaoke.")


class RenderRequestBody(_WireModel):
    """Body of a render submission."""

    action: str = Field(default="render", description="Always 'render'.")
    platform: str = Field(description="Target platform tag, e.g. 'tiktok'.")
    start_time: float = Field(alias="startTime", description="Clip start in seconds.")
    end_time: float = Field(alias="endTime", description="Clip end in seconds.")
    words: List[WordBody] = Field(
        default_factory=list, description="Timed words inside the clip range."
    )
    captions: List[PhraseBody] = Field(
        default_factory=list, description="Caption phrases inside the clip range."
    )
    caption_style: CaptionStyleBody = Field(
        alias="captionStyle", description="Resolved caption style."
    )
    video_url: Optional[str] = Field(
        default=None, alias="videoUrl", description="Source media URL."
    )
    title: Optional[str] = Field(default=None, description="Clip title, for logging.")


class RenderSubmitResponse(_WireModel):
    """Reply to a render submission."""

    render_id: Optional[str] = Field(
        default=None, alias="renderId", description="Render job identifier."
    )
    status: Optional[str] = Field(default=None, description="Initial job status.")


# ---------------------------------------------------------------------------
# Render status
# ---------------------------------------------------------------------------


class RenderStatusBody(_WireModel):
    """Reply to a status query."""

    status: str = Field(description="Renderer job status.")
    url: Optional[str] = Field(default=None, description="Result URL once finished.")
    error_message: Optional[str] = Field(
        default=None, alias="errorMessage", description="Failure detail."
    )
    progress: Optional[float] = Field(default=None, description="Progress 0-100.")

    def to_status(self) -> RenderStatus:
        return RenderStatus(
            status=self.status,
            url=self.url,
            error_message=self.error_message,
            progress=self.progress,
        )


# ---------------------------------------------------------------------------
# Clip suggestions
# ---------------------------------------------------------------------------


class ClipSuggestion(_WireModel):
    """One clip proposed by the clip-suggestion step."""

    title: str = Field(description="Catchy clip title.")
    start_time: str = Field(alias="startTime", description="Clip start, mm:ss or hh:mm:ss.")
    end_time: str = Field(alias="endTime", description="Clip end, mm:ss or hh:mm:ss.")
    hook: str = Field(default="", description="Short hook or description.")
    platforms: List[str] = Field(default_factory=list, description="Suggested platforms.")
    score: int = Field(default=0, ge=0, le=10, description="Engagement score 0-10.")
