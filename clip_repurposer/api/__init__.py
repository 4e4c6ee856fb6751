"""Render service client package — async HTTP interface to the renderer.

WHY: The orchestrator needs to submit renders and query their status
without knowing HTTP details, and the clip-suggestion step's replies need
parsing into clips. This package owns every external wire format.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. Request and response
bodies are pydantic models defined in models.py.

RULES:
- All render HTTP calls go through RenderClient (no direct httpx usage elsewhere)
- Authentication is via Bearer token from config
"""

from clip_repurposer.api.client import RenderAPIError, RenderClient
from clip_repurposer.api.models import RenderRequestBody, RenderStatus
from clip_repurposer.api.suggestions import parse_clip_suggestions

__all__ = [
    "RenderAPIError",
    "RenderClient",
    "RenderRequestBody",
    "RenderStatus",
    "parse_clip_suggestions",
]
