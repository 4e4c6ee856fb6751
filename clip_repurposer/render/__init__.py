"""Render orchestration package.

The orchestrator turns clip captions and a caption style into render
requests and drives each clip's render state machine to a terminal
state through a bounded polling loop.
"""

from clip_repurposer.render.orchestrator import (
    RenderBackend,
    RenderOrchestrator,
    build_render_request,
)

__all__ = ["RenderBackend", "RenderOrchestrator", "build_render_request"]
