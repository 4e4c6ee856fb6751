"""Async HTTP client for the external render function.

WHY: Clips are rendered by an external service (a serverless render
function fronting a cloud video renderer). The orchestrator only needs
two operations — submit a render, query its status — so this module
hides the HTTP details behind a RenderBackend-compatible class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. RenderClient is an
async context manager — enter it to get an authenticated client, exit to
close the connection pool. Both operations POST to the same function
endpoint with an ``action`` discriminator ("render" or "status").

RULES:
- Always use the async context manager (async with RenderClient(...) as client:)
- Non-2xx responses and bodies carrying "error" raise RenderAPIError
- Network failures surface as httpx.HTTPError; the orchestrator decides
  whether they are recoverable
- The client never sleeps or retries — polling belongs to the orchestrator
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from clip_repurposer.api.models import (
    RenderRequestBody,
    RenderStatus,
    RenderStatusBody,
    RenderSubmitResponse,
)
from clip_repurposer.config import RENDER_BASE_URL, load_api_key

logger = logging.getLogger(__name__)

RENDER_FUNCTION_PATH = "/render-clip"


class RenderAPIError(Exception):
    """Raised when the render service returns an error response.

    RULES:
    - Always include status_code and message
    - message is the service's error text or the raw response body
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Render API error {status_code}: {message}")


class RenderClient:
    """Async client for the render function.

    RULES:
    - Use as: async with RenderClient() as client: ...
    - api_key defaults to load_api_key() from .env
    - base_url defaults to RENDER_BASE_URL from config
    - transport is an optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or load_api_key()
        self._base_url = (base_url or RENDER_BASE_URL).rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> RenderClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=httpx.Timeout(60.0, connect=10.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "RenderClient must be used as an async context manager: "
                "async with RenderClient() as client: ..."
            )
        return self._client

    async def _call(self, body: dict) -> dict:
        client = self._ensure_client()
        resp = await client.post(RENDER_FUNCTION_PATH, json=body)

        if resp.status_code not in (200, 201):
            raise RenderAPIError(resp.status_code, _error_text(resp))

        try:
            data = resp.json()
        except ValueError:
            raise RenderAPIError(resp.status_code, "Invalid JSON: {}".format(resp.text))

        if not isinstance(data, dict):
            raise RenderAPIError(resp.status_code, "Unexpected response: {!r}".format(data))
        if data.get("error"):
            raise RenderAPIError(resp.status_code, str(data["error"]))
        return data

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    async def submit(self, request: RenderRequestBody) -> str:
        """Submit a render request and return the render job id.

        Raises:
            RenderAPIError: On non-2xx responses, error bodies, or a reply
                without a render id.
            httpx.HTTPError: On transport failures.
        """
        body = request.model_dump(by_alias=True, exclude_none=True)
        body["action"] = "render"
        logger.info(
            "Submitting %s render %.1fs-%.1fs with %d words",
            request.platform, request.start_time, request.end_time, len(request.words),
        )

        data = await self._call(body)
        try:
            reply = RenderSubmitResponse.model_validate(data)
        except ValidationError as exc:
            raise RenderAPIError(200, "Malformed submit response: {}".format(exc)) from exc

        if not reply.render_id:
            raise RenderAPIError(200, "Render service returned no renderId")
        return reply.render_id

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def status(self, job_id: str) -> RenderStatus:
        """Query the status of a render job.

        Raises:
            RenderAPIError: On non-2xx responses, error bodies, or a reply
                without a status field.
            httpx.HTTPError: On transport failures.
        """
        data = await self._call({"action": "status", "renderId": job_id})
        try:
            reply = RenderStatusBody.model_validate(data)
        except ValidationError as exc:
            raise RenderAPIError(200, "Malformed status response: {}".format(exc)) from exc
        return reply.to_status()


def _error_text(resp: httpx.Response) -> str:
    """Prefer the service's JSON error message over the raw body."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text
    if isinstance(data, dict):
        detail = data.get("error") or data.get("details")
        if detail:
            return str(detail)
    return resp.text
