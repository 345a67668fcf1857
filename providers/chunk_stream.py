"""
Pull-based iterator over an upstream chat completion stream.
"""
import json
import logging
from typing import Optional, TYPE_CHECKING

import httpx
import pydantic

from anthropic_compat.types import ChatChunk
from errors import MalformedUpstreamResponse, UpstreamError

if TYPE_CHECKING:
    from stream_debug import StreamTracer

logger = logging.getLogger(__name__)


class ChunkStream:
    """
    Yields one ``ChatChunk`` per upstream ``data:`` line until ``data: [DONE]``.

    Owns the httpx client and streaming response; both are released by
    ``aclose()``, which is also called automatically once the stream ends.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        response: httpx.Response,
        request_id: str,
        tracer: Optional["StreamTracer"] = None,
    ):
        self._client = client
        self._response = response
        self._lines = response.aiter_lines()
        self._request_id = request_id
        self._tracer = tracer
        self._closed = False
        self.chunk_count = 0

    def __aiter__(self) -> "ChunkStream":
        return self

    async def __anext__(self) -> ChatChunk:
        if self._closed:
            raise StopAsyncIteration

        while True:
            try:
                line = await self._lines.__anext__()
            except StopAsyncIteration:
                logger.debug(f"[{self._request_id}] Upstream stream ended without [DONE]")
                await self.aclose()
                raise
            except httpx.HTTPError as e:
                logger.error(f"[{self._request_id}] Upstream stream failed: {e}")
                if self._tracer:
                    self._tracer.log_error(f"upstream stream failed: {e}")
                await self.aclose()
                raise UpstreamError(f"Upstream stream failed: {e}") from e

            line = line.strip()
            if not line or line.startswith(":") or not line.startswith("data:"):
                continue

            data = line[len("data:"):].strip()
            if self._tracer:
                self._tracer.log_source_chunk(data)

            if data == "[DONE]":
                if self._tracer:
                    self._tracer.log_note("received [DONE] from upstream")
                await self.aclose()
                raise StopAsyncIteration

            try:
                payload = json.loads(data)
            except json.JSONDecodeError as e:
                await self.aclose()
                raise MalformedUpstreamResponse(f"Upstream sent an unparsable stream chunk: {e}") from e

            if isinstance(payload, dict) and "error" in payload:
                await self.aclose()
                raise UpstreamError("Upstream reported an error mid-stream", body=payload)

            try:
                chunk = ChatChunk.model_validate(payload)
            except pydantic.ValidationError as e:
                await self.aclose()
                raise MalformedUpstreamResponse(f"Upstream stream chunk has an unexpected shape: {e}") from e

            self.chunk_count += 1
            return chunk

    async def aclose(self) -> None:
        """Release the upstream response and its client. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()
        logger.debug(f"[{self._request_id}] Upstream stream closed after {self.chunk_count} chunks")
        if self._tracer:
            self._tracer.log_note("upstream stream closed")
