"""
OpenAI-compatible provider implementation.
Handles requests to the upstream chat completions and embeddings endpoints.
"""
import json
import logging
from typing import Dict, Any, Optional, TYPE_CHECKING

import httpx
import pydantic

import settings
from anthropic_compat.types import ChatRequest, ChatResponse
from errors import MalformedUpstreamResponse, UpstreamError
from providers.base_provider import BaseProvider
from providers.chunk_stream import ChunkStream

if TYPE_CHECKING:
    from stream_debug import StreamTracer

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class OpenAIProvider(BaseProvider):
    """Provider implementation for OpenAI-compatible APIs"""

    def __init__(self, base_url: str, api_key: str, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(base_url, api_key)
        # Tests swap in httpx.MockTransport here
        self.transport = transport

    def _get_endpoint(self, path: str) -> str:
        """Join the base URL and an API path"""
        return f"{self.base_url.rstrip('/')}/{path}"

    def _get_headers(self, accept: str = "application/json") -> Dict[str, str]:
        """Build request headers"""
        headers = {
            "Content-Type": "application/json",
            "Accept": accept,
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _post_json(self, path: str, payload: Dict[str, Any], request_id: str) -> Any:
        endpoint = self._get_endpoint(path)
        logger.debug(f"[{request_id}] Making upstream request to {endpoint}")
        logger.debug(f"[{request_id}] Request body: {json.dumps(payload)}")

        # Use REQUEST_TIMEOUT for non-streaming with industry-standard CONNECT_TIMEOUT
        timeout = httpx.Timeout(settings.REQUEST_TIMEOUT, connect=settings.CONNECT_TIMEOUT)
        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            try:
                response = await client.post(endpoint, json=payload, headers=self._get_headers())
            except httpx.HTTPError as e:
                logger.error(f"[{request_id}] Upstream request failed: {e}")
                raise UpstreamError(f"Upstream request failed: {e}") from e

        logger.debug(f"[{request_id}] Upstream response status: {response.status_code}")

        if response.status_code != 200:
            body = _error_body(response)
            logger.error(f"[{request_id}] Upstream error {response.status_code}: {body}")
            raise UpstreamError(
                f"Upstream returned status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedUpstreamResponse(f"Upstream returned a non-JSON body: {e}") from e

    async def create_chat_completion(
        self,
        request: ChatRequest,
        request_id: str
    ) -> ChatResponse:
        """Make a non-streaming request to an OpenAI-compatible provider

        Args:
            request: The OpenAI-format request
            request_id: Request ID for logging

        Returns:
            The parsed chat completion
        """
        payload = request.to_payload()
        payload["stream"] = False
        data = await self._post_json("chat/completions", payload, request_id)

        try:
            return ChatResponse.model_validate(data)
        except pydantic.ValidationError as e:
            logger.error(f"[{request_id}] Upstream completion has an unexpected shape: {e}")
            raise MalformedUpstreamResponse(f"Upstream completion has an unexpected shape: {e}") from e

    async def open_chat_stream(
        self,
        request: ChatRequest,
        request_id: str,
        tracer: Optional["StreamTracer"] = None,
    ) -> ChunkStream:
        """Open a stream from an OpenAI-compatible provider

        Args:
            request: The OpenAI-format request
            request_id: Request ID for logging
            tracer: Optional stream tracer for debugging

        Returns:
            A ChunkStream over the upstream SSE body
        """
        endpoint = self._get_endpoint("chat/completions")
        payload = request.to_payload()
        payload["stream"] = True

        if tracer:
            tracer.log_note(f"starting upstream stream to {endpoint}")
            tracer.log_note(f"model={request.model}")

        logger.debug(f"[{request_id}] Streaming from upstream: {endpoint}")
        logger.debug(f"[{request_id}] Request body: {json.dumps(payload)}")

        # Use STREAM_TIMEOUT for streaming requests with READ_TIMEOUT between chunks
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.STREAM_TIMEOUT, connect=settings.CONNECT_TIMEOUT, read=settings.READ_TIMEOUT),
            transport=self.transport,
        )
        upstream_request = client.build_request(
            "POST",
            endpoint,
            json=payload,
            headers=self._get_headers(accept="text/event-stream"),
        )

        try:
            response = await client.send(upstream_request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            logger.error(f"[{request_id}] Upstream stream request failed: {e}")
            if tracer:
                tracer.log_error(f"upstream stream request failed: {e}")
            raise UpstreamError(f"Upstream request failed: {e}") from e

        if tracer:
            tracer.log_note(f"upstream responded with status={response.status_code}")

        if response.status_code != 200:
            try:
                await response.aread()
                body = _error_body(response)
            finally:
                await response.aclose()
                await client.aclose()
            logger.error(f"[{request_id}] Upstream error {response.status_code}: {body}")
            if tracer:
                tracer.log_error(f"upstream error status={response.status_code} body={body}")
            raise UpstreamError(
                f"Upstream returned status {response.status_code}",
                status_code=response.status_code,
                body=body,
            )

        return ChunkStream(client, response, request_id, tracer)

    async def create_embeddings(
        self,
        payload: Dict[str, Any],
        request_id: str
    ) -> Dict[str, Any]:
        """Relay an embeddings request to the upstream"""
        return await self._post_json("embeddings", payload, request_id)
