"""
Test Configuration Module

Shared fakes for the upstream provider and helpers to build chunks.
"""

from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from prometheus_client.parser import text_string_to_metric_families

from anthropic_compat.types import ChatChunk, ChatRequest, ChatResponse
from errors import GatewayError
from providers import BaseProvider
from proxy.app import app
from proxy.dependencies import get_orchestrator
from proxy.handlers import ApprovalGate, CompletionOrchestrator, RateLimiter
from utils.usage_metrics import UsageMetrics


def make_chunk(
    content: Optional[str] = None,
    tool_calls: Optional[List[Dict[str, Any]]] = None,
    finish_reason: Optional[str] = None,
    usage: Optional[Dict[str, int]] = None,
    chunk_id: str = "chatcmpl-1",
    model: str = "gpt-4o",
) -> ChatChunk:
    """Build an upstream chunk the way an OpenAI-protocol server sends it"""
    delta: Dict[str, Any] = {}
    if content is not None:
        delta["content"] = content
    if tool_calls is not None:
        delta["tool_calls"] = tool_calls
    payload: Dict[str, Any] = {
        "id": chunk_id,
        "model": model,
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }
    if usage is not None:
        payload["usage"] = usage
    return ChatChunk.model_validate(payload)


def tool_fragment(index: int, arguments: str = "", call_id: Optional[str] = None, name: Optional[str] = None) -> Dict[str, Any]:
    fragment: Dict[str, Any] = {"index": index, "function": {"arguments": arguments}}
    if call_id is not None:
        fragment["id"] = call_id
        fragment["type"] = "function"
    if name is not None:
        fragment["function"]["name"] = name
    return fragment


class FakeChunkStream:
    """In-memory stand-in for ChunkStream"""

    def __init__(self, chunks: List[Any]):
        self._chunks = list(chunks)
        self.pulled = 0
        self.closed = False

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChatChunk:
        if self.closed or not self._chunks:
            raise StopAsyncIteration
        item = self._chunks.pop(0)
        self.pulled += 1
        if isinstance(item, GatewayError):
            raise item
        return item

    async def aclose(self) -> None:
        self.closed = True


class FakeProvider(BaseProvider):
    """Records upstream requests and replays canned responses"""

    def __init__(self, response: Optional[Dict[str, Any]] = None, chunks: Optional[List[Any]] = None, error: Optional[GatewayError] = None):
        super().__init__(base_url="http://upstream.test/v1", api_key="test-key")
        self.response = response
        self.chunks = chunks or []
        self.error = error
        self.requests: List[ChatRequest] = []
        self.embedding_payloads: List[Dict[str, Any]] = []
        self.streams: List[FakeChunkStream] = []

    async def create_chat_completion(self, request, request_id):
        self.requests.append(request)
        if self.error:
            raise self.error
        return ChatResponse.model_validate(self.response)

    async def open_chat_stream(self, request, request_id, tracer=None):
        self.requests.append(request)
        if self.error:
            raise self.error
        stream = FakeChunkStream(self.chunks)
        self.streams.append(stream)
        return stream

    async def create_embeddings(self, payload, request_id):
        self.embedding_payloads.append(payload)
        if self.error:
            raise self.error
        return {
            "object": "list",
            "data": [{"object": "embedding", "index": 0, "embedding": [0.1, 0.2]}],
            "model": payload["model"],
            "usage": {"prompt_tokens": 6, "total_tokens": 6},
        }


def exposed_samples(text: str) -> Dict[str, List[Any]]:
    """Group the samples of a Prometheus exposition by sample name"""
    samples: Dict[str, List[Any]] = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            samples.setdefault(sample.name, []).append((sample.labels, sample.value))
    return samples


def text_response(text: str = "Hello!", finish_reason: str = "stop", prompt_tokens: int = 10, completion_tokens: int = 3) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-abc",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": text},
                "finish_reason": finish_reason,
            }
        ],
        "usage": {
            "prompt_tokens": prompt_tokens,
            "completion_tokens": completion_tokens,
            "total_tokens": prompt_tokens + completion_tokens,
        },
    }


@pytest.fixture
def metrics() -> UsageMetrics:
    return UsageMetrics()


@pytest.fixture
def make_orchestrator(metrics):
    def _make(provider: BaseProvider, rate_limiter: Optional[RateLimiter] = None, approval_gate: Optional[ApprovalGate] = None):
        return CompletionOrchestrator(
            provider=provider,
            rate_limiter=rate_limiter or RateLimiter(0),
            approval_gate=approval_gate or ApprovalGate(enabled=False),
            metrics=metrics,
        )
    return _make


@pytest_asyncio.fixture
async def gateway_client():
    """
    Yield a function that installs an orchestrator and returns an AsyncClient.
    Overrides are cleared afterwards.
    """
    clients = []

    async def _client(orchestrator: CompletionOrchestrator) -> AsyncClient:
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _client

    for client in clients:
        await client.aclose()
    app.dependency_overrides = {}
