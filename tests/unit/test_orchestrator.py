"""
Completion Orchestrator Unit Tests

Drives CompletionOrchestrator against FakeProvider without the HTTP layer.
"""

import json

import pytest

from conftest import FakeProvider, make_chunk, text_response, tool_fragment
from errors import ApprovalRejected, RateLimitExceeded, UpstreamError, ValidationError
from proxy.handlers import ApprovalGate, RateLimiter


def anthropic_body(**overrides):
    body = {
        "model": "gpt-4o",
        "max_tokens": 256,
        "messages": [{"role": "user", "content": "Hi"}],
    }
    body.update(overrides)
    return body


def parse_anthropic_frames(frames):
    events = []
    for frame in frames:
        event_line, data_line = frame.strip().split("\n")
        assert event_line.startswith("event: ")
        payload = json.loads(data_line[len("data: "):])
        assert payload["type"] == event_line[len("event: "):]
        events.append(payload)
    return events


async def collect(stream):
    return [frame async for frame in stream]


class TestChatCompletion:

    @pytest.mark.asyncio
    async def test_non_streaming_returns_upstream_body(self, make_orchestrator, metrics):
        provider = FakeProvider(response=text_response("Hello!"))
        orchestrator = make_orchestrator(provider)

        result = await orchestrator.handle_chat_completion(
            {"model": "gpt-4o", "messages": [{"role": "user", "content": "Hi"}], "max_tokens": 32}, "req1"
        )

        assert result["choices"][0]["message"]["content"] == "Hello!"
        assert provider.requests[0].max_tokens == 32
        snapshot = metrics.snapshot()
        assert snapshot["tokens_in"] == {"gpt-4o": 10}
        assert snapshot["tokens_out"] == {"gpt-4o": 3}
        assert snapshot["requests"] == [{"model": "gpt-4o", "endpoint": "chat-completions", "count": 1}]

    @pytest.mark.asyncio
    async def test_max_tokens_defaults_from_catalog(self, make_orchestrator):
        provider = FakeProvider(response=text_response())
        orchestrator = make_orchestrator(provider)

        await orchestrator.handle_chat_completion({"model": "gpt-4o", "messages": [{"role": "user", "content": "Hi"}]}, "req1")

        assert provider.requests[0].max_tokens == 16_384

    @pytest.mark.asyncio
    async def test_max_tokens_left_unset_for_unknown_model(self, make_orchestrator):
        provider = FakeProvider(response=text_response())
        orchestrator = make_orchestrator(provider)

        await orchestrator.handle_chat_completion(
            {"model": "local-llama", "messages": [{"role": "user", "content": "Hi"}]}, "req1"
        )

        assert provider.requests[0].max_tokens is None
        assert "max_tokens" not in provider.requests[0].to_payload()

    @pytest.mark.asyncio
    async def test_invalid_body_never_reaches_upstream(self, make_orchestrator):
        provider = FakeProvider(response=text_response())
        orchestrator = make_orchestrator(provider)

        with pytest.raises(ValidationError):
            await orchestrator.handle_chat_completion({"messages": "nope"}, "req1")
        with pytest.raises(ValidationError):
            await orchestrator.handle_chat_completion(["not", "an", "object"], "req1")
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_streaming_relays_chunks_and_done(self, make_orchestrator, metrics):
        provider = FakeProvider(
            chunks=[
                make_chunk("Hel"),
                make_chunk("lo", finish_reason="stop"),
                make_chunk(usage={"prompt_tokens": 4, "completion_tokens": 2, "total_tokens": 6}),
            ]
        )
        orchestrator = make_orchestrator(provider)

        stream = await orchestrator.handle_chat_completion(
            {"model": "gpt-4o", "stream": True, "messages": [{"role": "user", "content": "Hi"}]}, "req1"
        )
        frames = await collect(stream)

        assert frames[-1] == "data: [DONE]\n\n"
        first = json.loads(frames[0][len("data: "):])
        assert first["choices"][0]["delta"]["content"] == "Hel"
        assert len(frames) == 4
        assert provider.streams[0].closed
        assert metrics.snapshot()["tokens_out"] == {"gpt-4o": 2}

    @pytest.mark.asyncio
    async def test_upstream_error_propagates_before_streaming(self, make_orchestrator, metrics):
        provider = FakeProvider(error=UpstreamError("overloaded", status_code=503))
        orchestrator = make_orchestrator(provider)

        with pytest.raises(UpstreamError):
            await orchestrator.handle_chat_completion(
                {"model": "gpt-4o", "stream": True, "messages": [{"role": "user", "content": "Hi"}]}, "req1"
            )
        assert metrics.snapshot()["requests"] == []


class TestMessages:

    @pytest.mark.asyncio
    async def test_non_streaming_translation(self, make_orchestrator, metrics):
        provider = FakeProvider(response=text_response("Hello!", prompt_tokens=12, completion_tokens=5))
        orchestrator = make_orchestrator(provider)

        result = await orchestrator.handle_messages(anthropic_body(system="Be brief"), "req1")

        assert result["type"] == "message"
        assert result["role"] == "assistant"
        assert result["content"] == [{"type": "text", "text": "Hello!"}]
        assert result["stop_reason"] == "end_turn"
        assert result["usage"] == {"input_tokens": 12, "output_tokens": 5}

        upstream = provider.requests[0]
        assert upstream.messages[0].role == "system"
        assert upstream.messages[0].content == "Be brief"
        assert upstream.max_tokens == 256
        assert metrics.snapshot()["requests"] == [{"model": "gpt-4o", "endpoint": "messages", "count": 1}]

    @pytest.mark.asyncio
    async def test_empty_messages_rejected(self, make_orchestrator):
        provider = FakeProvider(response=text_response())
        orchestrator = make_orchestrator(provider)

        with pytest.raises(ValidationError):
            await orchestrator.handle_messages(anthropic_body(messages=[]), "req1")
        assert provider.requests == []

    @pytest.mark.asyncio
    async def test_streaming_text(self, make_orchestrator, metrics):
        provider = FakeProvider(
            chunks=[
                make_chunk("Hi"),
                make_chunk(" there", finish_reason="stop", usage={"prompt_tokens": 7, "completion_tokens": 2, "total_tokens": 9}),
            ]
        )
        orchestrator = make_orchestrator(provider)

        stream = await orchestrator.handle_messages(anthropic_body(stream=True), "req1")
        events = parse_anthropic_frames(await collect(stream))

        assert [e["type"] for e in events] == [
            "message_start",
            "content_block_start",
            "content_block_delta",
            "content_block_delta",
            "content_block_stop",
            "message_delta",
            "message_stop",
        ]
        assert events[-2]["delta"]["stop_reason"] == "end_turn"
        assert events[-2]["usage"]["output_tokens"] == 2
        assert metrics.snapshot()["tokens_in"] == {"gpt-4o": 7}

    @pytest.mark.asyncio
    async def test_streaming_tool_call(self, make_orchestrator):
        provider = FakeProvider(
            chunks=[
                make_chunk(tool_calls=[tool_fragment(0, call_id="call_1", name="get_weather")]),
                make_chunk(tool_calls=[tool_fragment(0, '{"city": ')]),
                make_chunk(tool_calls=[tool_fragment(0, '"Paris"}')]),
                make_chunk(finish_reason="tool_calls"),
            ]
        )
        orchestrator = make_orchestrator(provider)

        stream = await orchestrator.handle_messages(anthropic_body(stream=True), "req1")
        events = parse_anthropic_frames(await collect(stream))

        start = events[1]
        assert start["content_block"] == {"type": "tool_use", "id": "call_1", "name": "get_weather", "input": {}}
        partials = [e["delta"]["partial_json"] for e in events if e["type"] == "content_block_delta"]
        assert json.loads("".join(partials)) == {"city": "Paris"}
        assert events[-2]["delta"]["stop_reason"] == "tool_use"

    @pytest.mark.asyncio
    async def test_trailing_usage_after_finish_is_counted(self, make_orchestrator, metrics):
        provider = FakeProvider(
            chunks=[
                make_chunk("ok", finish_reason="stop"),
                make_chunk(usage={"prompt_tokens": 9, "completion_tokens": 1, "total_tokens": 10}),
            ]
        )
        orchestrator = make_orchestrator(provider)

        stream = await orchestrator.handle_messages(anthropic_body(stream=True), "req1")
        events = parse_anthropic_frames(await collect(stream))

        assert events[-1]["type"] == "message_stop"
        assert provider.streams[0].pulled == 2
        assert metrics.snapshot()["tokens_in"] == {"gpt-4o": 9}

    @pytest.mark.asyncio
    async def test_protocol_violation_ends_stream_without_stop(self, make_orchestrator, metrics):
        provider = FakeProvider(
            chunks=[
                make_chunk("partial"),
                make_chunk(tool_calls=[tool_fragment(0, "{}")]),
                make_chunk("never sent", finish_reason="stop"),
            ]
        )
        orchestrator = make_orchestrator(provider)

        stream = await orchestrator.handle_messages(anthropic_body(stream=True), "req1")
        events = parse_anthropic_frames(await collect(stream))

        types = [e["type"] for e in events]
        assert "message_stop" not in types
        assert types[-1] == "content_block_delta"
        assert provider.streams[0].closed
        # Usage is still reported exactly once
        assert metrics.snapshot()["tokens_in"] == {"gpt-4o": 0}

    @pytest.mark.asyncio
    async def test_upstream_error_mid_stream(self, make_orchestrator):
        provider = FakeProvider(chunks=[make_chunk("a"), UpstreamError("connection reset")])
        orchestrator = make_orchestrator(provider)

        stream = await orchestrator.handle_messages(anthropic_body(stream=True), "req1")
        events = parse_anthropic_frames(await collect(stream))

        assert [e["type"] for e in events] == ["message_start", "content_block_start", "content_block_delta"]

    @pytest.mark.asyncio
    async def test_client_disconnect_closes_upstream(self, make_orchestrator):
        provider = FakeProvider(chunks=[make_chunk("a"), make_chunk("b"), make_chunk("c", finish_reason="stop")])
        orchestrator = make_orchestrator(provider)

        stream = await orchestrator.handle_messages(anthropic_body(stream=True), "req1")
        await stream.__anext__()
        await stream.aclose()

        assert provider.streams[0].closed
        assert provider.streams[0].pulled == 1


class TestAdmission:

    @pytest.mark.asyncio
    async def test_rate_limit_checked_before_upstream(self, make_orchestrator):
        provider = FakeProvider(response=text_response())
        orchestrator = make_orchestrator(provider, rate_limiter=RateLimiter(60, clock=lambda: 100.0))

        await orchestrator.handle_messages(anthropic_body(), "req1")
        with pytest.raises(RateLimitExceeded):
            await orchestrator.handle_messages(anthropic_body(), "req2")

        assert len(provider.requests) == 1

    @pytest.mark.asyncio
    async def test_rejected_approval_skips_upstream(self, make_orchestrator):
        provider = FakeProvider(response=text_response())
        orchestrator = make_orchestrator(provider, approval_gate=ApprovalGate(enabled=True, prompt=lambda summary: False))

        with pytest.raises(ApprovalRejected):
            await orchestrator.handle_messages(anthropic_body(), "req1")
        assert provider.requests == []


class TestEmbeddings:

    @pytest.mark.asyncio
    async def test_relays_and_counts(self, make_orchestrator, metrics):
        provider = FakeProvider()
        orchestrator = make_orchestrator(provider)

        result = await orchestrator.handle_embeddings({"model": "text-embedding-3-small", "input": "hi"}, "req1")

        assert result["data"][0]["embedding"] == [0.1, 0.2]
        assert metrics.snapshot()["requests"] == [
            {"model": "text-embedding-3-small", "endpoint": "embeddings", "count": 1}
        ]

    @pytest.mark.asyncio
    async def test_prompt_tokens_recorded(self, make_orchestrator, metrics):
        orchestrator = make_orchestrator(FakeProvider())

        await orchestrator.handle_embeddings({"model": "text-embedding-3-small", "input": "hi"}, "req1")
        await orchestrator.handle_embeddings({"model": "text-embedding-3-small", "input": "again"}, "req2")

        snapshot = metrics.snapshot()
        assert snapshot["tokens_in"] == {"text-embedding-3-small": 12}
        assert snapshot["tokens_out"] == {"text-embedding-3-small": 0}

    @pytest.mark.asyncio
    async def test_requires_model_and_input(self, make_orchestrator):
        orchestrator = make_orchestrator(FakeProvider())

        with pytest.raises(ValidationError):
            await orchestrator.handle_embeddings({"input": "hi"}, "req1")
