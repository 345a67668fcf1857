"""
Completion orchestration for both wire surfaces.

One ``CompletionOrchestrator`` serves every request: admission control, the
Anthropic request translation, the optional approval gate, the upstream call,
response or stream translation, and usage accounting.
"""
import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, Optional, Union

import pydantic

import settings
from anthropic_compat import (
    TranslationState,
    format_sse,
    translate_chunk_to_anthropic_events,
    translate_to_anthropic,
    translate_to_openai,
)
from anthropic_compat.types import AnthropicMessagesRequest, ChatRequest
from errors import GatewayError, ValidationError
from models import get_max_output_tokens, resolve_model
from providers import BaseProvider, ChunkStream
from stream_debug import StreamTracer, maybe_create_stream_tracer
from utils.usage_metrics import UsageMetrics
from .admission import RateLimiter
from .approval import ApprovalGate
from ..logging_utils import estimate_prompt_tokens, log_token_usage

logger = logging.getLogger(__name__)

CompletionResult = Union[Dict[str, Any], AsyncIterator[str]]

OPENAI_DONE_FRAME = "data: [DONE]\n\n"


def _describe_validation_error(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ())) or "body"
        parts.append(f"{location}: {error.get('msg')}")
    return "; ".join(parts)


def parse_chat_request(body: Any) -> ChatRequest:
    """Validate an OpenAI chat completion body, raising ValidationError"""
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return ChatRequest.model_validate(body)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid chat completion request: {_describe_validation_error(e)}") from e


def parse_messages_request(body: Any) -> AnthropicMessagesRequest:
    """Validate an Anthropic messages body, raising ValidationError"""
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    try:
        return AnthropicMessagesRequest.model_validate(body)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid messages request: {_describe_validation_error(e)}") from e


@dataclass
class ExchangeContext:
    """Bookkeeping for one request across the upstream call"""
    request_id: str
    model: str
    label: str
    context: Union[int, str, None]
    start_time: float = field(default_factory=time.monotonic)
    input_tokens: int = 0
    output_tokens: int = 0
    usage_reported: bool = False


class CompletionOrchestrator:
    """End-to-end handling of completion requests on both surfaces"""

    def __init__(
        self,
        provider: BaseProvider,
        rate_limiter: Optional[RateLimiter] = None,
        approval_gate: Optional[ApprovalGate] = None,
        metrics: Optional[UsageMetrics] = None,
    ):
        self.provider = provider
        self.rate_limiter = rate_limiter or RateLimiter()
        self.approval_gate = approval_gate or ApprovalGate()
        self.metrics = metrics or UsageMetrics()

    # ------------------------------------------------------------------
    # Collaborator calls
    # ------------------------------------------------------------------

    def _record_request(self, request_id: str, model: str, endpoint: str) -> None:
        try:
            self.metrics.record_request(model, endpoint)
        except Exception as e:
            logger.warning(f"[{request_id}] Failed to record request metric: {e}")

    def _report_usage(self, ctx: ExchangeContext) -> None:
        """Record and log the exchange's usage; only the first call counts"""
        if ctx.usage_reported:
            return
        ctx.usage_reported = True

        elapsed = time.monotonic() - ctx.start_time
        try:
            self.metrics.record_token_usage(ctx.model, ctx.input_tokens, ctx.output_tokens)
        except Exception as e:
            logger.warning(f"[{ctx.request_id}] Failed to record token usage: {e}")
        log_token_usage(
            ctx.request_id,
            ctx.label,
            ctx.model,
            ctx.input_tokens,
            ctx.output_tokens,
            ctx.context,
            elapsed,
        )

    def _create_tracer(self, request_id: str, route: str) -> Optional[StreamTracer]:
        return maybe_create_stream_tracer(
            enabled=settings.STREAM_TRACE_ENABLED,
            request_id=request_id,
            route=route,
            base_dir=settings.STREAM_TRACE_DIR,
            max_bytes=settings.STREAM_TRACE_MAX_BYTES,
        )

    async def _open_stream(self, request: ChatRequest, request_id: str, route: str):
        tracer = self._create_tracer(request_id, route)
        try:
            stream = await self.provider.open_chat_stream(request, request_id, tracer)
        except BaseException:
            if tracer:
                tracer.close()
            raise
        return stream, tracer

    # ------------------------------------------------------------------
    # OpenAI surface
    # ------------------------------------------------------------------

    async def handle_chat_completion(self, body: Dict[str, Any], request_id: str) -> CompletionResult:
        """
        Serve an OpenAI chat completion request.

        Returns the upstream response body, or for streaming requests an
        async iterator of SSE frames. The upstream call has already been made
        (and its HTTP status checked) when this returns.
        """
        await self.rate_limiter.check(request_id)

        request = parse_chat_request(body)
        model_spec = resolve_model(request.model)

        try:
            logger.info(f"[{request_id}] Current token count (estimated): {estimate_prompt_tokens(request.to_payload())}")
        except Exception as e:
            logger.warning(f"[{request_id}] Failed to estimate token count: {e}")

        await self.approval_gate.wait(request_id, f"{request.model} via /v1/chat/completions")

        if request.max_tokens is None:
            max_tokens = get_max_output_tokens(request.model)
            if max_tokens is not None:
                request = request.model_copy(update={"max_tokens": max_tokens})
                logger.debug(f"[{request_id}] Set max_tokens to {max_tokens}")
            else:
                logger.debug(f"[{request_id}] Model {request.model} not in catalog, leaving max_tokens unset")

        ctx = ExchangeContext(
            request_id=request_id,
            model=request.model,
            label="streaming" if request.stream else "chat",
            context=model_spec.context_window if model_spec else None,
        )

        if request.stream:
            stream, tracer = await self._open_stream(request, request_id, "chat-completions")
            self._record_request(request_id, request.model, "chat-completions")
            return self._relay_openai_stream(stream, ctx, tracer)

        response = await self.provider.create_chat_completion(request, request_id)
        self._record_request(request_id, request.model, "chat-completions")

        if response.usage:
            ctx.model = response.model or ctx.model
            ctx.input_tokens = response.usage.prompt_tokens
            ctx.output_tokens = response.usage.completion_tokens
        self._report_usage(ctx)

        return response.model_dump(exclude_unset=True)

    async def _relay_openai_stream(
        self,
        stream: ChunkStream,
        ctx: ExchangeContext,
        tracer: Optional[StreamTracer],
    ) -> AsyncIterator[str]:
        request_id = ctx.request_id
        try:
            async for chunk in stream:
                if chunk.usage is not None:
                    ctx.input_tokens = chunk.usage.prompt_tokens
                    ctx.output_tokens = chunk.usage.completion_tokens

                frame = f"data: {json.dumps(chunk.model_dump(exclude_unset=True))}\n\n"
                if tracer:
                    tracer.log_converted_chunk(frame)
                yield frame

            if tracer:
                tracer.log_converted_chunk(OPENAI_DONE_FRAME)
            yield OPENAI_DONE_FRAME

        except GatewayError as e:
            logger.error(f"[{request_id}] Stream aborted: {e.message}")
            if tracer:
                tracer.log_error(f"stream aborted: {e.message}")
        except asyncio.CancelledError:
            logger.info(f"[{request_id}] Client disconnected, closing upstream stream")
            raise
        finally:
            await stream.aclose()
            self._report_usage(ctx)
            if tracer:
                tracer.close()

    # ------------------------------------------------------------------
    # Anthropic surface
    # ------------------------------------------------------------------

    async def handle_messages(self, body: Dict[str, Any], request_id: str) -> CompletionResult:
        """
        Serve an Anthropic messages request.

        Returns the translated Anthropic message, or for streaming requests an
        async iterator of Anthropic SSE frames.
        """
        await self.rate_limiter.check(request_id)

        anthropic_request = parse_messages_request(body)
        request = translate_to_openai(anthropic_request)
        logger.debug(f"[{request_id}] Translated OpenAI request payload: {json.dumps(request.to_payload())}")

        await self.approval_gate.wait(request_id, f"{request.model} via /v1/messages")

        ctx = ExchangeContext(
            request_id=request_id,
            model=request.model,
            label="Anthropic streaming" if request.stream else "Anthropic",
            context=request.max_tokens,
        )

        if request.stream:
            stream, tracer = await self._open_stream(request, request_id, "messages")
            self._record_request(request_id, request.model, "messages")
            return self._translate_anthropic_stream(stream, ctx, tracer)

        response = await self.provider.create_chat_completion(request, request_id)
        self._record_request(request_id, request.model, "messages")

        try:
            message = translate_to_anthropic(response)
        finally:
            if response.usage:
                ctx.model = response.model or ctx.model
                ctx.input_tokens = response.usage.prompt_tokens
                ctx.output_tokens = response.usage.completion_tokens
            self._report_usage(ctx)

        return message.model_dump()

    async def _translate_anthropic_stream(
        self,
        stream: ChunkStream,
        ctx: ExchangeContext,
        tracer: Optional[StreamTracer],
    ) -> AsyncIterator[str]:
        request_id = ctx.request_id
        state = TranslationState()
        try:
            async for chunk in stream:
                if chunk.usage is not None:
                    ctx.input_tokens = chunk.usage.prompt_tokens
                    ctx.output_tokens = chunk.usage.completion_tokens

                if state.finished:
                    # Past message_stop; keep reading only for a trailing usage chunk
                    continue

                for event in translate_chunk_to_anthropic_events(chunk, state):
                    frame = format_sse(event)
                    if tracer:
                        tracer.log_converted_chunk(frame)
                    yield frame

            if not state.finished:
                logger.warning(f"[{request_id}] Upstream stream ended without a finish reason")

        except GatewayError as e:
            logger.error(f"[{request_id}] Stream aborted: {e.message}")
            if tracer:
                tracer.log_error(f"stream aborted: {e.message}")
        except asyncio.CancelledError:
            logger.info(f"[{request_id}] Client disconnected, closing upstream stream")
            raise
        finally:
            await stream.aclose()
            self._report_usage(ctx)
            if tracer:
                tracer.close()

    # ------------------------------------------------------------------
    # Embeddings
    # ------------------------------------------------------------------

    async def handle_embeddings(self, body: Any, request_id: str) -> Dict[str, Any]:
        """Relay an embeddings request to the upstream"""
        await self.rate_limiter.check(request_id)

        if not isinstance(body, dict) or not body.get("model") or "input" not in body:
            raise ValidationError("Embeddings request requires 'model' and 'input'")

        response = await self.provider.create_embeddings(body, request_id)
        self._record_request(request_id, body["model"], "embeddings")

        # Embeddings have no output tokens
        try:
            usage = response.get("usage") or {}
            prompt_tokens = int(usage.get("prompt_tokens") or 0)
            self.metrics.record_token_usage(response.get("model") or body["model"], prompt_tokens, 0)
            logger.info(f"[{request_id}] Tokens (embeddings) - Model: {body['model']}, In: {prompt_tokens}")
        except Exception as e:
            logger.warning(f"[{request_id}] Failed to record embedding token usage: {e}")
        return response
