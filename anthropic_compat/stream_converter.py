"""
Stream conversion from OpenAI chat completion chunks to Anthropic lifecycle events.

``translate_chunk_to_anthropic_events`` is the per-chunk step of the
streaming state machine:

    idle -> started -> {block-open <-> block-closed}* -> finished

It touches nothing but the ``TranslationState`` it is handed, so a whole
exchange can be replayed in tests without any I/O.
"""
import logging
from typing import List

from errors import ProtocolViolation
from .events import (
    AnthropicEvent,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
)
from .response_converter import generate_message_id, map_finish_reason_to_stop_reason
from .stream_state import ToolCallAccumulator, TranslationState
from .types import ChatChunk, ChunkToolCallDelta

logger = logging.getLogger(__name__)


def _close_open_block(state: TranslationState, events: List[AnthropicEvent]) -> None:
    if state.block_open:
        events.append(ContentBlockStopEvent(index=state.close_block()))


def _handle_text(text: str, state: TranslationState, events: List[AnthropicEvent]) -> None:
    if state.block_open and state.open_block_type != "text":
        _close_open_block(state, events)

    if not state.block_open:
        index = state.open_block("text")
        events.append(ContentBlockStartEvent(index=index, block_type="text"))

    events.append(ContentBlockDeltaEvent(index=state.open_block_index, delta_type="text_delta", fragment=text))


def _handle_tool_fragment(fragment: ChunkToolCallDelta, state: TranslationState, events: List[AnthropicEvent]) -> None:
    function = fragment.function
    accumulator = state.tool_calls.get(fragment.index)

    if accumulator is None:
        name = function.name if function else None
        if not fragment.id or not name:
            raise ProtocolViolation(
                f"First fragment of tool call #{fragment.index} is missing its id or function name"
            )

        _close_open_block(state, events)
        block_index = state.open_block("tool_use")
        accumulator = ToolCallAccumulator(block_index=block_index, id=fragment.id, name=name)
        state.tool_calls[fragment.index] = accumulator
        events.append(
            ContentBlockStartEvent(
                index=block_index,
                block_type="tool_use",
                tool_use_id=fragment.id,
                name=name,
            )
        )
        logger.debug(f"[STREAM_TOOL] Tool call #{fragment.index} ({name}) mapped to block {block_index}")

    elif state.open_block_index != accumulator.block_index:
        raise ProtocolViolation(
            f"Fragment for tool call #{fragment.index} arrived after its block {accumulator.block_index} was closed"
        )

    arguments = function.arguments if function else None
    if arguments:
        accumulator.arguments += arguments
        events.append(
            ContentBlockDeltaEvent(
                index=accumulator.block_index,
                delta_type="input_json_delta",
                fragment=arguments,
            )
        )


def translate_chunk_to_anthropic_events(chunk: ChatChunk, state: TranslationState) -> List[AnthropicEvent]:
    """
    Translate one upstream chunk into the Anthropic events it implies.

    Args:
        chunk: The next chunk of the upstream stream, in arrival order
        state: State owned by this exchange; mutated in place

    Returns:
        Ordered events to write before the next chunk is processed

    Raises:
        ProtocolViolation: on a chunk after the finish reason, a first tool
            fragment without id or name, or a fragment for a closed tool block
    """
    if state.finished:
        raise ProtocolViolation("Received a chunk after the stream finished")

    events: List[AnthropicEvent] = []

    if not state.message_start_sent:
        events.append(MessageStartEvent(message_id=chunk.id or generate_message_id(), model=chunk.model))
        state.message_start_sent = True

    choice = chunk.choices[0] if chunk.choices else None
    delta = choice.delta if choice else None

    if delta is not None:
        if delta.content:
            _handle_text(delta.content, state, events)

        for fragment in delta.tool_calls or []:
            _handle_tool_fragment(fragment, state, events)

    if chunk.usage is not None:
        state.input_tokens = chunk.usage.prompt_tokens
        state.output_tokens = chunk.usage.completion_tokens

    if choice is not None and choice.finish_reason:
        _close_open_block(state, events)
        events.append(
            MessageDeltaEvent(
                stop_reason=map_finish_reason_to_stop_reason(choice.finish_reason),
                input_tokens=state.input_tokens,
                output_tokens=state.output_tokens,
            )
        )
        events.append(MessageStopEvent())
        state.finished = True

    return events
