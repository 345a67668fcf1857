"""
Anthropic to OpenAI API compatibility layer.
Translates Anthropic Messages requests for an OpenAI-protocol upstream and
translates the upstream's responses and stream chunks back.
"""

# Public API exports
from .events import (
    AnthropicEvent,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    format_sse,
    serialize_event,
)
from .message_converter import convert_anthropic_messages_to_openai
from .tool_converter import (
    convert_anthropic_tools_to_openai,
    convert_anthropic_tool_choice_to_openai,
    convert_openai_tool_calls_to_anthropic,
)
from .request_converter import translate_to_openai
from .response_converter import translate_to_anthropic, map_finish_reason_to_stop_reason
from .stream_converter import translate_chunk_to_anthropic_events
from .stream_state import TranslationState, ToolCallAccumulator

__all__ = [
    # Events
    "AnthropicEvent",
    "ContentBlockDeltaEvent",
    "ContentBlockStartEvent",
    "ContentBlockStopEvent",
    "MessageDeltaEvent",
    "MessageStartEvent",
    "MessageStopEvent",
    "format_sse",
    "serialize_event",

    # Message and tool conversion
    "convert_anthropic_messages_to_openai",
    "convert_anthropic_tools_to_openai",
    "convert_anthropic_tool_choice_to_openai",
    "convert_openai_tool_calls_to_anthropic",

    # Request/Response conversion
    "translate_to_openai",
    "translate_to_anthropic",
    "map_finish_reason_to_stop_reason",

    # Stream conversion
    "translate_chunk_to_anthropic_events",
    "TranslationState",
    "ToolCallAccumulator",
]
