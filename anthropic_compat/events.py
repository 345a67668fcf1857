"""
Anthropic streaming lifecycle events.

The event kinds form a closed set; ``serialize_event`` is the single place
that turns them into wire dictionaries and rejects anything else.
"""
import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Literal, Optional, Union


@dataclass(frozen=True)
class MessageStartEvent:
    message_id: str
    model: str

    type: ClassVar[str] = "message_start"


@dataclass(frozen=True)
class ContentBlockStartEvent:
    index: int
    block_type: Literal["text", "tool_use"]
    tool_use_id: Optional[str] = None
    name: Optional[str] = None

    type: ClassVar[str] = "content_block_start"


@dataclass(frozen=True)
class ContentBlockDeltaEvent:
    index: int
    delta_type: Literal["text_delta", "input_json_delta"]
    fragment: str

    type: ClassVar[str] = "content_block_delta"


@dataclass(frozen=True)
class ContentBlockStopEvent:
    index: int

    type: ClassVar[str] = "content_block_stop"


@dataclass(frozen=True)
class MessageDeltaEvent:
    stop_reason: str
    input_tokens: int = 0
    output_tokens: int = 0

    type: ClassVar[str] = "message_delta"


@dataclass(frozen=True)
class MessageStopEvent:
    type: ClassVar[str] = "message_stop"


AnthropicEvent = Union[
    MessageStartEvent,
    ContentBlockStartEvent,
    ContentBlockDeltaEvent,
    ContentBlockStopEvent,
    MessageDeltaEvent,
    MessageStopEvent,
]


def serialize_event(event: AnthropicEvent) -> Dict[str, Any]:
    """Convert an event to its Anthropic wire dictionary"""
    if isinstance(event, MessageStartEvent):
        return {
            "type": event.type,
            "message": {
                "id": event.message_id,
                "type": "message",
                "role": "assistant",
                "model": event.model,
                "content": [],
                "stop_reason": None,
                "stop_sequence": None,
                "usage": {"input_tokens": 0, "output_tokens": 0},
            },
        }

    if isinstance(event, ContentBlockStartEvent):
        if event.block_type == "text":
            content_block: Dict[str, Any] = {"type": "text", "text": ""}
        else:
            content_block = {
                "type": "tool_use",
                "id": event.tool_use_id,
                "name": event.name,
                "input": {},
            }
        return {"type": event.type, "index": event.index, "content_block": content_block}

    if isinstance(event, ContentBlockDeltaEvent):
        if event.delta_type == "text_delta":
            delta = {"type": "text_delta", "text": event.fragment}
        else:
            delta = {"type": "input_json_delta", "partial_json": event.fragment}
        return {"type": event.type, "index": event.index, "delta": delta}

    if isinstance(event, ContentBlockStopEvent):
        return {"type": event.type, "index": event.index}

    if isinstance(event, MessageDeltaEvent):
        return {
            "type": event.type,
            "delta": {"stop_reason": event.stop_reason, "stop_sequence": None},
            "usage": {
                "input_tokens": event.input_tokens,
                "output_tokens": event.output_tokens,
            },
        }

    if isinstance(event, MessageStopEvent):
        return {"type": event.type}

    raise TypeError(f"Unknown Anthropic event: {event!r}")


def format_sse(event: AnthropicEvent) -> str:
    """Frame an event as a Server-Sent Events message"""
    payload = serialize_event(event)
    return f"event: {payload['type']}\ndata: {json.dumps(payload)}\n\n"
