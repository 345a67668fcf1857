"""
Response conversion from OpenAI to Anthropic format.
"""
import json
import logging
import uuid
from typing import List, Optional

from errors import MalformedUpstreamResponse
from .tool_converter import convert_openai_tool_calls_to_anthropic
from .types import (
    AnthropicContentBlock,
    AnthropicMessage,
    AnthropicTextBlock,
    AnthropicUsage,
    ChatResponse,
)

logger = logging.getLogger(__name__)

FINISH_REASON_MAP = {
    "stop": "end_turn",
    "length": "max_tokens",
    "tool_calls": "tool_use",
    "function_call": "tool_use",
    "content_filter": "end_turn",
}


def map_finish_reason_to_stop_reason(finish_reason: Optional[str]) -> str:
    """Map OpenAI finish_reason to Anthropic stop_reason."""
    return FINISH_REASON_MAP.get(finish_reason, "end_turn")


def generate_message_id() -> str:
    return f"msg_{uuid.uuid4().hex}"


def translate_to_anthropic(response: ChatResponse) -> AnthropicMessage:
    """
    Convert a completed OpenAI chat completion into an Anthropic message.

    Only the first choice is translated; the Messages API has no notion of
    multiple candidates.

    Raises:
        MalformedUpstreamResponse: if there are no choices or tool arguments
            don't parse to a JSON object
    """
    logger.debug("[RESPONSE_CONVERSION] ===== CONVERTING OPENAI RESPONSE TO ANTHROPIC =====")

    if not response.choices:
        raise MalformedUpstreamResponse("Upstream response contained no choices")

    choice = response.choices[0]
    message = choice.message

    content: List[AnthropicContentBlock] = []
    tool_calls = message.tool_calls or []

    if message.content or (message.content is not None and not tool_calls):
        content.append(AnthropicTextBlock(text=message.content))

    content.extend(convert_openai_tool_calls_to_anthropic(tool_calls))

    usage = response.usage
    anthropic_message = AnthropicMessage(
        id=response.id or generate_message_id(),
        model=response.model,
        content=content,
        stop_reason=map_finish_reason_to_stop_reason(choice.finish_reason),
        usage=AnthropicUsage(
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
        ),
    )

    logger.debug(f"[RESPONSE_CONVERSION] Final Anthropic message: {json.dumps(anthropic_message.model_dump(), indent=2)}")
    return anthropic_message
