"""
Request conversion from Anthropic to OpenAI format.
"""
import json
import logging

from errors import ValidationError
from .message_converter import convert_anthropic_messages_to_openai
from .tool_converter import convert_anthropic_tools_to_openai, convert_anthropic_tool_choice_to_openai
from .types import AnthropicMessagesRequest, ChatRequest

logger = logging.getLogger(__name__)


def translate_to_openai(anthropic_request: AnthropicMessagesRequest) -> ChatRequest:
    """
    Convert a full Anthropic messages request into an OpenAI chat completion request.

    Args:
        anthropic_request: Validated Anthropic messages request

    Returns:
        Immutable OpenAI chat completion request

    Raises:
        ValidationError: if there are no messages or a content block is unrecognized
    """
    logger.debug("[REQUEST_CONVERSION] ===== STARTING ANTHROPIC TO OPENAI CONVERSION =====")

    if not anthropic_request.messages:
        raise ValidationError("messages: at least one message is required")

    messages = convert_anthropic_messages_to_openai(anthropic_request.messages, anthropic_request.system)

    fields = {
        "model": anthropic_request.model,
        "messages": messages,
        "max_tokens": anthropic_request.max_tokens,
        "stream": bool(anthropic_request.stream),
    }

    if anthropic_request.temperature is not None:
        fields["temperature"] = anthropic_request.temperature

    if anthropic_request.top_p is not None:
        fields["top_p"] = anthropic_request.top_p

    if anthropic_request.stop_sequences:
        fields["stop"] = anthropic_request.stop_sequences

    tools = convert_anthropic_tools_to_openai(anthropic_request.tools)
    if tools:
        fields["tools"] = tools
        logger.debug(f"[REQUEST_CONVERSION] Added {len(tools)} tools to OpenAI request")

    tool_choice = convert_anthropic_tool_choice_to_openai(anthropic_request.tool_choice)
    if tool_choice is not None:
        fields["tool_choice"] = tool_choice

    user_id = (anthropic_request.metadata or {}).get("user_id")
    if user_id:
        fields["user"] = str(user_id)

    if anthropic_request.top_k is not None:
        logger.debug(f"[REQUEST_CONVERSION] Dropping top_k={anthropic_request.top_k} (no OpenAI equivalent)")
    if anthropic_request.thinking:
        logger.debug("[REQUEST_CONVERSION] Dropping thinking config (no OpenAI equivalent)")

    chat_request = ChatRequest(**fields)

    logger.debug("[REQUEST_CONVERSION] ===== FINAL OPENAI REQUEST =====")
    logger.debug(f"[REQUEST_CONVERSION] {json.dumps(chat_request.to_payload(), indent=2)}")
    return chat_request
