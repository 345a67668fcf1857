"""
Message conversion from Anthropic to OpenAI format.
"""
import logging
from typing import List, Union, Dict, Any

from .content_converter import (
    check_block_types,
    convert_assistant_text,
    convert_system_prompt,
    convert_tool_result_content,
    convert_user_content_to_openai,
)
from .tool_converter import convert_tool_use_blocks_to_openai
from .types import AnthropicMessageParam, ChatMessage

logger = logging.getLogger(__name__)


def _convert_user_message(content: Union[str, List[Dict[str, Any]]]) -> List[ChatMessage]:
    if isinstance(content, str):
        return [ChatMessage(role="user", content=content)]

    check_block_types(content, "user")

    # tool_result blocks answer the previous assistant turn, so they go first
    converted = [
        ChatMessage(
            role="tool",
            tool_call_id=block.get("tool_use_id", ""),
            content=convert_tool_result_content(block.get("content")),
        )
        for block in content
        if block.get("type") == "tool_result"
    ]

    remaining = [block for block in content if block.get("type") != "tool_result"]
    if remaining or not converted:
        converted.append(ChatMessage(role="user", content=convert_user_content_to_openai(remaining)))
    return converted


def _convert_assistant_message(content: Union[str, List[Dict[str, Any]]]) -> ChatMessage:
    if isinstance(content, str):
        return ChatMessage(role="assistant", content=content)

    check_block_types(content, "assistant")

    text = convert_assistant_text(content)
    tool_calls = convert_tool_use_blocks_to_openai(content)
    if tool_calls:
        return ChatMessage(role="assistant", content=text or None, tool_calls=tool_calls)
    return ChatMessage(role="assistant", content=text)


def convert_anthropic_messages_to_openai(
    messages: List[AnthropicMessageParam],
    system: Union[str, List[Dict[str, Any]], None] = None,
) -> List[ChatMessage]:
    """
    Convert Anthropic messages to OpenAI messages, preserving order and role.

    1. The system prompt becomes a leading system message
    2. Each user/assistant turn becomes one message of the same role
    3. tool_result blocks inside a user turn become tool messages placed
       ahead of whatever else that turn carries
    4. tool_use blocks inside an assistant turn become tool_calls on it

    Raises:
        ValidationError: on an unrecognized content block type
    """
    openai_messages: List[ChatMessage] = []

    system_text = convert_system_prompt(system)
    if system_text:
        openai_messages.append(ChatMessage(role="system", content=system_text))

    for message in messages:
        if message.role == "user":
            openai_messages.extend(_convert_user_message(message.content))
        else:
            openai_messages.append(_convert_assistant_message(message.content))

    logger.debug(f"[MESSAGE_CONVERSION] Converted {len(messages)} Anthropic messages into {len(openai_messages)} OpenAI messages")
    return openai_messages
