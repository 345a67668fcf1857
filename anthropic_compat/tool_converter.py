"""
Tool declarations and tool-call conversion between Anthropic and OpenAI formats.
"""
import json
import logging
from typing import Dict, Any, List, Optional, Union

from errors import MalformedUpstreamResponse, ValidationError
from .types import (
    AnthropicTool,
    AnthropicToolUseBlock,
    ChatFunction,
    ChatFunctionCall,
    ChatTool,
    ChatToolCall,
)

logger = logging.getLogger(__name__)


def convert_anthropic_tools_to_openai(tools: Optional[List[AnthropicTool]]) -> Optional[List[ChatTool]]:
    """Convert Anthropic tool declarations one-to-one into OpenAI function tools."""
    if not tools:
        logger.debug("[TOOLS_SCHEMA] No tools to convert")
        return None

    openai_tools = [
        ChatTool(
            type="function",
            function=ChatFunction(
                name=tool.name,
                description=tool.description,
                parameters=tool.input_schema,
            ),
        )
        for tool in tools
    ]
    logger.debug(f"[TOOLS_SCHEMA] Converted {len(openai_tools)} tools: {[t.function.name for t in openai_tools]}")
    return openai_tools


def convert_anthropic_tool_choice_to_openai(tool_choice: Optional[Dict[str, Any]]) -> Optional[Union[str, Dict[str, Any]]]:
    """Map Anthropic tool_choice onto the OpenAI tool_choice field."""
    if not tool_choice:
        return None

    choice_type = tool_choice.get("type")
    if choice_type == "auto":
        return "auto"
    if choice_type == "any":
        return "required"
    if choice_type == "none":
        return "none"
    if choice_type == "tool":
        name = tool_choice.get("name")
        if not name:
            raise ValidationError("tool_choice of type 'tool' requires a name")
        return {"type": "function", "function": {"name": name}}

    raise ValidationError(f"Unrecognized tool_choice type '{choice_type}'")


def convert_tool_use_blocks_to_openai(blocks: List[Dict[str, Any]]) -> List[ChatToolCall]:
    """Convert assistant tool_use history blocks to OpenAI tool_calls."""
    tool_calls = []
    for block in blocks:
        if block.get("type") != "tool_use":
            continue
        if not block.get("id") or not block.get("name"):
            raise ValidationError("tool_use blocks require an id and a name")
        tool_calls.append(
            ChatToolCall(
                id=block["id"],
                type="function",
                function=ChatFunctionCall(
                    name=block["name"],
                    arguments=json.dumps(block.get("input") or {}),
                ),
            )
        )
    return tool_calls


def convert_openai_tool_calls_to_anthropic(tool_calls: List[ChatToolCall]) -> List[AnthropicToolUseBlock]:
    """
    Convert upstream tool_calls to Anthropic tool_use content blocks.

    Raises:
        MalformedUpstreamResponse: if an arguments string isn't a JSON object
    """
    blocks = []
    for idx, tool_call in enumerate(tool_calls):
        arguments = tool_call.function.arguments or "{}"
        try:
            parsed_input = json.loads(arguments)
        except json.JSONDecodeError as e:
            logger.error(f"[TOOL_CONVERSION] Failed to parse arguments of tool call #{idx} ({tool_call.function.name}): {e}")
            raise MalformedUpstreamResponse(
                f"Upstream returned unparsable arguments for tool call '{tool_call.function.name}': {e}"
            ) from e

        if not isinstance(parsed_input, dict):
            raise MalformedUpstreamResponse(
                f"Upstream arguments for tool call '{tool_call.function.name}' are not a JSON object"
            )

        blocks.append(
            AnthropicToolUseBlock(
                id=tool_call.id,
                name=tool_call.function.name,
                input=parsed_input,
            )
        )

    logger.debug(f"[TOOL_CONVERSION] Converted {len(blocks)} tool calls to tool_use blocks")
    return blocks
