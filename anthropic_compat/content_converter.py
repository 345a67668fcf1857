"""
Content block conversion from Anthropic to OpenAI format.
"""
import json
import logging
from typing import Dict, Any, List, Union

from errors import ValidationError

logger = logging.getLogger(__name__)

USER_BLOCK_TYPES = {"text", "image", "tool_result"}
ASSISTANT_BLOCK_TYPES = {"text", "tool_use", "thinking", "redacted_thinking"}


def check_block_types(blocks: List[Dict[str, Any]], role: str) -> None:
    """Raise ValidationError for a content block this role can't carry."""
    allowed = USER_BLOCK_TYPES if role == "user" else ASSISTANT_BLOCK_TYPES
    for idx, block in enumerate(blocks):
        if not isinstance(block, dict):
            raise ValidationError(f"{role} content block #{idx} must be an object")
        block_type = block.get("type")
        if block_type not in allowed:
            raise ValidationError(
                f"Unrecognized content block type '{block_type}' in {role} message "
                f"(expected one of: {', '.join(sorted(allowed))})"
            )


def join_text_blocks(blocks: List[Dict[str, Any]]) -> str:
    """Concatenate the text of all text blocks, separated by blank lines."""
    return "\n\n".join(block.get("text", "") for block in blocks if block.get("type") == "text")


def convert_system_prompt(system: Union[str, List[Dict[str, Any]], None]) -> str:
    """Flatten an Anthropic system prompt (string or text blocks) to plain text."""
    if system is None:
        return ""
    if isinstance(system, str):
        return system
    return join_text_blocks(system)


def convert_anthropic_image_to_openai(block: Dict[str, Any]) -> Dict[str, Any]:
    """Convert an Anthropic image block to an OpenAI image_url content part."""
    source = block.get("source") or {}
    source_type = source.get("type")

    if source_type == "base64":
        media_type = source.get("media_type", "image/png")
        url = f"data:{media_type};base64,{source.get('data', '')}"
    elif source_type == "url":
        url = source.get("url", "")
    else:
        raise ValidationError(f"Unsupported image source type '{source_type}'")

    return {"type": "image_url", "image_url": {"url": url}}


def convert_user_content_to_openai(blocks: List[Dict[str, Any]]) -> Union[str, List[Dict[str, Any]]]:
    """
    Convert user text/image blocks to OpenAI message content.

    Text-only content collapses to a single string; content with images
    keeps the structured part list so the images survive.
    """
    if not any(block.get("type") == "image" for block in blocks):
        return join_text_blocks(blocks)

    parts: List[Dict[str, Any]] = []
    for block in blocks:
        if block.get("type") == "text":
            parts.append({"type": "text", "text": block.get("text", "")})
        elif block.get("type") == "image":
            parts.append(convert_anthropic_image_to_openai(block))
    logger.debug(f"[CONTENT_CONVERSION] Converted user content to {len(parts)} parts")
    return parts


def convert_tool_result_content(content: Any) -> str:
    """Flatten tool_result content to the string OpenAI tool messages expect."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        pieces = []
        for item in content:
            if isinstance(item, dict) and item.get("type") == "text":
                pieces.append(item.get("text", ""))
            else:
                pieces.append(json.dumps(item))
        return "\n\n".join(pieces)
    return json.dumps(content)


def convert_assistant_text(blocks: List[Dict[str, Any]]) -> str:
    """Assistant text, with any thinking history folded in ahead of it."""
    pieces = []
    for block in blocks:
        block_type = block.get("type")
        if block_type == "thinking":
            pieces.append(block.get("thinking", ""))
        elif block_type == "text":
            pieces.append(block.get("text", ""))
    return "\n\n".join(piece for piece in pieces if piece)
