"""
Logging utilities for request debugging and tracing.
"""
import json
import logging
from typing import Dict, Any, Optional, Union

logger = logging.getLogger(__name__)

# Rough characters-per-token ratio for the best-effort estimate
CHARS_PER_TOKEN = 4


def log_request(request_id: str, request_data: Dict[str, Any], endpoint: str, headers: Optional[Dict[str, str]] = None):
    """Log incoming request details including headers"""
    logger.debug(f"[{request_id}] RAW REQUEST CAPTURE")
    logger.debug(f"[{request_id}] Endpoint: {endpoint}")
    logger.debug(f"[{request_id}] Model: {request_data.get('model', 'unknown')}")
    logger.debug(f"[{request_id}] Stream: {request_data.get('stream', False)}")
    logger.debug(f"[{request_id}] Max Tokens: {request_data.get('max_tokens', 'unknown')}")
    logger.debug(f"[{request_id}] Messages: {len(request_data.get('messages') or [])}")

    if headers:
        logger.debug(f"[{request_id}] ===== INCOMING HEADERS FROM CLIENT =====")
        for header_name, header_value in headers.items():
            # Redact sensitive headers
            if header_name.lower() in ['authorization', 'x-api-key', 'api-key']:
                logger.debug(f"[{request_id}] {header_name}: [REDACTED]")
            else:
                logger.debug(f"[{request_id}] {header_name}: {header_value}")


def format_duration(seconds: float) -> str:
    """Format elapsed seconds as H:MM:SS"""
    total = int(max(seconds, 0))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def log_token_usage(
    request_id: str,
    label: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
    context: Union[int, str, None],
    elapsed: float,
):
    """Log the one-line token summary of a completed exchange"""
    speed = output_tokens / elapsed if elapsed > 0 else 0.0
    logger.info(
        f"[{request_id}] Tokens ({label}) - Model: {model}, In: {input_tokens}, Out: {output_tokens}, "
        f"Ctx: {context if context is not None else 'N/A'}, Time: {format_duration(elapsed)}, "
        f"Speed: {speed:.2f} t/s"
    )


def estimate_prompt_tokens(request_data: Dict[str, Any]) -> int:
    """Character-count estimate of the prompt size of an OpenAI request"""
    total_chars = 0
    for message in request_data.get("messages") or []:
        content = message.get("content")
        if isinstance(content, str):
            total_chars += len(content)
        elif content is not None:
            total_chars += len(json.dumps(content))
        if message.get("tool_calls"):
            total_chars += len(json.dumps(message["tool_calls"]))
    if request_data.get("tools"):
        total_chars += len(json.dumps(request_data["tools"]))
    return total_chars // CHARS_PER_TOKEN
