"""
Anthropic messages endpoint handler.
"""
import logging
import time
import uuid
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse

from errors import GatewayError
from ..dependencies import get_orchestrator, read_json_body
from ..handlers import CompletionOrchestrator
from ..logging_utils import log_request

logger = logging.getLogger(__name__)
router = APIRouter()

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive"}


@router.post("/v1/messages")
async def anthropic_messages(
    raw_request: Request,
    orchestrator: CompletionOrchestrator = Depends(get_orchestrator),
):
    """Anthropic Messages surface, served by the OpenAI-protocol upstream"""
    request_id = str(uuid.uuid4())[:8]
    start_time = time.time()

    logger.info(f"[{request_id}] ===== NEW ANTHROPIC MESSAGES REQUEST =====")

    try:
        body = await read_json_body(raw_request)
        if isinstance(body, dict):
            log_request(request_id, body, "/v1/messages", dict(raw_request.headers))

        result = await orchestrator.handle_messages(body, request_id)
    except GatewayError as e:
        final_elapsed_ms = int((time.time() - start_time) * 1000)
        logger.error(f"[{request_id}] ===== ANTHROPIC MESSAGES FAILED ===== {e.status_code} {e.message} ({final_elapsed_ms}ms)")
        raise

    if isinstance(result, dict):
        final_elapsed_ms = int((time.time() - start_time) * 1000)
        logger.info(f"[{request_id}] ===== ANTHROPIC MESSAGES FINISHED ===== Total time: {final_elapsed_ms}ms")
        return JSONResponse(result)

    logger.debug(f"[{request_id}] Streaming Anthropic events to client")
    return StreamingResponse(result, media_type="text/event-stream", headers=SSE_HEADERS)
