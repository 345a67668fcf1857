"""
Embeddings pass-through endpoint.
"""
import logging
import uuid

from fastapi import APIRouter, Depends, Request

from ..dependencies import get_orchestrator, read_json_body
from ..handlers import CompletionOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/v1/embeddings")
@router.post("/embeddings")
async def create_embeddings(
    raw_request: Request,
    orchestrator: CompletionOrchestrator = Depends(get_orchestrator),
):
    """Relay an embeddings request to the upstream unchanged"""
    request_id = str(uuid.uuid4())[:8]
    body = await read_json_body(raw_request)
    logger.debug(f"[{request_id}] Embeddings request for model {body.get('model') if isinstance(body, dict) else None}")
    return await orchestrator.handle_embeddings(body, request_id)
