"""
Shared request dependencies.
"""
import json
import logging
from typing import Any, Optional

from fastapi import Request

import settings
from errors import ValidationError
from providers import create_upstream_provider
from utils.usage_metrics import USAGE_METRICS
from .handlers import ApprovalGate, CompletionOrchestrator, RateLimiter

logger = logging.getLogger(__name__)

_orchestrator: Optional[CompletionOrchestrator] = None


def build_orchestrator() -> CompletionOrchestrator:
    """Wire the orchestrator from the current settings"""
    logger.debug(
        f"Building orchestrator: upstream={settings.UPSTREAM_BASE_URL}, "
        f"rate_limit={settings.RATE_LIMIT_SECONDS}s wait={settings.RATE_LIMIT_WAIT}, "
        f"manual_approve={settings.MANUAL_APPROVE}"
    )
    return CompletionOrchestrator(
        provider=create_upstream_provider(),
        rate_limiter=RateLimiter(settings.RATE_LIMIT_SECONDS, wait=settings.RATE_LIMIT_WAIT),
        approval_gate=ApprovalGate(enabled=settings.MANUAL_APPROVE),
        metrics=USAGE_METRICS,
    )


def get_orchestrator() -> CompletionOrchestrator:
    """FastAPI dependency returning the process-wide orchestrator"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = build_orchestrator()
    return _orchestrator


async def read_json_body(request: Request) -> Any:
    """Parse the request body as JSON, raising ValidationError on bad input"""
    raw = await request.body()
    if not raw:
        raise ValidationError("Request body is empty")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValidationError(f"Request body is not valid JSON: {e}") from e


def reset_orchestrator() -> None:
    """Drop the cached orchestrator so the next request rebuilds it from settings"""
    global _orchestrator
    _orchestrator = None
