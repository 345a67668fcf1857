"""
Usage metrics endpoint.
"""
from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..dependencies import get_orchestrator
from ..handlers import CompletionOrchestrator

router = APIRouter()


@router.get("/metrics")
async def usage_metrics(orchestrator: CompletionOrchestrator = Depends(get_orchestrator)):
    """Token and request counters since startup, in Prometheus text format"""
    return Response(content=orchestrator.metrics.render(), media_type=CONTENT_TYPE_LATEST)
