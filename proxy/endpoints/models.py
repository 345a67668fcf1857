"""
Models listing endpoint.
"""
from fastapi import APIRouter
from models import list_models

router = APIRouter()


@router.get("/v1/models")
@router.get("/models")
async def list_available_models():
    """OpenAI-compatible listing of the model catalog"""
    return {
        "object": "list",
        "data": list_models(),
        "has_more": False,
    }
