"""
Endpoint handlers for the gateway.
"""
from .health import router as health_router
from .models import router as models_router
from .metrics import router as metrics_router
from .chat_completions import router as chat_completions_router
from .anthropic_messages import router as anthropic_messages_router
from .embeddings import router as embeddings_router

__all__ = [
    'health_router',
    'models_router',
    'metrics_router',
    'chat_completions_router',
    'anthropic_messages_router',
    'embeddings_router',
]
