"""Model catalog package for the chat gateway"""

from .specifications import ModelSpec, BASE_MODELS
from .registry import MODEL_REGISTRY, build_registry, list_models
from .resolution import resolve_model, get_max_output_tokens

__all__ = [
    "ModelSpec",
    "BASE_MODELS",
    "MODEL_REGISTRY",
    "build_registry",
    "list_models",
    "resolve_model",
    "get_max_output_tokens",
]
