"""Model registry for managing available models"""

from typing import Any, Dict, Iterable, List, Optional
import logging

import settings
from config.loader import load_model_catalog
from .specifications import ModelSpec, BASE_MODELS

logger = logging.getLogger(__name__)

MODEL_REGISTRY: Dict[str, ModelSpec] = {}


def _register_model(spec: ModelSpec) -> None:
    """Register a model in the registry"""
    existing = MODEL_REGISTRY.get(spec.id)
    if existing and existing != spec:
        logger.debug("Overwriting model registry entry for %s", spec.id)
    MODEL_REGISTRY[spec.id] = spec


def build_registry(extra_entries: Optional[Iterable[Dict[str, Any]]] = None) -> None:
    """(Re)build the registry from the built-in models plus catalog entries"""
    MODEL_REGISTRY.clear()
    for base in BASE_MODELS:
        _register_model(base)
    for entry in extra_entries or ():
        _register_model(ModelSpec.from_entry(entry))


def list_models() -> List[Dict[str, int | str | bool]]:
    """OpenAI-style listing of every listable model, sorted by id"""
    listing = [spec.to_model_listing() for spec in MODEL_REGISTRY.values() if spec.include_in_listing]
    listing.sort(key=lambda model: model["id"])  # type: ignore[index]
    return listing


# Build the registry on module import
build_registry(load_model_catalog(settings.MODELS_FILE))
