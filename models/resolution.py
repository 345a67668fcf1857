"""Model name resolution against the catalog"""

import re
from typing import Optional
import logging

from .registry import MODEL_REGISTRY
from .specifications import ModelSpec

logger = logging.getLogger(__name__)

_DATE_SUFFIX = re.compile(r"-\d{8}$")


def resolve_model(model_name: str) -> Optional[ModelSpec]:
    """
    Look up the catalog entry for a client-supplied model name.

    Examples:
        >>> resolve_model("gpt-4o").id
        'gpt-4o'

        >>> resolve_model("upstream/gpt-4o").id
        'gpt-4o'

        >>> resolve_model("gpt-4.1-20250414").id
        'gpt-4.1'

    Returns None for models the catalog doesn't know about.
    """
    if not model_name:
        return None

    # Handle format "provider/model-name"
    if "/" in model_name:
        model_name = model_name.split("/", 1)[-1]

    entry = MODEL_REGISTRY.get(model_name)
    if entry:
        return entry

    # Dated snapshots resolve to their family entry
    undated = _DATE_SUFFIX.sub("", model_name)
    if undated != model_name:
        entry = MODEL_REGISTRY.get(undated)
        if entry:
            logger.debug("Resolved dated model '%s' to '%s'", model_name, undated)
            return entry

    return None


def get_max_output_tokens(model_name: str) -> Optional[int]:
    """Output-token bound for a catalog model, or None when the catalog doesn't know it"""
    entry = resolve_model(model_name)
    if entry is None:
        return None
    return entry.max_output_tokens
