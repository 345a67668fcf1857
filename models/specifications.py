"""Model specifications for the upstream catalog"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import settings


@dataclass(frozen=True)
class ModelSpec:
    id: str
    created: int
    owned_by: str
    context_window: int
    max_output_tokens: int
    supports_tools: bool = True
    supports_vision: bool = False
    include_in_listing: bool = True

    @classmethod
    def from_entry(cls, entry: Dict[str, Any]) -> "ModelSpec":
        """Build a spec from a validated models.json entry"""
        return cls(
            id=entry["id"],
            created=int(entry.get("created", 0)),
            owned_by=entry.get("owned_by", "upstream"),
            context_window=int(entry.get("context_window", 128_000)),
            max_output_tokens=int(entry.get("max_output_tokens") or settings.DEFAULT_MAX_OUTPUT_TOKENS),
            supports_tools=bool(entry.get("supports_tools", True)),
            supports_vision=bool(entry.get("supports_vision", False)),
        )

    def to_model_listing(self) -> Dict[str, int | str | bool]:
        data: Dict[str, int | str | bool] = {
            "id": self.id,
            "object": "model",
            "type": "model",
            "created": self.created,
            "owned_by": self.owned_by,
            "context_window": self.context_window,
            "max_output_tokens": self.max_output_tokens,
        }
        if self.supports_tools:
            data["supports_tools"] = True
        if self.supports_vision:
            data["supports_vision"] = True
        return data


BASE_MODELS: List[ModelSpec] = [
    ModelSpec(
        id="gpt-4o",
        created=1715367049,
        owned_by="openai",
        context_window=128_000,
        max_output_tokens=16_384,
        supports_vision=True,
    ),
    ModelSpec(
        id="gpt-4o-mini",
        created=1721172741,
        owned_by="openai",
        context_window=128_000,
        max_output_tokens=16_384,
        supports_vision=True,
    ),
    ModelSpec(
        id="gpt-4.1",
        created=1744316542,
        owned_by="openai",
        context_window=1_047_576,
        max_output_tokens=32_768,
        supports_vision=True,
    ),
    ModelSpec(
        id="o3-mini",
        created=1737146383,
        owned_by="openai",
        context_window=200_000,
        max_output_tokens=100_000,
    ),
]
