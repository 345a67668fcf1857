"""
Upstream provider integration.
The gateway talks to a single OpenAI-compatible endpoint.
"""
import settings
from providers.base_provider import BaseProvider
from providers.chunk_stream import ChunkStream
from providers.openai_provider import OpenAIProvider

__all__ = [
    'BaseProvider',
    'ChunkStream',
    'OpenAIProvider',
    'create_upstream_provider',
]


def create_upstream_provider() -> OpenAIProvider:
    """Build the provider from the current settings"""
    return OpenAIProvider(base_url=settings.UPSTREAM_BASE_URL, api_key=settings.UPSTREAM_API_KEY)
