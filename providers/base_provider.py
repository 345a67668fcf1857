"""
Base provider interface for the upstream completion provider.
Defines the contract the orchestrator relies on.
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, TYPE_CHECKING

from anthropic_compat.types import ChatRequest, ChatResponse

if TYPE_CHECKING:
    from providers.chunk_stream import ChunkStream
    from stream_debug import StreamTracer


class BaseProvider(ABC):
    """Abstract base class for upstream providers"""

    def __init__(self, base_url: str, api_key: str):
        """
        Initialize provider with endpoint and credentials

        Args:
            base_url: The provider's base URL
            api_key: The API key for authentication
        """
        self.base_url = base_url
        self.api_key = api_key

    @abstractmethod
    async def create_chat_completion(
        self,
        request: ChatRequest,
        request_id: str
    ) -> ChatResponse:
        """Make a non-streaming chat completion request

        Raises:
            UpstreamError: on transport failure or a non-200 status
            MalformedUpstreamResponse: if the body isn't a chat completion
        """

    @abstractmethod
    async def open_chat_stream(
        self,
        request: ChatRequest,
        request_id: str,
        tracer: Optional["StreamTracer"] = None,
    ) -> "ChunkStream":
        """Open a streaming chat completion

        The upstream status is checked before this returns, so HTTP errors
        surface here rather than from the first pull.
        """

    @abstractmethod
    async def create_embeddings(
        self,
        payload: Dict[str, Any],
        request_id: str
    ) -> Dict[str, Any]:
        """Relay an embeddings request and return the upstream JSON"""
