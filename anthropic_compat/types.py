"""
Pydantic models for both wire protocols.

OpenAI-shape models (``Chat*``) describe what the upstream accepts and
returns; Anthropic-shape models describe the Messages surface.
"""
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# OpenAI chat completions: request
# ---------------------------------------------------------------------------

class ChatFunctionCall(BaseModel):
    """Function call in a tool call"""
    name: str
    arguments: str = ""  # JSON string


class ChatToolCall(BaseModel):
    """Tool call from assistant"""
    id: str
    type: str = "function"
    function: ChatFunctionCall


class ChatMessage(BaseModel):
    """Chat message"""
    model_config = ConfigDict(extra="allow")

    role: str
    content: Optional[Union[str, List[Dict[str, Any]]]] = None
    name: Optional[str] = None
    tool_calls: Optional[List[ChatToolCall]] = None
    tool_call_id: Optional[str] = None  # For tool response messages


class ChatFunction(BaseModel):
    """Function definition"""
    name: str
    description: Optional[str] = None
    parameters: Optional[Dict[str, Any]] = None


class ChatTool(BaseModel):
    """Tool definition"""
    type: str = "function"
    function: ChatFunction


class ChatRequest(BaseModel):
    """OpenAI chat completion request (immutable once built)"""
    model_config = ConfigDict(extra="allow", frozen=True)

    model: str
    messages: List[ChatMessage]
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    stop: Optional[Union[str, List[str]]] = None
    stream: Optional[bool] = False
    tools: Optional[List[ChatTool]] = None
    tool_choice: Optional[Union[str, Dict[str, Any]]] = None
    user: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the upstream call"""
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# OpenAI chat completions: responses and stream chunks
# ---------------------------------------------------------------------------

class ChatUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: Optional[int] = None


class ChatResponseMessage(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: str = "assistant"
    content: Optional[str] = None
    tool_calls: Optional[List[ChatToolCall]] = None


class ChatChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    message: ChatResponseMessage
    finish_reason: Optional[str] = None


class ChatResponse(BaseModel):
    """Completed (non-streaming) chat completion"""
    model_config = ConfigDict(extra="allow")

    id: str = ""
    object: str = "chat.completion"
    created: int = 0
    model: str
    choices: List[ChatChoice]
    usage: Optional[ChatUsage] = None


class ChunkFunctionDelta(BaseModel):
    name: Optional[str] = None
    arguments: Optional[str] = None


class ChunkToolCallDelta(BaseModel):
    """Tool call fragment; id and function name only arrive on the first one"""
    index: int
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[ChunkFunctionDelta] = None


class ChunkDelta(BaseModel):
    model_config = ConfigDict(extra="allow")

    role: Optional[str] = None
    content: Optional[str] = None
    tool_calls: Optional[List[ChunkToolCallDelta]] = None


class ChunkChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    delta: Optional[ChunkDelta] = None
    finish_reason: Optional[str] = None


class ChatChunk(BaseModel):
    """One increment of a streaming chat completion"""
    model_config = ConfigDict(extra="allow")

    id: str = ""
    model: str = ""
    choices: List[ChunkChoice] = []
    usage: Optional[ChatUsage] = None


# ---------------------------------------------------------------------------
# Anthropic messages: request
# ---------------------------------------------------------------------------

class AnthropicMessageParam(BaseModel):
    """One conversation turn; content blocks are validated by the converters"""
    role: Literal["user", "assistant"]
    content: Union[str, List[Dict[str, Any]]]


class AnthropicTool(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: Optional[str] = None
    input_schema: Dict[str, Any] = {}


class AnthropicMessagesRequest(BaseModel):
    """Anthropic Messages API request model"""
    model: str
    messages: List[AnthropicMessageParam]
    max_tokens: int
    system: Optional[Union[str, List[Dict[str, Any]]]] = None
    metadata: Optional[Dict[str, Any]] = None
    stop_sequences: Optional[List[str]] = None
    stream: Optional[bool] = False
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    top_k: Optional[int] = None
    tools: Optional[List[AnthropicTool]] = None
    tool_choice: Optional[Dict[str, Any]] = None
    thinking: Optional[Dict[str, Any]] = None


# ---------------------------------------------------------------------------
# Anthropic messages: response
# ---------------------------------------------------------------------------

class AnthropicTextBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class AnthropicToolUseBlock(BaseModel):
    type: Literal["tool_use"] = "tool_use"
    id: str
    name: str
    input: Dict[str, Any]


AnthropicContentBlock = Union[AnthropicTextBlock, AnthropicToolUseBlock]


class AnthropicUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0


class AnthropicMessage(BaseModel):
    """Anthropic Messages API response"""
    id: str
    type: Literal["message"] = "message"
    role: Literal["assistant"] = "assistant"
    model: str
    content: List[AnthropicContentBlock]
    stop_reason: Optional[str] = None
    stop_sequence: Optional[str] = None
    usage: AnthropicUsage
