"""
Request handlers for the gateway.
"""
from .admission import RateLimiter
from .approval import ApprovalGate
from .completion_handler import (
    CompletionOrchestrator,
    parse_chat_request,
    parse_messages_request,
)

__all__ = [
    'RateLimiter',
    'ApprovalGate',
    'CompletionOrchestrator',
    'parse_chat_request',
    'parse_messages_request',
]
