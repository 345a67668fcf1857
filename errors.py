"""
Error types shared by the translators, the orchestrator and the HTTP layer.

Every error carries the HTTP status it maps to and renders itself in either
wire protocol's error envelope.
"""
from typing import Any, Dict, Optional


class GatewayError(Exception):
    """Base class for all gateway errors"""

    error_type = "api_error"
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_anthropic_dict(self) -> Dict[str, Any]:
        """Anthropic Messages error envelope"""
        return {
            "type": "error",
            "error": {
                "type": self.error_type,
                "message": self.message,
            },
        }

    def to_openai_dict(self) -> Dict[str, Any]:
        """OpenAI error envelope"""
        error: Dict[str, Any] = {
            "message": self.message,
            "type": self.error_type,
            "code": self.status_code,
        }
        if self.details:
            error["details"] = self.details
        return {"error": error}


class ValidationError(GatewayError):
    """Malformed or incomplete inbound payload. No upstream call is made."""

    error_type = "invalid_request_error"
    status_code = 400


class RateLimitExceeded(GatewayError):
    """Admission control rejected the request"""

    error_type = "rate_limit_error"
    status_code = 429


class ApprovalRejected(GatewayError):
    """The operator declined the request at the approval gate"""

    error_type = "permission_error"
    status_code = 403


class MalformedUpstreamResponse(GatewayError):
    """The upstream payload doesn't have the expected shape"""

    status_code = 502


class ProtocolViolation(GatewayError):
    """The stream translator observed an impossible chunk sequence"""

    status_code = 502


class UpstreamError(GatewayError):
    """The upstream call failed (HTTP error status or transport failure)"""

    status_code = 502

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message, status_code=status_code)
        self.body = body

    def to_openai_dict(self) -> Dict[str, Any]:
        # Upstream already speaks the OpenAI protocol; relay its envelope verbatim
        if isinstance(self.body, dict) and "error" in self.body:
            return self.body
        return super().to_openai_dict()
