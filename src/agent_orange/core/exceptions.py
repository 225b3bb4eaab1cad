"""
Custom Exceptions for Agent Orange
==================================

Structured error handling allows the HTTP, voice and chat surfaces to map
failures by type rather than by parsing strings.

Error Codes:
- 1xxx: Client errors (user input, validation)
- 2xxx: Security errors (auth, upstream credentials)
- 3xxx: Delivery errors (outbound notification APIs)
- 4xxx: Execution errors (external agent process)
- 5xxx: System errors (backing store, unexpected)
"""

from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Structured error codes for user-friendly messages"""

    # 1xxx: Client Errors
    VALIDATION_ERROR = 1001

    # 2xxx: Security Errors
    UNAUTHORIZED = 2001
    FORBIDDEN = 2004
    UPSTREAM_UNAUTHORIZED = 2005

    # 3xxx: Delivery Errors
    DELIVERY_FAILED = 3004

    # 4xxx: Execution Errors
    AGENT_PROCESS_FAILED = 4001

    # 5xxx: System Errors
    INTERNAL_ERROR = 5001
    STORE_UNAVAILABLE = 5002


class AgentOrangeError(Exception):
    """Base exception for all Agent Orange errors"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging"""
        return {
            'error_type': self.__class__.__name__,
            'error_code': int(self.error_code),
            'message': self.message,
            'details': self.details
        }


class ValidationError(AgentOrangeError):
    """Raised when input validation fails"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.VALIDATION_ERROR, details)


class UnauthorizedError(AgentOrangeError):
    """Raised when a caller of the producer API is not authenticated"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.UNAUTHORIZED, details)


class ForbiddenError(AgentOrangeError):
    """Raised when a voice request comes from an unexpected skill"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.FORBIDDEN, details)


class UpstreamAuthorizationError(AgentOrangeError):
    """Raised when the client-credentials token exchange fails"""

    def __init__(self, message: str, status_code: int | None = None, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.UPSTREAM_UNAUTHORIZED, details)
        self.status_code = status_code


class DeliveryError(AgentOrangeError):
    """Raised when an outbound notification API answers with a non-success status"""

    def __init__(self, channel: str, status_code: int, body: str = "", details: dict[str, Any] | None = None):
        super().__init__(f"{channel} returned {status_code}: {body}", ErrorCode.DELIVERY_FAILED, details)
        self.channel = channel
        self.status_code = status_code
        self.body = body


class AgentProcessError(AgentOrangeError):
    """Raised when the external agent process fails or cannot be started"""

    def __init__(self, message: str, exit_code: int | None = None, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.AGENT_PROCESS_FAILED, details)
        self.exit_code = exit_code


class StoreUnavailableError(AgentOrangeError):
    """Raised when the backing record store cannot be reached"""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, ErrorCode.STORE_UNAVAILABLE, details)
