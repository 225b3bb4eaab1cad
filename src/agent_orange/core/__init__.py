"""Core agent_orange module — exceptions, record types and logging."""

from agent_orange.core.exceptions import (
    AgentOrangeError,
    AgentProcessError,
    DeliveryError,
    ErrorCode,
    ForbiddenError,
    StoreUnavailableError,
    UnauthorizedError,
    UpstreamAuthorizationError,
    ValidationError,
)
from agent_orange.core.types import (
    ActiveNotification,
    ApprovalRequest,
    DecisionResult,
    DeviceCredential,
    Mode,
    RecordKey,
    RequestStatus,
    UnicastTarget,
)

__all__ = [
    "ActiveNotification",
    "AgentOrangeError",
    "AgentProcessError",
    "ApprovalRequest",
    "DecisionResult",
    "DeliveryError",
    "DeviceCredential",
    "ErrorCode",
    "ForbiddenError",
    "Mode",
    "RecordKey",
    "RequestStatus",
    "StoreUnavailableError",
    "UnauthorizedError",
    "UnicastTarget",
    "UpstreamAuthorizationError",
    "ValidationError",
]
