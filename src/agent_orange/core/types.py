"""
Core Type Definitions
=====================

Records kept in the backing store and the enums that replace magic strings
across the HTTP API, the voice skill and the chat relay.

Every record is a singleton row addressed by a RecordKey. Field names inside
a stored item follow the wire names used by the producer API (camelCase) so
the rows stay readable when inspected with the sqlite shell.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from agent_orange.core.exceptions import ValidationError

REQUEST_TTL_SECONDS = 3600
CREDENTIAL_TTL_SECONDS = 3600
NOTIFICATION_TTL_SECONDS = 3600
TOOL_DETAIL_MAX_CHARS = 500


class RecordKey(str, Enum):
    """Primary keys of the singleton rows."""

    MODE = "MODE"
    CURRENT = "CURRENT"
    USER = "USER"
    API_TOKEN = "API_TOKEN"
    NOTIFICATION = "NOTIFICATION"

    def __str__(self) -> str:
        return self.value


class Mode(str, Enum):
    """Which channel receives approval prompts."""

    RELAY = "relay-channel"
    VOICE = "voice-channel"
    DISABLED = "disabled"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> "Mode":
        """Return the Mode for *value* or raise ValidationError."""
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(f"'{m.value}'" for m in cls)
            raise ValidationError(
                f"mode must be one of {allowed}",
                details={"mode": value},
            ) from None


class RequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"

    def __str__(self) -> str:
        return self.value


class DecisionResult(str, Enum):
    """Outcome of the compare-and-set on the current request."""

    SUCCESS = "success"
    CONFLICT = "conflict"


@dataclass
class ApprovalRequest:
    """The one outstanding approval request (row ``CURRENT``)."""

    id: str
    tool_name: str
    tool_detail: str
    status: RequestStatus
    created_at: int
    decided_at: int
    expires_at: int

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def to_item(self) -> dict[str, Any]:
        return {
            "requestId": self.id,
            "toolName": self.tool_name,
            "toolDetail": self.tool_detail,
            "status": self.status.value,
            "createdAt": self.created_at,
            "decidedAt": self.decided_at,
        }

    @classmethod
    def from_item(cls, item: dict[str, Any], expires_at: int) -> "ApprovalRequest":
        return cls(
            id=item["requestId"],
            tool_name=item.get("toolName", "unknown"),
            tool_detail=item.get("toolDetail", ""),
            status=RequestStatus(item["status"]),
            created_at=int(item.get("createdAt", 0)),
            decided_at=int(item.get("decidedAt", 0)),
            expires_at=expires_at,
        )

    def to_view(self) -> dict[str, Any]:
        """Shape returned by ``GET /request``."""
        return {
            "status": self.status.value,
            "requestId": self.id,
            "toolName": self.tool_name,
            "toolDetail": self.tool_detail,
        }


@dataclass
class DeviceCredential:
    """Per-session notification credential captured from the voice skill."""

    access_token: str
    endpoint: str
    updated_at: int
    expires_at: int


@dataclass
class UnicastTarget:
    """The last user who talked to the voice skill."""

    user_id: str
    updated_at: int


@dataclass
class ActiveNotification:
    """A posted device notification that can still be retracted."""

    notification_id: str
    access_token: str
    endpoint: str
    expires_at: int
