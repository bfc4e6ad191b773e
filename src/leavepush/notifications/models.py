"""Pydantic models for users, subscriptions and push payloads."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Role(StrEnum):
    """Known user roles. Stored as an open string."""

    MANAGER = "manager"
    EMPLOYEE = "employee"
    HR = "HR"


APPROVER_ROLES = frozenset({Role.MANAGER, Role.HR})


class User(BaseModel):
    """A row of the users table."""

    name: str = ""
    role: str = Role.EMPLOYEE
    department: str = ""


class Subscription(BaseModel):
    """A stored Web Push subscription, one per user."""

    model_config = ConfigDict(populate_by_name=True)

    endpoint: str
    keys: Any = None
    created_at: str = Field(default="", alias="createdAt")
    updated_at: str = Field(default="", alias="updatedAt")

    def subscription_info(self) -> dict[str, Any]:
        """Shape expected by pywebpush."""
        return {"endpoint": self.endpoint, "keys": self.keys if self.keys is not None else {}}

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class NotificationPayload(BaseModel):
    """Message body delivered to the service worker. Never persisted."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    body: str
    icon: str | None = None
    badge: str | None = None
    tag: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)
    require_interaction: bool | None = Field(default=None, alias="requireInteraction")
    vibrate: list[int] | None = None

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class DeliveryOutcome(StrEnum):
    """Result of a single-recipient notify."""

    SENT = "sent"
    NOT_SUBSCRIBED = "not_subscribed"
    GONE = "gone"
    FAILED = "failed"


class DispatchSummary(BaseModel):
    """Counts from a fan-out."""

    sent: int = 0
    removed: int = 0


class LeaveStatus(StrEnum):
    APPROVED = "approved"
    REJECTED = "rejected"


# Request bodies. Required fields are optional here so that
# missing values surface as ValidationError (HTTP 400).


class PushSubscriptionBody(BaseModel):
    endpoint: str | None = None
    keys: Any = None


class SubscribeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(default=None, alias="userId")
    subscription: PushSubscriptionBody | None = None


class NewLeaveRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(default=None, alias="userId")
    user_name: str | None = Field(default=None, alias="userName")
    leave_data: dict[str, Any] | None = Field(default=None, alias="leaveData")


class LeaveResultRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(default=None, alias="userId")
    user_name: str | None = Field(default=None, alias="userName")
    status: LeaveStatus | None = None
    reason: str | None = None


class SendTestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    user_id: str | None = Field(default=None, alias="userId")
