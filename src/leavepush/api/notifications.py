"""Push notification API endpoints."""

import asyncio

import structlog
from fastapi import APIRouter, Request

from leavepush.errors import ValidationError
from leavepush.notifications.models import (
    DeliveryOutcome,
    LeaveResultRequest,
    NewLeaveRequest,
    SendTestRequest,
    SubscribeRequest,
)
from leavepush.notifications.payloads import (
    leave_result_payload,
    new_leave_payload,
    ping_payload,
)

logger = structlog.get_logger()

router = APIRouter()

_OUTCOME_MESSAGES = {
    DeliveryOutcome.SENT: "Notification sent",
    DeliveryOutcome.NOT_SUBSCRIBED: "User has not subscribed to notifications",
    DeliveryOutcome.GONE: "Subscription expired and was removed",
    DeliveryOutcome.FAILED: "Notification delivery failed",
}


def _outcome_response(outcome: DeliveryOutcome) -> dict:
    return {
        "success": outcome == DeliveryOutcome.SENT,
        "outcome": outcome.value,
        "message": _OUTCOME_MESSAGES[outcome],
    }


@router.get("/vapid-key")
async def vapid_key(request: Request) -> dict:
    """Return the VAPID application server key."""
    return {"success": True, "publicKey": request.app.state.vapid_public_key}


@router.post("/subscribe")
async def subscribe(body: SubscribeRequest, request: Request) -> dict:
    """Register or replace the push subscription for a user."""
    if body.subscription is None:
        raise ValidationError("subscription is required")
    registry = request.app.state.registry
    registry.subscribe(
        user_id=body.user_id,
        endpoint=body.subscription.endpoint,
        keys=body.subscription.keys,
    )
    return {"success": True, "message": "Subscribed to notifications"}


@router.delete("/unsubscribe/{user_id}")
async def unsubscribe(user_id: str, request: Request) -> dict:
    """Remove a user's subscription. Unknown users are not an error."""
    removed = request.app.state.registry.unsubscribe(user_id)
    return {
        "success": True,
        "removed": removed,
        "message": "Unsubscribed" if removed else "No subscription found",
    }


@router.post("/notify-new-leave")
async def notify_new_leave(body: NewLeaveRequest, request: Request) -> dict:
    """Tell every manager and HR user (except the requester) about a new request."""
    if not body.user_name:
        raise ValidationError("userName is required")
    state = request.app.state
    logger.info("notify_new_leave", user_id=body.user_id, user_name=body.user_name)

    recipients = state.registry.list_eligible_recipients(exclude_user_id=body.user_id)
    payload = new_leave_payload(
        body.user_name,
        body.user_id,
        body.leave_data,
        icon=state.icon_path,
    )
    summary = await asyncio.to_thread(
        state.dispatcher.notify_many,
        recipients,
        payload,
    )
    return {
        "success": True,
        "message": f"Sent {summary.sent} notification(s)",
        "sent": summary.sent,
        "removed": summary.removed,
    }


@router.post("/notify-leave-result")
async def notify_leave_result(body: LeaveResultRequest, request: Request) -> dict:
    """Tell the requester their leave was approved or rejected."""
    if not body.user_id:
        raise ValidationError("userId is required")
    if body.status is None:
        raise ValidationError("status is required")
    state = request.app.state
    logger.info(
        "notify_leave_result",
        user_id=body.user_id,
        user_name=body.user_name,
        status=body.status.value,
    )
    payload = leave_result_payload(body.status, body.reason, icon=state.icon_path)
    outcome = await asyncio.to_thread(
        state.dispatcher.notify_one,
        body.user_id,
        payload,
    )
    return _outcome_response(outcome)


@router.post("/test-notification")
async def test_notification(body: SendTestRequest, request: Request) -> dict:
    """Send a fixed test message to one user."""
    if not body.user_id:
        raise ValidationError("userId is required")
    state = request.app.state
    outcome = await asyncio.to_thread(
        state.dispatcher.notify_one,
        body.user_id,
        ping_payload(icon=state.icon_path),
    )
    return _outcome_response(outcome)
