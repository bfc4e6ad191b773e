"""Notification payloads for leave lifecycle events."""

import time
from typing import Any

from leavepush.notifications.models import LeaveStatus, NotificationPayload

DEFAULT_ICON = "/static/icon.svg"
_VIBRATE = [200, 100, 200]


def new_leave_payload(
    user_name: str,
    user_id: str | None,
    leave_data: dict[str, Any] | None = None,
    icon: str = DEFAULT_ICON,
) -> NotificationPayload:
    """Sent to approvers when an employee files a leave request."""
    leave_id = (leave_data or {}).get("id") or int(time.time() * 1000)
    return NotificationPayload(
        title="📝 ĐƠN NGHỈ PHÉP MỚI",
        body=f"{user_name} vừa gửi đơn nghỉ phép",
        icon=icon,
        badge=icon,
        data={
            "type": "new_leave",
            "userId": user_id,
            "userName": user_name,
            "leaveId": leave_id,
            "url": "/",
        },
        vibrate=_VIBRATE,
        require_interaction=True,
    )


def leave_result_payload(
    status: LeaveStatus,
    reason: str | None = None,
    icon: str = DEFAULT_ICON,
) -> NotificationPayload:
    """Sent to the requester once their leave is approved or rejected."""
    if status == LeaveStatus.APPROVED:
        title = "✅ ĐƠN ĐÃ ĐƯỢC DUYỆT"
        body = "Đơn nghỉ phép của bạn đã được duyệt"
    else:
        title = "❌ ĐƠN BỊ TỪ CHỐI"
        body = f"Đơn bị từ chối: {reason or 'Không rõ lý do'}"
    return NotificationPayload(
        title=title,
        body=body,
        icon=icon,
        badge=icon,
        data={"type": f"leave_{status.value}", "url": "/"},
        vibrate=_VIBRATE,
        require_interaction=True,
    )


def ping_payload(icon: str = DEFAULT_ICON) -> NotificationPayload:
    return NotificationPayload(
        title="🔔 TEST NOTIFICATION",
        body="Đây là thông báo test từ hệ thống",
        icon=icon,
        data={"type": "test"},
    )
