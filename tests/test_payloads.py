import json

from leavepush.notifications.models import LeaveStatus
from leavepush.notifications.payloads import (
    leave_result_payload,
    new_leave_payload,
    ping_payload,
)


def test_new_leave_payload():
    body = json.loads(new_leave_payload("Luyt", "5035", {"id": 42}).to_json())
    assert body["body"] == "Luyt vừa gửi đơn nghỉ phép"
    assert body["data"] == {
        "type": "new_leave",
        "userId": "5035",
        "userName": "Luyt",
        "leaveId": 42,
        "url": "/",
    }
    assert body["vibrate"] == [200, 100, 200]
    assert body["requireInteraction"] is True


def test_new_leave_without_id_uses_timestamp():
    payload = new_leave_payload("Luyt", "5035", None)
    assert isinstance(payload.data["leaveId"], int)
    assert payload.data["leaveId"] > 0


def test_rejected_without_reason():
    payload = leave_result_payload(LeaveStatus.REJECTED)
    assert payload.body == "Đơn bị từ chối: Không rõ lý do"
    assert payload.data["type"] == "leave_rejected"


def test_approved():
    payload = leave_result_payload(LeaveStatus.APPROVED, "ignored", icon="/i.png")
    assert payload.title.endswith("ĐƠN ĐÃ ĐƯỢC DUYỆT")
    assert payload.icon == payload.badge == "/i.png"


def test_ping_omits_unset_fields():
    body = json.loads(ping_payload().to_json())
    assert set(body) == {"title", "body", "icon", "data"}
