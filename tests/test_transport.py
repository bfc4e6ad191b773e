"""Tests for WebPushTransport error classification."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from leavepush.errors import (
    TransportPermanentFailure,
    TransportTransientFailure,
)
from leavepush.notifications.models import Subscription
from leavepush.notifications.transport import WebPushTransport

SUB = Subscription(endpoint="https://ep/1", keys={"p256dh": "k", "auth": "a"})


@pytest.fixture
def transport():
    return WebPushTransport(
        vapid_private_key="fake-key",
        vapid_claims={"sub": "mailto:test@test"},
        timeout_s=3.0,
    )


def _make_webpush_exc(status_code):
    from pywebpush import WebPushException

    resp = MagicMock()
    resp.status_code = status_code
    return WebPushException("push failed", response=resp)


def test_success_passes_arguments(transport):
    with patch("leavepush.notifications.transport.webpush") as mock:
        transport.send(SUB, '{"title": "t"}')
    kwargs = mock.call_args.kwargs
    assert kwargs["subscription_info"] == {
        "endpoint": "https://ep/1",
        "keys": {"p256dh": "k", "auth": "a"},
    }
    assert kwargs["data"] == '{"title": "t"}'
    assert kwargs["vapid_private_key"] == "fake-key"
    assert kwargs["timeout"] == 3.0


def test_claims_copied_per_call(transport):
    def mutate(**kwargs):
        kwargs["vapid_claims"]["aud"] = "https://ep"

    with patch("leavepush.notifications.transport.webpush", side_effect=mutate):
        transport.send(SUB, "{}")
    with patch("leavepush.notifications.transport.webpush") as mock:
        transport.send(SUB, "{}")
    assert mock.call_args.kwargs["vapid_claims"] == {"sub": "mailto:test@test"}


@pytest.mark.parametrize("code", [404, 410])
def test_gone_statuses_are_permanent(transport, code):
    with patch(
        "leavepush.notifications.transport.webpush",
        side_effect=_make_webpush_exc(code),
    ):
        with pytest.raises(TransportPermanentFailure):
            transport.send(SUB, "{}")


@pytest.mark.parametrize("code", [400, 413, 429, 500])
def test_other_statuses_are_transient(transport, code):
    with patch(
        "leavepush.notifications.transport.webpush",
        side_effect=_make_webpush_exc(code),
    ):
        with pytest.raises(TransportTransientFailure):
            transport.send(SUB, "{}")


def test_timeout_is_transient(transport):
    with patch(
        "leavepush.notifications.transport.webpush",
        side_effect=requests.Timeout("slow"),
    ):
        with pytest.raises(TransportTransientFailure) as info:
            transport.send(SUB, "{}")
    assert info.value.endpoint == "https://ep/1"


def test_opaque_keys_failure_is_transient(transport):
    sub = Subscription(endpoint="https://ep/1", keys="opaque-string-blob")
    with patch(
        "leavepush.notifications.transport.webpush",
        side_effect=AttributeError("'str' object has no attribute 'get'"),
    ) as mock:
        with pytest.raises(TransportTransientFailure):
            transport.send(sub, "{}")
    assert mock.call_args.kwargs["subscription_info"]["keys"] == "opaque-string-blob"
