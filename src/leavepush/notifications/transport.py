"""Web Push transport with gone/transient classification."""

from typing import Protocol

import requests
import structlog
from pywebpush import WebPushException, webpush

from leavepush.errors import (
    TransportPermanentFailure,
    TransportTransientFailure,
)
from leavepush.notifications.models import Subscription

logger = structlog.get_logger()

_GONE_STATUSES = {404, 410}


class PushTransport(Protocol):
    """Delivers one payload to one subscription.

    Returns on success; raises TransportPermanentFailure
    when the endpoint will never accept messages again and
    TransportTransientFailure otherwise.
    """

    def send(self, subscription: Subscription, payload: str) -> None: ...


class WebPushTransport:
    """pywebpush-backed transport signed with VAPID."""

    def __init__(
        self,
        vapid_private_key: str,
        vapid_claims: dict,
        timeout_s: float = 10.0,
        ttl_s: int = 86400,
    ) -> None:
        self._private_key = vapid_private_key
        self._claims = vapid_claims
        self._timeout = timeout_s
        self._ttl = ttl_s

    def send(self, subscription: Subscription, payload: str) -> None:
        endpoint = subscription.endpoint
        try:
            webpush(
                subscription_info=subscription.subscription_info(),
                data=payload,
                vapid_private_key=self._private_key,
                # webpush fills in "aud" per endpoint origin
                vapid_claims=dict(self._claims),
                timeout=self._timeout,
                ttl=self._ttl,
            )
        except WebPushException as e:
            code = getattr(getattr(e, "response", None), "status_code", None)
            if code in _GONE_STATUSES:
                raise TransportPermanentFailure(endpoint, f"HTTP {code}") from e
            raise TransportTransientFailure(endpoint, str(e)) from e
        except (requests.RequestException, ValueError, TypeError, AttributeError) as e:
            # timeouts, connection errors, malformed key material
            raise TransportTransientFailure(endpoint, str(e)) from e
        logger.debug("push_sent", endpoint=endpoint)
