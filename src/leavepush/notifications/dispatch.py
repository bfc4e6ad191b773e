"""Fan-out delivery with stale-subscription pruning."""

from collections.abc import Iterable

import structlog

from leavepush.errors import (
    TransportPermanentFailure,
    TransportTransientFailure,
)
from leavepush.notifications.models import (
    DeliveryOutcome,
    DispatchSummary,
    NotificationPayload,
    Subscription,
)
from leavepush.notifications.registry import SubscriptionRegistry
from leavepush.notifications.transport import PushTransport

logger = structlog.get_logger()


class NotificationDispatcher:
    """Deliver payloads to users through their subscriptions.

    Each recipient is independent: a failure for one never
    stops delivery to the rest. Endpoints the push service
    reports as gone are dropped from the registry.
    """

    def __init__(
        self,
        registry: SubscriptionRegistry,
        transport: PushTransport,
    ) -> None:
        self._registry = registry
        self._transport = transport

    def notify_many(
        self,
        recipient_ids: Iterable[str],
        payload: NotificationPayload,
    ) -> DispatchSummary:
        """Send one push per subscribed recipient.

        Unsubscribed recipients are skipped. Gone
        subscriptions are removed and the table is written
        once at the end.
        """
        subs = self._registry.load()
        body = payload.to_json()
        summary = DispatchSummary()

        for user_id in recipient_ids:
            sub = subs.get(user_id)
            if sub is None:
                continue
            outcome = self._deliver(user_id, sub, body)
            if outcome == DeliveryOutcome.SENT:
                summary.sent += 1
            elif outcome == DeliveryOutcome.GONE:
                del subs[user_id]
                summary.removed += 1

        if summary.removed:
            self._registry.save(subs)
        logger.info("fanout_done", sent=summary.sent, removed=summary.removed)
        return summary

    def notify_one(
        self,
        user_id: str,
        payload: NotificationPayload,
    ) -> DeliveryOutcome:
        """Send to a single user; NOT_SUBSCRIBED if they have no subscription."""
        sub = self._registry.get(user_id)
        if sub is None:
            logger.info("push_not_subscribed", user_id=user_id)
            return DeliveryOutcome.NOT_SUBSCRIBED
        outcome = self._deliver(user_id, sub, payload.to_json())
        if outcome == DeliveryOutcome.GONE:
            self._registry.unsubscribe(user_id)
        return outcome

    def _deliver(
        self,
        user_id: str,
        sub: Subscription,
        body: str,
    ) -> DeliveryOutcome:
        try:
            self._transport.send(sub, body)
        except TransportPermanentFailure as e:
            logger.info("push_endpoint_gone", user_id=user_id, endpoint=e.endpoint)
            return DeliveryOutcome.GONE
        except TransportTransientFailure as e:
            logger.warning(
                "push_failed",
                user_id=user_id,
                endpoint=e.endpoint,
                error=e.reason,
            )
            return DeliveryOutcome.FAILED
        logger.info("push_delivered", user_id=user_id)
        return DeliveryOutcome.SENT
