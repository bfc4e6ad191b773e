"""Subscription registry over the ``subscriptions`` and ``users`` tables."""

from datetime import UTC, datetime
from typing import Any

import structlog

from leavepush.errors import ValidationError
from leavepush.notifications.models import APPROVER_ROLES, Subscription, User
from leavepush.storage.records import RecordStore

logger = structlog.get_logger()

SUBSCRIPTIONS = "subscriptions"
USERS = "users"

DEFAULT_USERS: dict[str, dict[str, str]] = {
    "4810": {
        "name": "Trà Thị Tuyết Trang",
        "role": "manager",
        "department": "Nhân sự",
    },
    "5035": {
        "name": "Lê Văn Luýt",
        "role": "employee",
        "department": "Kỹ thuật",
    },
    "1234": {
        "name": "Nguyễn Thị Vân Hiếu",
        "role": "HR",
        "department": "Nhân sự",
    },
}


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def seed_default_users(store: RecordStore) -> bool:
    """Write the default users if the table does not exist. Returns True if seeded.

    An existing table is never replaced, even if it is empty or
    unreadable.
    """
    if store.exists(USERS):
        return False
    store.write(USERS, DEFAULT_USERS)
    logger.info("users_seeded", count=len(DEFAULT_USERS))
    return True


def _parse_subscription(raw: Any) -> Subscription | None:
    try:
        return Subscription.model_validate(raw)
    except ValueError:
        return None


class SubscriptionRegistry:
    """One push subscription per user, persisted as a whole table.

    Every mutation re-reads the table, changes it and
    writes it back. Write failures are logged by the
    store and not surfaced. Rows that do not parse are
    hidden from lookups but kept on disk.
    """

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def load(self) -> dict[str, Subscription]:
        """All valid subscriptions keyed by user id."""
        subs: dict[str, Subscription] = {}
        for user_id, raw in self._store.read(SUBSCRIPTIONS).items():
            sub = _parse_subscription(raw)
            if sub is None:
                logger.warning("subscription_row_invalid", user_id=user_id)
                continue
            subs[user_id] = sub
        return subs

    def save(self, subs: dict[str, Subscription]) -> bool:
        """Write ``subs`` back, carrying unparseable rows through unchanged."""
        records = {
            user_id: raw
            for user_id, raw in self._store.read(SUBSCRIPTIONS).items()
            if user_id not in subs and _parse_subscription(raw) is None
        }
        records.update({uid: sub.to_record() for uid, sub in subs.items()})
        return self._store.write(SUBSCRIPTIONS, records)

    def subscribe(
        self,
        user_id: str | None,
        endpoint: str | None,
        keys: Any = None,
    ) -> Subscription:
        """Add or overwrite the subscription for a user."""
        if not user_id or not user_id.strip():
            raise ValidationError("userId is required")
        if not endpoint or not endpoint.strip():
            raise ValidationError("subscription.endpoint is required")

        now = _now()
        sub = Subscription(
            endpoint=endpoint,
            keys=keys,
            created_at=now,
            updated_at=now,
        )
        subs = self.load()
        subs[user_id] = sub
        self.save(subs)
        logger.info("subscription_saved", user_id=user_id)
        return sub

    def unsubscribe(self, user_id: str) -> bool:
        """Remove a user's row, valid or not. Returns False if there was none."""
        records = self._store.read(SUBSCRIPTIONS)
        if user_id not in records:
            return False
        del records[user_id]
        self._store.write(SUBSCRIPTIONS, records)
        logger.info("subscription_removed", user_id=user_id)
        return True

    def get(self, user_id: str) -> Subscription | None:
        return self.load().get(user_id)

    def count(self) -> int:
        return len(self.load())

    def users(self) -> dict[str, User]:
        users: dict[str, User] = {}
        for user_id, raw in self._store.read(USERS).items():
            try:
                users[user_id] = User.model_validate(raw)
            except ValueError:
                logger.warning("user_row_invalid", user_id=user_id)
        return users

    def count_users(self) -> int:
        return len(self._store.read(USERS))

    def list_eligible_recipients(self, exclude_user_id: str | None = None) -> set[str]:
        """Managers and HR, minus the given user."""
        return {
            user_id
            for user_id, user in self.users().items()
            if user.role in APPROVER_ROLES and user_id != exclude_user_id
        }
