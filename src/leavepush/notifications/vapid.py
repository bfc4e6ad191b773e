"""VAPID credentials for Web Push."""

import base64
from dataclasses import dataclass

import structlog
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    PublicFormat,
)
from py_vapid import Vapid02

from leavepush.errors import MissingVapidKeysError

logger = structlog.get_logger()


@dataclass(frozen=True)
class VapidCredentials:
    public_key: str
    private_key: str
    subject: str

    @property
    def claims(self) -> dict:
        return {"sub": self.subject}


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _public_key_b64url(vapid: Vapid02) -> str:
    """Extract application server key as URL-safe base64."""
    raw = vapid.public_key.public_bytes(
        encoding=Encoding.X962,
        format=PublicFormat.UncompressedPoint,
    )
    return _b64url(raw)


def generate_vapid_keys() -> tuple[str, str]:
    """Create a new EC key pair.

    Returns:
        (public_key, private_key), both raw URL-safe base64,
        the format the browser and pywebpush accept.
    """
    vapid = Vapid02()
    vapid.generate_keys()
    private_value = vapid.private_key.private_numbers().private_value
    return _public_key_b64url(vapid), _b64url(private_value.to_bytes(32, "big"))


def require_vapid_keys(
    public_key: str,
    private_key: str,
    subject: str,
) -> VapidCredentials:
    """Validate configured keys; raises MissingVapidKeysError if absent."""
    missing = [
        name
        for name, value in (
            ("VAPID_PUBLIC_KEY", public_key),
            ("VAPID_PRIVATE_KEY", private_key),
        )
        if not value or not value.strip()
    ]
    if missing:
        raise MissingVapidKeysError(f"missing {', '.join(missing)}")

    creds = VapidCredentials(
        public_key=public_key.strip(),
        private_key=private_key.strip(),
        subject=subject,
    )
    try:
        derived = _public_key_b64url(Vapid02.from_string(private_key=creds.private_key))
    except Exception as e:  # noqa: BLE001 - py_vapid raises assorted decode errors
        logger.warning("vapid_private_key_unreadable", error=str(e))
        return creds
    if derived != creds.public_key:
        logger.warning("vapid_key_pair_mismatch")
    return creds
