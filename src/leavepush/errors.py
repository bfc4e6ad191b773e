"""Error taxonomy shared by the registry, dispatcher and API."""


class LeavePushError(Exception):
    """Base class for service errors."""


class ValidationError(LeavePushError):
    """A request is missing a required field (HTTP 400)."""


class MissingVapidKeysError(LeavePushError):
    """Delivery credentials are not configured. Fatal at startup."""


class TransportError(LeavePushError):
    """Push delivery failed for one subscription."""

    def __init__(self, endpoint: str, reason: str = "") -> None:
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"push delivery failed for {endpoint[:60]}: {reason}")


class TransportPermanentFailure(TransportError):
    """The push service reports the endpoint is gone (404/410)."""


class TransportTransientFailure(TransportError):
    """Any other delivery failure. The subscription is kept."""
