"""Exception types raised by collaborators and handled inside the core.

None of these escape the resolver or the recording session: they are caught
by the owning component and surfaced as activity log entries.
"""

from typing import Iterable


class AgilowError(Exception):
    """Base class for all Agilow errors."""
    pass


class ConfigIncompleteError(AgilowError):
    """Raised when a configuration is submitted with required fields empty."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(
            "Please fill in the following required fields: " + ", ".join(self.missing)
        )


class ConfigParseError(AgilowError):
    """Raised when a stored configuration record cannot be decoded."""
    pass


class DeviceAcquisitionError(AgilowError):
    """Raised when the capture device is missing or permission is denied."""
    pass


class TransportError(AgilowError):
    """Raised when a network call could not complete at all."""
    pass


class GatewayTransportError(TransportError):
    """Raised when the backend gateway could not be reached."""
    pass


class ResponseParseError(AgilowError):
    """Raised when the gateway replied with a body that is not JSON."""
    pass


class TrelloAuthError(AgilowError):
    """Raised when the Trello authorization callback carries no token."""
    pass
