"""
Exceptions raised by the bgpstuff client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""


class BGPStuffError(Exception):
    """Base exception for bgpstuff errors."""
    pass


class ValidationError(BGPStuffError, ValueError):
    """Input rejected before any request was made."""
    pass


class InvalidIPError(ValidationError):
    """Address is unparsable or not public unicast."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"invalid IP: {value!r}")


class InvalidASNError(ValidationError):
    """AS number is malformed, reserved or outside the public range."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"invalid AS number: {value!r}")


class TransportError(BGPStuffError):
    """Network failure or timeout talking to the API."""
    pass


class RequestCancelledError(TransportError):
    """Cancelled while waiting for a rate-limit token. No request was sent."""
    pass


class StatusError(BGPStuffError):
    """API answered with a non-200 status."""

    def __init__(self, status_code: int, reason: str = "", url: str | None = None):
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"received status: {reason} ({status_code})")


class DecodeError(BGPStuffError):
    """Response body is not the expected JSON envelope."""
    pass


class CacheNotLoadedError(BGPStuffError):
    """Cached lookup attempted before the matching bulk load."""
    pass
