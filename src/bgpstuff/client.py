"""
bgpstuff.net API Client

Provides route, origin, AS path, ROA, AS name, invalid prefix, sourced
prefix and totals lookups against the bgpstuff.net looking glass.

API: https://bgpstuff.net

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import dataclasses
import logging
import threading
import time
from typing import Any
from urllib.parse import quote

import httpx
from netaddr import IPNetwork

from bgpstuff.cache import ReferenceCache
from bgpstuff.config import ClientConfig, get_config
from bgpstuff.exceptions import (
    CacheNotLoadedError,
    DecodeError,
    StatusError,
    TransportError,
)
from bgpstuff.models import (
    ASNameResult,
    ASPathResult,
    Envelope,
    InvalidResult,
    OriginResult,
    ROAResult,
    RouteResult,
    SourcedResult,
    TotalsResult,
)
from bgpstuff.ratelimit import TokenBucket
from bgpstuff.validators import validate_asn, validate_ip

logger = logging.getLogger(__name__)


class BGPStuffClient:
    """
    Blocking client for the bgpstuff.net REST API.

    Every call validates its input, waits for a token from the client's
    rate limiter and makes exactly one GET request. The AS name and invalid
    prefix listings can be bulk-loaded into a cache owned by this instance.

    Usage:
        with BGPStuffClient() as client:
            route = client.get_route("1.1.1.1")
            if route.exists:
                print(route.prefix)
    """

    def __init__(
        self,
        testing: bool | None = None,
        config: ClientConfig | None = None,
        http_client: httpx.Client | None = None,
        limiter: TokenBucket | None = None,
    ):
        """
        Args:
            testing: Use the test API host. None keeps the configured choice
            config: Settings to use instead of the global configuration
            http_client: Preconfigured httpx client. It is not closed by close()
            limiter: Token bucket to use instead of one built from the config
        """
        config = config or get_config()
        if testing is not None and testing != config.testing:
            config = dataclasses.replace(config, testing=testing)

        self.config = config
        self.base_url = config.endpoint
        self.limiter = limiter or TokenBucket.per_minute(config.requests_per_minute)
        self.cache = ReferenceCache()
        self._client = http_client
        self._owns_client = http_client is None
        self._client_lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        with self._client_lock:
            if self._client is not None and self._client.is_closed and not self._owns_client:
                raise TransportError("the injected HTTP client has been closed")
            if self._client is None or self._client.is_closed:
                self._client = httpx.Client(timeout=httpx.Timeout(self.config.timeout))
                self._owns_client = True
            return self._client

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        with self._client_lock:
            if self._owns_client and self._client is not None and not self._client.is_closed:
                self._client.close()

    def __enter__(self) -> "BGPStuffClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"BGPStuffClient(base_url={self.base_url!r}, rpm={self.config.requests_per_minute})"

    # ================================================================
    # Request execution
    # ================================================================

    def build_url(self, *segments: Any) -> str:
        """Join the base URL with a handler name and its arguments."""
        parts = [quote(str(s), safe=":") for s in segments]
        return "/".join([self.base_url, *parts])

    def _request(self, *segments: Any, cancel: threading.Event | None = None) -> Envelope:
        """
        Make one rate-limited GET request and decode the reply.

        Raises:
            RequestCancelledError: if cancel fired before a token was granted
            TransportError: on network failure or timeout, or if an injected
                HTTP client has been closed
            StatusError: on any status other than 200
            DecodeError: if the body is not the expected JSON envelope
        """
        self.limiter.acquire(cancel)

        url = self.build_url(*segments)
        client = self._get_client()
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.config.user_agent,
        }

        start = time.monotonic()
        try:
            response = client.get(url, headers=headers, timeout=self.config.timeout)
        except httpx.RequestError as e:
            raise TransportError(f"request to {url} failed: {e}") from e
        elapsed_ms = (time.monotonic() - start) * 1000

        logger.debug(f"GET {url} -> {response.status_code} ({elapsed_ms:.0f}ms)")

        if response.status_code != httpx.codes.OK:
            raise StatusError(response.status_code, response.reason_phrase, url=url)

        try:
            payload = response.json()
        except ValueError as e:
            raise DecodeError(f"invalid JSON from {url}: {e}") from e

        return Envelope.from_api(payload)

    # ================================================================
    # Address lookups
    # ================================================================

    def get_route(self, ip: str, *, cancel: threading.Event | None = None) -> RouteResult:
        """Get the prefix covering an address (/route)."""
        ip = validate_ip(ip)
        env = self._request("route", ip, cancel=cancel)
        return RouteResult.from_envelope(ip, env)

    def get_origin(self, ip: str, *, cancel: threading.Event | None = None) -> OriginResult:
        """Get the origin ASN of the prefix covering an address (/origin)."""
        ip = validate_ip(ip)
        env = self._request("origin", ip, cancel=cancel)
        return OriginResult.from_envelope(ip, env)

    def get_as_path(self, ip: str, *, cancel: threading.Event | None = None) -> ASPathResult:
        """Get the AS path and AS-SET towards an address (/aspath)."""
        ip = validate_ip(ip)
        env = self._request("aspath", ip, cancel=cancel)
        return ASPathResult.from_envelope(ip, env)

    def get_roa(self, ip: str, *, cancel: threading.Event | None = None) -> ROAResult:
        """Get the ROA state of the prefix covering an address (/roa)."""
        ip = validate_ip(ip)
        env = self._request("roa", ip, cancel=cancel)
        return ROAResult.from_envelope(ip, env)

    # ================================================================
    # ASN lookups
    # ================================================================

    def get_as_name(self, asn: int | str, *, cancel: threading.Event | None = None) -> ASNameResult:
        """
        Get the registered name of an ASN.

        Once load_as_names() has succeeded the answer comes from the cache,
        including "not found", without a request. Before that a single /asname
        request is made.
        """
        asn = validate_asn(asn, self.config.highest_allocated_asn)

        try:
            entry = self.cache.get_as_name(asn)
        except CacheNotLoadedError:
            entry = None
            cached = False
        else:
            cached = True

        if not cached:
            env = self._request("asname", asn, cancel=cancel)
            return ASNameResult.from_envelope(asn, env)
        if entry is None:
            return ASNameResult(asn=asn, cached=True)
        name, locale = entry
        return ASNameResult(asn=asn, exists=True, name=name, locale=locale, cached=True)

    def get_invalid(self, asn: int | str) -> InvalidResult:
        """
        Get the ROA-invalid prefixes an ASN originates.

        Answered from the cache only; there is no per-ASN handler.

        Raises:
            InvalidASNError: if the ASN is not public
            CacheNotLoadedError: if load_invalids() has not succeeded yet
        """
        asn = validate_asn(asn, self.config.highest_allocated_asn)
        prefixes = self.cache.get_invalids(asn)
        return InvalidResult(asn=asn, exists=bool(prefixes), prefixes=prefixes)

    def get_sourced(self, asn: int | str, *, cancel: threading.Event | None = None) -> SourcedResult:
        """Get the prefixes an ASN originates and their IPv4/IPv6 counts (/sourced)."""
        asn = validate_asn(asn, self.config.highest_allocated_asn)
        env = self._request("sourced", asn, cancel=cancel)
        return SourcedResult.from_envelope(asn, env)

    def get_totals(self, *, cancel: threading.Event | None = None) -> TotalsResult:
        """Get the number of IPv4 and IPv6 prefixes in the RIB (/totals)."""
        env = self._request("totals", cancel=cancel)
        return TotalsResult.from_envelope(env)

    # ================================================================
    # Bulk loads
    # ================================================================

    def load_as_names(self, *, cancel: threading.Event | None = None) -> int:
        """
        Fetch every AS name (/asnames) and replace the AS name cache.

        Returns:
            Number of ASNs loaded
        """
        env = self._request("asnames", cancel=cancel)
        return self.cache.replace_as_names(env.as_names)

    def load_invalids(self, *, cancel: threading.Event | None = None) -> int:
        """
        Fetch every ROA-invalid prefix (/invalids) and replace the invalids cache.

        Returns:
            Number of ASNs with invalid prefixes

        Raises:
            DecodeError: if a listed prefix is malformed; the cache is unchanged
        """
        env = self._request("invalids", cancel=cancel)
        return self.cache.replace_invalids(env.invalids)

    @property
    def as_names(self) -> dict[int, str]:
        """Copy of the cached AS names."""
        return self.cache.as_names()

    @property
    def invalids(self) -> dict[int, list[IPNetwork]]:
        """Copy of the cached invalid prefixes."""
        return self.cache.invalids()
