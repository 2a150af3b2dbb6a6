"""
Data models for bgpstuff.net responses.

``Envelope`` mirrors the JSON body every handler returns; each lookup then
builds its own result type from the fields that belong to it.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from netaddr import AddrFormatError, IPNetwork

from bgpstuff.exceptions import DecodeError

logger = logging.getLogger(__name__)

# Go's zero time.Time, sent when an answer was not served from cache
ZERO_TIME = "0001-01-01T00:00:00Z"


# ================================================================
# Field decoding
# ================================================================

def _str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"{key}: expected string, got {type(value).__name__}")
    return value


def _int(data: dict[str, Any], key: str) -> int:
    """Integer field. Strings are accepted since some fields are string-encoded."""
    value = data.get(key)
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise DecodeError(f"{key}: expected integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as e:
            raise DecodeError(f"{key}: invalid integer {value!r}") from e
    raise DecodeError(f"{key}: expected integer, got {type(value).__name__}")


def _bool(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DecodeError(f"{key}: expected bool, got {type(value).__name__}")
    return value


def _str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DecodeError(f"{key}: expected list of strings")
    return list(value)


def _object(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise DecodeError(f"{key}: expected object, got {type(value).__name__}")
    return value


def _object_list(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, dict) for v in value):
        raise DecodeError(f"{key}: expected list of objects")
    return value


def _time(data: dict[str, Any], key: str) -> datetime | None:
    value = _str(data, key)
    if not value or value == ZERO_TIME:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise DecodeError(f"{key}: invalid timestamp {value!r}") from e
    if parsed.year == 1:
        return None
    return parsed


def _format_time(value: datetime | None) -> str:
    if value is None:
        return ZERO_TIME
    return value.isoformat().replace("+00:00", "Z")


def parse_prefix(value: str) -> IPNetwork:
    """Parse a CIDR string into its network, host bits cleared."""
    if not isinstance(value, str) or "/" not in value:
        raise DecodeError(f"invalid prefix: {value!r}")
    try:
        return IPNetwork(value).cidr
    except (AddrFormatError, ValueError, TypeError) as e:
        raise DecodeError(f"invalid prefix: {value!r}") from e


def parse_asn_list(values: list[str]) -> list[int]:
    """
    Convert string AS numbers to ints.

    An entry that does not parse becomes 0 and the rest of the list is kept,
    so one bad hop degrades a path instead of failing the lookup.
    """
    result = []
    for value in values:
        try:
            result.append(int(value))
        except (TypeError, ValueError):
            logger.debug(f"Unparsable AS number {value!r} in path, using 0")
            result.append(0)
    return result


# ================================================================
# Envelope
# ================================================================

@dataclass
class ASNumName:
    """One entry of the /asnames listing."""
    asn: int = 0
    as_name: str = ""
    as_locale: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ASNumName":
        return cls(
            asn=_int(data, "ASN"),
            as_name=_str(data, "ASName"),
            as_locale=_str(data, "ASLocale"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"ASN": self.asn, "ASName": self.as_name, "ASLocale": self.as_locale}


@dataclass
class InvalidsEntry:
    """ROA-invalid prefixes originated by one ASN."""
    asn: int = 0
    prefixes: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "InvalidsEntry":
        return cls(asn=_int(data, "ASN"), prefixes=_str_list(data, "Prefixes"))

    def to_dict(self) -> dict[str, Any]:
        # ASN travels as a string on the wire
        return {"ASN": str(self.asn), "Prefixes": list(self.prefixes)}


@dataclass
class Sourced:
    """Prefix counts and prefixes originated by an ASN."""
    ipv4: int = 0
    ipv6: int = 0
    prefixes: list[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Sourced":
        return cls(
            ipv4=_int(data, "Ipv4"),
            ipv6=_int(data, "Ipv6"),
            prefixes=_str_list(data, "Prefixes"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"Ipv4": self.ipv4, "Ipv6": self.ipv6, "Prefixes": list(self.prefixes)}


@dataclass
class Totals:
    """Prefix counts in the RIB and the unix time they were taken."""
    ipv4: int = 0
    ipv6: int = 0
    time: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Totals":
        return cls(ipv4=_int(data, "Ipv4"), ipv6=_int(data, "Ipv6"), time=_int(data, "Time"))

    def to_dict(self) -> dict[str, Any]:
        return {"Ipv4": self.ipv4, "Ipv6": self.ipv6, "Time": self.time}


@dataclass
class Location:
    """Ingress location of the looking glass."""
    lat: str = ""
    long: str = ""
    city: str = ""
    country: str = ""
    map: str = ""  # base64 encoded png

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Location":
        return cls(
            lat=_str(data, "Lat"),
            long=_str(data, "Long"),
            city=_str(data, "City"),
            country=_str(data, "Country"),
            map=_str(data, "Map"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "Lat": self.lat,
            "Long": self.long,
            "City": self.city,
            "Country": self.country,
            "Map": self.map,
        }


@dataclass
class Envelope:
    """
    Decoded body of any bgpstuff.net reply.

    Only the fields of the handler that was called carry data; the rest keep
    their zero values. Lookups never hand this to callers.
    """
    action: str = ""
    route: str = ""
    as_path: list[str] = field(default_factory=list)
    as_set: list[str] = field(default_factory=list)
    origin: int = 0
    roa: str = ""
    as_name: str = ""
    as_locale: str = ""
    as_names: list[ASNumName] = field(default_factory=list)
    invalids: list[InvalidsEntry] = field(default_factory=list)
    sourced: Sourced = field(default_factory=Sourced)
    location: Location = field(default_factory=Location)
    totals: Totals = field(default_factory=Totals)
    ip: str = ""
    exists: bool = False
    cache_time: datetime | None = None

    @classmethod
    def from_api(cls, payload: Any) -> "Envelope":
        """
        Build an Envelope from a parsed JSON body.

        Raises:
            DecodeError: if the body is not a {"Response": {...}} object or a
                field has the wrong type
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("Response"), dict):
            raise DecodeError("response body has no Response object")
        data = payload["Response"]

        return cls(
            action=_str(data, "Action"),
            route=_str(data, "Route"),
            as_path=_str_list(data, "ASPath"),
            as_set=_str_list(data, "ASSet"),
            origin=_int(data, "Origin"),
            roa=_str(data, "ROA"),
            as_name=_str(data, "ASName"),
            as_locale=_str(data, "ASLocale"),
            as_names=[ASNumName.from_api(v) for v in _object_list(data, "ASNames")],
            invalids=[InvalidsEntry.from_api(v) for v in _object_list(data, "Invalids")],
            sourced=Sourced.from_api(_object(data, "Sourced")),
            location=Location.from_api(_object(data, "Location")),
            totals=Totals.from_api(_object(data, "Totals")),
            ip=_str(data, "IP"),
            exists=_bool(data, "Exists"),
            cache_time=_time(data, "CacheTime"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize back to the wire schema."""
        return {
            "Response": {
                "Action": self.action,
                "Route": self.route,
                "ASPath": list(self.as_path),
                "ASSet": list(self.as_set),
                # Origin is string-encoded on the wire
                "Origin": str(self.origin),
                "ROA": self.roa,
                "ASName": self.as_name,
                "ASLocale": self.as_locale,
                "ASNames": [v.to_dict() for v in self.as_names],
                "Invalids": [v.to_dict() for v in self.invalids],
                "Sourced": self.sourced.to_dict(),
                "Location": self.location.to_dict(),
                "Totals": self.totals.to_dict(),
                "IP": self.ip,
                "Exists": self.exists,
                "CacheTime": _format_time(self.cache_time),
            }
        }


# ================================================================
# Per-handler results
# ================================================================

class ROAStatus(str, Enum):
    """RPKI validation state of a prefix/origin pair."""
    VALID = "VALID"
    INVALID = "INVALID"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str) -> "ROAStatus":
        try:
            return cls(value.strip().upper())
        except ValueError as e:
            raise DecodeError(f"unknown ROA status: {value!r}") from e


@dataclass
class RouteResult:
    """Covering prefix for an address (/route)."""
    ip: str
    exists: bool = False
    prefix: IPNetwork | None = None
    cache_time: datetime | None = None

    @classmethod
    def from_envelope(cls, ip: str, env: Envelope) -> "RouteResult":
        # The API answers "/0" when it has no route
        if not env.exists or env.route in ("", "/0"):
            return cls(ip=ip)
        return cls(
            ip=ip,
            exists=True,
            prefix=parse_prefix(env.route),
            cache_time=env.cache_time,
        )


@dataclass
class OriginResult:
    """Origin ASN of the covering prefix (/origin)."""
    ip: str
    exists: bool = False
    asn: int = 0

    @classmethod
    def from_envelope(cls, ip: str, env: Envelope) -> "OriginResult":
        if not env.exists or env.origin == 0:
            return cls(ip=ip)
        return cls(ip=ip, exists=True, asn=env.origin)


@dataclass
class ASPathResult:
    """AS path towards an address (/aspath). The last element is the origin."""
    ip: str
    exists: bool = False
    path: list[int] = field(default_factory=list)
    as_set: list[int] = field(default_factory=list)

    @property
    def origin(self) -> int | None:
        return self.path[-1] if self.path else None

    @classmethod
    def from_envelope(cls, ip: str, env: Envelope) -> "ASPathResult":
        if not env.exists or not env.as_path:
            return cls(ip=ip)
        return cls(
            ip=ip,
            exists=True,
            path=parse_asn_list(env.as_path),
            as_set=parse_asn_list(env.as_set),
        )


@dataclass
class ROAResult:
    """ROA validation state of the covering prefix (/roa)."""
    ip: str
    exists: bool = False
    status: ROAStatus | None = None

    @classmethod
    def from_envelope(cls, ip: str, env: Envelope) -> "ROAResult":
        # No origin means there is no prefix ROA to check
        if not env.exists or env.origin == 0 or not env.roa:
            return cls(ip=ip)
        return cls(ip=ip, exists=True, status=ROAStatus.parse(env.roa))


@dataclass
class ASNameResult:
    """Registered name of an ASN (/asname or the AS name cache)."""
    asn: int
    exists: bool = False
    name: str = ""
    locale: str = ""
    cached: bool = False  # answered from the client's cache

    @classmethod
    def from_envelope(cls, asn: int, env: Envelope) -> "ASNameResult":
        if not env.exists or not env.as_name:
            return cls(asn=asn)
        return cls(asn=asn, exists=True, name=env.as_name, locale=env.as_locale)


@dataclass
class InvalidResult:
    """ROA-invalid prefixes originated by an ASN, from the invalids cache."""
    asn: int
    exists: bool = False
    prefixes: list[IPNetwork] = field(default_factory=list)


@dataclass
class SourcedResult:
    """Prefixes originated by an ASN (/sourced)."""
    asn: int
    exists: bool = False
    prefixes: list[IPNetwork] = field(default_factory=list)
    ipv4: int = 0
    ipv6: int = 0

    @classmethod
    def from_envelope(cls, asn: int, env: Envelope) -> "SourcedResult":
        if not env.exists:
            return cls(asn=asn)
        return cls(
            asn=asn,
            exists=True,
            prefixes=[parse_prefix(p) for p in env.sourced.prefixes],
            ipv4=env.sourced.ipv4,
            ipv6=env.sourced.ipv6,
        )


@dataclass
class TotalsResult:
    """IPv4 and IPv6 prefix counts in the RIB (/totals)."""
    exists: bool = False
    ipv4: int = 0
    ipv6: int = 0
    time: datetime | None = None

    @classmethod
    def from_envelope(cls, env: Envelope) -> "TotalsResult":
        if not env.exists:
            return cls()
        taken = env.totals.time
        time = None
        if taken:
            try:
                time = datetime.fromtimestamp(taken, tz=timezone.utc)
            except (ValueError, OverflowError, OSError) as e:
                raise DecodeError(f"Time: invalid unix timestamp {taken!r}") from e
        return cls(
            exists=True,
            ipv4=env.totals.ipv4,
            ipv6=env.totals.ipv6,
            time=time,
        )
