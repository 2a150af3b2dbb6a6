"""
Validators for public IP addresses and AS numbers.

Every lookup runs these before touching the network.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from netaddr import AddrFormatError, IPAddress, IPNetwork, IPSet

from bgpstuff.exceptions import InvalidASNError, InvalidIPError


# RFC 5735 / RFC 6890 - Special-Purpose IP Address Registries
BOGON_RANGES_V4 = [
    "0.0.0.0/8",           # "This" network
    "10.0.0.0/8",          # Private-Use
    "100.64.0.0/10",       # Shared Address Space (CGN)
    "127.0.0.0/8",         # Loopback
    "169.254.0.0/16",      # Link-Local
    "172.16.0.0/12",       # Private-Use
    "192.0.0.0/24",        # IETF Protocol Assignments
    "192.0.2.0/24",        # Documentation (TEST-NET-1)
    "192.88.99.0/24",      # Deprecated 6to4 Relay Anycast (RFC 7526)
    "192.168.0.0/16",      # Private-Use
    "198.18.0.0/15",       # Benchmarking
    "198.51.100.0/24",     # Documentation (TEST-NET-2)
    "203.0.113.0/24",      # Documentation (TEST-NET-3)
    "224.0.0.0/4",         # Multicast
    "240.0.0.0/4",         # Reserved for Future Use
    "255.255.255.255/32",  # Limited Broadcast
]

BOGON_RANGES_V6 = [
    "::/128",              # Unspecified
    "::1/128",             # Loopback
    "::ffff:0:0/96",       # IPv4-mapped
    "64:ff9b::/96",        # IPv4/IPv6 Translation
    "100::/64",            # Discard-Only
    "2001::/32",           # TEREDO
    "2001:2::/48",         # Benchmarking
    "2001:db8::/32",       # Documentation
    "2001:10::/28",        # ORCHID
    "2002::/16",           # 6to4
    "fc00::/7",            # Unique-Local
    "fe80::/10",           # Link-Local
    "ff00::/8",            # Multicast
]

# Only this block is handed out for global unicast
GLOBAL_UNICAST_V6 = IPNetwork("2000::/3")

_BOGONS = IPSet(BOGON_RANGES_V4 + BOGON_RANGES_V6)

AS_NUMBER_MIN = 1
AS_NUMBER_MAX = 4294967295  # 32-bit unsigned integer maximum

# Last ASN IANA has delegated to the RIRs, per the IANA 32-bit AS number
# registry as of 2025. Anything above it and below the 32-bit private-use
# block is unallocated. Override with ClientConfig.highest_allocated_asn.
HIGHEST_ALLOCATED_ASN = 401308
PRIVATE_USE_32BIT_START = 4200000000

# Inclusive ranges that never appear as a public origin
RESERVED_AS_RANGES = [
    (0, 0),                    # Reserved (RFC 7607)
    (23456, 23456),            # AS_TRANS (RFC 6793)
    (64496, 64511),            # Documentation/Sample Use (RFC 5398)
    (64512, 65534),            # Private Use (RFC 6996)
    (65535, 65535),            # Reserved (RFC 7300)
    (65536, 65551),            # Documentation/Sample Use (RFC 5398)
    (65552, 131071),           # Reserved (IANA)
    (4200000000, 4294967294),  # Private Use 32-bit (RFC 6996)
    (4294967295, 4294967295),  # Reserved (RFC 7300)
]


def _parse_ip(value: object) -> IPAddress | None:
    if not isinstance(value, str):
        return None
    try:
        return IPAddress(value)
    except (AddrFormatError, ValueError, TypeError):
        return None


def is_valid_public_ip(value: object) -> bool:
    """Check if value is a public unicast IPv4 or IPv6 address."""
    ip = _parse_ip(value)
    if ip is None:
        return False
    if ip.version == 6 and ip not in GLOBAL_UNICAST_V6:
        return False
    return ip not in _BOGONS


def validate_ip(value: object) -> str:
    """Return the canonical form of a public IP address or raise InvalidIPError."""
    if not is_valid_public_ip(value):
        raise InvalidIPError(value)
    return str(IPAddress(value))


def _parse_asn(value: object) -> int | None:
    # bool is an int subclass but never an AS number
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip().upper()
        if text.startswith("AS"):
            text = text[2:]
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def is_reserved_asn(asn: int, highest_allocated: int = HIGHEST_ALLOCATED_ASN) -> bool:
    """Check if an AS number falls in a reserved or unallocated block."""
    if highest_allocated < asn < PRIVATE_USE_32BIT_START:
        return True
    return any(start <= asn <= end for start, end in RESERVED_AS_RANGES)


def is_valid_public_asn(value: object, highest_allocated: int = HIGHEST_ALLOCATED_ASN) -> bool:
    """Check if value is an AS number usable as a public origin."""
    asn = _parse_asn(value)
    if asn is None:
        return False
    if not AS_NUMBER_MIN <= asn <= AS_NUMBER_MAX:
        return False
    return not is_reserved_asn(asn, highest_allocated)


def validate_asn(value: object, highest_allocated: int = HIGHEST_ALLOCATED_ASN) -> int:
    """
    Normalize and validate an AS number.

    Accepts an int, a digit string or an "AS"-prefixed string. ASNs above
    highest_allocated and below the 32-bit private-use block are rejected
    as unallocated.

    Returns:
        The AS number as an int

    Raises:
        InvalidASNError: if the value is malformed, reserved or out of range
    """
    if not is_valid_public_asn(value, highest_allocated):
        raise InvalidASNError(value)
    return _parse_asn(value)
