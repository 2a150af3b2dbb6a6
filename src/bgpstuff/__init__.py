"""
bgpstuff - Python client for the bgpstuff.net BGP looking glass

Looks up covering prefixes, origin ASNs, AS paths, ROA status, AS names,
ROA-invalid listings and global totals, with a shared rate limiter and a
client-owned cache for the bulk datasets.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

__version__ = "1.0.0"
__author__ = "DNS Science.io"
__copyright__ = "Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company"

from bgpstuff.client import BGPStuffClient
from bgpstuff.config import ClientConfig, get_config, set_config
from bgpstuff.exceptions import (
    BGPStuffError,
    CacheNotLoadedError,
    DecodeError,
    InvalidASNError,
    InvalidIPError,
    RequestCancelledError,
    StatusError,
    TransportError,
    ValidationError,
)
from bgpstuff.models import (
    ASNameResult,
    ASPathResult,
    Envelope,
    InvalidResult,
    OriginResult,
    ROAResult,
    ROAStatus,
    RouteResult,
    SourcedResult,
    TotalsResult,
)
from bgpstuff.validators import (
    is_valid_public_asn,
    is_valid_public_ip,
    validate_asn,
    validate_ip,
)

__all__ = [
    "__version__",
    # Client
    "BGPStuffClient",
    "ClientConfig",
    "get_config",
    "set_config",
    # Errors
    "BGPStuffError",
    "ValidationError",
    "InvalidIPError",
    "InvalidASNError",
    "TransportError",
    "RequestCancelledError",
    "StatusError",
    "DecodeError",
    "CacheNotLoadedError",
    # Results
    "Envelope",
    "RouteResult",
    "OriginResult",
    "ASPathResult",
    "ROAResult",
    "ROAStatus",
    "ASNameResult",
    "InvalidResult",
    "SourcedResult",
    "TotalsResult",
    # Validators
    "is_valid_public_ip",
    "is_valid_public_asn",
    "validate_ip",
    "validate_asn",
]
