"""
In-memory reference data for the bulk bgpstuff.net datasets.

Holds the AS name listing and the ROA-invalid listing. Each mapping is
replaced wholesale by a bulk load and never expires on its own.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import threading
from datetime import datetime, timezone

from netaddr import IPNetwork

from bgpstuff.exceptions import CacheNotLoadedError
from bgpstuff.models import ASNumName, InvalidsEntry, parse_prefix

logger = logging.getLogger(__name__)

AS_NAMES = "asnames"
INVALIDS = "invalids"


class ReferenceCache:
    """
    AS name and invalid prefix mappings owned by one client.

    A mapping counts as loaded once a bulk load has succeeded, even when the
    dataset was empty. All access goes through an internal lock, so bulk
    replacements may race with reads from other threads.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._as_names: dict[int, str] | None = None
        self._as_locales: dict[int, str] = {}
        self._invalids: dict[int, list[IPNetwork]] | None = None
        self._loaded_at: dict[str, datetime] = {}

    # ================================================================
    # Bulk replacement
    # ================================================================

    def replace_as_names(self, entries: list[ASNumName]) -> int:
        """Replace the AS name mapping. Returns the number of ASNs held."""
        names = {}
        locales = {}
        for entry in entries:
            names[entry.asn] = entry.as_name
            if entry.as_locale:
                locales[entry.asn] = entry.as_locale

        with self._lock:
            self._as_names = names
            self._as_locales = locales
            self._loaded_at[AS_NAMES] = datetime.now(timezone.utc)

        logger.info(f"Loaded {len(names):,} AS names")
        return len(names)

    def replace_invalids(self, entries: list[InvalidsEntry]) -> int:
        """
        Replace the invalids mapping. Returns the number of ASNs held.

        Every prefix is parsed before anything is swapped in, so a malformed
        prefix leaves the previous mapping untouched.

        Raises:
            DecodeError: if any prefix is not valid CIDR
        """
        invalids = {}
        for entry in entries:
            invalids[entry.asn] = [parse_prefix(p) for p in entry.prefixes]

        with self._lock:
            self._invalids = invalids
            self._loaded_at[INVALIDS] = datetime.now(timezone.utc)

        logger.info(f"Loaded invalid prefixes for {len(invalids):,} ASNs")
        return len(invalids)

    def clear(self) -> None:
        """Forget both mappings. Lookups behave as if nothing was ever loaded."""
        with self._lock:
            self._as_names = None
            self._as_locales = {}
            self._invalids = None
            self._loaded_at.clear()

    # ================================================================
    # Lookups
    # ================================================================

    @property
    def as_names_loaded(self) -> bool:
        with self._lock:
            return self._as_names is not None

    @property
    def invalids_loaded(self) -> bool:
        with self._lock:
            return self._invalids is not None

    def loaded_at(self, kind: str) -> datetime | None:
        """When the "asnames" or "invalids" mapping was last loaded."""
        with self._lock:
            return self._loaded_at.get(kind)

    def get_as_name(self, asn: int) -> tuple[str, str] | None:
        """
        Look up (name, locale) for an ASN.

        Returns None when the ASN is not in the listing.

        Raises:
            CacheNotLoadedError: if the AS names were never loaded
        """
        with self._lock:
            if self._as_names is None:
                raise CacheNotLoadedError("AS names not loaded, call load_as_names() first")
            name = self._as_names.get(asn)
            if name is None:
                return None
            return name, self._as_locales.get(asn, "")

    def get_invalids(self, asn: int) -> list[IPNetwork]:
        """
        Invalid prefixes originated by an ASN, empty if it has none.

        Raises:
            CacheNotLoadedError: if the invalids were never loaded
        """
        with self._lock:
            if self._invalids is None:
                raise CacheNotLoadedError("invalids not loaded, call load_invalids() first")
            return list(self._invalids.get(asn, []))

    def as_names(self) -> dict[int, str]:
        """Copy of the AS name mapping, empty when not loaded."""
        with self._lock:
            return dict(self._as_names or {})

    def invalids(self) -> dict[int, list[IPNetwork]]:
        """Copy of the invalids mapping, empty when not loaded."""
        with self._lock:
            return {asn: list(prefixes) for asn, prefixes in (self._invalids or {}).items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._as_names or {}) + len(self._invalids or {})
