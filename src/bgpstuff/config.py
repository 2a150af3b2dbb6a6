"""
Configuration management for the bgpstuff client.

Loads endpoint and rate-limit settings from environment variables or a .env file.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from bgpstuff import __version__
from bgpstuff.validators import HIGHEST_ALLOCATED_ASN


LIVE_API = "https://bgpstuff.net"
TEST_API = "https://test.bgpstuff.net"

DEFAULT_REQUESTS_PER_MINUTE = 30
DEFAULT_TIMEOUT = 8.0
DEFAULT_USER_AGENT = f"bgpstuff-python/{__version__}"

# Check common locations for .env
_ENV_LOCATIONS = [
    Path.home() / ".bgpstuff" / ".env",
    Path.home() / ".config" / "bgpstuff" / ".env",
    Path.cwd() / ".env",
]


def load_env_file() -> Path | None:
    """Load the first .env file found. Existing variables are not overridden."""
    for env_path in _ENV_LOCATIONS:
        if env_path.exists():
            load_dotenv(env_path)
            return env_path
    return None


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientConfig:
    """Endpoint, quota and timeout settings for BGPStuffClient."""

    base_url: str = LIVE_API
    test_url: str = TEST_API
    testing: bool = False

    # Rate limiting: also the burst size of the token bucket
    requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE

    timeout: float = DEFAULT_TIMEOUT  # seconds, per request
    user_agent: str = DEFAULT_USER_AGENT

    # ASNs between this and the 32-bit private-use block fail validation
    highest_allocated_asn: int = HIGHEST_ALLOCATED_ASN

    def __post_init__(self) -> None:
        if self.requests_per_minute <= 0:
            raise ValueError(f"requests_per_minute must be positive, got {self.requests_per_minute}")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.highest_allocated_asn < 1:
            raise ValueError(f"highest_allocated_asn must be positive, got {self.highest_allocated_asn}")

    @property
    def endpoint(self) -> str:
        """Base URL requests are sent to, without a trailing slash."""
        url = self.test_url if self.testing else self.base_url
        return url.rstrip("/")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables."""
        load_env_file()
        return cls(
            base_url=os.getenv("BGPSTUFF_API_URL", LIVE_API),
            test_url=os.getenv("BGPSTUFF_TEST_API_URL", TEST_API),
            testing=_env_flag("BGPSTUFF_TESTING"),
            requests_per_minute=int(os.getenv("BGPSTUFF_RPM", str(DEFAULT_REQUESTS_PER_MINUTE))),
            timeout=float(os.getenv("BGPSTUFF_TIMEOUT", str(DEFAULT_TIMEOUT))),
            highest_allocated_asn=int(os.getenv("BGPSTUFF_HIGHEST_ASN", str(HIGHEST_ALLOCATED_ASN))),
        )


# Global config instance
_config: ClientConfig | None = None


def get_config() -> ClientConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ClientConfig.from_env()
    return _config


def set_config(config: ClientConfig | None) -> None:
    """Set the global configuration instance. None forces a reload from the environment."""
    global _config
    _config = config
