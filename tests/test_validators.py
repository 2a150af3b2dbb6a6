"""Tests for public IP and ASN validation."""

import pytest

from bgpstuff.exceptions import InvalidASNError, InvalidIPError, ValidationError
from bgpstuff.validators import (
    HIGHEST_ALLOCATED_ASN,
    is_reserved_asn,
    is_valid_public_asn,
    is_valid_public_ip,
    validate_asn,
    validate_ip,
)


class TestPublicIP:
    """Tests for is_valid_public_ip / validate_ip."""

    @pytest.mark.parametrize("address", [
        "1.1.1.1",
        "8.8.8.8",
        "151.101.1.69",
        "2600::",
        "2606:4700:4700::1111",
    ])
    def test_accepts_public_unicast(self, address):
        assert is_valid_public_ip(address)

    @pytest.mark.parametrize("address", [
        "10.1.1.1",         # private
        "172.16.5.4",       # private
        "192.168.0.1",      # private
        "100.64.0.1",       # CGN
        "127.0.0.1",        # loopback
        "169.254.1.1",      # link-local
        "192.0.2.10",       # documentation
        "192.88.99.1",      # 6to4 relay anycast
        "2002:c058:6301::", # 6to4
        "198.18.0.1",       # benchmarking
        "224.0.0.1",        # multicast
        "240.0.0.1",        # reserved
        "255.255.255.255",  # broadcast
        "0.0.0.0",
        "::",
        "::1",
        "fe80::1",
        "fc00::1",
        "2001:db8::1",
        "ff02::1",
    ])
    def test_rejects_non_public(self, address):
        assert not is_valid_public_ip(address)

    def test_rejects_outside_global_unicast_v6(self):
        assert not is_valid_public_ip("4000::1")
        assert not is_valid_public_ip("1000::1")

    @pytest.mark.parametrize("value", [
        "🥺",
        "",
        "999.999.1.1",
        "not an ip",
        "1.1.1.1/24",
        None,
        16843009,
        b"1.1.1.1",
    ])
    def test_rejects_unparsable(self, value):
        assert not is_valid_public_ip(value)

    def test_validate_returns_canonical_form(self):
        assert validate_ip("1.1.1.1") == "1.1.1.1"
        assert validate_ip("2600:0:0::") == "2600::"
        assert validate_ip("2606:4700:4700:0:0:0:0:1111") == "2606:4700:4700::1111"

    def test_validate_raises(self):
        with pytest.raises(InvalidIPError) as exc_info:
            validate_ip("10.1.1.1")
        assert exc_info.value.value == "10.1.1.1"
        assert isinstance(exc_info.value, ValidationError)
        assert isinstance(exc_info.value, ValueError)


class TestPublicASN:
    """Tests for is_valid_public_asn / validate_asn."""

    @pytest.mark.parametrize("asn", [1, 174, 3356, 13335, 15169, 131072, 396982, 401308])
    def test_accepts_public(self, asn):
        assert is_valid_public_asn(asn)

    @pytest.mark.parametrize("asn", [
        0,
        23456,        # AS_TRANS
        64496,        # documentation
        64512,        # private
        65534,
        65535,
        65536,        # documentation
        100000,       # reserved
        401309,       # unallocated
        4199999999,
        4200000000,   # private 32-bit
        4294967295,
        4294967296,   # beyond 32 bits
        -1,
    ])
    def test_rejects_reserved_and_out_of_range(self, asn):
        assert not is_valid_public_asn(asn)

    @pytest.mark.parametrize("value", [True, False, None, 3356.0, "AS", "abc", "", "33 56", "²"])
    def test_rejects_malformed(self, value):
        assert not is_valid_public_asn(value)

    def test_is_reserved(self):
        assert is_reserved_asn(0)
        assert is_reserved_asn(64512)
        assert not is_reserved_asn(3356)

    @pytest.mark.parametrize("value", [3356, "3356", "AS3356", "as3356", " AS3356 "])
    def test_validate_normalizes(self, value):
        assert validate_asn(value) == 3356

    def test_validate_raises(self):
        with pytest.raises(InvalidASNError) as exc_info:
            validate_asn(0)
        assert exc_info.value.value == 0

        with pytest.raises(InvalidASNError):
            validate_asn(4199999999)

    def test_unallocated_ceiling(self):
        assert not is_valid_public_asn(HIGHEST_ALLOCATED_ASN + 1)
        assert is_valid_public_asn(HIGHEST_ALLOCATED_ASN + 1, highest_allocated=500000)
        assert validate_asn("AS450000", highest_allocated=500000) == 450000
        assert not is_reserved_asn(4199999999, highest_allocated=4199999999)

        # Raising the ceiling never opens the reserved blocks
        assert is_reserved_asn(64512, highest_allocated=4199999999)
        assert is_reserved_asn(4200000000, highest_allocated=4199999999)
