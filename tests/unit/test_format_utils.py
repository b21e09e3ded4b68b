"""
Unit tests for realm_ad.environment.format_utils module.

Tests computer name derivation from host names and the naming policy.
"""

import hashlib

import pytest

from realm_ad.environment.format_utils import (
    format_hostname_or_ip_and_port_to_uri,
    hostfqdn_to_computer_name,
    should_apply_computer_name_prefix,
)


class TestComputerNameDerivation:
    """Tests for hostfqdn_to_computer_name."""

    def test_short_hostname_uppercased(self):
        """Test the domain is stripped and the name uppercased."""
        assert hostfqdn_to_computer_name("myhost.example.com") == "MYHOST"

    def test_long_hostname_truncated(self):
        """Test names are cut to 15 characters."""
        assert hostfqdn_to_computer_name("averyveryverylonghostname.example.com") == "AVERYVERYVERYLO"

    def test_host_without_domain(self):
        """Test a bare hostname is used as is."""
        assert hostfqdn_to_computer_name("web01") == "WEB01"

    def test_empty_host(self):
        """Test an empty host gives an empty name rather than failing."""
        assert hostfqdn_to_computer_name("") == ""

    def test_prefix_applied(self):
        """Test the prefix goes in front of the hostname."""
        assert hostfqdn_to_computer_name("web01.example.com", prefix="lnx") == "LNXWEB01"

    def test_prefix_not_duplicated(self):
        """Test a hostname already carrying the prefix is left alone."""
        assert hostfqdn_to_computer_name("lnx-web01.example.com", prefix="lnx") == "LNX-WEB01"

    def test_prefix_check_ignores_case(self):
        """Test an uppercase prefix matches a lowercase hostname."""
        assert hostfqdn_to_computer_name("lnxweb01.example.com", prefix="LNX") == "LNXWEB01"

    def test_long_prefix_pushes_out_hostname(self):
        """Test a prefix of 15 or more characters is all that's left."""
        assert hostfqdn_to_computer_name("web01.example.com", prefix="abcdefghijklmnopq") == "ABCDEFGHIJKLMNO"

    def test_hash_with_prefix(self):
        """Test hashing replaces the hostname with its sha256 digest before prefixing."""
        digest = hashlib.sha256(b"myhost").hexdigest()
        expected = ("AB" + digest.upper())[:15]

        assert hostfqdn_to_computer_name("myhost.example.com", prefix="ab", hash_enabled=True) == expected

    def test_hash_without_prefix(self):
        """Test a hashed name is the start of the uppercase digest."""
        digest = hashlib.sha256(b"myhost").hexdigest()
        assert hostfqdn_to_computer_name("myhost.example.com", hash_enabled=True) == digest[:15].upper()

    def test_hash_of_fqdn(self):
        """Test use_fqdn hashes the whole name."""
        digest = hashlib.sha256(b"myhost.example.com").hexdigest()
        name = hostfqdn_to_computer_name("myhost.example.com", hash_enabled=True, use_fqdn=True)
        assert name == digest[:15].upper()

    def test_use_fqdn(self):
        """Test use_fqdn keeps the domain labels."""
        assert hostfqdn_to_computer_name("a.b.example.com", use_fqdn=True) == "A.B.EXAMPLE.COM"

    def test_deterministic(self):
        """Test the same input always gives the same name."""
        first = hostfqdn_to_computer_name("db.example.com", prefix="x", hash_enabled=True)
        second = hostfqdn_to_computer_name("db.example.com", prefix="x", hash_enabled=True)
        assert first == second


class TestPrefixDecision:
    """Tests for should_apply_computer_name_prefix."""

    @pytest.mark.parametrize("name,prefix,hash_enabled,expected", [
        ("web01", "lnx", False, True),
        ("lnxweb01", "lnx", False, False),
        ("LNXWEB01", "lnx", False, False),
        ("lnxweb01", "lnx", True, True),
        ("web01", "", False, False),
        ("web01", "", True, False),
        ("", "lnx", False, False),
    ])
    def test_prefix_decision(self, name, prefix, hash_enabled, expected):
        """Test when the prefix is applied."""
        assert should_apply_computer_name_prefix(name, prefix, hash_enabled) is expected


class TestUriFormatting:
    """Tests for format_hostname_or_ip_and_port_to_uri."""

    def test_hostname_and_port(self):
        assert format_hostname_or_ip_and_port_to_uri("dc1.example.com", 389) == "dc1.example.com:389"

    def test_ipv6_bracketed(self):
        assert format_hostname_or_ip_and_port_to_uri("fe80::1", 389) == "[fe80::1]:389"

    def test_no_port(self):
        assert format_hostname_or_ip_and_port_to_uri("10.0.0.1", None) == "10.0.0.1"
