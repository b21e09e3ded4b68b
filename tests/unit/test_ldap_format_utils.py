"""
Unit tests for realm_ad.environment.ldap.ldap_format_utils module.

Tests distinguished name construction, location normalization and
computer name validation.
"""

from unittest import mock

import pytest

from realm_ad.environment.ldap.ldap_format_utils import (
    construct_default_hostnames_for_computer,
    construct_ldap_base_dn_from_domain,
    construct_object_distinguished_name,
    construct_service_principal_names,
    escape_generic_filter_value,
    is_dn,
    normalize_object_location_in_domain,
    process_ldap3_conn_return_value,
    remove_ad_search_refs,
    validate_computer_name,
)
from realm_ad.exceptions import InvalidConfigurationException


class TestDistinguishedNames:
    """Tests for building distinguished names."""

    def test_base_dn(self):
        assert construct_ldap_base_dn_from_domain("corp.example.com") == "DC=corp,DC=example,DC=com"

    def test_object_dn(self):
        dn = construct_object_distinguished_name("WEB01", "OU=Linux", "example.com")
        assert dn == "CN=WEB01,OU=Linux,DC=example,DC=com"

    def test_is_dn(self):
        """Test DNs are told apart from windows paths."""
        assert is_dn("OU=Linux,OU=Servers")
        assert not is_dn("Servers/Linux")


class TestLocationNormalization:
    """Tests for normalize_object_location_in_domain."""

    @pytest.mark.parametrize("location,expected", [
        (None, "CN=Computers"),
        ("", "CN=Computers"),
        ("OU=Linux,OU=Servers", "OU=Linux,OU=Servers"),
        ("OU=Linux,DC=example,DC=com", "OU=Linux"),
        ("ou=Linux,dc=EXAMPLE,dc=com", "ou=Linux"),
        ("Servers/Linux", "OU=Linux,OU=Servers"),
        ("example.com/Servers/Linux", "OU=Linux,OU=Servers"),
        ("Servers/", "OU=Servers"),
    ])
    def test_normalize(self, location, expected):
        assert normalize_object_location_in_domain(location, "example.com") == expected

    def test_domain_only_path_rejected(self):
        """Test a windows path naming only the domain is rejected."""
        with pytest.raises(InvalidConfigurationException):
            normalize_object_location_in_domain("example.com/", "example.com")


class TestHostnamesAndSpns:
    """Tests for hostnames and service principal names."""

    def test_hostnames_include_fqdn(self):
        assert construct_default_hostnames_for_computer("WEB01", "Web01.Example.com") == [
            "WEB01", "web01.example.com"]

    def test_hostnames_without_fqdn(self):
        assert construct_default_hostnames_for_computer("web01", "") == ["WEB01"]

    def test_spns(self):
        spns = construct_service_principal_names(["HOST"], ["WEB01", "web01.example.com"])
        assert spns == ["HOST/WEB01", "HOST/web01.example.com"]


class TestFilterEscaping:
    """Tests for escape_generic_filter_value."""

    def test_alphanumeric_untouched(self):
        assert escape_generic_filter_value("WEB01") == "WEB01"

    def test_dollar_untouched(self):
        assert escape_generic_filter_value("WEB01$") == "WEB01$"

    def test_special_characters_escaped(self):
        assert escape_generic_filter_value("a*(b)") == "a\\2a\\28b\\29"


class TestComputerNameValidation:
    """Tests for validate_computer_name."""

    def test_valid_name(self):
        assert validate_computer_name("WEB01") == "WEB01"

    def test_trailing_dollar_stripped(self):
        assert validate_computer_name("WEB01$") == "WEB01"

    @pytest.mark.parametrize("name", ["", "$", "ABCDEFGHIJKLMNOP", "WEB+01", "WEB,01", "A/B"])
    def test_invalid_names(self, name):
        with pytest.raises(InvalidConfigurationException):
            validate_computer_name(name)


class TestLdap3Results:
    """Tests for handling ldap3 return values."""

    def test_thread_safe_tuple(self):
        conn = mock.MagicMock()
        conn.strategy.thread_safe = True
        value = (True, {"result": 0}, [], {"type": "addRequest"})
        assert process_ldap3_conn_return_value(conn, value) == value

    def test_sync_connection(self):
        conn = mock.MagicMock()
        conn.strategy.thread_safe = False
        conn.result = {"result": 0}
        conn.response = []
        conn.request = None
        assert process_ldap3_conn_return_value(conn, True) == (True, {"result": 0}, [], None)

    def test_search_refs_removed(self):
        response = [{"dn": "CN=WEB01,DC=example,DC=com"}, {"type": "searchResRef", "uri": ["ldap://x"]}]
        assert remove_ad_search_refs(response) == [{"dn": "CN=WEB01,DC=example,DC=com"}]
        assert remove_ad_search_refs(None) == []
