"""
Unit tests for realm_ad.environment.discovery.discovery_utils module.

DNS resolution and LDAP pings are mocked.
"""

from unittest import mock

import dns.resolver
import pytest

from realm_ad.environment.discovery import discovery_utils
from realm_ad.environment.discovery.discovery_utils import (
    discover_ldap_domain_controllers_in_domain,
    resolve_record_in_dns,
)


def _srv(host, port, priority, weight):
    record = mock.MagicMock()
    record.target.to_text.return_value = host
    record.port = port
    record.priority = priority
    record.weight = weight
    return record


@pytest.fixture
def resolver(monkeypatch):
    instance = mock.MagicMock()
    monkeypatch.setattr(discovery_utils.dns.resolver, "Resolver", mock.MagicMock(return_value=instance))
    return instance


@pytest.fixture
def rtts(monkeypatch):
    """Maps hostnames to ping times. Hosts missing from the map are unreachable."""
    times = {}

    def check(host, port, secure):
        if host.lower() not in times:
            return None
        return times[host.lower()], "ldap://{}:{}".format(host, port)

    monkeypatch.setattr(discovery_utils, "_check_ldap_server_availability_and_rtt", check)
    return times


class TestResolveRecord:
    """Tests for resolve_record_in_dns."""

    def test_sorted_by_priority_then_weight(self, resolver):
        resolver.resolve.return_value = [
            _srv("dc2.example.com", 389, 10, 0),
            _srv("dc1.example.com", 389, 0, 50),
            _srv("dc3.example.com", 389, 0, 100),
        ]
        records = resolve_record_in_dns("_ldap._tcp.dc._msdcs.example.com", "SRV")
        assert [record[0] for record in records] == ["dc3.example.com", "dc1.example.com", "dc2.example.com"]

    def test_custom_nameservers(self, resolver):
        resolver.resolve.return_value = []
        resolve_record_in_dns("_ldap._tcp.dc._msdcs.example.com", "SRV", ["10.0.0.53"])
        assert resolver.nameservers == ["10.0.0.53"]

    def test_dns_failure_is_empty(self, resolver):
        resolver.resolve.side_effect = dns.resolver.NXDOMAIN()
        assert resolve_record_in_dns("_ldap._tcp.dc._msdcs.example.com", "SRV") == []


class TestDiscoverControllers:
    """Tests for discover_ldap_domain_controllers_in_domain."""

    def test_ordered_by_rtt(self, resolver, rtts):
        resolver.resolve.return_value = [_srv("dc1.example.com", 389, 0, 100), _srv("dc2.example.com", 389, 0, 100)]
        rtts.update({"dc1.example.com": 0.2, "dc2.example.com": 0.05})

        uris = discover_ldap_domain_controllers_in_domain("example.com")

        assert uris == ["ldap://dc2.example.com:389", "ldap://dc1.example.com:389"]
        resolver.resolve.assert_called_once_with("_ldap._tcp.dc._msdcs.example.com", mock.ANY, tcp=True)

    def test_unreachable_dropped(self, resolver, rtts):
        resolver.resolve.return_value = [_srv("dc1.example.com", 389, 0, 100), _srv("dc2.example.com", 389, 0, 100)]
        rtts["dc1.example.com"] = 0.1
        assert discover_ldap_domain_controllers_in_domain("example.com") == ["ldap://dc1.example.com:389"]

    def test_duplicates_differing_by_case(self, resolver, rtts):
        resolver.resolve.return_value = [_srv("dc1.example.com", 389, 0, 100), _srv("DC1.EXAMPLE.COM", 389, 0, 100)]
        rtts["dc1.example.com"] = 0.1
        assert discover_ldap_domain_controllers_in_domain("example.com") == ["ldap://dc1.example.com:389"]

    def test_server_limit(self, resolver, rtts):
        resolver.resolve.return_value = [_srv("dc{}.example.com".format(i), 389, 0, 100) for i in range(4)]
        rtts.update({"dc{}.example.com".format(i): i / 10.0 for i in range(4)})
        uris = discover_ldap_domain_controllers_in_domain("example.com", server_limit=2)
        assert uris == ["ldap://dc0.example.com:389", "ldap://dc1.example.com:389"]

    def test_nothing_in_dns(self, resolver, rtts):
        resolver.resolve.return_value = []
        assert discover_ldap_domain_controllers_in_domain("example.com") == []
