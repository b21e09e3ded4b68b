"""
Pytest configuration and shared fixtures for realm_ad tests.
"""

import pytest
from unittest import mock

from realm_ad.core.directory_session import DirectorySession
from realm_ad.core.realm_config import RealmConfig
from realm_ad.core.realm_provider import RealmProvider
from realm_ad.exceptions import ObjectCreationException, ObjectNotFoundException, PasswordResetException


# =============================================================================
# FAKE DIRECTORY COLLABORATORS
# =============================================================================


class RecordingEnroller:
    """An enroller that records every call and fails on demand.

    join_failures / set_password_failures are the number of calls that fail
    before calls start succeeding. Use a large number to always fail.
    """

    def __init__(self, join_failures=0, set_password_failures=0, delete_fails=False):
        self.join_failures = join_failures
        self.set_password_failures = set_password_failures
        self.delete_fails = delete_fails
        self.calls = []

    def join(self, session, computer_name, host_fqdn, ou, password):
        self.calls.append(("join", computer_name, host_fqdn, ou, password))
        if self.join_failures > 0:
            self.join_failures -= 1
            raise ObjectCreationException("entryAlreadyExists")

    def set_password(self, session, computer_name, ou, password):
        self.calls.append(("set_password", computer_name, ou, password))
        if self.set_password_failures > 0:
            self.set_password_failures -= 1
            raise PasswordResetException("unwillingToPerform")

    def delete(self, session, computer_name, ou=None):
        self.calls.append(("delete", computer_name, ou))
        if self.delete_fails:
            raise ObjectNotFoundException("no such computer")

    def call_names(self):
        return [call[0] for call in self.calls]


class RecordingConnector:
    """Stands in for both the kerberos credential initializer and the session factory."""

    def __init__(self):
        self.kinit_calls = []
        self.connect_calls = []
        self.sessions = []

    def init_credential_cache(self, keytab_path, principal, ccache_name=None):
        self.kinit_calls.append((keytab_path, principal, ccache_name))
        return mock.sentinel.credentials

    def connect(self, domain, realm, **kwargs):
        self.connect_calls.append((domain, realm, kwargs))
        session = DirectorySession(mock.MagicMock(), domain, realm)
        self.sessions.append(session)
        return session


# =============================================================================
# CONFIG AND PROVIDER FIXTURES
# =============================================================================


@pytest.fixture
def realm_config() -> RealmConfig:
    """Realm configured in lowercase so tests exercise case-insensitive matching."""
    return RealmConfig(
        realm="example.com",
        keytab_path="/etc/realm_ad/realm_ad.keytab",
        principal="realm-proxy@EXAMPLE.COM",
        domain_controller="dc1.example.com",
        ou="OU=Linux,OU=Servers",
    )


@pytest.fixture
def connector() -> RecordingConnector:
    return RecordingConnector()


@pytest.fixture
def sleeps() -> list:
    """Collects every backoff delay instead of sleeping."""
    return []


@pytest.fixture
def make_provider(realm_config, connector, sleeps):
    """Factory building a provider around a RecordingEnroller."""

    def _make(enroller=None, config=None):
        return RealmProvider(
            config or realm_config,
            enroller=enroller if enroller is not None else RecordingEnroller(),
            credential_initializer=connector.init_credential_cache,
            session_factory=connector.connect,
            sleep=sleeps.append,
        )

    return _make


@pytest.fixture
def ldap_connection() -> mock.MagicMock:
    """A thread-safe style ldap3 connection whose operations succeed."""
    conn = mock.MagicMock()
    conn.strategy.thread_safe = True
    ok = (True, {"result": 0, "description": "success"}, [], None)
    conn.add.return_value = ok
    conn.modify.return_value = ok
    conn.delete.return_value = ok
    conn.search.return_value = (
        True,
        {"result": 0, "description": "success"},
        [{"dn": "CN=WEB01,OU=Linux,OU=Servers,DC=example,DC=com", "attributes": {}}],
        None,
    )
    return conn


@pytest.fixture
def directory_session(ldap_connection) -> DirectorySession:
    return DirectorySession(ldap_connection, "EXAMPLE.com", "EXAMPLE.COM")
