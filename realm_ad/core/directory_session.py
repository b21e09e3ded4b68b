# Created in August 2021
#
# Author: Azaria Zornberg
#
# Copyright 2021 - 2021 Azaria Zornberg
#
# This file is part of realm_ad
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

from ldap3 import (
    Connection,
    FIRST,
    KERBEROS,
    SAFE_RESTARTABLE,
    SASL,
    Server,
    ServerPool,
    Tls,
)
from ldap3.core.exceptions import LDAPException
from ssl import (
    OP_NO_SSLv2,
    OP_NO_SSLv3,
    OP_NO_TLSv1,
    OP_NO_TLSv1_1,
    CERT_NONE,
    CERT_REQUIRED,
)
from typing import List

# local imports come after imports from other libraries
from realm_ad import logging_utils
from realm_ad.environment.discovery.discovery_utils import discover_ldap_domain_controllers_in_domain
from realm_ad.environment.ldap.ldap_format_utils import (
    construct_ldap_base_dn_from_domain,
    process_ldap3_conn_return_value,
)
from realm_ad.exceptions import DomainConnectException


logger = logging_utils.get_logger(__name__)


class DirectorySession:

    def __init__(self, ldap_connection: Connection, domain: str, realm: str):
        """ Create a session object for an authenticated connection to an AD domain controller.
        A session is created for a single create or delete request and discarded afterwards; it is passed
        explicitly to everything that needs to talk to the directory.

        :param ldap_connection: A bound ldap3 Connection object to a domain controller.
        :param domain: The DNS name of the domain, which is the lowercase form of the realm.
        :param realm: The kerberos realm of the domain.
        """
        self.ldap_connection = ldap_connection
        self.domain_dns_name = domain.lower()
        self.realm = realm
        self.domain_search_base = construct_ldap_base_dn_from_domain(self.domain_dns_name)

    def is_authenticated(self) -> bool:
        """ Returns if the session is currently authenticated """
        return self.ldap_connection.bound

    def get_ldap_connection(self) -> Connection:
        return self.ldap_connection

    def get_current_server_uri(self) -> str:
        return self.ldap_connection.server.name

    def get_domain_dns_name(self) -> str:
        return self.domain_dns_name

    def get_domain_search_base(self) -> str:
        return self.domain_search_base

    def close(self):
        """ Unbind the underlying connection. Failures are logged rather than raised, since the request
        using the session has already finished by the time it's closed.
        """
        try:
            self.ldap_connection.unbind()
        except LDAPException as ex:
            logger.warning('Failed to cleanly unbind from %s: %s', self.domain_dns_name, ex)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self):
        return 'DirectorySession(domain={}, realm={}, server={}, authenticated={})'.format(
            self.domain_dns_name, self.realm, self.get_current_server_uri(), self.is_authenticated())


def build_ldap_servers(ldap_uris: List[str], encrypt_connections: bool = True,
                       ca_certificates_file_path: str = None) -> List[Server]:
    """ Build ldap3 Server objects for a list of hostnames or LDAP uris, with TLS settings that disable
    everything below TLS 1.2.
    """
    tls_setting = None
    if encrypt_connections:
        # only check peer certs if we have CAs
        checking = CERT_REQUIRED if ca_certificates_file_path else CERT_NONE
        tls_setting = Tls(ca_certs_file=ca_certificates_file_path,
                          ssl_options=[OP_NO_SSLv2, OP_NO_SSLv3, OP_NO_TLSv1, OP_NO_TLSv1_1],
                          validate=checking)
    return [Server(uri, tls=tls_setting) for uri in ldap_uris]


def connect(domain: str, realm: str, domain_controller: str = None, credentials=None,
            encrypt_connections: bool = True, ca_certificates_file_path: str = None,
            dns_nameservers: List[str] = None) -> DirectorySession:
    """ Connect and bind to a domain controller using kerberos (SASL GSSAPI) and return a session.
    A valid credential cache must already exist, either the one `credentials` was acquired into or the
    process default.

    :param domain: The DNS name of the AD domain.
    :param realm: The kerberos realm of the domain.
    :param domain_controller: Optional. A hostname or LDAP uri of the domain controller to use. If not
                              specified, domain controllers are discovered in DNS and the fastest one to
                              reply is used, with the others as fallbacks.
    :param credentials: Optional. gssapi Credentials to bind with. If not specified, the default
                        credential cache is used.
    :param encrypt_connections: Whether to StartTLS before binding. AD only accepts password writes over
                                protected connections. Defaults to True.
    :param ca_certificates_file_path: Optional. CA certificates used to verify the controllers' TLS
                                      certificates. If not specified, peer certificates are not checked.
    :param dns_nameservers: Optional. Nameservers to use for domain controller discovery.
    :returns: A DirectorySession with a bound connection.
    :raises: DomainConnectException if no controller can be found or reached, TLS can't be started,
             or the bind fails.
    """
    domain = domain.lower()
    if domain_controller:
        ldap_uris = [domain_controller]
    else:
        ldap_uris = discover_ldap_domain_controllers_in_domain(domain, dns_nameservers=dns_nameservers,
                                                               secure=encrypt_connections)
    if not ldap_uris:
        raise DomainConnectException('Cannot create a session with the AD domain {}, as there are no LDAP servers '
                                     'known for the domain.'.format(domain))

    # our servers were either configured (one preference) or discovered (ordered by RTT), so use the
    # FIRST strategy to either contact the preferred server or the fastest/closest server
    servers = build_ldap_servers(ldap_uris, encrypt_connections, ca_certificates_file_path)
    server_pool = ServerPool(servers=servers, pool_strategy=FIRST)
    # AD tends to close idle connections, and a retry sequence can sit idle for over a minute,
    # so use a restartable strategy. use the safe one since callers may provision hosts in parallel
    # threads
    conn = Connection(server_pool, authentication=SASL, sasl_mechanism=KERBEROS,
                      sasl_credentials=(None, None, credentials), client_strategy=SAFE_RESTARTABLE)
    try:
        conn.open()
        logger.debug('Opened connection to AD domain %s: %s', domain, conn)
        if encrypt_connections and not conn.server.ssl:
            # if we're using LDAPS, don't StartTLS
            if not conn.start_tls():
                raise DomainConnectException('Unable to StartTLS on connection to domain {}. Please check the '
                                             'server(s) to ensure that they have properly configured '
                                             'certificates.'.format(domain))
            logger.debug('Successfully secured connection to AD domain %s', domain)
        bind_resp = conn.bind()
        bound, result, _, _ = process_ldap3_conn_return_value(conn, bind_resp)
        if not bound:
            raise DomainConnectException('Failed to bind connection to {} - please check that the kerberos '
                                         'credentials are valid for realm {}. LDAP result: {}'
                                         .format(conn.server.name, realm, result))
    except LDAPException as ex:
        _discard_connection(conn, domain)
        raise DomainConnectException('Failed to connect to AD domain {} using servers {}: {}'
                                     .format(domain, ', '.join(ldap_uris), ex))
    except DomainConnectException:
        _discard_connection(conn, domain)
        raise
    logger.debug('Successfully bound connection to AD domain %s to establish session', domain)
    return DirectorySession(conn, domain, realm)


def _discard_connection(conn: Connection, domain: str):
    try:
        conn.unbind()
    except LDAPException as ex:
        logger.debug('Failed to close unusable connection to AD domain %s: %s', domain, ex)
