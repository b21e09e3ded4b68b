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

from ldap3 import MODIFY_REPLACE, SUBTREE
from ldap3.core.exceptions import LDAPException
from typing import List, Optional

from realm_ad import logging_utils
from realm_ad.core.directory_session import DirectorySession
from realm_ad.environment.ldap import ldap_constants
from realm_ad.environment.ldap.ldap_format_utils import (
    construct_default_hostnames_for_computer,
    construct_object_distinguished_name,
    construct_service_principal_names,
    escape_generic_filter_value,
    normalize_object_location_in_domain,
    process_ldap3_conn_return_value,
    remove_ad_search_refs,
)
from realm_ad.environment.security.security_config_constants import (
    ADEncryptionType,
    DEFAULT_COMPUTER_ENCRYPTION_TYPES,
)
from realm_ad.environment.security.security_config_utils import (
    encode_password,
    get_supported_encryption_types_value,
)
from realm_ad.exceptions import (
    DomainSearchException,
    ObjectCreationException,
    ObjectDeletionException,
    ObjectNotFoundException,
    PasswordResetException,
)


logger = logging_utils.get_logger(__name__)


class AccountEnroller:
    """ Performs the computer account operations needed for the host lifecycle on a DirectorySession:
    joining a new computer, resetting the password of an existing one, and deleting one.
    Every failure raised here is a DirectoryOperationException.
    """

    def __init__(self, services: List[str] = None, encryption_types: List[ADEncryptionType] = None):
        """
        :param services: The services to register service principal names for on each hostname of a joined
                         computer. If not specified, defaults to HOST and RestrictedKrbHost, which is what
                         Windows and adcli register.
        :param encryption_types: The kerberos encryption types to enable on joined computers. If not specified,
                                 defaults to RC4-HMAC, AES128-SHA1 and AES256-SHA1.
        """
        self.services = services if services else ldap_constants.DEFAULT_COMPUTER_SERVICES
        self.encryption_types = encryption_types if encryption_types else DEFAULT_COMPUTER_ENCRYPTION_TYPES

    def find_computer_dn(self, session: DirectorySession, computer_name: str, ou: str = None) -> Optional[str]:
        """ Find the distinguished name of a computer account by its sAMAccountName.
        :param session: The session to search with.
        :param computer_name: The computer name, with or without the trailing $.
        :param ou: Optional. If specified, only this organizational unit and its children are searched.
                   Otherwise the whole domain is searched.
        :returns: The distinguished name, or None if there's no such computer.
        """
        samaccount_name = _to_samaccount_name(computer_name)
        search_base = session.get_domain_search_base()
        if ou:
            location = normalize_object_location_in_domain(ou, session.get_domain_dns_name())
            search_base = location + ',' + search_base
        ldap_filter = ldap_constants.FIND_COMPUTER_FILTER_FORMAT.format(escape_generic_filter_value(samaccount_name))
        conn = session.get_ldap_connection()
        try:
            res = conn.search(search_base=search_base, search_filter=ldap_filter, search_scope=SUBTREE,
                              attributes=[ldap_constants.AD_ATTRIBUTE_SAMACCOUNT_NAME], size_limit=1)
        except LDAPException as ex:
            raise DomainSearchException('An error was encountered searching {} for computer {}: {}'
                                        .format(search_base, samaccount_name, ex))
        _, result, response, _ = process_ldap3_conn_return_value(conn, res)
        # no such object should be considered an okay search
        if result['result'] not in (ldap_constants.OP_SUCCESS, ldap_constants.NO_SUCH_OBJECT):
            raise DomainSearchException('An error was encountered searching {} for computer {}. This may have '
                                        'occurred due to domain unavailability or a permission issue. Raw result: {}'
                                        .format(search_base, samaccount_name, result))
        real_entities = remove_ad_search_refs(response)
        if not real_entities:
            logger.debug('No computer found with sAMAccountName %s under %s', samaccount_name, search_base)
            return None
        return real_entities[0]['dn']

    def join(self, session: DirectorySession, computer_name: str, host_fqdn: str, ou: str, password: str):
        """ Create a computer account with its password and the attributes a joined host needs, in a single
        add so that a failure never leaves a partially configured account behind.

        :param session: The session to create the account with.
        :param computer_name: The computer name, which becomes the CN and (with a trailing $) the
                              sAMAccountName.
        :param host_fqdn: The host's fully qualified domain name, used for dNSHostName and service
                          principal names.
        :param ou: The organizational unit to create the account in. If None, CN=Computers is used.
        :param password: The password to set for the account.
        :raises: ObjectCreationException if the account can't be created, including when it already exists.
        """
        domain = session.get_domain_dns_name()
        location = normalize_object_location_in_domain(ou, domain)
        computer_dn = construct_object_distinguished_name(computer_name, location, domain)
        samaccount_name = _to_samaccount_name(computer_name)
        hostnames = construct_default_hostnames_for_computer(computer_name, host_fqdn)
        computer_attributes = {
            ldap_constants.AD_ATTRIBUTE_SAMACCOUNT_NAME: samaccount_name,
            ldap_constants.AD_ATTRIBUTE_USER_ACCOUNT_CONTROL: ldap_constants.COMPUTER_ACCESS_CONTROL_VAL,
            ldap_constants.AD_ATTRIBUTE_DNS_HOST_NAME: hostnames[-1],
            ldap_constants.AD_ATTRIBUTE_SERVICE_PRINCIPAL_NAMES: construct_service_principal_names(self.services,
                                                                                                  hostnames),
            ldap_constants.AD_ATTRIBUTE_ENCRYPTION_TYPES: get_supported_encryption_types_value(
                self.encryption_types),
        }
        logger.info('Attempting to create computer %s in domain %s at %s with the following LDAP attributes: %s',
                    samaccount_name, domain, computer_dn, computer_attributes)
        # the logged dict must never get the password
        add_attributes = dict(computer_attributes)
        add_attributes[ldap_constants.AD_ATTRIBUTE_PASSWORD] = encode_password(password)

        conn = session.get_ldap_connection()
        try:
            res = conn.add(computer_dn, ldap_constants.OBJECT_CLASSES_FOR_COMPUTER, add_attributes)
        except LDAPException as ex:
            raise ObjectCreationException('An exception was encountered creating computer {} with distinguished '
                                          'name {}: {}'.format(samaccount_name, computer_dn, ex))
        success, result, _, _ = process_ldap3_conn_return_value(conn, res)
        if not success:
            # don't include attributes in the exception because the password is there and it could get logged.
            raise ObjectCreationException('Failed to create computer {} with distinguished name {}. LDAP result: {}'
                                          .format(samaccount_name, computer_dn, result))
        logger.info('Joined computer %s to domain %s', samaccount_name, domain)

    def set_password(self, session: DirectorySession, computer_name: str, ou: str, password: str):
        """ Reset the password of an existing computer account.
        :raises: ObjectNotFoundException if the account doesn't exist.
        :raises: PasswordResetException if the directory rejects the new password.
        """
        computer_dn = self._find_existing_computer_dn(session, computer_name, ou)
        self._write_password(session, computer_dn, password)
        logger.info('Reset password for computer %s in domain %s', computer_name, session.get_domain_dns_name())

    def delete(self, session: DirectorySession, computer_name: str, ou: str = None):
        """ Delete a computer account, along with anything stored beneath it.
        :raises: ObjectNotFoundException if the account doesn't exist.
        :raises: ObjectDeletionException if the directory refuses the deletion.
        """
        computer_dn = self._find_existing_computer_dn(session, computer_name, ou)
        logger.info('Deleting computer %s at %s', computer_name, computer_dn)
        conn = session.get_ldap_connection()
        tree_delete = (ldap_constants.TREE_DELETE_CONTROL_OID, True, None)
        try:
            res = conn.delete(computer_dn, controls=[tree_delete])
        except LDAPException as ex:
            raise ObjectDeletionException('An exception was encountered deleting computer {}: {}'
                                          .format(computer_dn, ex))
        success, result, _, _ = process_ldap3_conn_return_value(conn, res)
        if not success:
            raise ObjectDeletionException('Failed to delete computer {}. LDAP result: {}'.format(computer_dn, result))

    def _find_existing_computer_dn(self, session: DirectorySession, computer_name: str, ou: str) -> str:
        computer_dn = self.find_computer_dn(session, computer_name, ou)
        if computer_dn is None:
            raise ObjectNotFoundException('No computer could be found with name {} in domain {}'
                                          .format(computer_name, session.get_domain_dns_name()))
        return computer_dn

    def _write_password(self, session: DirectorySession, computer_dn: str, password: str):
        conn = session.get_ldap_connection()
        changes = {ldap_constants.AD_ATTRIBUTE_PASSWORD: [(MODIFY_REPLACE, [encode_password(password)])]}
        try:
            res = conn.modify(computer_dn, changes)
        except LDAPException as ex:
            # don't include the changes in the exception, they contain the password
            raise PasswordResetException('An exception was encountered setting the password of {}: {}'
                                         .format(computer_dn, ex))
        success, result, _, _ = process_ldap3_conn_return_value(conn, res)
        if not success:
            raise PasswordResetException('Failed to set the password of {}. LDAP result: {}'
                                         .format(computer_dn, result))


def _to_samaccount_name(computer_name: str) -> str:
    # add a $ at the end of the sAMAccountName if it's not there, as is convention for computers
    return computer_name if computer_name.endswith('$') else computer_name + '$'
