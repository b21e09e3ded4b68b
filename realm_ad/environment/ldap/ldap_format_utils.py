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

from ldap3 import Connection
from ldap3.core.exceptions import LDAPInvalidDnError
from ldap3.utils.dn import parse_dn
from typing import List, Union

from realm_ad import logging_utils
from realm_ad.environment.constants import LEGACY_COMPUTER_NAME_LENGTH_LIMIT
from realm_ad.environment.ldap.ldap_constants import (
    AD_USERNAME_RESTRICTED_CHARS,
    DEFAULT_COMPUTER_LOCATION,
)
from realm_ad.exceptions import InvalidConfigurationException


logger = logging_utils.get_logger(__name__)


def is_dn(anything: str) -> bool:
    """ Determine if a specified string is a distinguished name. """
    try:
        # hostnames and canonical paths parse as DNs only if they contain attr=value pairs, so
        # "example.com/Servers" is rejected while "OU=Servers" is accepted
        parse_dn(anything, escape=True)
        return True
    except LDAPInvalidDnError:
        return False


def construct_ldap_base_dn_from_domain(domain: str) -> str:
    """
    Given a domain, constructs the base dn.
    """
    domain_split = domain.split('.')
    return ','.join(map(lambda x: 'DC=' + x, domain_split))


def construct_object_distinguished_name(object_name: str, object_location: str, domain: str) -> str:
    """
    Constructs the distinguished name of a computer given the name, join location, and domain.
    """
    computer_part = 'CN=' + object_name
    domain_part = construct_ldap_base_dn_from_domain(domain)
    return ','.join([computer_part, object_location, domain_part])


def construct_default_hostnames_for_computer(computer_name: str, host_fqdn: str) -> List[str]:
    """ Construct the hostnames registered for a computer. The short hostname is the computer name
    capitalized, and the fqdn is the lowercase of the host's own fqdn, which may differ from the
    computer name when the name was prefixed or hashed.
    """
    hostnames = [computer_name.upper()]
    if host_fqdn and host_fqdn.lower() != computer_name.lower():
        hostnames.append(host_fqdn.lower())
    return hostnames


def construct_service_principal_names(services: List[str], hostnames: List[str]) -> List[str]:
    """ Given a list of services and hostnames, construct the kerberos service principal names for them. """
    spns = []
    for serv in services:
        for hostname in hostnames:
            spns.append(serv + '/' + hostname)
    return spns


def escape_generic_filter_value(anything: str) -> str:
    """ Escape anything, so that it can be used in ldap queries without confusing the server.
    Over-escaping is safe, so every character that any of rfc2254, AD or OpenLDAP treat as special is
    escaped.
    """
    if anything.isalnum():
        return anything

    def escape_char(char):
        """ Escape a single character."""
        if char in "*()\\/\0 \t\r\n+<>,\";":
            return "\\%02x" % ord(char)
        return char
    return "".join(escape_char(x) for x in anything)


def convert_canonical_name_to_relative_dn(location: str, domain_dns_name: str) -> str:
    """ Convert a windows path style location such as `example.com/Servers/Linux` or `Servers/Linux`
    into the relative distinguished name `OU=Linux,OU=Servers`.
    """
    domain_lower = domain_dns_name.lower()
    if location.lower().startswith(domain_lower):
        location = location[len(domain_lower):]
    pieces = [piece for piece in location.split('/') if piece]
    if not pieces:
        raise InvalidConfigurationException('Location {} does not name a container within domain {}'
                                            .format(location, domain_dns_name))
    return ','.join('OU=' + piece for piece in reversed(pieces))


def normalize_object_location_in_domain(location: str, domain_dns_name: str) -> str:
    """ There's two main formats we might see used for an organizational unit - LDAP style and Windows
    Path style. For each style, they can be relative or fully qualified.

    LDAP Style looks like this:
    OU=Location
    or fully qualified:
    OU=Location,DC=example,DC=com

    Windows Path Style looks like this:
    Location/
    or fully canonical:
    example.com/Location

    Everything is normalized to the LDAP relative distinguished name format. If no location is given,
    the default computers container is used.
    """
    if not location:
        return DEFAULT_COMPUTER_LOCATION
    if not is_dn(location):
        return convert_canonical_name_to_relative_dn(location, domain_dns_name)
    return strip_domain_from_object_location(location, domain_dns_name)


def strip_domain_from_object_location(location: str, domain_dns_name: str) -> str:
    """ Our object Location in a domain should be a relative distinguished name (RDN), but if someone specifies the full
    path, let's be forgiving.
    So if a user specifies "OU=Location,DC=example,DC=com" this function will strip off "DC=example,DC=com"
    and leave the relative distinguished name "OU=Location" which is what we'll actually use.
    """
    # compare in uppercase in order to avoid worrying about how a user chose to type their DN.
    # place a comma in front of the domain RDN so that any stripping we do will strip the trailing comma
    domain_rdn_upper = ',' + construct_ldap_base_dn_from_domain(domain_dns_name).upper()
    if location.upper().endswith(domain_rdn_upper):
        location = location[:-len(domain_rdn_upper)]
    return location


def process_ldap3_conn_return_value(ldap_connection: Connection, return_value: Union[tuple, bool]) -> tuple:
    """ Thread-safe ldap3 connections return a tuple containing a boolean about success,
    the result, the response, and the request. Non-thread-safe ldap3 connections just
    return a boolean when performing search/add/etc. and leave the rest on the connection.

    This function processes the return value so that callers don't need to worry about the
    return format.
    """
    if ldap_connection.strategy.thread_safe:
        success, result, response, req = return_value
    else:
        success = return_value
        result = ldap_connection.result
        response = ldap_connection.response
        req = ldap_connection.request
    return success, result, response, req


def remove_ad_search_refs(response: List[dict]) -> List[dict]:
    """ Many LDAP queries in Active Directory will include a number of generic search references
    to say 'maybe go look here for completeness', especially in forests with several domains.
    sAMAccountName is unique within a domain, so we never care about them here.

    :param response: A list of LDAP search responses.
    :returns: A filtered list, with search references removed.
    """
    if not response:
        return []
    return [entry for entry in response if entry.get('dn')]


def validate_computer_name(name: str) -> str:
    """ Computer common names are sAMAccountNames without the $ at the end. So check for allowable
    characters and the length limit.
    """
    if name.endswith('$'):
        name = name[:-1]
    if not name:
        raise InvalidConfigurationException('A computer name may not be empty')
    if len(name) > LEGACY_COMPUTER_NAME_LENGTH_LIMIT:
        raise InvalidConfigurationException('Computer name {} is longer than {} characters'
                                            .format(name, LEGACY_COMPUTER_NAME_LENGTH_LIMIT))
    for character in AD_USERNAME_RESTRICTED_CHARS:
        if character in name:
            raise InvalidConfigurationException('AD computer names may not contain any of the following '
                                                'characters: {}'
                                                .format(', '.join(sorted(AD_USERNAME_RESTRICTED_CHARS))))
    return name
