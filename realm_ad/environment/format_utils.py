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

import hashlib
import ipaddress

from realm_ad import logging_utils
from realm_ad.environment.constants import LEGACY_COMPUTER_NAME_LENGTH_LIMIT


logger = logging_utils.get_logger(__name__)


def hostfqdn_to_computer_name(host_fqdn: str, prefix: str = '', hash_enabled: bool = False,
                              use_fqdn: bool = False) -> str:
    """ Derive the computer account name for a host.
    :param host_fqdn: The fully qualified domain name of the host being provisioned.
    :param prefix: A prefix to place at the start of every computer name, such as a site or tenant code.
                   Defaults to no prefix.
    :param hash_enabled: If true, the name is replaced by the hex SHA-256 digest of the hostname before
                         the prefix is applied. This gives opaque names that rarely collide once truncated.
    :param use_fqdn: If true, the whole FQDN is used as the starting point instead of only the short
                     hostname.
    :returns: An uppercase name of at most 15 characters.
    """
    computer_name = host_fqdn
    # strip the domain from the host
    if not use_fqdn:
        computer_name = computer_name.split('.')[0]

    if hash_enabled:
        computer_name = hashlib.sha256(computer_name.encode('utf-8')).hexdigest()

    # apply the prefix if it has not already been applied
    if should_apply_computer_name_prefix(computer_name, prefix, hash_enabled):
        computer_name = prefix + computer_name

    # anything longer than this can't be used by netbios or ntlm clients.
    # a long prefix can push the hostname out entirely, which is accepted
    final_name = computer_name[:LEGACY_COMPUTER_NAME_LENGTH_LIMIT].upper()
    logger.debug('Derived computer name %s for host %s (prefix=%r hash=%s use_fqdn=%s)',
                 final_name, host_fqdn, prefix, hash_enabled, use_fqdn)
    return final_name


def should_apply_computer_name_prefix(computer_name: str, prefix: str, hash_enabled: bool) -> bool:
    """ Decide whether `prefix` needs to be placed in front of `computer_name`.
    A hash can't meaningfully already carry the prefix, so it's always applied when hashing. Otherwise it
    is only applied if the name doesn't already start with it, compared case-insensitively, so that names
    which were already prefixed by the host's own naming scheme don't get it twice.
    """
    if not computer_name or not prefix:
        return False
    already_prefixed = computer_name[:len(prefix)].lower() == prefix.lower()
    return bool(hash_enabled) or not already_prefixed


def format_hostname_or_ip_and_port_to_uri(host_or_ip: str, port, is_ipv6_fmt: bool = None) -> str:
    """ Combine what is either an ipv4 address, ipv6 address, or hostname and (optionally) a port
    into the proper format.
    """
    if port is None or port == '':
        return host_or_ip

    if is_ipv6_fmt is None:
        try:
            ipaddress.IPv6Address(host_or_ip)
            is_ipv6_fmt = True
        except ValueError:
            pass

    if is_ipv6_fmt:
        return '[{}]:{}'.format(host_or_ip, port)
    return '{}:{}'.format(host_or_ip, port)
