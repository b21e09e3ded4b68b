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

""" Initialization of the kerberos credentials used to bind to the directory. A keytab holding the
long-term keys of a privileged principal is used to obtain initiator credentials non-interactively.
"""
import os

from realm_ad import logging_utils
from realm_ad.environment.kerberos.kerberos_constants import (
    CRED_STORE_CCACHE_KEY,
    CRED_STORE_CLIENT_KEYTAB_KEY,
)
from realm_ad.exceptions import KerberosCredentialException

# gssapi needs the system kerberos libraries to build, so it's an optional dependency
# and we only complain about it when credentials are actually needed
try:
    import gssapi
    _gssapi_available = True
except ImportError:
    gssapi = None
    _gssapi_available = False


logger = logging_utils.get_logger(__name__)


def is_gssapi_available() -> bool:
    return _gssapi_available


def init_credential_cache(keytab_path: str, principal: str, ccache_name: str = None):
    """ Acquire initiator credentials for a principal from a keytab and store them in a credential cache.
    This is the equivalent of running `kinit -k -t <keytab_path> <principal>`.

    :param keytab_path: The path to the keytab containing keys for the principal.
    :param principal: The principal to acquire credentials as, e.g. `realm-proxy@EXAMPLE.COM`.
    :param ccache_name: Optional. The credential cache to store the credentials in, such as
                        `FILE:/run/realm_ad/krb5cc` or `MEMORY:realm_ad`. If not specified, the default
                        cache for the process is used.
    :returns: A gssapi Credentials object that can be used directly for GSSAPI binds.
    :raises: KerberosCredentialException if gssapi is unavailable, the keytab can't be read, or
             credentials can't be acquired for the principal.
    """
    if not _gssapi_available:
        raise KerberosCredentialException('The gssapi package is required to acquire kerberos credentials from '
                                          'a keytab. Install realm_ad with the "kerberos" extra.')
    if not os.access(keytab_path, os.R_OK):
        raise KerberosCredentialException('Keytab {} does not exist or is not readable'.format(keytab_path))

    store = {CRED_STORE_CLIENT_KEYTAB_KEY: keytab_path}
    if ccache_name:
        store[CRED_STORE_CCACHE_KEY] = ccache_name
    logger.debug('Acquiring kerberos credentials for %s from keytab %s into ccache %s',
                 principal, keytab_path, ccache_name or 'default')
    try:
        name = gssapi.Name(principal, gssapi.NameType.kerberos_principal)
        creds = gssapi.Credentials(name=name, usage='initiate', store=store)
        # acquisition from a client keytab is lazy, so ask for the lifetime to force the AS exchange
        # now rather than on the first bind
        lifetime = creds.lifetime
    except gssapi.exceptions.GSSError as ex:
        raise KerberosCredentialException('Failed to acquire kerberos credentials for {} using keytab {}: {}'
                                          .format(principal, keytab_path, ex))
    logger.info('Acquired kerberos credentials for %s valid for %s seconds', principal, lifetime)
    return creds
