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

import os
import yaml

from typing import Optional

from realm_ad import logging_utils
from realm_ad.environment.ldap.ldap_constants import AD_USERNAME_RESTRICTED_CHARS
from realm_ad.exceptions import InvalidConfigurationException


logger = logging_utils.get_logger(__name__)

REQUIRED_SETTINGS = ('realm', 'keytab_path', 'principal')
BOOLEAN_SETTINGS = ('computername_hash', 'computername_use_fqdn', 'encrypt_connections')
KNOWN_SETTINGS = REQUIRED_SETTINGS + BOOLEAN_SETTINGS + ('domain_controller', 'ou', 'computername_prefix',
                                                         'ca_certificates_file_path', 'ccache_name')


class RealmConfig:
    """ The settings for the realm a provider manages. Constructed once at startup and read-only afterwards. """

    def __init__(self, realm: str, keytab_path: str, principal: str, domain_controller: str = None,
                 ou: str = None, computername_prefix: str = '', computername_hash: bool = False,
                 computername_use_fqdn: bool = False, encrypt_connections: bool = True,
                 ca_certificates_file_path: str = None, ccache_name: str = None):
        """
        :param realm: The kerberos realm of the AD domain, e.g. EXAMPLE.COM. The domain is always the lowercase
                      form of this.
        :param keytab_path: The keytab holding keys for `principal`.
        :param principal: The principal with rights to create, reset and delete computer accounts.
        :param domain_controller: Optional. The domain controller to use. If not specified, one is discovered
                                  in DNS for every request.
        :param ou: Optional. The organizational unit computer accounts are created in, as an LDAP distinguished
                   name or a windows path. If not specified, CN=Computers is used.
        :param computername_prefix: A prefix for every computer name. Defaults to no prefix. It may not contain
                                    characters AD forbids in computer names.
        :param computername_hash: Whether computer names are derived from a SHA-256 hash of the hostname.
        :param computername_use_fqdn: Whether computer names are derived from the whole FQDN rather than only
                                      the short hostname.
        :param encrypt_connections: Whether to StartTLS on LDAP connections. Defaults to True.
        :param ca_certificates_file_path: Optional. CA certificates used to verify domain controllers.
        :param ccache_name: Optional. The credential cache to acquire kerberos credentials into.
        """
        if not realm:
            raise InvalidConfigurationException('A realm must be specified')
        bad_prefix_chars = sorted(set(computername_prefix or '') & AD_USERNAME_RESTRICTED_CHARS)
        if bad_prefix_chars:
            raise InvalidConfigurationException('Computer name prefix {!r} contains characters that AD computer names '
                                                'may not contain: {}'
                                                .format(computername_prefix, ', '.join(bad_prefix_chars)))
        self._realm = realm
        self._domain = realm.lower()
        self._keytab_path = keytab_path
        self._principal = principal
        self._domain_controller = domain_controller
        self._ou = ou
        self._computername_prefix = computername_prefix or ''
        self._computername_hash = bool(computername_hash)
        self._computername_use_fqdn = bool(computername_use_fqdn)
        self._encrypt_connections = bool(encrypt_connections)
        self._ca_certificates_file_path = ca_certificates_file_path
        self._ccache_name = ccache_name

    @property
    def realm(self) -> str:
        return self._realm

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def keytab_path(self) -> str:
        return self._keytab_path

    @property
    def principal(self) -> str:
        return self._principal

    @property
    def domain_controller(self) -> Optional[str]:
        return self._domain_controller

    @property
    def ou(self) -> Optional[str]:
        return self._ou

    @property
    def computername_prefix(self) -> str:
        return self._computername_prefix

    @property
    def computername_hash(self) -> bool:
        return self._computername_hash

    @property
    def computername_use_fqdn(self) -> bool:
        return self._computername_use_fqdn

    @property
    def encrypt_connections(self) -> bool:
        return self._encrypt_connections

    @property
    def ca_certificates_file_path(self) -> Optional[str]:
        return self._ca_certificates_file_path

    @property
    def ccache_name(self) -> Optional[str]:
        return self._ccache_name

    def matches_realm(self, realm: str) -> bool:
        """ Realm names are compared case-insensitively """
        return realm is not None and realm.lower() == self._domain

    def __repr__(self):
        return ('RealmConfig(realm={}, principal={}, domain_controller={}, ou={}, computername_prefix={!r}, '
                'computername_hash={}, computername_use_fqdn={})'
                .format(self._realm, self._principal, self._domain_controller, self._ou, self._computername_prefix,
                        self._computername_hash, self._computername_use_fqdn))


def realm_config_from_settings(settings: dict) -> RealmConfig:
    """ Build a RealmConfig from a mapping of setting names to values, such as a parsed settings file.
    Unknown settings are ignored with a warning so that settings files can be shared with other tools.
    :raises: InvalidConfigurationException if a required setting is missing or a flag isn't a boolean.
    """
    if not isinstance(settings, dict):
        raise InvalidConfigurationException('Realm settings must be a mapping of setting names to values')
    missing = [name for name in REQUIRED_SETTINGS if not settings.get(name)]
    if missing:
        raise InvalidConfigurationException('Missing required realm settings: {}'.format(', '.join(missing)))
    for name in BOOLEAN_SETTINGS:
        if name in settings and not isinstance(settings[name], bool):
            raise InvalidConfigurationException('Realm setting {} must be true or false, not {!r}'
                                                .format(name, settings[name]))
    unknown = sorted(set(settings) - set(KNOWN_SETTINGS))
    if unknown:
        logger.warning('Ignoring unknown realm settings: %s', ', '.join(unknown))
    kwargs = {name: settings[name] for name in KNOWN_SETTINGS if settings.get(name) is not None}
    return RealmConfig(**kwargs)


def load_realm_config(path: str) -> RealmConfig:
    """ Load realm settings from a YAML file, for example:

        realm: EXAMPLE.COM
        keytab_path: /etc/realm_ad/realm_ad.keytab
        principal: realm-proxy@EXAMPLE.COM
        domain_controller: dc1.example.com
        ou: OU=Linux,OU=Servers
        computername_prefix: LNX
        computername_hash: false
        computername_use_fqdn: false

    :raises: InvalidConfigurationException if the file can't be read or parsed, a setting is invalid, or the
             keytab isn't readable.
    """
    try:
        with open(path) as settings_fp:
            settings = yaml.safe_load(settings_fp)
    except (OSError, yaml.YAMLError) as ex:
        raise InvalidConfigurationException('Unable to read realm settings from {}: {}'.format(path, ex))
    config = realm_config_from_settings(settings)
    if not os.access(config.keytab_path, os.R_OK):
        raise InvalidConfigurationException('Keytab {} does not exist or is not readable'.format(config.keytab_path))
    logger.info('Loaded realm settings from %s: %s', path, config)
    return config
