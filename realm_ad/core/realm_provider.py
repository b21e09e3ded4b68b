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

import json
import time

from typing import Callable, Optional, Tuple

from realm_ad import logging_utils
from realm_ad.core.account_enroller import AccountEnroller
from realm_ad.core.directory_session import DirectorySession, connect
from realm_ad.core.realm_config import RealmConfig
from realm_ad.environment.constants import (
    INITIAL_RETRY_DELAY_SECONDS,
    JoinOutcome,
    MAX_PASSWORD_RESET_ATTEMPTS,
    REBUILD_PARAMETER,
    REBUILD_TRUE_VALUE,
    RETRY_DELAY_MULTIPLIER,
    RetryOutcome,
)
from realm_ad.environment.format_utils import hostfqdn_to_computer_name
from realm_ad.environment.kerberos.kerberos_credential_utils import init_credential_cache
from realm_ad.environment.ldap.ldap_format_utils import validate_computer_name
from realm_ad.environment.security.security_config_utils import generate_random_ad_password
from realm_ad.exceptions import (
    DirectoryOperationException,
    InvalidConfigurationException,
    RealmMismatchException,
)


logger = logging_utils.get_logger(__name__)


class JoinResult:
    """ The result of provisioning a computer account. `random_password` is the credential that was set; the
    outcome records which path produced it. Only the password is part of the serialized result.
    """

    def __init__(self, random_password: str, outcome: JoinOutcome, password_reset_attempts: int = 0):
        self.random_password = random_password
        self.outcome = outcome
        self.password_reset_attempts = password_reset_attempts

    def is_success(self) -> bool:
        return self.outcome.is_success()

    def to_dict(self) -> dict:
        return {'randompassword': self.random_password}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def __repr__(self):
        # never show the password
        return 'JoinResult(outcome={}, password_reset_attempts={})'.format(self.outcome.name,
                                                                          self.password_reset_attempts)


class RealmProvider:

    def __init__(self, config: RealmConfig, enroller: AccountEnroller = None,
                 credential_initializer: Callable = init_credential_cache,
                 session_factory: Callable[..., DirectorySession] = connect,
                 sleep: Callable[[float], None] = time.sleep):
        """ Create a provider that manages computer accounts for hosts in one realm.

        :param config: The realm settings.
        :param enroller: Optional. The AccountEnroller used for directory operations. If not specified, one with
                         default services and encryption types is used.
        :param credential_initializer: Optional. Called with (keytab_path, principal, ccache_name) at the start of
                                       every create and delete to acquire kerberos credentials.
        :param session_factory: Optional. Called with the domain, realm, domain controller, credentials and TLS
                                settings to open a DirectorySession.
        :param sleep: Optional. Used to wait between password reset attempts. Defaults to time.sleep.
        """
        self.config = config
        self.enroller = enroller if enroller is not None else AccountEnroller()
        self._credential_initializer = credential_initializer
        self._session_factory = session_factory
        self._sleep = sleep
        logger.info('Initialized realm provider for %s', config.realm)

    def check_realm(self, realm: str):
        """ Raise a RealmMismatchException unless `realm` is the configured realm, ignoring case """
        if not self.config.matches_realm(realm):
            raise RealmMismatchException('Unknown realm {}'.format(realm))

    def find(self, host_fqdn: str) -> bool:
        """ Hosts are always reported as present. Whether an account really exists is settled by create. """
        return True

    def computer_name_for_host(self, host_fqdn: str) -> str:
        """ Derive the computer name for a host using the configured naming policy """
        return hostfqdn_to_computer_name(host_fqdn, prefix=self.config.computername_prefix,
                                         hash_enabled=self.config.computername_hash,
                                         use_fqdn=self.config.computername_use_fqdn)

    def create(self, realm: str, host_fqdn: str, params: dict = None) -> JoinResult:
        """ Provision a computer account for a host with a freshly generated password.

        Normally the account is joined. If the join fails, the account is assumed to exist already from an
        earlier, partially completed join and its password is reset instead, backing off exponentially between
        attempts. If that keeps failing, the account is deleted and joined one last time.
        If `params` has `rebuild` set to 'true', the join is skipped and only the password is reset.

        :param realm: The realm of the host. Must match the configured realm, ignoring case.
        :param host_fqdn: The fully qualified domain name of the host.
        :param params: Optional. Request parameters; only `rebuild` is used.
        :returns: A JoinResult with the password. A result is returned even if the final join attempt failed;
                  check `outcome` to tell the cases apart.
        :raises: RealmMismatchException before any directory calls if the realm doesn't match.
        :raises: DirectoryOperationException if credentials can't be acquired, the domain can't be reached, or a
                 rebuild's password reset fails.
        """
        params = params or {}
        logger.debug('Request to create computer account in realm %s for host %s with params %s',
                     realm, host_fqdn, params)
        self.check_realm(realm)
        with self._kinit_and_connect() as session:
            password = generate_random_ad_password()
            computer_name = self.computer_name_for_host(host_fqdn)
            try:
                validate_computer_name(computer_name)
            except InvalidConfigurationException as ex:
                # a rejected join is recovered like any other
                logger.warning('Computer name %r derived for host %s may not be accepted by the directory: %s',
                               computer_name, host_fqdn, ex)

            if _is_rebuild(params):
                logger.info('Rebuild requested for %s, resetting the password of computer %s', host_fqdn,
                            computer_name)
                self.enroller.set_password(session, computer_name, self.config.ou, password)
                return JoinResult(password, JoinOutcome.PASSWORD_RESET)

            try:
                self.enroller.join(session, computer_name, host_fqdn, self.config.ou, password)
                return JoinResult(password, JoinOutcome.JOINED)
            except DirectoryOperationException as ex:
                logger.warning('Failed to join computer %s for host %s in realm %s: %s', computer_name, host_fqdn,
                               realm, ex)
            logger.info('Resetting the password of computer %s for host %s up to %s times', computer_name,
                        host_fqdn, MAX_PASSWORD_RESET_ATTEMPTS)

            outcome, attempts = self._reset_password_with_backoff(session, computer_name, password)
            if outcome is RetryOutcome.OK:
                return JoinResult(password, JoinOutcome.RECOVERED_AFTER_RETRY, attempts)

            logger.warning('Max attempts to reset the password of computer %s reached. Deleting it and trying one '
                           'last join', computer_name)
            final_outcome = self._delete_and_rejoin(session, computer_name, host_fqdn, password)
            return JoinResult(password, final_outcome, attempts)

    def delete(self, realm: str, host_fqdn: str):
        """ Delete the computer account for a host. Directory failures propagate unmodified and are never
        retried.
        :raises: RealmMismatchException if the realm doesn't match.
        :raises: DirectoryOperationException if the account can't be found or deleted.
        """
        logger.debug('Request to delete computer account in realm %s for host %s', realm, host_fqdn)
        with self._kinit_and_connect() as session:
            self.check_realm(realm)
            computer_name = self.computer_name_for_host(host_fqdn)
            self.enroller.delete(session, computer_name, self.config.ou)

    def try_delete(self, session: DirectorySession, computer_name: str) -> bool:
        """ Delete a computer account on a best-effort basis, so that a failure to clean up never blocks the
        join that follows.
        :returns: True if the account was deleted. The result may be ignored.
        """
        try:
            self.enroller.delete(session, computer_name, self.config.ou)
            return True
        except DirectoryOperationException as ex:
            logger.info('Ignoring failure to delete computer %s before rejoining it: %s', computer_name, ex)
            return False

    def _kinit_and_connect(self) -> DirectorySession:
        credentials = self._credential_initializer(self.config.keytab_path, self.config.principal,
                                                   self.config.ccache_name)
        return self._session_factory(self.config.domain, self.config.realm,
                                     domain_controller=self.config.domain_controller, credentials=credentials,
                                     encrypt_connections=self.config.encrypt_connections,
                                     ca_certificates_file_path=self.config.ca_certificates_file_path)

    def _attempt_password_reset(self, session: DirectorySession, computer_name: str, password: str,
                                attempt: int) -> Tuple[RetryOutcome, Optional[DirectoryOperationException]]:
        try:
            self.enroller.set_password(session, computer_name, self.config.ou, password)
            return RetryOutcome.OK, None
        except DirectoryOperationException as ex:
            if attempt <= MAX_PASSWORD_RESET_ATTEMPTS:
                return RetryOutcome.RETRYABLE, ex
            return RetryOutcome.EXHAUSTED, ex

    def _reset_password_with_backoff(self, session: DirectorySession, computer_name: str,
                                     password: str) -> Tuple[RetryOutcome, int]:
        """ Reset the password until it works or the attempts run out. The first attempt is made right away and
        every failure within the limit is followed by a sleep that doubles each time, so the final attempt comes
        MAX_PASSWORD_RESET_ATTEMPTS sleeps after the first.
        :returns: The outcome of the last attempt, which is OK or EXHAUSTED, and the number of attempts made.
        """
        attempt = 0
        delay = INITIAL_RETRY_DELAY_SECONDS
        while True:
            attempt += 1
            outcome, error = self._attempt_password_reset(session, computer_name, password, attempt)
            if outcome is not RetryOutcome.RETRYABLE:
                if outcome is RetryOutcome.OK:
                    logger.info('Reset the password of computer %s on attempt %s', computer_name, attempt)
                return outcome, attempt
            logger.warning('Attempt %s/%s to reset the password of computer %s failed with error: %s. Retrying in '
                           '%s seconds.', attempt, MAX_PASSWORD_RESET_ATTEMPTS, computer_name, error, delay)
            self._sleep(delay)
            delay *= RETRY_DELAY_MULTIPLIER

    def _delete_and_rejoin(self, session: DirectorySession, computer_name: str, host_fqdn: str,
                           password: str) -> JoinOutcome:
        self.try_delete(session, computer_name)
        try:
            self.enroller.join(session, computer_name, host_fqdn, self.config.ou, password)
        except DirectoryOperationException as ex:
            # the caller still gets a password back, as it always has. the outcome records the failure
            logger.error('Final attempt to join computer %s for host %s failed: %s', computer_name, host_fqdn, ex)
            return JoinOutcome.FAILED_FINAL_ATTEMPT
        logger.info('Final attempt to join computer %s for host %s succeeded', computer_name, host_fqdn)
        return JoinOutcome.REJOINED_AFTER_DELETE


def _is_rebuild(params: dict) -> bool:
    rebuild = params.get(REBUILD_PARAMETER)
    if isinstance(rebuild, bool):
        return rebuild
    return isinstance(rebuild, str) and rebuild.lower() == REBUILD_TRUE_VALUE
