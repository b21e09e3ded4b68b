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

""" Utilities for the security-related aspects of a computer account, such as its password and
encryption types.
"""
import secrets

from typing import List

from realm_ad import logging_utils
from realm_ad.environment.constants import DEFAULT_COMPUTER_PASSWORD_LENGTH
from realm_ad.environment.security.security_config_constants import (
    AD_PASSWORD_CHAR_RANGE,
    ADEncryptionType,
    UNSUPPORTED_ENC_TYPES,
)


logger = logging_utils.get_logger(__name__)


def encode_password(password: str) -> bytes:
    """ Encodes a password to be set for an AD account via the LDAP protocol.
    Surrounds password in quotes and encodes with 'utf-16-le' as is required when writing the
    unicodePwd attribute of the computer account.
    """
    quoted_pw = '"' + password + '"'
    return quoted_pw.encode('utf-16-le')


def generate_random_ad_password(password_length: int = DEFAULT_COMPUTER_PASSWORD_LENGTH) -> str:
    """ Generates a random computer password by drawing characters uniformly from the letters and
    digits until we reach the specified length. A cryptographically secure source is used since the
    password is the only secret protecting the account.
    :param password_length: The length of the password to generate. Defaults to 20 characters if not
                            specified.
    """
    if password_length <= 0:
        raise ValueError('Password length must be positive, not {}'.format(password_length))
    return ''.join(secrets.choice(AD_PASSWORD_CHAR_RANGE) for _ in range(password_length))


def get_supported_encryption_types_value(encryption_types: List[ADEncryptionType]) -> int:
    """ Calculates the number that represents the list of encryption types by adding their values
    in the bit map.
    """
    ret = 0
    for encryption_type in set(encryption_types):
        if encryption_type in UNSUPPORTED_ENC_TYPES:
            raise NotImplementedError('Support for encryption type {} has not been implemented'
                                      .format(encryption_type))
        ret += encryption_type.value
    logger.debug('Encoded encryption types %s as %s', encryption_types, ret)
    return ret
