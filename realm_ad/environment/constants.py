""" Constants describing the provisioning policy that aren't specific to any protocol """
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

import enum

# netbios names, and so computer names usable by legacy clients and NTLM, are capped at 15 characters
# see https://support.microsoft.com/en-us/kb/909264
LEGACY_COMPUTER_NAME_LENGTH_LIMIT = 15

# generated computer passwords are 20 alphanumeric characters
DEFAULT_COMPUTER_PASSWORD_LENGTH = 20

# when a join fails we assume the account exists from an earlier partial join and keep resetting
# its password. the delay doubles after each failure: 1, 2, 4, ... 64 seconds
MAX_PASSWORD_RESET_ATTEMPTS = 7
INITIAL_RETRY_DELAY_SECONDS = 1
RETRY_DELAY_MULTIPLIER = 2

# the value of the rebuild parameter that means only the password should be reset
REBUILD_PARAMETER = 'rebuild'
REBUILD_TRUE_VALUE = 'true'


class JoinOutcome(enum.Enum):
    """ This enum describes which path through account creation produced a result """
    JOINED = 'joined'
    PASSWORD_RESET = 'password_reset'
    RECOVERED_AFTER_RETRY = 'recovered_after_retry'
    REJOINED_AFTER_DELETE = 'rejoined_after_delete'
    FAILED_FINAL_ATTEMPT = 'failed_final_attempt'

    def is_success(self) -> bool:
        return self is not JoinOutcome.FAILED_FINAL_ATTEMPT


class RetryOutcome(enum.Enum):
    """ The result of a single password reset attempt within the recovery loop """
    OK = 'ok'
    RETRYABLE = 'retryable'
    EXHAUSTED = 'exhausted'
