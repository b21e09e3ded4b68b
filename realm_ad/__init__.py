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

from realm_ad.core.account_enroller import (
    AccountEnroller,
)

from realm_ad.core.directory_session import (
    DirectorySession,
    connect,
)

from realm_ad.core.realm_config import (
    RealmConfig,
    load_realm_config,
    realm_config_from_settings,
)

from realm_ad.core.realm_provider import (
    JoinResult,
    RealmProvider,
)

from realm_ad.environment.constants import (
    JoinOutcome,
    RetryOutcome,
)

from realm_ad.environment.format_utils import hostfqdn_to_computer_name
from realm_ad.environment.kerberos.kerberos_credential_utils import init_credential_cache
from realm_ad.environment.security.security_config_utils import generate_random_ad_password

from realm_ad.exceptions import *
from realm_ad.logging_utils import configure_log_level, get_logger
