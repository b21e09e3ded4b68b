""" Exceptions used within the library """
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


class RealmAdException(Exception):
    """ A parent class for all other exceptions so that callers can have a catch-all exception for
    provisioning issues that still doesn't blind them to things like accidentally providing a string
    where a boolean is needed.
    """
    def __init__(self, exception_str):
        self.message = exception_str
        super().__init__(self.message)


class InvalidConfigurationException(RealmAdException):
    """ An exception raised when realm settings are missing, malformed, or reference files that
    cannot be read.
    """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class RealmMismatchException(RealmAdException):
    """ An exception raised when a request names a realm other than the one this provider is
    configured to manage. It is never retried.
    """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class DirectoryOperationException(RealmAdException):
    """ A parent class for every failure encountered talking to the directory or the KDC. Account
    creation treats all of these uniformly as recoverable; everywhere else they propagate.
    """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class DomainConnectException(DirectoryOperationException):
    """ An exception raised when an error is encountered connecting or binding to a domain controller """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class DomainSearchException(DirectoryOperationException):
    """ An exception raised when an error is encountered searching the domain """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class KerberosCredentialException(DirectoryOperationException):
    """ An exception raised when initiator credentials cannot be acquired from the configured keytab """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class ObjectCreationException(DirectoryOperationException):
    """ An exception raised when an error is encountered creating a computer account, including when
    the account already exists.
    """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class ObjectDeletionException(DirectoryOperationException):
    """ An exception raised when the directory refuses to delete a computer account """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class ObjectNotFoundException(DirectoryOperationException):
    """ An exception raised when a computer account cannot be found for an operation that requires
    it to exist.
    """
    def __init__(self, exception_str):
        super().__init__(exception_str)


class PasswordResetException(DirectoryOperationException):
    """ An exception raised when the directory rejects setting the password of a computer account """
    def __init__(self, exception_str):
        super().__init__(exception_str)
