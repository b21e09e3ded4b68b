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

import logging

from typing import Union

ROOT_LOGGER_NAME = 'realm_ad'

_realm_logger = None


def configure_log_level(level: Union[int, str]):
    """ Set the log level of the realm logger and, through propagation, all of its module loggers.
    :param level: The lowest log severity to be recorded, either as a logging constant or its name.
    """
    if isinstance(level, str):
        level = level.upper()
    get_logger().setLevel(level)


def disable_logging():
    """ Stop records from the realm loggers reaching handlers configured by the calling application """
    get_logger().propagate = False


def enable_logging():
    """ Let records from the realm loggers reach handlers configured by the calling application """
    get_logger().propagate = True


def get_logger(module_name: str = None) -> logging.Logger:
    """ Retrieve the realm logger, declaring it on first use.
    :param module_name: Optional. The dotted name of a module within the package. If specified, a child
                        of the realm logger is returned so records show which component emitted them,
                        while still honoring the level set through `configure_log_level`.
    """
    global _realm_logger
    if _realm_logger is None:
        logger = logging.getLogger(ROOT_LOGGER_NAME)
        # by default, only log info+
        logger.setLevel(logging.INFO)
        _realm_logger = logger
    if module_name:
        if module_name.startswith(ROOT_LOGGER_NAME + '.'):
            module_name = module_name[len(ROOT_LOGGER_NAME) + 1:]
        return _realm_logger.getChild(module_name)
    return _realm_logger
