#  _  __
# | |/ /___ ___ _ __  ___ _ _ ®
# | ' </ -_) -_) '_ \/ -_) '_|
# |_|\_\___\___| .__/\___|_|
#              |_|
#
# Keeper Directory Provisioner
# Copyright 2026 Keeper Security Inc.
# Contact: ops@keepersecurity.com
#

import os
import re
from pathlib import Path

from .constants import EMAIL_PATTERN, PHONE_PATTERN

email_pattern = re.compile(EMAIL_PATTERN)
phone_pattern = re.compile(PHONE_PATTERN)


def get_default_path(override_path=None):
    """
    Get the default path for the provisioner data directory.

    Precedence order (highest to lowest):
    1. override_path parameter
    2. PROVISIONER_DATA_HOME environment variable
    3. HOME/.provisioner
    """
    path = override_path or os.getenv('PROVISIONER_DATA_HOME')
    if path:
        return Path(os.path.expanduser(path))
    return Path.home().joinpath('.provisioner')


def is_email(test_str):
    return isinstance(test_str, str) and email_pattern.match(test_str) is not None


def is_phone(test_str):
    return isinstance(test_str, str) and phone_pattern.match(test_str) is not None


def email_domain(email):    # type: (str) -> str
    _, _, domain = (email or '').rpartition('@')
    return domain.lower()


def same_address(a, b):    # type: (str, str) -> bool
    if not a or not b:
        return False
    return a.casefold() == b.casefold()
