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

import enum
import logging

from .constants import PRIVILEGE_PROBE_FIELDS
from .directory import DirectoryClient
from .error import PrivilegeError
from .models import CallerContext


class ProbeResult(enum.Enum):
    GRANTED = 'granted'
    DENIED = 'denied'
    PROBE_ERROR = 'probe_error'


class PrivilegeGate:
    """Capability probe: a caller that can list one directory account is treated as super admin."""

    def __init__(self, directory):    # type: (DirectoryClient) -> None
        self.directory = directory

    def probe(self, caller):    # type: (CallerContext) -> ProbeResult
        try:
            self.directory.list_accounts(fields=PRIVILEGE_PROBE_FIELDS, max_results=1)
            logging.debug('Privilege probe succeeded for "%s"', caller.address)
            return ProbeResult.GRANTED
        except PrivilegeError as e:
            logging.warning('Privilege probe denied for "%s": %s', caller.address, e)
            return ProbeResult.DENIED
        except Exception as e:
            logging.error('Privilege probe for "%s" could not reach the directory: %s', caller.address, e)
            return ProbeResult.PROBE_ERROR

    def is_super_admin(self, caller):    # type: (CallerContext) -> bool
        return self.probe(caller) == ProbeResult.GRANTED
