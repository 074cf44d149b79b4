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

import logging
from typing import Optional

from .constants import ALIAS_SCAN_FIELDS, DEFAULT_PAGE_SIZE
from .directory import DirectoryClient, ScanLimit, iterate_account_pages
from .error import DirectoryApiError, DirectoryUnavailable
from . import utils


class UniquenessChecker:
    """Decides whether an address is already taken by any primary address or alias.

    The check is advisory: an account created by another caller between this
    check and the create call is rejected by the directory itself.
    """

    def __init__(self, directory, page_size=DEFAULT_PAGE_SIZE, limit=None):
        # type: (DirectoryClient, int, Optional[ScanLimit]) -> None
        self.directory = directory
        self.page_size = page_size
        self.limit = limit
        self.pages_scanned = 0

    def email_exists_anywhere(self, candidate):    # type: (str) -> bool
        self.pages_scanned = 0
        candidate = (candidate or '').strip()
        if not candidate:
            return False

        try:
            account = self.directory.get_account_by_address(candidate)
        except DirectoryUnavailable:
            raise
        except DirectoryApiError as e:
            raise DirectoryUnavailable(f'Unable to look up "{candidate}": {e}') from e
        if account and utils.same_address(account.get('primaryEmail'), candidate):
            logging.debug('"%s" is a primary address', candidate)
            return True

        for page in iterate_account_pages(self.directory, fields=ALIAS_SCAN_FIELDS,
                                          page_size=self.page_size, limit=self.limit):
            self.pages_scanned += 1
            for identity in page.identities:
                if utils.same_address(identity.primary_email, candidate):
                    logging.debug('"%s" is a primary address', candidate)
                    return True
                if any(utils.same_address(alias, candidate) for alias in identity.aliases):
                    logging.debug('"%s" is an alias of "%s"', candidate, identity.primary_email)
                    return True

        logging.debug('"%s" is not used: %d page(s) scanned', candidate, self.pages_scanned)
        return False
