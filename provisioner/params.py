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

import json
import logging
import os
from typing import Optional, Dict, Any

from .constants import DEFAULT_CUSTOMER, DEFAULT_PAGE_SIZE
from .directory import DirectoryClient, GoogleDirectoryClient, ScanLimit
from .email_service import EmailConfig, EmailSender, WelcomeNotifier
from .error import CommandError
from .models import CallerContext
from .provisioning import ProvisioningOrchestrator


class ProvisionParams:
    def __init__(self, config_filename='', config=None):
        self.config_filename = config_filename
        self.config = config or {}    # type: Dict[str, Any]
        self.user = ''
        self.debug = False
        self.batch_mode = False
        self.commands = []
        self.directory = None         # type: Optional[DirectoryClient]
        self.notifier = None          # type: Optional[WelcomeNotifier]

    def clear_session(self):
        self.directory = None
        self.notifier = None

    def load_config(self, config):    # type: (Dict[str, Any]) -> None
        self.config = config or {}
        if isinstance(self.config.get('user'), str):
            self.user = self.config['user'].strip()
        if self.config.get('debug') is True:
            self.debug = True
        if self.config.get('batch_mode') is True:
            self.batch_mode = True
        if isinstance(self.config.get('commands'), list):
            self.commands.extend(self.config['commands'])

    @property
    def customer(self):    # type: () -> str
        return self.config.get('customer') or DEFAULT_CUSTOMER

    @property
    def page_size(self):    # type: () -> int
        page_size = self.config.get('page_size')
        return page_size if isinstance(page_size, int) and page_size > 0 else DEFAULT_PAGE_SIZE

    def scan_limit(self):    # type: () -> ScanLimit
        return ScanLimit(max_pages=self.config.get('scan_max_pages'), timeout=self.config.get('scan_timeout'))

    def caller(self):    # type: () -> CallerContext
        if not self.user:
            raise CommandError('', 'Administrator address is not configured. Use --user or set "user" in config')
        return CallerContext(address=self.user)

    def service_account_info(self):    # type: () -> Optional[Dict[str, Any]]
        info = self.config.get('service_account')
        if isinstance(info, dict):
            return info
        file_name = self.config.get('service_account_file') or os.getenv('GOOGLE_APPLICATION_CREDENTIALS')
        if file_name:
            file_name = os.path.expanduser(file_name)
            if not os.path.isabs(file_name) and self.config_filename:
                file_name = os.path.join(os.path.dirname(os.path.abspath(self.config_filename)), file_name)
            try:
                with open(file_name, 'r') as f:
                    return json.load(f)
            except (IOError, ValueError) as e:
                raise CommandError('', f'Unable to load service account file "{file_name}": {e}')

    def get_directory(self):    # type: () -> DirectoryClient
        if self.directory is None:
            self.directory = GoogleDirectoryClient(self.caller(), self.service_account_info(), customer=self.customer)
        return self.directory

    def get_notifier(self):    # type: () -> Optional[WelcomeNotifier]
        if self.notifier is None:
            email = self.config.get('email')
            if isinstance(email, dict) and email.get('provider'):
                try:
                    config = EmailConfig.from_dict(email, service_account=self.config.get('service_account'))
                    if config.provider == 'gmail' and not config.service_account:
                        config.service_account = self.service_account_info()
                    self.notifier = WelcomeNotifier(EmailSender(config))
                except (ValueError, CommandError) as e:
                    logging.warning('Welcome email is disabled: %s', e)
        return self.notifier

    def get_orchestrator(self, notify=True):    # type: (bool) -> ProvisioningOrchestrator
        return ProvisioningOrchestrator(self.get_directory(), self.caller(),
                                        notifier=self.get_notifier() if notify else None,
                                        page_size=self.page_size, scan_limit=self.scan_limit())
