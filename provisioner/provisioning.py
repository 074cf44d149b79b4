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

"""
Account provisioning pipeline.

    START -> PRIVILEGE_CHECK -> UNIQUENESS_CHECK -> FIELD_VALIDATION
          -> PASSWORD_GEN -> DIRECTORY_CREATE -> DONE

Every stage may end the attempt in FAILED with a ProvisioningError subclass.
The create call is never retried.
"""

import enum
import logging
from typing import Optional, Dict, Any, List

from .constants import DEFAULT_PAGE_SIZE, USER_PICKER_FIELDS
from .directory import DirectoryClient, ScanLimit, iterate_account_pages
from .email_service import WelcomeNotifier
from .error import (ProvisioningError, PrivilegeDenied, DuplicateIdentity, ValidationFailed,
                    DirectoryUnavailable, CreateRejected)
from .generator import PasswordGenerator, TemporaryPasswordGenerator
from .models import Profile, CallerContext, ProvisionedAccount, OrgUnit, DirectoryUser
from .privilege import PrivilegeGate
from .uniqueness import UniquenessChecker
from . import validator


class ProvisioningStage(enum.Enum):
    START = 'start'
    PRIVILEGE_CHECK = 'privilege_check'
    UNIQUENESS_CHECK = 'uniqueness_check'
    FIELD_VALIDATION = 'field_validation'
    PASSWORD_GEN = 'password_gen'
    DIRECTORY_CREATE = 'directory_create'
    DONE = 'done'
    FAILED = 'failed'


def build_account_spec(profile, password):    # type: (Profile, str) -> Dict[str, Any]
    spec = {
        'primaryEmail': profile.primary_email,
        'name': {
            'givenName': profile.first_name,
            'familyName': profile.last_name,
        },
        'password': password,
        'changePasswordAtNextLogin': True,
        'orgUnitPath': profile.org_unit_path,
        'recoveryEmail': profile.secondary_email,
        'emails': [{'address': profile.secondary_email, 'type': 'home'}],
        'phones': [{'value': profile.phone_number, 'type': 'work'}],
        'organizations': [{
            'title': profile.title,
            'department': profile.department,
            'primary': True,
        }],
    }
    if profile.manager_email:
        spec['relations'] = [{'value': profile.manager_email, 'type': 'manager'}]
    return spec


class ProvisioningOrchestrator:
    def __init__(self, directory, caller, password_generator=None, notifier=None,
                 page_size=DEFAULT_PAGE_SIZE, scan_limit=None):
        # type: (DirectoryClient, CallerContext, Optional[PasswordGenerator], Optional[WelcomeNotifier], int, Optional[ScanLimit]) -> None
        self.directory = directory
        self.caller = caller
        self.privilege_gate = PrivilegeGate(directory)
        self.uniqueness_checker = UniquenessChecker(directory, page_size=page_size, limit=scan_limit)
        self.password_generator = password_generator or TemporaryPasswordGenerator()
        self.notifier = notifier
        self.page_size = page_size
        self.scan_limit = scan_limit
        self.stage = ProvisioningStage.START
        self.failed_stage = None    # type: Optional[ProvisioningStage]

    def _fail(self, error):    # type: (ProvisioningError) -> ProvisioningError
        logging.warning('Provisioning failed at %s: %s', self.stage.value, error)
        self.failed_stage = self.stage
        self.stage = ProvisioningStage.FAILED
        return error

    def create_user(self, profile, dry_run=False, notify=True):
        # type: (Profile, bool, bool) -> Dict[str, Any]
        self.stage = ProvisioningStage.START
        self.failed_stage = None

        self.stage = ProvisioningStage.PRIVILEGE_CHECK
        if not self.privilege_gate.is_super_admin(self.caller):
            raise self._fail(PrivilegeDenied())

        self.stage = ProvisioningStage.UNIQUENESS_CHECK
        try:
            exists = self.uniqueness_checker.email_exists_anywhere(profile.primary_email)
        except DirectoryUnavailable as e:
            raise self._fail(e)
        except Exception as e:
            raise self._fail(DirectoryUnavailable(f'uniqueness check failed: {e}')) from e
        if exists:
            raise self._fail(DuplicateIdentity(profile.primary_email))

        self.stage = ProvisioningStage.FIELD_VALIDATION
        result = validator.validate(profile, self.caller)
        if not result.ok:
            raise self._fail(ValidationFailed(result.field, result.message))

        if dry_run:
            account = ProvisionedAccount.from_profile(profile, profile.primary_email)
            self.stage = ProvisioningStage.DONE
            return {
                'success': True,
                'dry_run': True,
                'message': f'Validation passed: {account.email} can be created',
                'account': account.to_dict(),
            }

        self.stage = ProvisioningStage.PASSWORD_GEN
        password = self.password_generator.generate()

        self.stage = ProvisioningStage.DIRECTORY_CREATE
        try:
            created = self.directory.create_account(build_account_spec(profile, password))
        except (CreateRejected, DirectoryUnavailable) as e:
            raise self._fail(type(e)(f'creation failed: {e.message}'))
        except Exception as e:
            raise self._fail(DirectoryUnavailable(f'creation failed: {e}'))

        canonical_email = (created or {}).get('primaryEmail') or profile.primary_email
        account = ProvisionedAccount.from_profile(profile, canonical_email)
        self.stage = ProvisioningStage.DONE
        logging.info('Account "%s" has been created', account.email)

        notification = 'skipped'
        if notify and self.notifier:
            delivered = self.notifier.notify(account, profile.secondary_email, password)
            notification = 'sent' if delivered else 'failed'

        return {
            'success': True,
            'message': f'User {account.email} created successfully',
            'account': account.to_dict(),
            'notification': notification,
        }

    def get_ous(self):    # type: () -> List[OrgUnit]
        org_units = []
        for ou in self.directory.list_org_units():
            path = ou.get('orgUnitPath') or ''
            name = ou.get('name') or ''
            display_name = path.lstrip('/')
            if not display_name:
                if path not in ('', '/'):
                    logging.debug('Organizational unit "%s" has an empty display path', name)
                display_name = name or '/'
            org_units.append(OrgUnit(path=path or '/', display_name=display_name))
        org_units.sort(key=lambda x: x.path.casefold())
        return org_units

    def get_all_users(self):    # type: () -> List[DirectoryUser]
        users = []
        for page in iterate_account_pages(self.directory, fields=USER_PICKER_FIELDS,
                                          page_size=self.page_size, limit=self.scan_limit):
            for user in page.users:
                email = user.get('primaryEmail')
                if not email or user.get('suspended') is True:
                    continue
                name = ((user.get('name') or {}).get('fullName') or '').strip()
                users.append(DirectoryUser(email=email, name=name or email))
        users.sort(key=lambda x: (x.name.casefold(), x.email.casefold()))
        return users
