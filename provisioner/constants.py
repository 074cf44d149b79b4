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

EMAIL_PATTERN = r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$"
PHONE_PATTERN = r"^\+\d{8,15}$"

TEMPORARY_PASSWORD_LENGTH = 12
TEMPORARY_PASSWORD_SPECIAL_CHARACTERS = '!@#$%^&*'

DEFAULT_CUSTOMER = 'my_customer'
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 500

# Partial response masks for the Admin SDK users resource
ALIAS_SCAN_FIELDS = 'nextPageToken,users(primaryEmail,aliases,suspended)'
USER_PICKER_FIELDS = 'nextPageToken,users(primaryEmail,name/fullName,suspended)'
PRIVILEGE_PROBE_FIELDS = 'users(primaryEmail)'

DIRECTORY_SCOPES = [
    'https://www.googleapis.com/auth/admin.directory.user',
    'https://www.googleapis.com/auth/admin.directory.orgunit.readonly',
]
GMAIL_SEND_SCOPES = ['https://www.googleapis.com/auth/gmail.send']

REQUIRED_PROFILE_FIELDS = [
    ('firstName', 'First name'),
    ('lastName', 'Last name'),
    ('primaryEmail', 'Primary email'),
    ('title', 'Title'),
    ('department', 'Department'),
    ('secondaryEmail', 'Secondary email'),
    ('phoneNumber', 'Phone number'),
    ('organizationalUnitPath', 'Organizational unit'),
]
