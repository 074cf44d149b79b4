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
Profile field validation.

Rules run in a fixed order and the first failing rule wins, so the same bad
input always produces the same (field, message) pair:

1. required fields are non-empty
2. primary and secondary email have a local-part@domain.tld shape
3. primary email belongs to the caller's own directory domain
4. phone number is "+" followed by 8 to 15 digits
5. manager email, when present, has a valid shape
"""

from .constants import REQUIRED_PROFILE_FIELDS
from .models import Profile, CallerContext, ValidationResult
from . import utils

INVALID_EMAIL_MESSAGE = 'Invalid email format'
INVALID_PHONE_MESSAGE = 'Phone number must be in the format +<country code><number> (8-15 digits, no spaces)'


def validate(profile, caller):    # type: (Profile, CallerContext) -> ValidationResult
    for field_name, label in REQUIRED_PROFILE_FIELDS:
        value = profile.get(field_name)
        if not value or not value.strip():
            return ValidationResult.failure(field_name, f'{label} is required')

    for field_name in ('primaryEmail', 'secondaryEmail'):
        if not utils.is_email(profile.get(field_name)):
            return ValidationResult.failure(field_name, INVALID_EMAIL_MESSAGE)

    allowed_domain = caller.domain
    if not allowed_domain or utils.email_domain(profile.primary_email) != allowed_domain:
        return ValidationResult.failure('primaryEmail', f'Email domain must be @{allowed_domain}')

    if not utils.is_phone(profile.phone_number):
        return ValidationResult.failure('phoneNumber', INVALID_PHONE_MESSAGE)

    if profile.manager_email and not utils.is_email(profile.manager_email):
        return ValidationResult.failure('managerEmail', INVALID_EMAIL_MESSAGE)

    return ValidationResult.success()
