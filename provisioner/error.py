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

class Error(Exception):
    """Base class for exceptions in this module."""
    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class DirectoryApiError(Error):
    """Exception raised with failed directory API request
    """

    def __init__(self, status, message):
        super().__init__(message)
        self.status = status

    def __str__(self):
        return f'{self.status or ""}: {self.message or ""}'


class PrivilegeError(DirectoryApiError):
    """Directory refused the request for the current caller (401/403)"""
    pass


class CommandError(Error):
    def __init__(self, command, message):
        super().__init__(message)
        self.command = command

    def __str__(self):
        if self.command:
            return f'{self.command}: {self.message}'
        else:
            return super().__str__()


class ProvisioningError(Error):
    """Base class for failures of the provisioning pipeline."""
    pass


class PrivilegeDenied(ProvisioningError):
    def __init__(self, message='not super admin'):
        super().__init__(message)


class DuplicateIdentity(ProvisioningError):
    def __init__(self, email):
        super().__init__(f'Email {email} already exists')
        self.email = email


class ValidationFailed(ProvisioningError):
    def __init__(self, field, reason):
        super().__init__(f'{field}: {reason}')
        self.field = field
        self.reason = reason


class DirectoryUnavailable(ProvisioningError):
    pass


class ScanAborted(DirectoryUnavailable):
    """Account scan stopped by a page, time or cancellation bound before completion."""
    pass


class CreateRejected(ProvisioningError):
    pass
