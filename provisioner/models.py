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
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, List, Dict, Any


PROFILE_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'title': 'title',
    'department': 'department',
    'primaryEmail': 'primary_email',
    'secondaryEmail': 'secondary_email',
    'phoneNumber': 'phone_number',
    'organizationalUnitPath': 'org_unit_path',
    'managerEmail': 'manager_email',
    'managerName': 'manager_name',
}


@dataclass
class Profile:
    first_name: str = ''
    last_name: str = ''
    title: str = ''
    department: str = ''
    primary_email: str = ''
    secondary_email: str = ''
    phone_number: str = ''
    org_unit_path: str = ''
    manager_email: str = ''
    manager_name: str = ''

    @classmethod
    def from_dict(cls, data):    # type: (Dict[str, Any]) -> Profile
        """Build a profile from camelCase or snake_case keys."""
        profile = cls()
        if not isinstance(data, dict):
            return profile
        for camel_name, attr_name in PROFILE_FIELDS.items():
            value = data.get(camel_name)
            if value is None:
                value = data.get(attr_name)
            if value is None and attr_name == 'org_unit_path':
                value = data.get('orgUnitPath')
            setattr(profile, attr_name, str(value).strip() if value is not None else '')
        return profile

    def get(self, camel_name):    # type: (str) -> str
        return getattr(self, PROFILE_FIELDS[camel_name])

    @property
    def display_name(self):    # type: () -> str
        return f'{self.first_name} {self.last_name}'.strip()

    def to_dict(self):    # type: () -> Dict[str, str]
        return {camel_name: getattr(self, attr_name) for camel_name, attr_name in PROFILE_FIELDS.items()}


@dataclass(frozen=True)
class CallerContext:
    address: str

    @property
    def domain(self):    # type: () -> str
        _, _, domain = (self.address or '').rpartition('@')
        return domain.strip().lower()


@dataclass(frozen=True)
class DirectoryIdentity:
    primary_email: str
    aliases: Tuple[str, ...] = ()
    suspended: bool = False

    @classmethod
    def from_google_user(cls, user):    # type: (Dict[str, Any]) -> DirectoryIdentity
        aliases = user.get('aliases') or []
        return cls(primary_email=user.get('primaryEmail') or '',
                   aliases=tuple(x for x in aliases if isinstance(x, str)),
                   suspended=user.get('suspended') is True)


@dataclass
class AccountPage:
    users: List[Dict[str, Any]] = field(default_factory=list)
    next_page_token: Optional[str] = None

    @property
    def identities(self):    # type: () -> List[DirectoryIdentity]
        return [DirectoryIdentity.from_google_user(x) for x in self.users]


@dataclass(frozen=True)
class ProvisionedAccount:
    email: str
    name: str
    department: str
    title: str
    manager: str = ''

    @classmethod
    def from_profile(cls, profile, canonical_email):    # type: (Profile, str) -> ProvisionedAccount
        return cls(email=canonical_email or profile.primary_email,
                   name=profile.display_name,
                   department=profile.department,
                   title=profile.title,
                   manager=profile.manager_name or profile.manager_email or '')

    def to_dict(self):    # type: () -> Dict[str, str]
        return asdict(self)

    def __str__(self):
        return 'PROVISIONED ACCOUNT: ' + json.dumps(self.to_dict())


@dataclass(frozen=True)
class OrgUnit:
    path: str
    display_name: str

    def to_dict(self):
        return {'path': self.path, 'display_name': self.display_name}


@dataclass(frozen=True)
class DirectoryUser:
    email: str
    name: str

    def to_dict(self):
        return {'email': self.email, 'name': self.name}


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    field: str = ''
    message: str = ''

    @classmethod
    def success(cls):
        return cls(ok=True)

    @classmethod
    def failure(cls, field_name, message):
        return cls(ok=False, field=field_name, message=message)

    def __bool__(self):
        return self.ok
