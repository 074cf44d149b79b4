import json
from unittest import mock

from googleapiclient.errors import HttpError

from provisioner.constants import PRIVILEGE_PROBE_FIELDS
from provisioner.directory import DirectoryClient
from provisioner.error import DirectoryApiError, PrivilegeError, CreateRejected
from provisioner.models import AccountPage, CallerContext, Profile

ADMIN_EMAIL = 'admin@acme.com'
CALLER = CallerContext(address=ADMIN_EMAIL)


def make_users(count, domain='acme.com', prefix='user'):
    return [{
        'primaryEmail': f'{prefix}{i:03d}@{domain}',
        'name': {'fullName': f'User {i:03d}'},
        'aliases': [],
        'suspended': False,
    } for i in range(count)]


def valid_profile(**kwargs):
    data = {
        'firstName': 'Jane',
        'lastName': 'Doe',
        'title': 'Engineer',
        'department': 'R&D',
        'primaryEmail': 'jane.doe@acme.com',
        'secondaryEmail': 'jane@example.com',
        'phoneNumber': '+14165551234',
        'organizationalUnitPath': '/Engineering',
    }
    data.update(kwargs)
    return Profile.from_dict(data)


class FakeDirectory(DirectoryClient):
    """In-memory directory: pages of users, org units and scripted failures"""

    def __init__(self, users=None, page_size=2, org_units=None):
        self.users = list(users or [])
        self.page_size = page_size
        self.org_units = list(org_units or [])
        self.privilege_error = False
        self.lookup_error = None      # type: Exception or None
        self.failing_pages = {}       # page number (1-based) -> exception
        self.create_error = None      # type: Exception or None
        self.created = []
        self.list_calls = 0
        self.probe_calls = 0
        self.repeat_token = False

    def list_org_units(self):
        return [dict(x) for x in self.org_units]

    def get_account_by_address(self, address):
        if self.lookup_error:
            raise self.lookup_error
        for user in self.users:
            if (user.get('primaryEmail') or '').casefold() == address.casefold():
                return dict(user)
            if any(x.casefold() == address.casefold() for x in user.get('aliases') or []):
                return dict(user)
        return None

    def list_accounts(self, page_token=None, query=None, fields=None, max_results=100):
        if fields == PRIVILEGE_PROBE_FIELDS:
            self.probe_calls += 1
            if self.privilege_error:
                raise PrivilegeError(403, 'Not Authorized to access this resource/api')
            return AccountPage(users=self.users[:1], next_page_token=None)

        self.list_calls += 1
        page_no = int(page_token) if page_token else 1
        error = self.failing_pages.get(page_no)
        if error:
            raise error
        start = (page_no - 1) * self.page_size
        chunk = self.users[start:start + self.page_size]
        has_more = start + self.page_size < len(self.users)
        if self.repeat_token:
            next_token = '2'
        else:
            next_token = str(page_no + 1) if has_more else None
        return AccountPage(users=[dict(x) for x in chunk], next_page_token=next_token)

    def create_account(self, spec):
        if self.create_error:
            raise self.create_error
        if any(x['primaryEmail'].casefold() == spec['primaryEmail'].casefold() for x in self.users):
            raise CreateRejected('Entity already exists.')
        self.created.append(spec)
        user = {
            'primaryEmail': spec['primaryEmail'].lower(),
            'name': {'fullName': f'{spec["name"]["givenName"]} {spec["name"]["familyName"]}'},
            'aliases': [],
            'suspended': False,
        }
        self.users.append(user)
        return dict(user, id='1000')


def api_error(status, message='error'):
    return DirectoryApiError(status, message)


def http_error(status, message='error'):
    resp = mock.Mock(status=status, reason=message)
    content = json.dumps({'error': {'code': status, 'message': message}}).encode()
    return HttpError(resp, content)
