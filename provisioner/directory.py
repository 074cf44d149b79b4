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

import abc
import logging
import threading
import time
from typing import Optional, Iterator, List, Dict, Any

from .constants import DEFAULT_CUSTOMER, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, DIRECTORY_SCOPES
from .error import DirectoryApiError, PrivilegeError, DirectoryUnavailable, CreateRejected, ScanAborted, CommandError
from .models import AccountPage, CallerContext


class DirectoryClient(abc.ABC):
    """Query/command interface of the identity directory"""

    @abc.abstractmethod
    def list_org_units(self):    # type: () -> List[Dict[str, Any]]
        pass

    @abc.abstractmethod
    def get_account_by_address(self, address):    # type: (str) -> Optional[Dict[str, Any]]
        """Returns the account for a primary address or alias, None when not found"""
        pass

    @abc.abstractmethod
    def list_accounts(self, page_token=None, query=None, fields=None, max_results=DEFAULT_PAGE_SIZE):
        # type: (Optional[str], Optional[str], Optional[str], int) -> AccountPage
        pass

    @abc.abstractmethod
    def create_account(self, spec):    # type: (Dict[str, Any]) -> Dict[str, Any]
        pass


class ScanLimit:
    """Bounds for a directory page scan.

    max_pages: maximum number of pages to request
    timeout: seconds allowed for the whole scan
    cancel_event: threading.Event set by another thread to stop the scan
    """
    def __init__(self, max_pages=None, timeout=None, cancel_event=None):
        # type: (Optional[int], Optional[float], Optional[threading.Event]) -> None
        self.max_pages = max_pages if isinstance(max_pages, int) and max_pages > 0 else None
        self.timeout = timeout if isinstance(timeout, (int, float)) and timeout > 0 else None
        self.cancel_event = cancel_event

    @classmethod
    def unbounded(cls):
        return cls()

    def deadline(self):    # type: () -> Optional[float]
        if self.timeout is not None:
            return time.monotonic() + self.timeout

    def check(self, pages_read, deadline):    # type: (int, Optional[float]) -> None
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise ScanAborted(f'Directory scan cancelled after {pages_read} page(s)')
        if self.max_pages is not None and pages_read >= self.max_pages:
            raise ScanAborted(f'Directory scan exceeded {self.max_pages} page(s) without completing')
        if deadline is not None and time.monotonic() > deadline:
            raise ScanAborted(f'Directory scan timed out after {self.timeout} second(s)')


def iterate_account_pages(directory, fields=None, query=None, page_size=DEFAULT_PAGE_SIZE, limit=None):
    # type: (DirectoryClient, Optional[str], Optional[str], int, Optional[ScanLimit]) -> Iterator[AccountPage]
    """Lazily yields account pages until the directory returns no continuation token.

    Any failure to load a page is raised as DirectoryUnavailable. A scan stopped by
    its limit raises ScanAborted. Neither is ever reported as an exhausted scan.
    """
    limit = limit or ScanLimit.unbounded()
    deadline = limit.deadline()
    page_size = min(max(page_size, 1), MAX_PAGE_SIZE)
    page_token = None     # type: Optional[str]
    seen_tokens = set()
    pages_read = 0
    while True:
        limit.check(pages_read, deadline)
        try:
            page = directory.list_accounts(page_token=page_token, query=query, fields=fields, max_results=page_size)
        except DirectoryUnavailable:
            raise
        except DirectoryApiError as e:
            raise DirectoryUnavailable(f'Directory scan failed on page {pages_read + 1}: {e}') from e
        pages_read += 1
        logging.debug('Directory page %d: %d account(s)', pages_read, len(page.users))
        yield page

        page_token = page.next_page_token
        if not page_token:
            break
        if page_token in seen_tokens:
            raise DirectoryUnavailable('Directory returned a repeated page token')
        seen_tokens.add(page_token)


class GoogleDirectoryClient(DirectoryClient):
    def __init__(self, caller, credentials, customer=DEFAULT_CUSTOMER, service=None):
        # type: (CallerContext, Optional[dict], str, Any) -> None
        self.caller = caller
        self.credentials = credentials
        self.customer = customer or DEFAULT_CUSTOMER
        self._service = service
        self._local = threading.local()

    def _get_service(self):
        """Google API client of the calling thread. httplib2 transports are not thread-safe."""
        if self._service is not None:
            return self._service
        service = getattr(self._local, 'service', None)
        if service is None:
            try:
                from google.oauth2 import service_account
                import googleapiclient.discovery
                logging.getLogger('googleapiclient.discovery_cache').setLevel(logging.ERROR)
            except ModuleNotFoundError:
                raise CommandError('', 'Google Cloud client is not installed.\npip install google-api-python-client')

            if not self.credentials:
                raise CommandError('', 'Service account credentials are not configured')
            cred = service_account.Credentials.from_service_account_info(
                self.credentials, scopes=DIRECTORY_SCOPES).with_subject(self.caller.address)
            service = googleapiclient.discovery.build(
                'admin', 'directory_v1', credentials=cred, static_discovery=False, cache_discovery=False)
            self._local.service = service
        return service

    @staticmethod
    def _translate_error(e, action):    # type: (Exception, str) -> Exception
        from googleapiclient.errors import HttpError
        from google.auth.exceptions import RefreshError

        if isinstance(e, HttpError):
            status = getattr(e, 'status_code', None) or getattr(e.resp, 'status', None)
            try:
                status = int(status)
            except (TypeError, ValueError):
                status = None
            reason = getattr(e, 'reason', None) or str(e)
            if status in (401, 403):
                return PrivilegeError(status, f'{action}: {reason}')
            if status is not None and 400 <= status < 500:
                return DirectoryApiError(status, f'{action}: {reason}')
            return DirectoryUnavailable(f'{action}: {reason}')
        if isinstance(e, RefreshError):
            return PrivilegeError(401, f'{action}: {e}')
        return DirectoryUnavailable(f'{action}: {e}')

    def list_org_units(self):
        service = self._get_service()
        try:
            rs = service.orgunits().list(customerId=self.customer, type='all').execute()
        except Exception as e:
            err = self._translate_error(e, 'List organizational units')
            if isinstance(err, DirectoryApiError):
                raise DirectoryUnavailable(str(err)) from e
            raise err from e
        return rs.get('organizationUnits') or []

    def get_account_by_address(self, address):
        service = self._get_service()
        try:
            return service.users().get(userKey=address, projection='basic').execute()
        except Exception as e:
            err = self._translate_error(e, f'Lookup "{address}"')
            # a foreign domain (403) or a malformed address (400) cannot be a primary address here
            if isinstance(err, DirectoryApiError) and err.status in (400, 403, 404):
                return None
            raise err from e

    def list_accounts(self, page_token=None, query=None, fields=None, max_results=DEFAULT_PAGE_SIZE):
        service = self._get_service()
        kwargs = {
            'customer': self.customer,
            'maxResults': max_results,
            'orderBy': 'email',
            'showDeleted': 'false',
        }
        if page_token:
            kwargs['pageToken'] = page_token
        if query:
            kwargs['query'] = query
        if fields:
            kwargs['fields'] = fields
        try:
            rs = service.users().list(**kwargs).execute()
        except Exception as e:
            raise self._translate_error(e, 'List accounts') from e
        return AccountPage(users=rs.get('users') or [], next_page_token=rs.get('nextPageToken') or None)

    def create_account(self, spec):
        service = self._get_service()
        try:
            return service.users().insert(body=spec).execute()
        except Exception as e:
            err = self._translate_error(e, 'Create account')
            if isinstance(err, DirectoryApiError):
                raise CreateRejected(err.message) from e
            raise err from e
