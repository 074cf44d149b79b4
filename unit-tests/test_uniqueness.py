import itertools
import threading
from unittest import TestCase, mock

from data_directory import FakeDirectory, make_users, api_error
from provisioner.directory import ScanLimit, iterate_account_pages
from provisioner.error import DirectoryUnavailable, ScanAborted
from provisioner.uniqueness import UniquenessChecker


class TestUniquenessChecker(TestCase):
    def setUp(self):
        self.users = make_users(7)
        self.users[5]['aliases'] = ['Sales@acme.com', 'support@acme.com']
        self.directory = FakeDirectory(users=self.users, page_size=3)
        self.checker = UniquenessChecker(self.directory)

    def test_primary_address_any_case(self):
        self.assertTrue(self.checker.email_exists_anywhere('user001@acme.com'))
        self.assertTrue(self.checker.email_exists_anywhere('USER001@Acme.Com'))
        self.assertEqual(self.directory.list_calls, 0)

    def test_primary_address_found_by_scan(self):
        self.directory.get_account_by_address = mock.Mock(return_value=None)
        self.assertTrue(self.checker.email_exists_anywhere('user006@acme.com'))
        self.assertEqual(self.checker.pages_scanned, 3)

    def test_alias_any_case(self):
        self.assertTrue(self.checker.email_exists_anywhere('sales@ACME.com'))
        self.assertEqual(self.checker.pages_scanned, 2)
        self.assertTrue(self.checker.email_exists_anywhere('Support@acme.com'))

    def test_miss_scans_every_page(self):
        self.assertFalse(self.checker.email_exists_anywhere('nobody@acme.com'))
        self.assertEqual(self.checker.pages_scanned, 3)
        self.assertEqual(self.directory.list_calls, 3)

    def test_empty_candidate(self):
        self.assertFalse(self.checker.email_exists_anywhere(''))
        self.assertFalse(self.checker.email_exists_anywhere('   '))
        self.assertEqual(self.directory.list_calls, 0)

    def test_page_error_is_not_a_miss(self):
        self.directory.failing_pages[2] = api_error(500, 'Backend Error')
        with self.assertRaises(DirectoryUnavailable):
            self.checker.email_exists_anywhere('nobody@acme.com')

    def test_lookup_error(self):
        self.directory.lookup_error = api_error(400, 'Bad Request')
        with self.assertRaises(DirectoryUnavailable):
            self.checker.email_exists_anywhere('nobody@acme.com')

    def test_max_pages(self):
        checker = UniquenessChecker(self.directory, limit=ScanLimit(max_pages=2))
        with self.assertRaises(ScanAborted):
            checker.email_exists_anywhere('nobody@acme.com')
        self.assertEqual(self.directory.list_calls, 2)

    def test_max_pages_not_reached(self):
        checker = UniquenessChecker(self.directory, limit=ScanLimit(max_pages=3))
        self.assertFalse(checker.email_exists_anywhere('nobody@acme.com'))

    def test_cancel(self):
        event = threading.Event()
        event.set()
        checker = UniquenessChecker(self.directory, limit=ScanLimit(cancel_event=event))
        with self.assertRaises(ScanAborted):
            checker.email_exists_anywhere('nobody@acme.com')
        self.assertEqual(self.directory.list_calls, 0)

    def test_timeout(self):
        limit = ScanLimit(timeout=5)
        with mock.patch('provisioner.directory.time.monotonic', side_effect=itertools.chain([100.0, 100.0], itertools.repeat(200.0))):
            checker = UniquenessChecker(self.directory, limit=limit)
            with self.assertRaises(ScanAborted):
                checker.email_exists_anywhere('nobody@acme.com')
        self.assertEqual(self.directory.list_calls, 1)


class TestAccountPages(TestCase):
    def test_repeated_page_token(self):
        directory = FakeDirectory(users=make_users(6), page_size=2)
        directory.repeat_token = True
        with self.assertRaises(DirectoryUnavailable):
            list(iterate_account_pages(directory))

    def test_pages_are_lazy(self):
        directory = FakeDirectory(users=make_users(6), page_size=2)
        pages = iterate_account_pages(directory)
        self.assertEqual(directory.list_calls, 0)
        next(pages)
        self.assertEqual(directory.list_calls, 1)

    def test_page_size_clamped(self):
        directory = mock.Mock()
        directory.list_accounts.return_value = mock.Mock(users=[], next_page_token=None)
        list(iterate_account_pages(directory, page_size=10000))
        self.assertEqual(directory.list_accounts.call_args[1]['max_results'], 500)

    def test_scan_limit_ignores_invalid_values(self):
        limit = ScanLimit(max_pages=0, timeout=-1)
        self.assertIsNone(limit.max_pages)
        self.assertIsNone(limit.timeout)
        self.assertIsNone(limit.deadline())
