from unittest import TestCase, mock

from data_directory import FakeDirectory, CALLER, make_users
from provisioner.error import DirectoryUnavailable
from provisioner.privilege import PrivilegeGate, ProbeResult


class TestPrivilegeGate(TestCase):
    def setUp(self):
        self.directory = FakeDirectory(users=make_users(3))
        self.gate = PrivilegeGate(self.directory)

    def test_granted(self):
        self.assertEqual(self.gate.probe(CALLER), ProbeResult.GRANTED)
        self.assertTrue(self.gate.is_super_admin(CALLER))
        self.assertEqual(self.directory.list_calls, 0)

    def test_denied(self):
        self.directory.privilege_error = True
        with self.assertLogs(level='WARNING'):
            self.assertEqual(self.gate.probe(CALLER), ProbeResult.DENIED)
        self.assertFalse(self.gate.is_super_admin(CALLER))

    def test_probe_error(self):
        self.directory.list_accounts = mock.Mock(side_effect=DirectoryUnavailable('connection reset'))
        with self.assertLogs(level='ERROR'):
            self.assertEqual(self.gate.probe(CALLER), ProbeResult.PROBE_ERROR)
        self.assertFalse(self.gate.is_super_admin(CALLER))

    def test_unexpected_error(self):
        self.directory.list_accounts = mock.Mock(side_effect=OSError('timed out'))
        self.assertFalse(self.gate.is_super_admin(CALLER))
