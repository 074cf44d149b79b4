import json
import os
import tempfile
from unittest import TestCase, mock

from provisioner import __main__ as entry
from provisioner.directory import GoogleDirectoryClient
from provisioner.error import CommandError
from provisioner.params import ProvisionParams


class TestProvisionParams(TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_file = os.path.join(self.temp_dir.name, 'config.json')

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_config(self, config):
        with open(self.config_file, 'w') as f:
            json.dump(config, f)

    def test_load_config(self):
        params = ProvisionParams()
        params.load_config({
            'user': ' admin@acme.com ',
            'customer': 'C01abc',
            'page_size': 200,
            'scan_max_pages': 50,
            'scan_timeout': 30,
            'debug': True,
            'commands': ['ou-list'],
        })
        self.assertEqual(params.user, 'admin@acme.com')
        self.assertEqual(params.customer, 'C01abc')
        self.assertEqual(params.page_size, 200)
        self.assertTrue(params.debug)
        self.assertEqual(params.commands, ['ou-list'])
        limit = params.scan_limit()
        self.assertEqual(limit.max_pages, 50)
        self.assertEqual(limit.timeout, 30)
        self.assertEqual(params.caller().domain, 'acme.com')

    def test_defaults(self):
        params = ProvisionParams()
        self.assertEqual(params.customer, 'my_customer')
        self.assertEqual(params.page_size, 100)
        self.assertIsNone(params.scan_limit().max_pages)
        with self.assertRaises(CommandError):
            params.caller()

    def test_service_account_file(self):
        with open(os.path.join(self.temp_dir.name, 'sa.json'), 'w') as f:
            json.dump({'type': 'service_account', 'client_email': 'sa@acme.iam.gserviceaccount.com'}, f)
        params = ProvisionParams(config_filename=self.config_file, config={'service_account_file': 'sa.json'})
        self.assertEqual(params.service_account_info()['type'], 'service_account')

        params = ProvisionParams(config_filename=self.config_file, config={'service_account_file': 'missing.json'})
        with self.assertRaises(CommandError):
            params.service_account_info()

    def test_get_directory(self):
        params = ProvisionParams(config={'service_account': {'type': 'service_account'}, 'customer': 'C01abc'})
        params.user = 'admin@acme.com'
        directory = params.get_directory()
        self.assertIsInstance(directory, GoogleDirectoryClient)
        self.assertEqual(directory.customer, 'C01abc')
        self.assertIs(params.get_directory(), directory)
        params.clear_session()
        self.assertIsNone(params.directory)

    def test_get_notifier(self):
        params = ProvisionParams(config={'email': {'provider': 'smtp', 'from_address': 'it@acme.com',
                                                   'smtp_host': 'smtp.acme.com'}})
        self.assertIsNotNone(params.get_notifier())

        params = ProvisionParams(config={'email': {'provider': 'pigeon', 'from_address': 'it@acme.com'}})
        with self.assertLogs(level='WARNING'):
            self.assertIsNone(params.get_notifier())

        self.assertIsNone(ProvisionParams().get_notifier())

    def test_get_params_from_config(self):
        self.write_config({'user': 'admin@acme.com', 'page_size': 50})
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop('PROVISIONER_USER', None)
            params = entry.get_params_from_config(self.config_file)
        self.assertEqual(params.config_filename, self.config_file)
        self.assertEqual(params.user, 'admin@acme.com')
        self.assertEqual(params.page_size, 50)

    def test_config_from_environment(self):
        self.write_config({'page_size': 50})
        with mock.patch.dict(os.environ, {'PROVISIONER_CONFIG_FILE': self.config_file,
                                          'PROVISIONER_USER': 'ops@acme.com'}):
            params = entry.get_params_from_config()
        self.assertEqual(params.config_filename, self.config_file)
        self.assertEqual(params.user, 'ops@acme.com')

    def test_invalid_config(self):
        with open(self.config_file, 'w') as f:
            f.write('{"user": ')
        with self.assertLogs(level='ERROR'):
            with self.assertRaises(ValueError):
                entry.get_params_from_config(self.config_file)

    def test_default_path(self):
        with mock.patch.dict(os.environ, {'PROVISIONER_DATA_HOME': self.temp_dir.name}):
            self.assertEqual(str(entry.utils.get_default_path()), self.temp_dir.name)
