from unittest import TestCase, mock

from data_directory import FakeDirectory, ADMIN_EMAIL, make_users
from provisioner.error import CreateRejected, DirectoryApiError
from provisioner.params import ProvisionParams
from provisioner.service import create_app

API_KEY = 'test-api-key'

REQUEST = {
    'firstName': 'Jane',
    'lastName': 'Doe',
    'title': 'Engineer',
    'department': 'R&D',
    'primaryEmail': 'jane.doe@acme.com',
    'secondaryEmail': 'jane@example.com',
    'phoneNumber': '+14165551234',
    'organizationalUnitPath': '/Engineering',
}


class TestProvisioningService(TestCase):
    def setUp(self):
        self.params = ProvisionParams(config={'service': {'api_key': API_KEY}})
        self.params.user = ADMIN_EMAIL
        self.directory = FakeDirectory(users=make_users(3), org_units=[{'name': 'Sales', 'orgUnitPath': '/Sales'}])
        self.params.directory = self.directory
        self.app = create_app(self.params)
        self.client = self.app.test_client()
        self.headers = {'api-key': API_KEY}

    def test_health(self):
        response = self.client.get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {'status': 'ok'})

    def test_missing_api_key(self):
        response = self.client.get('/api/v1/org-units')
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.get_json()['success'])

    def test_invalid_api_key(self):
        response = self.client.get('/api/v1/org-units', headers={'api-key': 'wrong'})
        self.assertEqual(response.status_code, 401)

    def test_create_user(self):
        response = self.client.post('/api/v1/users', json=REQUEST, headers=self.headers)
        self.assertEqual(response.status_code, 201)
        body = response.get_json()
        self.assertEqual(body['message'], 'User jane.doe@acme.com created successfully')
        self.assertEqual(body['account']['name'], 'Jane Doe')
        self.assertNotIn('password', body)
        self.assertEqual(len(self.directory.created), 1)

    def test_create_user_dry_run(self):
        response = self.client.post('/api/v1/users', json=dict(REQUEST, dry_run=True), headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.get_json()['dry_run'])
        self.assertEqual(self.directory.created, [])

    def test_create_user_errors(self):
        response = self.client.post('/api/v1/users', json=dict(REQUEST, phoneNumber='4165551234'),
                                    headers=self.headers)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.get_json()['field'], 'phoneNumber')

        response = self.client.post('/api/v1/users', json=dict(REQUEST, primaryEmail='user001@acme.com'),
                                    headers=self.headers)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()['error'], 'Email user001@acme.com already exists')

        self.directory.privilege_error = True
        response = self.client.post('/api/v1/users', json=REQUEST, headers=self.headers)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.get_json()['error'], 'not super admin')

    def test_create_user_rejected(self):
        self.directory.create_error = CreateRejected('Invalid Input: orgUnitPath')
        response = self.client.post('/api/v1/users', json=REQUEST, headers=self.headers)
        self.assertEqual(response.status_code, 422)

    def test_create_user_unavailable(self):
        self.directory.failing_pages[1] = DirectoryApiError(500, 'Backend Error')
        response = self.client.post('/api/v1/users', json=REQUEST, headers=self.headers)
        self.assertEqual(response.status_code, 503)

    def test_create_user_without_body(self):
        response = self.client.post('/api/v1/users', data='not json', headers=self.headers)
        self.assertEqual(response.status_code, 400)

    def test_list_users(self):
        response = self.client.get('/api/v1/users', headers=self.headers)
        self.assertEqual(response.status_code, 200)
        users = response.get_json()['users']
        self.assertEqual(users[0], {'email': 'user000@acme.com', 'name': 'User 000'})

    def test_list_org_units(self):
        response = self.client.get('/api/v1/org-units', headers=self.headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['org_units'], [{'path': '/Sales', 'display_name': 'Sales'}])

    def test_unexpected_error(self):
        with mock.patch.object(self.directory, 'list_org_units', side_effect=ConnectionError('reset')):
            response = self.client.get('/api/v1/org-units', headers=self.headers)
        self.assertEqual(response.status_code, 500)
