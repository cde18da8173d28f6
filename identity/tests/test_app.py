"""End-to-end tests for the identity service API."""

import json
import os
import shutil
import tempfile
from unittest import TestCase, mock

import jsonschema

from pictureit import status
from pictureit.auth import helpers, keys, tokens
from pictureit.auth.exceptions import ConfigurationError
from pictureit.domain import Permission

from identity.factory import create_app
from identity.services import users

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), '..', '..', 'schema')


def load_schema(name: str) -> dict:
    with open(os.path.join(SCHEMA_PATH, name)) as f:
        schema: dict = json.load(f)
    return schema


class IdentityAppTestCase(TestCase):
    """Runs the identity app against an in-memory database."""

    @classmethod
    def setUpClass(cls):
        cls.key_dir = tempfile.mkdtemp()
        cls.private_path, cls.public_path = helpers.write_keypair(cls.key_dir)
        cls.key_material = keys.load_signing_keys(cls.private_path)

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(cls.key_dir)

    def setUp(self):
        env = {'JWT_PRIVATE_KEY_PATH': self.private_path,
               'SQLALCHEMY_DATABASE_URI': 'sqlite://',
               'CREATE_DB': '1'}
        with mock.patch.dict(os.environ, env):
            self.app = create_app()
        self.client = self.app.test_client()

    def tearDown(self):
        with self.app.app_context():
            users.drop_all()

    def register(self, **overrides):
        payload = {'username': 'alice1',
                   'password': 'correct-horse-battery',
                   'firstName': 'A',
                   'lastName': 'B',
                   'email': 'a@example.com'}
        payload.update(overrides)
        return self.client.post('/api/v1/register', json=payload)

    def login(self, username='alice1', password='correct-horse-battery'):
        return self.client.post('/api/v1/login',
                                json={'username': username,
                                      'password': password})


class TestRegisterAndLogin(IdentityAppTestCase):
    """Register, log in, and look up an identity."""

    def test_scenario(self):
        """Register alice1, log in, and read the identity document."""
        response = self.register()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user_id = response.get_json()['id']
        self.assertTrue(response.headers['Location']
                        .endswith(f'/api/v1/users/{user_id}'))

        response = self.login()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        jsonschema.validate(response.get_json(), load_schema('token.json'))
        token = response.get_json()['access_token']
        claims = tokens.decode(token, self.key_material.verification_key)
        self.assertEqual(claims.subject, user_id)
        self.assertEqual(claims.permissions, Permission.READ)
        self.assertEqual(claims.username, 'alice1')

        response = self.login(password='wrong-horse-battery')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        no_read = helpers.generate_token(self.key_material.signing_key,
                                         user_id=user_id,
                                         mask=Permission.CREATE)
        response = self.client.get(f'/api/v1/users/{user_id}',
                                   headers={'Authorization':
                                            f'Bearer {no_read}'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        response = self.client.get(f'/api/v1/users/{user_id}',
                                   headers={'Authorization':
                                            f'Bearer {token}'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        document = response.get_json()
        jsonschema.validate(document, load_schema('user.json'))
        self.assertEqual(document['id'], user_id)
        self.assertEqual(document['username'], 'alice1')
        self.assertEqual(document['email'], 'a@example.com')
        self.assertEqual(document['permissionLevel'], 1)
        self.assertNotIn('password', document)

    def test_login_failure_does_not_reveal_cause(self):
        """Unknown user and wrong password get the same response."""
        self.register()
        wrong_password = self.login(password='not-the-password')
        unknown_user = self.login(username='bob22')
        self.assertEqual(wrong_password.status_code,
                         status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(unknown_user.status_code,
                         status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(wrong_password.get_json(), unknown_user.get_json())

    def test_login_missing_fields(self):
        """A login without a password is rejected as unauthenticated."""
        response = self.client.post('/api/v1/login',
                                    json={'username': 'alice1'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_not_json(self):
        """A login body that is not JSON is rejected as unauthenticated."""
        response = self.client.post('/api/v1/login', data='username=alice1')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_duplicate_username(self):
        """Registering a taken username is a conflict."""
        self.assertEqual(self.register().status_code, status.HTTP_201_CREATED)
        response = self.register(email='other@example.com')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_duplicate_email(self):
        """Registering a taken e-mail address is a conflict."""
        self.assertEqual(self.register().status_code, status.HTTP_201_CREATED)
        response = self.register(username='alice2', email=' A@Example.com ')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_invalid_registration(self):
        """Field errors are reported per field, by payload key."""
        response = self.register(username='1alice', password='short',
                                 email='not-an-email', firstName='  ')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        errors = response.get_json()['errors']
        self.assertIn('username', errors)
        self.assertIn('password', errors)
        self.assertIn('email', errors)
        self.assertIn('firstName', errors)
        self.assertNotIn('lastName', errors)

    def test_default_permissions(self):
        """New users get the configured default permission mask."""
        self.app.config['DEFAULT_PERMISSIONS'] = 3
        self.register()
        token = self.login().get_json()['access_token']
        claims = tokens.decode(token, self.key_material.verification_key)
        self.assertEqual(claims.permissions,
                         Permission.READ | Permission.CREATE)


class TestGetUser(IdentityAppTestCase):
    """Lookup of identity documents."""

    def test_no_token(self):
        """Lookup requires a bearer token."""
        response = self.client.get('/api/v1/users/abc123')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_bad_scheme(self):
        """Only the bearer scheme is accepted."""
        token = helpers.generate_token(self.key_material.signing_key)
        response = self.client.get('/api/v1/users/abc123',
                                   headers={'Authorization': f'Basic {token}'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_no_such_user(self):
        """An unknown id is not found."""
        token = helpers.generate_token(self.key_material.signing_key)
        response = self.client.get('/api/v1/users/abc123',
                                   headers={'Authorization':
                                            f'Bearer {token}'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('reason', response.get_json())


class TestServiceRoutes(IdentityAppTestCase):
    """Health check, welcome and unknown routes."""

    def test_status(self):
        """The health check does not require a token."""
        response = self.client.get('/status')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_welcome(self):
        """The API root describes the service."""
        response = self.client.get('/api/v1/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('version', response.get_json())

    def test_unknown_route(self):
        """Unknown routes get a JSON 404."""
        response = self.client.get('/api/v1/nope')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('reason', response.get_json())

    def test_method_not_allowed(self):
        """Wrong verbs get a JSON 405."""
        response = self.client.get('/api/v1/login')
        self.assertEqual(response.status_code,
                         status.HTTP_405_METHOD_NOT_ALLOWED)


class TestStartup(TestCase):
    """The app cannot be created without a signing key."""

    def test_no_key(self):
        """Missing key configuration fails fast."""
        env = {'JWT_PRIVATE_KEY_PATH': '', 'JWT_PUBLIC_KEY_PATH': ''}
        with mock.patch.dict(os.environ, env):
            with self.assertRaises(ConfigurationError):
                create_app()

    def test_missing_key_file(self):
        """A key path that does not exist fails fast."""
        env = {'JWT_PRIVATE_KEY_PATH': '/does/not/exist.key'}
        with mock.patch.dict(os.environ, env):
            with self.assertRaises(ConfigurationError):
                create_app()
