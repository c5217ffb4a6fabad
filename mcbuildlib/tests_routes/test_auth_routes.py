import unittest
from unittest.mock import MagicMock, patch

import jwt
from flask import Flask

from mcbuildlib import _register_error_handlers
from mcbuildlib.services.auth import AuthService
from mcbuildlib.services.errors import Conflict


class TestAuthRoutes(unittest.TestCase):

    def setUp(self):
        self.app = Flask(__name__)
        self.app.config['TESTING'] = True
        self.app.config['JWT_SECRET'] = 'test-secret-key'
        self.app.config['JWT_EXPIRES_HOURS'] = 24
        _register_error_handlers(self.app)

        # Import and register blueprint
        from mcbuildlib.routes.auth import auth_bp
        self.app.register_blueprint(auth_bp, url_prefix='/api')
        self.client = self.app.test_client()

        self.mock_conn = MagicMock()
        self.user = {'id': 3, 'username': 'steve', 'role': 'User'}

    @patch('mcbuildlib.routes.auth.AuthService.authenticate_user')
    @patch('mcbuildlib.routes.auth.get_conn')
    def test_login_success(self, mock_get_conn, mock_authenticate):
        """Test successful login"""
        mock_get_conn.return_value.__enter__.return_value = self.mock_conn
        mock_authenticate.return_value = self.user

        response = self.client.post(
            '/api/auth/login',
            json={'username': 'steve', 'password': 'diamond-pickaxe'}
        )

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['user'], self.user)
        payload = jwt.decode(data['access_token'], 'test-secret-key', algorithms=['HS256'])
        self.assertEqual(payload['sub'], '3')
        self.assertEqual(payload['role'], 'User')
        mock_authenticate.assert_called_once_with(self.mock_conn, 'steve', 'diamond-pickaxe')

    @patch('mcbuildlib.routes.auth.AuthService.authenticate_user', return_value=None)
    @patch('mcbuildlib.routes.auth.get_conn')
    def test_login_invalid_credentials(self, mock_get_conn, _mock_authenticate):
        """Test login with wrong password"""
        mock_get_conn.return_value.__enter__.return_value = self.mock_conn

        response = self.client.post(
            '/api/auth/login',
            json={'username': 'steve', 'password': 'wrong-password'}
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['error'], 'invalid_credentials')

    def test_login_missing_fields(self):
        """Test login without a password"""
        response = self.client.post('/api/auth/login', json={'username': 'steve'})
        self.assertEqual(response.status_code, 400)

    @patch('mcbuildlib.routes.auth.AuthService.register_user')
    @patch('mcbuildlib.routes.auth.get_conn')
    def test_register_conflict(self, mock_get_conn, mock_register):
        """Test registering a taken username"""
        mock_get_conn.return_value.__enter__.return_value = self.mock_conn
        mock_register.side_effect = Conflict(
            "A User with name 'steve' already exists. Please choose a unique name."
        )

        response = self.client.post(
            '/api/users/register',
            json={'username': 'steve', 'password': 'diamond-pickaxe'}
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.get_json()['error'], 'conflict')

    @patch('mcbuildlib.routes.auth.AuthService.get_user_by_id')
    @patch('mcbuildlib.routes.auth.get_conn')
    def test_me_with_token(self, mock_get_conn, mock_get_user):
        """Test /users/me with a valid bearer token"""
        mock_get_conn.return_value.__enter__.return_value = self.mock_conn
        mock_get_user.return_value = self.user
        token = AuthService.generate_token(self.user, 'test-secret-key')

        response = self.client.get('/api/users/me', headers={'Authorization': f'Bearer {token}'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['user']['username'], 'steve')
        mock_get_user.assert_called_once_with(self.mock_conn, 3)

    def test_me_without_token(self):
        """Test /users/me without a token"""
        response = self.client.get('/api/users/me')
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.get_json()['error'], 'unauthorized')


def test_register_login_me_end_to_end(client):
    resp = client.post("/api/users/register", json={"username": "alex", "password": "emerald-sword"})
    assert resp.status_code == 201
    assert resp.get_json()["user"]["role"] == "User"

    resp = client.post("/api/auth/login", json={"username": "alex", "password": "emerald-sword"})
    token = resp.get_json()["access_token"]

    resp = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["username"] == "alex"


def test_register_validation_error(client):
    resp = client.post("/api/users/register", json={"username": "al", "password": "x"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "validation_failed"
    assert set(body["details"]) == {"username", "password"}


def test_non_object_bodies_are_rejected(client):
    resp = client.post("/api/auth/login", json=["admin"])
    assert resp.status_code == 400
    assert resp.get_json()["details"] == {"body": "Request body must be a JSON object"}

    resp = client.post("/api/users/register", json="steve")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "validation_failed"
