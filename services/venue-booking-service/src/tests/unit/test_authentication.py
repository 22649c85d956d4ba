# services/venue-booking-service/src/tests/unit/test_authentication.py
"""
Unit Tests for JWT authentication
"""

import uuid
from datetime import timedelta

import jwt
import pytest
from django.conf import settings
from django.test import override_settings
from rest_framework import exceptions
from rest_framework.test import APIRequestFactory

from shared.common.authentication import JWTAuthentication, JWTTokenGenerator, TokenUser


def bearer_request(token):
    return APIRequestFactory().get('/api/v1/bookings/', HTTP_AUTHORIZATION=f'Bearer {token}')


class TestJWTAuthentication:

    def setup_method(self):
        self.auth = JWTAuthentication()

    def test_valid_token(self):
        user_id = uuid.uuid4()
        token = JWTTokenGenerator.generate_access_token(user_id, 'manager', country_code='NOR')

        user, payload = self.auth.authenticate(bearer_request(token))

        assert isinstance(user, TokenUser)
        assert user.id == str(user_id)
        assert user.role == 'manager'
        assert user.country_code == 'NOR'
        assert payload['iss'] == settings.JWT_ISSUER

    def test_no_header_is_anonymous(self):
        request = APIRequestFactory().get('/api/v1/bookings/')
        assert self.auth.authenticate(request) is None

    def test_other_scheme_is_ignored(self):
        request = APIRequestFactory().get('/', HTTP_AUTHORIZATION='Basic dXNlcjpwYXNz')
        assert self.auth.authenticate(request) is None

    def test_malformed_header(self):
        request = APIRequestFactory().get('/', HTTP_AUTHORIZATION='Bearer a b')
        with pytest.raises(exceptions.AuthenticationFailed):
            self.auth.authenticate(request)

    @override_settings(JWT_ACCESS_TOKEN_LIFETIME=timedelta(seconds=-1))
    def test_expired_token(self):
        token = JWTTokenGenerator.generate_access_token(uuid.uuid4(), 'customer')
        with pytest.raises(exceptions.AuthenticationFailed, match='expired'):
            self.auth.authenticate(bearer_request(token))

    def test_wrong_signature(self):
        token = jwt.encode(
            {'sub': str(uuid.uuid4()), 'role': 'superadmin', 'iss': settings.JWT_ISSUER,
             'iat': 0, 'exp': 4102444800},
            'not-the-secret',
            algorithm='HS256',
        )
        with pytest.raises(exceptions.AuthenticationFailed):
            self.auth.authenticate(bearer_request(token))

    def test_wrong_issuer(self):
        token = JWTTokenGenerator.generate_access_token(
            uuid.uuid4(), 'customer', extra_claims={'iss': 'someone-else'}
        )
        with pytest.raises(exceptions.AuthenticationFailed):
            self.auth.authenticate(bearer_request(token))

    def test_token_without_role(self):
        token = JWTTokenGenerator.generate_access_token(uuid.uuid4(), None)
        with pytest.raises(exceptions.AuthenticationFailed, match='role'):
            self.auth.authenticate(bearer_request(token))

    def test_subject_must_be_uuid(self):
        token = JWTTokenGenerator.generate_access_token('admin', 'superadmin')
        with pytest.raises(exceptions.AuthenticationFailed, match='subject'):
            self.auth.authenticate(bearer_request(token))


class TestJWTTokenGenerator:

    def test_round_trip_claims(self):
        token = JWTTokenGenerator.generate_access_token(
            'c0ffee00-0000-4000-8000-000000000001', 'customer', country_code='SWE',
            extra_claims={'team': 'handball'},
        )
        payload = JWTTokenGenerator.decode_token(token)
        assert payload['role'] == 'customer'
        assert payload['team'] == 'handball'
        assert payload['type'] == 'access'

    @override_settings(JWT_ACCESS_TOKEN_LIFETIME=timedelta(seconds=-1))
    def test_decode_expired_without_verification(self):
        token = JWTTokenGenerator.generate_access_token(uuid.uuid4(), 'manager')
        with pytest.raises(jwt.ExpiredSignatureError):
            JWTTokenGenerator.decode_token(token)
        assert JWTTokenGenerator.decode_token(token, verify_exp=False)['role'] == 'manager'


class TestTokenUser:

    def test_falls_back_to_first_role(self):
        user = TokenUser({'sub': 'x', 'roles': ['customer', 'manager']})
        assert user.role == 'customer'
        assert user.has_role('customer')
        assert user.is_authenticated
