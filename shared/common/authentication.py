# shared/common/authentication.py
"""
JWT Authentication

Services never see passwords or sessions. The identity provider issues a
signed token carrying the user id, role and country; this module verifies it
and exposes the claims as a lightweight user object.
"""

import jwt
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Tuple
from django.conf import settings
from rest_framework import authentication, exceptions
from rest_framework.request import Request

logger = logging.getLogger(__name__)


class JWTAuthentication(authentication.BaseAuthentication):
    """
    JWT Token Authentication for API requests.
    Verifies HS256 tokens signed with JWT_SECRET_KEY.
    """

    keyword = 'Bearer'

    def authenticate(self, request: Request) -> Optional[Tuple[Any, Dict]]:
        auth_header = authentication.get_authorization_header(request)

        if not auth_header:
            return None

        try:
            auth_parts = auth_header.decode('utf-8').split()
        except UnicodeDecodeError:
            raise exceptions.AuthenticationFailed('Invalid token header encoding')

        if not auth_parts or auth_parts[0].lower() != self.keyword.lower():
            return None

        if len(auth_parts) != 2:
            raise exceptions.AuthenticationFailed('Invalid token header format')

        return self.authenticate_token(auth_parts[1])

    def authenticate_token(self, token: str) -> Tuple['TokenUser', Dict]:
        """Validate and decode JWT token"""
        try:
            payload = jwt.decode(
                token,
                settings.JWT_SECRET_KEY,
                algorithms=[settings.JWT_ALGORITHM],
                issuer=settings.JWT_ISSUER,
                options={'require': ['exp', 'iat', 'sub', 'iss']},
            )
        except jwt.ExpiredSignatureError:
            raise exceptions.AuthenticationFailed('Token has expired')
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise exceptions.AuthenticationFailed('Invalid token')

        if not payload.get('role') and not payload.get('roles'):
            raise exceptions.AuthenticationFailed('Token carries no role')

        try:
            uuid.UUID(str(payload['sub']))
        except ValueError:
            raise exceptions.AuthenticationFailed('Invalid token subject')

        return TokenUser(payload), payload

    def authenticate_header(self, request: Request) -> str:
        return self.keyword


class TokenUser:
    """
    User object created from JWT token payload.
    """

    def __init__(self, payload: Dict):
        self.payload = payload
        self.id = payload.get('sub')
        self.email = payload.get('email')
        roles = payload.get('roles') or []
        self.role = payload.get('role') or (roles[0] if roles else None)
        self.country_code = payload.get('country_code')
        self.is_active = True
        self.is_authenticated = True
        self.is_anonymous = False

    def __str__(self) -> str:
        return f"TokenUser({self.id}, {self.role})"

    def has_role(self, role: str) -> bool:
        return self.role == role


class JWTTokenGenerator:
    """
    Issue tokens compatible with JWTAuthentication.
    Used by operational tooling and the test-suite.
    """

    @staticmethod
    def generate_access_token(
        user_id: str,
        role: str,
        country_code: str = None,
        email: str = None,
        extra_claims: Dict = None
    ) -> str:
        now = datetime.now(timezone.utc)

        payload = {
            'sub': str(user_id),
            'role': role,
            'country_code': country_code,
            'email': email,
            'iat': now,
            'exp': now + settings.JWT_ACCESS_TOKEN_LIFETIME,
            'iss': settings.JWT_ISSUER,
            'type': 'access',
        }

        if extra_claims:
            payload.update(extra_claims)

        return jwt.encode(
            payload,
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM
        )

    @staticmethod
    def decode_token(token: str, verify_exp: bool = True) -> Dict:
        """Decode and verify a token"""
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            issuer=settings.JWT_ISSUER,
            options={'verify_exp': verify_exp}
        )
