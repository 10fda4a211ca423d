# apps/core/auth_service.py

"""
Authentication service - registration, login and bearer tokens

Password hashing is Django's; tokens are HS256 JWTs signed with
AUTH_TOKEN_SECRET. Views and the WebSocket middleware only talk to
`auth_service`, never to PyJWT directly.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

import jwt
from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ImproperlyConfigured, ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction

from .exceptions import AuthFailure, Conflict, InvalidInput, PermissionDenied
from .models import User

logger = logging.getLogger(__name__)


class AuthenticationService:
    """Registers users, checks credentials and issues/verifies tokens"""

    def __init__(self):
        self._algorithm = 'HS256'

    # === REGISTRATION / LOGIN ===

    def register(self, data: Dict) -> User:
        """
        Create an account

        Raises InvalidInput for missing fields and Conflict when the
        email is already taken.
        """
        email = (data.get('email') or '').strip().lower()
        password = data.get('password') or ''
        name = (data.get('name') or '').strip()

        if not email or not password or not name:
            raise InvalidInput('All fields are required')

        try:
            validate_email(email)
        except ValidationError:
            raise InvalidInput('A valid email is required')

        try:
            validate_password(password)
        except ValidationError as e:
            raise InvalidInput(' '.join(e.messages))

        if User.objects.filter(email=email).exists():
            raise Conflict('User with this email already exists')

        try:
            with transaction.atomic():
                user = User(username=email, email=email, name=name)
                user.set_password(password)
                user.save()
        except IntegrityError:
            # Lost a race against another registration with the same email
            raise Conflict('User with this email already exists')

        logger.info(f"👤 User registered: {user.id}")
        return user

    def login(self, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and return the user with a fresh token

        The error never says whether the email or the password was wrong.
        """
        if not email or not password:
            raise InvalidInput('Email and password are required')

        user = self._find_active_user(email.strip().lower())
        if user is None or not user.check_password(password):
            raise AuthFailure('Invalid credentials')

        return user, self.issue_token(user)

    # === TOKENS ===

    def issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            'id': str(user.id),
            'iat': now,
            'exp': now + timedelta(minutes=settings.AUTH_TOKEN_TTL_MINUTES),
        }
        return jwt.encode(payload, self._secret(), algorithm=self._algorithm)

    def verify_token(self, token: Optional[str]) -> User:
        """
        Resolve a bearer token to its user

        Missing token -> AuthFailure (401); bad, expired or orphaned
        token -> PermissionDenied (403).
        """
        if not token:
            raise AuthFailure()

        try:
            payload = jwt.decode(token, self._secret(), algorithms=[self._algorithm])
        except jwt.InvalidTokenError as e:
            logger.warning(f"⚠️ Token verification failed: {e}")
            raise PermissionDenied()

        try:
            user = User.objects.filter(id=payload.get('id'), is_active=True).first()
        except (ValidationError, ValueError):
            user = None
        if user is None:
            raise PermissionDenied()
        return user

    @staticmethod
    def token_from_header(header: Optional[str]) -> Optional[str]:
        """Extract TOKEN from 'Bearer TOKEN'"""
        if not header:
            return None
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return None
        return parts[1]

    # === PRIVATE ===

    def _secret(self) -> str:
        secret = settings.AUTH_TOKEN_SECRET
        if not secret:
            raise ImproperlyConfigured("AUTH_TOKEN_SECRET is not configured")
        return secret

    @staticmethod
    def _find_active_user(email: str) -> Optional[User]:
        return User.objects.filter(email=email, is_active=True).first()


# Shared instance used by views, decorators and the WebSocket middleware
auth_service = AuthenticationService()
