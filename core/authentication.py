"""
Bearer token authentication.

Session tokens are signed JWTs issued by ``core.services.sessions``.  The
token itself is the session: the authenticated identity is rebuilt from
its claims (``ClinicIdentity``) without touching the database, so an
unauthenticated or badly authenticated request is rejected before any
store access happens.  Keeping this module free of view imports avoids
circular imports when DRF loads ``DEFAULT_AUTHENTICATION_CLASSES``.
"""
from __future__ import annotations

import jwt
from django.utils.functional import cached_property
from rest_framework_simplejwt.authentication import JWTStatelessUserAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.models import TokenUser
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from core.exceptions import SessionExpired, SessionInvalid


class ClinicIdentity(TokenUser):
    """The caller as described by the token claims."""

    @cached_property
    def id(self) -> int:
        return int(self.token[api_settings.USER_ID_CLAIM])

    @cached_property
    def role(self) -> str:
        return self.token.get('role', '')

    @cached_property
    def name(self) -> str:
        return self.token.get('name', '')

    @property
    def is_admin(self) -> bool:
        return self.role == 'admin'


def _is_expired(exc: BaseException) -> bool:
    seen: BaseException | None = exc
    while seen is not None:
        if isinstance(seen, jwt.ExpiredSignatureError):
            return True
        seen = seen.__cause__ or seen.__context__
    return False


def decode_session_token(raw_token: str | bytes) -> AccessToken:
    """Validate ``raw_token`` or raise ``SessionExpired``/``SessionInvalid``."""
    try:
        return AccessToken(raw_token)
    except TokenError as exc:
        if _is_expired(exc):
            raise SessionExpired() from exc
        raise SessionInvalid() from exc


class BearerTokenAuthentication(JWTStatelessUserAuthentication):
    """``Authorization: Bearer <token>``.  Missing header means anonymous."""

    def get_validated_token(self, raw_token):
        return decode_session_token(raw_token)

    def get_user(self, validated_token):
        if api_settings.USER_ID_CLAIM not in validated_token or 'role' not in validated_token:
            raise SessionInvalid()
        return ClinicIdentity(validated_token)
