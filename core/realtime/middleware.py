"""
WebSocket authentication.

Browsers cannot set an ``Authorization`` header on a WebSocket handshake,
so the session token travels in the query string: ``/ws/events/?token=``.
The identity is rebuilt from the token claims, without a database lookup.
"""
from __future__ import annotations

import logging
from urllib.parse import parse_qs

from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from rest_framework.exceptions import AuthenticationFailed

logger = logging.getLogger(__name__)


def identity_from_token(raw_token: str | None):
    from core.authentication import BearerTokenAuthentication, decode_session_token

    if not raw_token:
        return AnonymousUser()
    try:
        token = decode_session_token(raw_token)
        return BearerTokenAuthentication().get_user(token)
    except AuthenticationFailed as exc:
        logger.debug("socket token rejected: %s", exc.default_code)
        return AnonymousUser()


class TokenAuthMiddleware(BaseMiddleware):
    async def __call__(self, scope, receive, send):
        query = parse_qs((scope.get('query_string') or b'').decode())
        token = (query.get('token') or [None])[0]
        scope = dict(scope, user=identity_from_token(token))
        return await super().__call__(scope, receive, send)
