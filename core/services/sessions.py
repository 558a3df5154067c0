from __future__ import annotations

from rest_framework_simplejwt.tokens import AccessToken


def issue_token(user) -> tuple[str, int]:
    """Sign a session token for ``user``; returns (token, lifetime seconds)."""
    token = AccessToken.for_user(user)
    token['username'] = user.username
    token['role'] = user.role
    token['name'] = user.name or user.username
    return str(token), int(token.lifetime.total_seconds())
