"""
Login endpoint.

Staff log in with username and password and receive a signed session
token valid for 24 hours.  There is no server-side session: logging out
means discarding the token.  Unknown usernames, inactive accounts, wrong
passwords and role mismatches all fail with the same error so that the
response never reveals which accounts exist.
"""
from __future__ import annotations

from django.contrib.auth import authenticate
from rest_framework.decorators import api_view, authentication_classes, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from core.exceptions import InvalidCredentials
from core.models import Role
from core.serializers.auth import LoginSerializer
from core.services.audit import record_activity
from core.services.sessions import issue_token


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    username = vd['username']
    requested_role = vd.get('role') or None
    ip = request.META.get('REMOTE_ADDR')

    # ModelBackend runs the hasher even for unknown usernames and rejects
    # inactive accounts.
    user = authenticate(request, username=username, password=vd['password'])
    if user is not None and requested_role and user.role not in (requested_role, Role.ADMIN):
        user = None
    if user is None:
        record_activity(None, 'login_failed', {'username': username, 'ip': ip})
        raise InvalidCredentials()

    token, expires_in = issue_token(user)
    record_activity(user, 'login', {'role': user.role, 'ip': ip})

    return Response({
        'ok': True,
        'token': token,
        'expires_in': expires_in,
        'user': {
            'id': user.id,
            'name': user.name,
            'username': user.username,
            'role': user.role,
            'shift': user.shift,
        },
    })
