"""
Staff account management.

Administrators create, edit, deactivate and delete accounts.  Reception
and doctors may list staff (to pick a doctor for an appointment, for
example); everyone else only sees and edits their own profile.  The
primary administrator can never be deleted or deactivated.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from core.models import User
from core.permissions import allow, has_capability, protect_primary_admin
from core.serializers.users import (
    PasswordChangeSerializer,
    UserAdminUpdateSerializer,
    UserCreateSerializer,
    UserListQuerySerializer,
    UserSerializer,
    UserSelfUpdateSerializer,
)
from core.services.audit import record_activity
from core.services.events import publish_change
from core.services.users import create_staff_user, set_password, toggle_active
from core.store import get_store


def _require_self_or_admin(request, pk: int) -> None:
    if request.user.role != 'admin' and request.user.id != pk:
        raise PermissionDenied()


@api_view(['GET', 'POST'])
@permission_classes([allow('users.read', POST='users.admin')])
def users(request):
    if request.method == 'GET':
        q = UserListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = User.objects.order_by('-date_joined', '-id')
        if q.validated_data.get('role'):
            qs = qs.filter(role=q.validated_data['role'])
        if q.validated_data.get('active') is not None:
            qs = qs.filter(is_active=q.validated_data['active'])
        return Response(UserSerializer(qs, many=True).data)

    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = create_staff_user(s.validated_data)
    data = UserSerializer(user).data
    publish_change(request.user, 'user_created', 'user_added', data, {'username': user.username, 'role': user.role})
    return Response({'ok': True, 'user': data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([protect_primary_admin('DELETE'), allow('users.self', DELETE='destructive')])
def user_detail(request, pk: int):
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        if not has_capability(request.user, 'users.read'):
            _require_self_or_admin(request, pk)
        return Response(UserSerializer(user).data)

    if request.method == 'PUT':
        _require_self_or_admin(request, pk)
        serializer_class = UserAdminUpdateSerializer if request.user.role == 'admin' else UserSelfUpdateSerializer
        s = serializer_class(user, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        with get_store().write():
            user = s.save()
        data = UserSerializer(user).data
        publish_change(request.user, 'user_updated', 'user_updated', data, {'id': user.id, 'fields': sorted(s.validated_data)})
        return Response({'ok': True, 'user': data})

    with get_store().write():
        user.delete()
    publish_change(request.user, 'user_deleted', 'user_deleted', {'id': pk}, {'id': pk, 'username': user.username})
    return Response({'ok': True})


@api_view(['PUT'])
@permission_classes([protect_primary_admin(), allow('users.admin')])
def user_toggle_active(request, pk: int):
    user = toggle_active(get_object_or_404(User, pk=pk))
    payload = {'id': user.id, 'active': user.is_active}
    publish_change(
        request.user, 'user_activated' if user.is_active else 'user_deactivated', 'user_updated', payload, payload,
    )
    return Response({'ok': True, 'active': user.is_active})


@api_view(['PUT'])
@permission_classes([allow('users.self')])
def user_change_password(request, pk: int):
    _require_self_or_admin(request, pk)
    user = get_object_or_404(User, pk=pk)
    s = PasswordChangeSerializer(data=request.data, context={'user': user})
    s.is_valid(raise_exception=True)
    set_password(user, s.validated_data['new_password'])
    # Password changes are audited but never broadcast.
    record_activity(request.user, 'password_changed', {'id': user.id})
    return Response({'ok': True})
