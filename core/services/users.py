from __future__ import annotations

from django.utils.translation import gettext_lazy as _

from core.exceptions import Conflict
from core.models import User
from core.store import get_store


def create_staff_user(data: dict) -> User:
    data = dict(data)
    password = data.pop('password')
    with get_store().write():
        if User.objects.filter(username__iexact=data['username']).exists():
            raise Conflict(_('A user with that username already exists.'))
        user = User(**data)
        user.set_password(password)
        user.save()
    return user


def set_password(user: User, password: str) -> None:
    with get_store().write():
        user.set_password(password)
        user.save(update_fields=['password'])


def toggle_active(user: User) -> User:
    with get_store().write():
        user = User.objects.select_for_update().get(pk=user.pk)
        user.is_active = not user.is_active
        user.save(update_fields=['is_active'])
    return user
