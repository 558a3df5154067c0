"""
Role based access control.

Roles are the closed :class:`core.models.Role` enumeration.  Which roles
may use which operation is declared once, in :data:`CAPABILITIES`; views
pick a capability per HTTP method with :func:`allow`.  An empty role set
means any authenticated caller.
"""
from __future__ import annotations

from django.conf import settings
from django.utils.translation import gettext_lazy as _
from rest_framework.permissions import BasePermission

from core.exceptions import ProtectedResource
from core.models import Role

ADMIN = Role.ADMIN
DOCTOR = Role.DOCTOR
RECEPTION = Role.RECEPTION
LAB = Role.LAB
PHARMACY = Role.PHARMACY
NURSE = Role.NURSE
ULTRASOUND = Role.ULTRASOUND

ANY: frozenset[str] = frozenset()

CAPABILITIES: dict[str, frozenset[str]] = {
    'users.read': frozenset({ADMIN, RECEPTION, DOCTOR}),
    'users.self': ANY,
    'users.admin': frozenset({ADMIN}),
    'patients.read': ANY,
    'patients.write': frozenset({ADMIN, RECEPTION, DOCTOR}),
    'appointments.read': ANY,
    'appointments.write': frozenset({ADMIN, RECEPTION, DOCTOR}),
    'payments.read': frozenset({ADMIN, RECEPTION}),
    'payments.write': frozenset({ADMIN, RECEPTION}),
    'records.read': frozenset({ADMIN, DOCTOR, NURSE}),
    'records.write': frozenset({ADMIN, DOCTOR}),
    'lab.read': frozenset({ADMIN, DOCTOR, LAB}),
    'lab.order': frozenset({ADMIN, DOCTOR}),
    'lab.result': frozenset({ADMIN, LAB}),
    'lab.statistics': frozenset({ADMIN, DOCTOR, LAB}),
    'prescriptions.read': frozenset({ADMIN, DOCTOR, PHARMACY, NURSE}),
    'prescriptions.write': frozenset({ADMIN, DOCTOR}),
    'prescriptions.update': frozenset({ADMIN, DOCTOR, PHARMACY}),
    'prescriptions.dispense': frozenset({ADMIN, PHARMACY}),
    'inventory.read': frozenset({ADMIN, PHARMACY, DOCTOR}),
    'inventory.write': frozenset({ADMIN, PHARMACY}),
    'interactions.read': frozenset({ADMIN, DOCTOR, PHARMACY}),
    'interactions.write': frozenset({ADMIN, PHARMACY}),
    'nursing.read': frozenset({ADMIN, DOCTOR, NURSE}),
    'nursing.order': frozenset({ADMIN, DOCTOR}),
    'nursing.update': frozenset({ADMIN, DOCTOR, NURSE}),
    'ultrasound.read': frozenset({ADMIN, DOCTOR, ULTRASOUND}),
    'ultrasound.order': frozenset({ADMIN, DOCTOR}),
    'ultrasound.update': frozenset({ADMIN, ULTRASOUND}),
    'notes.create': ANY,
    'notes.admin': frozenset({ADMIN}),
    'statistics.read': ANY,
    'activity.read': frozenset({ADMIN}),
    'destructive': frozenset({ADMIN}),
}


def has_capability(user, capability: str) -> bool:
    if not (user and user.is_authenticated):
        return False
    roles = CAPABILITIES[capability]
    return not roles or getattr(user, 'role', None) in roles


class CapabilityPermission(BasePermission):
    """Grant access when the caller's role holds the route's capability."""

    message = _('Your role is not allowed to perform this action.')
    default_capability: str | None = None
    capability_by_method: dict[str, str] = {}

    def capability_for(self, method: str) -> str | None:
        if method in ('HEAD', 'OPTIONS'):
            method = 'GET'
        return self.capability_by_method.get(method, self.default_capability)

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        capability = self.capability_for(request.method)
        if capability is None:
            return False
        return has_capability(request.user, capability)


def allow(default: str | None = None, **by_method: str) -> type[CapabilityPermission]:
    """Build a permission class, e.g. ``allow('patients.read', POST='patients.write')``."""
    for capability in [default, *by_method.values()]:
        if capability is not None and capability not in CAPABILITIES:
            raise KeyError(f"unknown capability {capability!r}")
    return type(
        'Allow_' + '_'.join(filter(None, [default, *by_method.values()])).replace('.', '_'),
        (CapabilityPermission,),
        {
            'default_capability': default,
            'capability_by_method': {method.upper(): cap for method, cap in by_method.items()},
        },
    )


class PrimaryAdminGuard(BasePermission):
    """Refuse to delete or deactivate the primary administrator.

    Listed before the role check so that the refusal is the same for every
    authenticated caller.  ``protected_methods`` empty means every method.
    """

    protected_methods: tuple[str, ...] = ()

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        if not (request.user and request.user.is_authenticated):
            return False
        if self.protected_methods and request.method not in self.protected_methods:
            return True
        target = view.kwargs.get('pk')
        if target is not None and int(target) == settings.PRIMARY_ADMIN_ID:
            raise ProtectedResource()
        return True


def protect_primary_admin(*methods: str) -> type[PrimaryAdminGuard]:
    return type('PrimaryAdminGuard_' + '_'.join(methods or ('ALL',)), (PrimaryAdminGuard,), {
        'protected_methods': tuple(m.upper() for m in methods),
    })
