from io import StringIO

import pytest
from django.conf import settings
from django.core.management import call_command

from core.models import DrugInteraction, Role, User

pytestmark = pytest.mark.django_db


def test_seed_creates_one_account_per_role_and_is_idempotent():
    out = StringIO()

    call_command('seed_clinic', stdout=out)
    call_command('seed_clinic', stdout=out)

    assert User.objects.count() == len(Role.values)
    assert sorted(User.objects.values_list('role', flat=True)) == sorted(Role.values)
    assert DrugInteraction.objects.count() == 4
    admin = User.objects.get(username='admin')
    assert admin.is_staff
    assert admin.check_password(settings.DEFAULT_ADMIN_PASSWORD)
    assert User.objects.get(username='lab').check_password(settings.DEFAULT_STAFF_PASSWORD)
    assert 'exists: admin' in out.getvalue()
