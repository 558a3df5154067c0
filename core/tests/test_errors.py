"""Every failure leaves the API in the same envelope."""
import os
import subprocess
import sys
from pathlib import Path

import pytest
from django.db import IntegrityError
from django.urls import reverse

from core.auth_views import LoginRateThrottle
from core.exceptions import api_exception_handler
from core.models import Role

pytestmark = pytest.mark.django_db


@pytest.fixture
def exploding_statistics(monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError('secret connection string')

    monkeypatch.setattr('core.views.reports.clinic_statistics', boom)


def test_unknown_route_is_json(anon):
    resp = anon.get('/api/no-such-thing')

    assert resp.status_code == 404
    assert resp.json() == {'ok': False, 'error': {'code': 'route_not_found', 'message': 'Route not found.'}}


def test_unclassified_error_hides_details(as_role, exploding_statistics):
    resp = as_role(Role.ADMIN).get(reverse('statistics'))

    assert resp.status_code == 500
    error = resp.json()['error']
    assert error == {'code': 'server_error', 'message': 'Internal server error.'}
    assert 'secret' not in resp.content.decode()


def test_debug_mode_adds_detail(settings, as_role, exploding_statistics):
    settings.DEBUG = True

    resp = as_role(Role.ADMIN).get(reverse('statistics'))

    detail = resp.json()['error']['detail']
    assert detail['message'] == 'secret connection string'
    assert any('RuntimeError' in line for line in detail['traceback'])


def test_integrity_errors_become_conflicts():
    resp = api_exception_handler(IntegrityError('UNIQUE constraint failed: core_inventoryitem.medicine_name'), {})

    assert resp.status_code == 400
    assert resp.data['error']['code'] == 'conflict'
    assert 'UNIQUE' not in resp.data['error']['message']


def test_malformed_json_is_a_parse_error(as_role):
    client = as_role(Role.RECEPTION)

    resp = client.generic('POST', reverse('patients'), '{"name": ', content_type='application/json')

    assert resp.status_code == 400
    assert resp.json()['error']['code'] == 'parse_error'


def test_method_not_allowed(as_role):
    resp = as_role(Role.ADMIN).delete(reverse('patients'))

    assert resp.status_code == 405
    assert resp.json()['error']['code'] == 'method_not_allowed'


def test_login_throttle_uses_the_envelope(anon, monkeypatch):
    monkeypatch.setattr(LoginRateThrottle, 'rate', '1/min', raising=False)

    anon.post(reverse('login'), {'username': 'a', 'password': 'b'}, format='json')
    resp = anon.post(reverse('login'), {'username': 'a', 'password': 'b'}, format='json')

    assert resp.status_code == 429
    assert resp.json()['error']['code'] == 'throttled'


@pytest.mark.parametrize('first', ['core.authentication', 'core.exceptions', 'rest_framework.views'])
def test_project_loads_whatever_is_imported_first(first):
    code = (
        'import importlib, django\n'
        'django.setup()\n'
        f'importlib.import_module({first!r})\n'
        'from django.core.management import call_command\n'
        'call_command("check")\n'
    )
    result = subprocess.run(
        [sys.executable, '-c', code],
        cwd=Path(__file__).resolve().parents[2],
        env={**os.environ, 'DJANGO_SETTINGS_MODULE': 'clinic.settings'},
        capture_output=True,
        text=True,
        timeout=120,
    )

    assert result.returncode == 0, result.stderr
