"""
Login and bearer token tests.

A failed login must look the same whatever the reason, and a rejected
token must say whether it expired or was never valid.
"""
from datetime import timedelta

import pytest
from django.urls import reverse
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from core.models import ActivityLog, Role
from core.tests.conftest import PASSWORD, client_for

pytestmark = pytest.mark.django_db


def login(client, **body):
    return client.post(reverse('login'), body, format='json')


def test_login_returns_token_carrying_role(anon, make_user):
    doctor = make_user(Role.DOCTOR, username='dr_salma', name='Salma', shift='morning')

    resp = login(anon, username='dr_salma', password=PASSWORD)

    assert resp.status_code == 200
    body = resp.json()
    assert body['ok'] is True
    assert body['expires_in'] == 24 * 3600
    assert body['user'] == {
        'id': doctor.id, 'name': 'Salma', 'username': 'dr_salma', 'role': 'doctor', 'shift': 'morning',
    }
    token = AccessToken(body['token'])
    assert int(token['user_id']) == doctor.id
    assert token['role'] == 'doctor'
    assert ActivityLog.objects.filter(action='login', user_id=doctor.id).exists()


@pytest.mark.parametrize('username,password', [
    ('nobody', PASSWORD),
    ('lab1', 'wrong-password'),
    ('inactive', PASSWORD),
])
def test_failed_logins_are_indistinguishable(anon, make_user, username, password):
    make_user(Role.LAB, username='lab1')
    make_user(Role.LAB, username='inactive', is_active=False)

    resp = login(anon, username=username, password=password)

    assert resp.status_code == 401
    assert resp.json() == {
        'ok': False,
        'error': {'code': 'invalid_credentials', 'message': 'Invalid username or password.'},
    }
    assert ActivityLog.objects.filter(action='login_failed').count() == 1


def test_role_mismatch_is_rejected_like_bad_password(anon, make_user):
    make_user(Role.DOCTOR, username='dr_ali')

    resp = login(anon, username='dr_ali', password=PASSWORD, role='lab')

    assert resp.status_code == 401
    assert resp.json()['error']['code'] == 'invalid_credentials'


def test_admin_may_log_in_under_any_role(anon, admin_user):
    resp = login(anon, username='admin', password=PASSWORD, role='pharmacy')

    assert resp.status_code == 200
    assert AccessToken(resp.json()['token'])['role'] == 'admin'


def test_login_requires_both_fields(anon):
    resp = login(anon, username='admin')

    assert resp.status_code == 400
    assert resp.json()['error']['code'] == 'validation_failed'
    assert 'password' in resp.json()['error']['fields']


def test_missing_token_is_not_authenticated(anon):
    resp = anon.get(reverse('patients'))

    assert resp.status_code == 401
    assert resp.json()['error']['code'] == 'not_authenticated'


def test_garbage_token_is_invalid():
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION='Bearer not-a-token')

    resp = client.get(reverse('patients'))

    assert resp.status_code == 401
    assert resp.json()['error']['code'] == 'token_invalid'


def test_expired_token_is_reported_as_expired(make_user):
    nurse = make_user(Role.NURSE)
    token = AccessToken.for_user(nurse)
    token['role'] = nurse.role
    token.set_exp(lifetime=-timedelta(hours=1))
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    resp = client.get(reverse('patients'))

    assert resp.status_code == 401
    assert resp.json()['error']['code'] == 'token_expired'


def test_token_without_role_claim_is_invalid(make_user):
    nurse = make_user(Role.NURSE)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {AccessToken.for_user(nurse)}')

    resp = client.get(reverse('patients'))

    assert resp.status_code == 401
    assert resp.json()['error']['code'] == 'token_invalid'


def test_requests_need_no_database_lookup_for_identity(make_user, django_assert_num_queries):
    client = client_for(make_user(Role.RECEPTION))

    # Only the listing itself touches the database.
    with django_assert_num_queries(1):
        resp = client.get(reverse('patients'))

    assert resp.status_code == 200
