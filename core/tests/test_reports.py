import pytest
from django.urls import reverse

from core.models import LabTest, MedicalRecord, Patient, Payment, Role
from core.services.audit import record_activity

pytestmark = pytest.mark.django_db


def add_patient(name, age):
    return Patient.objects.create(name=name, phone='0', age=age, gender='female')


def test_statistics_totals_and_breakdowns(as_role):
    child = add_patient('Child', 7)
    adult = add_patient('Adult', 40)
    add_patient('Elder', 75)
    LabTest.objects.create(patient=child, test_names='CBC')
    LabTest.objects.create(patient=adult, test_names='ESR', status='completed')
    MedicalRecord.objects.create(patient=adult, diagnosis='Malaria')
    MedicalRecord.objects.create(patient=child, diagnosis='Malaria')
    MedicalRecord.objects.create(patient=child, diagnosis='Typhoid')
    MedicalRecord.objects.create(patient=child, symptoms='cough')
    Payment.objects.create(patient=adult, amount='100.50', payment_method='cash')
    Payment.objects.create(patient=adult, amount='20.00', payment_method='card')

    stats = as_role(Role.NURSE).get(reverse('statistics')).json()

    assert stats['total_patients'] == 3
    assert stats['total_tests'] == 2
    assert stats['pending_tests'] == 1
    assert stats['total_payments'] == '120.50'
    # admin and the nurse making the request
    assert stats['active_users'] == 2
    assert stats['age_groups'] == [
        {'age_group': '0-12', 'count': 1},
        {'age_group': '13-60', 'count': 1},
        {'age_group': '60+', 'count': 1},
    ]
    assert stats['top_diagnoses'] == [
        {'diagnosis': 'Malaria', 'count': 2},
        {'diagnosis': 'Typhoid', 'count': 1},
    ]


def test_empty_clinic_statistics(as_role):
    stats = as_role(Role.ADMIN).get(reverse('statistics')).json()

    assert stats['total_patients'] == 0
    assert stats['total_payments'] == '0.00'
    assert stats['age_groups'] == []


def test_activity_log_is_newest_first_with_actor(as_role, admin_user):
    record_activity(admin_user, 'first')
    record_activity(admin_user, 'second', {'id': 4})
    record_activity(None, 'login_failed', {'username': 'ghost'})

    entries = as_role(Role.ADMIN).get(reverse('activity-log'), {'limit': 2}).json()

    assert [e['action'] for e in entries] == ['login_failed', 'second']
    assert entries[0]['user_name'] is None
    assert entries[1]['user_name'] == 'Admin'
    assert entries[1]['user_role'] == 'admin'
    assert entries[1]['details'] == '{"id": 4}'


def test_activity_log_limit_is_bounded(as_role):
    resp = as_role(Role.ADMIN).get(reverse('activity-log'), {'limit': 501})

    assert resp.status_code == 400
    assert 'limit' in resp.json()['error']['fields']


def test_health_reports_database(anon, settings):
    resp = anon.get(reverse('health'))

    assert resp.status_code == 200
    body = resp.json()
    assert body['status'] == 'OK'
    assert body['database'] is True
    assert body['environment'] == settings.ENV
    assert body['uptime'] >= 0


def test_health_degrades_when_database_is_down(anon, monkeypatch):
    def down(self):
        raise ConnectionError('database is gone')

    monkeypatch.setattr('core.store.Store.ping', down)

    resp = anon.get(reverse('health'))

    assert resp.status_code == 503
    assert resp.json()['status'] == 'DEGRADED'
    assert resp.json()['database'] is False
