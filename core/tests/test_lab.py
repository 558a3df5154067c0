import pytest
from django.urls import reverse

from core import models
from core.models import LabTest, Role
from core.services.lab import bump_test_statistics

pytestmark = pytest.mark.django_db


def counts():
    return dict(models.TestStatistic.objects.values_list('test_name', 'count'))


def test_ordering_counts_every_requested_name(as_role, broadcaster, patient):
    doctor = as_role(Role.DOCTOR)
    url = reverse('patient-lab-tests', kwargs={'pk': patient.id})

    resp = doctor.post(url, {'test_names': 'CBC, CBC, ESR'}, format='json')

    assert resp.status_code == 201
    test = resp.json()['test']
    assert test['patient_id'] == patient.id
    assert test['doctor_id'] == doctor.user.id
    assert test['status'] == 'pending'
    assert counts() == {'CBC': 2, 'ESR': 1}
    assert broadcaster.names == ['lab_test_added']

    doctor.post(url, {'test_names': 'CBC'}, format='json')
    assert counts() == {'CBC': 3, 'ESR': 1}


def test_empty_names_are_dropped():
    bump_test_statistics(' CBC , , ESR,')

    assert counts() == {'CBC': 1, 'ESR': 1}


def test_order_without_any_test_name_is_rejected(as_role, patient):
    resp = as_role(Role.DOCTOR).post(
        reverse('patient-lab-tests', kwargs={'pk': patient.id}), {'test_names': ' , '}, format='json',
    )

    assert resp.status_code == 400
    assert 'test_names' in resp.json()['error']['fields']
    assert counts() == {}


def test_order_through_flat_route_needs_patient(as_role, patient):
    doctor = as_role(Role.DOCTOR)

    missing = doctor.post(reverse('lab-tests'), {'test_names': 'LFT'}, format='json')
    ok = doctor.post(reverse('lab-tests'), {'test_names': 'LFT', 'patient_id': patient.id}, format='json')

    assert missing.status_code == 400
    assert 'patient_id' in missing.json()['error']['fields']
    assert ok.status_code == 201


def test_lab_records_results(as_role, broadcaster, patient):
    test = LabTest.objects.create(patient=patient, test_names='CBC')

    resp = as_role(Role.LAB).put(
        reverse('lab-test-detail', kwargs={'pk': test.id}),
        {'status': 'completed', 'results': 'Hb 13.1 g/dL'},
        format='json',
    )

    assert resp.status_code == 200
    assert resp.json()['test']['status'] == 'completed'
    assert resp.json()['test']['results'] == 'Hb 13.1 g/dL'
    assert broadcaster.names == ['lab_test_updated']


def test_doctors_cannot_enter_results(as_role, patient):
    test = LabTest.objects.create(patient=patient, test_names='CBC')

    resp = as_role(Role.DOCTOR).put(reverse('lab-test-detail', kwargs={'pk': test.id}), {'results': 'x'}, format='json')

    assert resp.status_code == 403


def test_statistics_are_sorted_by_count(as_role):
    models.TestStatistic.objects.create(test_name='ESR', count=2)
    models.TestStatistic.objects.create(test_name='CBC', count=7)
    models.TestStatistic.objects.create(test_name='AST', count=2)

    resp = as_role(Role.LAB).get(reverse('test-statistics'))

    assert resp.json() == [
        {'test_name': 'CBC', 'count': 7},
        {'test_name': 'AST', 'count': 2},
        {'test_name': 'ESR', 'count': 2},
    ]


def test_status_filter(as_role, patient):
    LabTest.objects.create(patient=patient, test_names='CBC')
    done = LabTest.objects.create(patient=patient, test_names='ESR', status='completed')

    resp = as_role(Role.LAB).get(reverse('lab-tests'), {'status': 'completed'})

    assert [t['id'] for t in resp.json()] == [done.id]
