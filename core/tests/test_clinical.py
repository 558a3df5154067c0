"""Medical records, prescriptions, appointments and notes to administrators."""
import pytest
from django.urls import reverse

from core.models import AdminNote, Prescription, Role

pytestmark = pytest.mark.django_db


def test_medical_record_is_attributed_to_the_doctor(as_role, broadcaster, patient):
    doctor = as_role(Role.DOCTOR)
    url = reverse('patient-medical-records', kwargs={'pk': patient.id})

    resp = doctor.post(url, {'symptoms': 'fever', 'diagnosis': 'Malaria'}, format='json')

    assert resp.status_code == 201
    record = resp.json()['record']
    assert record['doctor_id'] == doctor.user.id
    assert record['doctor_name'] == doctor.user.name
    assert record['patient_id'] == patient.id
    assert as_role(Role.NURSE).get(url).json() == [record]
    assert broadcaster.names == ['medical_record_added']


def test_empty_medical_record_is_rejected(as_role, patient):
    resp = as_role(Role.DOCTOR).post(
        reverse('patient-medical-records', kwargs={'pk': patient.id}), {'symptoms': ''}, format='json',
    )

    assert resp.status_code == 400
    assert resp.json()['error']['code'] == 'validation_failed'


def test_reception_cannot_read_medical_records(as_role, patient):
    resp = as_role(Role.RECEPTION).get(reverse('patient-medical-records', kwargs={'pk': patient.id}))

    assert resp.status_code == 403


@pytest.fixture
def prescription(as_role, patient):
    resp = as_role(Role.DOCTOR).post(reverse('patient-prescriptions', kwargs={'pk': patient.id}), {
        'medicine_name': 'Amoxicillin', 'dosage': '500mg', 'frequency': '3x daily', 'duration': 7, 'timing': 'after meals',
    }, format='json')
    assert resp.status_code == 201
    return resp.json()['prescription']


def test_pharmacy_dispenses(as_role, broadcaster, prescription):
    pharmacy = as_role(Role.PHARMACY)

    resp = pharmacy.post(reverse('prescription-dispense', kwargs={'pk': prescription['id']}))

    assert resp.status_code == 200
    dispensed = resp.json()['prescription']
    assert dispensed['dispensed'] is True
    assert dispensed['dispensed_by_id'] == pharmacy.user.id
    assert dispensed['dispensed_at'] is not None
    assert broadcaster.names[-1] == 'prescription_dispensed'


def test_doctor_cannot_mark_dispensed(as_role, prescription):
    doctor = as_role(Role.DOCTOR)
    url = reverse('prescription-detail', kwargs={'pk': prescription['id']})

    assert doctor.put(url, {'dispensed': True}, format='json').status_code == 403
    assert doctor.post(reverse('prescription-dispense', kwargs={'pk': prescription['id']})).status_code == 403
    assert Prescription.objects.get(pk=prescription['id']).dispensed is False

    resp = doctor.put(url, {'status': 'completed'}, format='json')
    assert resp.status_code == 200
    assert resp.json()['prescription']['status'] == 'completed'


def test_prescriptions_listed_per_patient(as_role, patient, prescription):
    resp = as_role(Role.NURSE).get(reverse('patient-prescriptions', kwargs={'pk': patient.id}))

    assert [p['id'] for p in resp.json()] == [prescription['id']]


def test_appointment_book(as_role, broadcaster, make_user, patient):
    doctor = make_user(Role.DOCTOR, name='Dr Nadia')
    reception = as_role(Role.RECEPTION)

    resp = reception.post(reverse('appointments'), {
        'patient_id': patient.id, 'doctor_id': doctor.id,
        'appointment_date': '2030-05-02', 'appointment_time': '10:15',
    }, format='json')

    assert resp.status_code == 201
    created = resp.json()['appointment']
    assert created['doctor_name'] == 'Dr Nadia'
    assert created['status'] == 'scheduled'

    on_day = reception.get(reverse('appointments'), {'date': '2030-05-02'}).json()
    other_day = reception.get(reverse('appointments'), {'date': '2030-05-03'}).json()
    assert [a['id'] for a in on_day] == [created['id']]
    assert other_day == []
    assert broadcaster.names == ['appointment_added']


def test_appointment_doctor_must_be_a_doctor(as_role, make_user, patient):
    nurse = make_user(Role.NURSE)

    resp = as_role(Role.RECEPTION).post(reverse('appointments'), {
        'patient_id': patient.id, 'doctor_id': nurse.id,
        'appointment_date': '2030-05-02', 'appointment_time': '10:15',
    }, format='json')

    assert resp.status_code == 400
    assert 'doctor_id' in resp.json()['error']['fields']


def test_any_role_can_write_to_the_administrators(as_role, broadcaster):
    resp = as_role(Role.LAB).post(reverse('admin-notes'), {'message': 'Centrifuge broken', 'priority': 'urgent'}, format='json')

    assert resp.status_code == 201
    note = resp.json()['note']
    assert note['from_user_role'] == 'lab'
    assert note['status'] == 'unread'
    assert broadcaster.names == ['admin_note_added']


def test_only_administrators_read_and_mark_notes(as_role):
    nurse = as_role(Role.NURSE)
    note = AdminNote.objects.create(from_user_id=nurse.user.id, from_user_role='nurse', message='Need gloves')

    assert nurse.get(reverse('admin-notes')).status_code == 403
    assert nurse.put(reverse('admin-note-detail', kwargs={'pk': note.id}), {}, format='json').status_code == 403

    admin = as_role(Role.ADMIN)
    resp = admin.put(reverse('admin-note-detail', kwargs={'pk': note.id}), {}, format='json')
    assert resp.json() == {'ok': True, 'note': {'id': note.id, 'status': 'read'}}
    assert admin.get(reverse('admin-notes'), {'status': 'unread'}).json() == []
