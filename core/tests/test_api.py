"""
End-to-end flow through the clinic API.

A patient's visit crosses every department: reception registers the
patient, the doctor writes a record and orders a test and a
prescription, the lab reports, pharmacy dispenses.  The test logs in
through the API like the dashboards do and uses DRF's APIClient within
the APITestCase base class.
"""

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import ActivityLog, Role, TestStatistic, User

PASSWORD = 'Visit-Flow-2030'


class ClinicVisitTests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(id=1, username='admin', password=PASSWORD, name='Admin', role=Role.ADMIN)
        for role in (Role.RECEPTION, Role.DOCTOR, Role.LAB, Role.PHARMACY):
            User.objects.create_user(username=role, password=PASSWORD, name=role.label, role=role)

    def login(self, username: str) -> None:
        resp = self.client.post(reverse('login'), {'username': username, 'password': PASSWORD}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {resp.json()['token']}")

    def test_patient_visit(self):
        self.login('reception')
        resp = self.client.post(reverse('patients'), {
            'name': 'Salma Idris', 'phone': '0915550000', 'age': 27, 'gender': 'female',
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        patient_id = resp.json()['patient']['id']

        self.login('doctor')
        resp = self.client.post(
            reverse('patient-medical-records', kwargs={'pk': patient_id}),
            {'symptoms': 'fatigue', 'diagnosis': 'Anaemia'}, format='json',
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        resp = self.client.post(
            reverse('patient-lab-tests', kwargs={'pk': patient_id}), {'test_names': 'CBC, Ferritin'}, format='json',
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        test_id = resp.json()['test']['id']
        resp = self.client.post(reverse('patient-prescriptions', kwargs={'pk': patient_id}), {
            'medicine_name': 'Ferrous sulfate', 'dosage': '200mg', 'frequency': 'daily',
            'duration': 30, 'timing': 'before breakfast',
        }, format='json')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        prescription_id = resp.json()['prescription']['id']

        self.login('lab')
        resp = self.client.put(
            reverse('lab-test-detail', kwargs={'pk': test_id}),
            {'status': 'completed', 'results': 'Hb 9.8'}, format='json',
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        self.login('pharmacy')
        resp = self.client.put(reverse('prescription-dispense', kwargs={'pk': prescription_id}))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertTrue(resp.json()['prescription']['dispensed'])

        self.assertEqual(
            dict(TestStatistic.objects.values_list('test_name', 'count')), {'CBC': 1, 'Ferritin': 1},
        )
        actions = list(ActivityLog.objects.order_by('id').values_list('action', flat=True))
        self.assertEqual(actions, [
            'login', 'patient_created',
            'login', 'medical_record_created', 'lab_test_ordered', 'prescription_created',
            'login', 'lab_test_updated',
            'login', 'prescription_dispensed',
        ])

    def test_statistics_are_shared_by_every_role(self):
        self.login('pharmacy')
        resp = self.client.get(reverse('statistics'))
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()['active_users'], 5)
