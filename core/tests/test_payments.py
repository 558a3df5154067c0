import pytest
from django.urls import reverse

from core.models import ActivityLog, Payment, Role

pytestmark = pytest.mark.django_db


def pay(client, patient, method, amount='150.00'):
    return client.post(
        reverse('payments'), {'patient_id': patient.id, 'amount': amount, 'payment_method': method}, format='json',
    )


def test_cash_payment_has_no_qr(as_role, broadcaster, patient):
    resp = pay(as_role(Role.RECEPTION), patient, 'cash')

    assert resp.status_code == 201
    payment = resp.json()['payment']
    assert payment['qr_code'] is None
    assert payment['amount'] == '150.00'
    assert payment['reference'].startswith('PAY-')
    assert payment['payment_status'] == 'completed'
    assert broadcaster.names == ['payment_added']


def test_qr_method_stores_png_data_url(as_role, patient):
    resp = pay(as_role(Role.RECEPTION), patient, 'bankak')

    assert resp.status_code == 201
    assert resp.json()['payment']['qr_code'].startswith('data:image/png;base64,')


@pytest.fixture
def broken_qr(monkeypatch):
    def fail(text):
        raise OSError('no image backend')

    monkeypatch.setattr('core.services.payments.render_qr_data_url', fail)


def test_qr_failure_rejects_payment_by_default(as_role, broadcaster, patient, broken_qr):
    resp = pay(as_role(Role.RECEPTION), patient, 'bankak')

    assert resp.status_code == 503
    assert resp.json()['error']['code'] == 'qr_generation_failed'
    assert not Payment.objects.exists()
    assert broadcaster.events == []
    assert not ActivityLog.objects.filter(action='payment_created').exists()


def test_qr_failure_can_degrade(settings, as_role, patient, broken_qr):
    settings.PAYMENT_QR_FAILURE_POLICY = 'degrade'

    resp = pay(as_role(Role.RECEPTION), patient, 'bankak')

    assert resp.status_code == 201
    assert resp.json()['payment']['qr_code'] is None
    assert Payment.objects.count() == 1


def test_amount_must_be_positive(as_role, patient):
    resp = pay(as_role(Role.RECEPTION), patient, 'cash', amount='0')

    assert resp.status_code == 400
    assert 'amount' in resp.json()['error']['fields']


def test_history_filters_by_patient(as_role, patient):
    from core.models import Patient

    other = Patient.objects.create(name='Other', phone='1', age=3, gender='male')
    Payment.objects.create(patient=patient, amount='10.00', payment_method='cash')
    Payment.objects.create(patient=other, amount='20.00', payment_method='card')

    resp = as_role(Role.ADMIN).get(reverse('payments'), {'patient_id': other.id})

    assert [p['amount'] for p in resp.json()] == ['20.00']
    assert resp.json()[0]['patient_name'] == 'Other'


def test_doctors_cannot_take_payments(as_role, patient):
    assert pay(as_role(Role.DOCTOR), patient, 'cash').status_code == 403
