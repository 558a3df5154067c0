"""
Doctor-authored clinical data: medical records, lab tests and
prescriptions.

Lab tests and prescriptions can be created either on the flat collection
(with ``patient_id`` in the body) or nested under a patient.  Ordering a
lab test also bumps the per-test request counters in the same write.
Only pharmacy and administrators may mark a prescription dispensed.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from core.models import LabTest, MedicalRecord, Patient, Prescription
from core.permissions import allow, has_capability
from core.serializers.clinical import (
    LabTestListQuerySerializer,
    LabTestResultSerializer,
    LabTestSerializer,
    MedicalRecordSerializer,
    PrescriptionSerializer,
    PrescriptionUpdateSerializer,
    TestStatisticSerializer,
)
from core.services.events import publish_change
from core.services.lab import order_lab_test, top_statistics
from core.store import get_store


def _lab_tests():
    return LabTest.objects.select_related('patient', 'doctor')


def _prescriptions():
    return Prescription.objects.select_related('patient', 'doctor')


# ---------------------------------------------------------------------
# Medical records
# ---------------------------------------------------------------------
@api_view(['GET', 'POST'])
@permission_classes([allow('records.read', POST='records.write')])
def medical_records(request, pk: int):
    patient = get_object_or_404(Patient, pk=pk)
    if request.method == 'GET':
        qs = MedicalRecord.objects.filter(patient=patient).select_related('doctor').order_by('-created_at', '-id')
        return Response(MedicalRecordSerializer(qs, many=True).data)

    s = MedicalRecordSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        record = s.save(patient=patient, doctor_id=request.user.id)
    data = MedicalRecordSerializer(MedicalRecord.objects.select_related('doctor').get(pk=record.pk)).data
    publish_change(request.user, 'medical_record_created', 'medical_record_added', data, {'patient_id': patient.id})
    return Response({'ok': True, 'record': data}, status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------
# Lab tests
# ---------------------------------------------------------------------
def _create_lab_test(request, patient: Patient | None = None):
    s = LabTestSerializer(data=request.data, context={'patient': patient})
    s.is_valid(raise_exception=True)
    test = order_lab_test(s, doctor_id=request.user.id)
    data = LabTestSerializer(_lab_tests().get(pk=test.pk)).data
    publish_change(
        request.user, 'lab_test_ordered', 'lab_test_added', data,
        {'patient_id': test.patient_id, 'tests': test.test_names},
    )
    return Response({'ok': True, 'test': data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([allow('lab.read', POST='lab.order')])
def lab_tests(request):
    if request.method == 'GET':
        q = LabTestListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = _lab_tests().order_by('-created_at', '-id')
        if q.validated_data.get('status'):
            qs = qs.filter(status=q.validated_data['status'])
        return Response(LabTestSerializer(qs, many=True).data)
    return _create_lab_test(request)


@api_view(['GET', 'POST'])
@permission_classes([allow('lab.read', POST='lab.order')])
def patient_lab_tests(request, pk: int):
    patient = get_object_or_404(Patient, pk=pk)
    if request.method == 'GET':
        qs = _lab_tests().filter(patient=patient).order_by('-created_at', '-id')
        return Response(LabTestSerializer(qs, many=True).data)
    return _create_lab_test(request, patient)


@api_view(['GET', 'PUT'])
@permission_classes([allow('lab.read', PUT='lab.result')])
def lab_test_detail(request, pk: int):
    test = get_object_or_404(_lab_tests(), pk=pk)
    if request.method == 'GET':
        return Response(LabTestSerializer(test).data)

    s = LabTestResultSerializer(test, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    with get_store().write():
        s.save()
    data = LabTestSerializer(_lab_tests().get(pk=pk)).data
    publish_change(request.user, 'lab_test_updated', 'lab_test_updated', data, {'id': pk, 'status': data['status']})
    return Response({'ok': True, 'test': data})


@api_view(['GET'])
@permission_classes([allow('lab.statistics')])
def test_statistics(request):
    return Response(TestStatisticSerializer(top_statistics(), many=True).data)


# ---------------------------------------------------------------------
# Prescriptions
# ---------------------------------------------------------------------
def _create_prescription(request, patient: Patient | None = None):
    s = PrescriptionSerializer(data=request.data, context={'patient': patient})
    s.is_valid(raise_exception=True)
    with get_store().write():
        prescription = s.save(doctor_id=request.user.id)
    data = PrescriptionSerializer(_prescriptions().get(pk=prescription.pk)).data
    publish_change(
        request.user, 'prescription_created', 'prescription_added', data,
        {'patient_id': prescription.patient_id, 'medicine': prescription.medicine_name},
    )
    return Response({'ok': True, 'prescription': data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([allow('prescriptions.read', POST='prescriptions.write')])
def prescriptions(request):
    if request.method == 'GET':
        qs = _prescriptions().order_by('-created_at', '-id')
        if request.query_params.get('status'):
            qs = qs.filter(status=request.query_params['status'])
        return Response(PrescriptionSerializer(qs, many=True).data)
    return _create_prescription(request)


@api_view(['GET', 'POST'])
@permission_classes([allow('prescriptions.read', POST='prescriptions.write')])
def patient_prescriptions(request, pk: int):
    patient = get_object_or_404(Patient, pk=pk)
    if request.method == 'GET':
        qs = _prescriptions().filter(patient=patient).order_by('-created_at', '-id')
        return Response(PrescriptionSerializer(qs, many=True).data)
    return _create_prescription(request, patient)


def _dispense_fields(request, dispensed: bool) -> dict:
    if not has_capability(request.user, 'prescriptions.dispense'):
        raise PermissionDenied()
    if dispensed:
        return {'dispensed': True, 'dispensed_at': timezone.now(), 'dispensed_by_id': request.user.id}
    return {'dispensed': False, 'dispensed_at': None, 'dispensed_by_id': None}


@api_view(['GET', 'PUT'])
@permission_classes([allow('prescriptions.read', PUT='prescriptions.update')])
def prescription_detail(request, pk: int):
    prescription = get_object_or_404(_prescriptions(), pk=pk)
    if request.method == 'GET':
        return Response(PrescriptionSerializer(prescription).data)

    s = PrescriptionUpdateSerializer(prescription, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    extra = {}
    if 'dispensed' in s.validated_data:
        extra = _dispense_fields(request, s.validated_data.pop('dispensed'))
    with get_store().write():
        s.save(**extra)
    data = PrescriptionSerializer(_prescriptions().get(pk=pk)).data
    publish_change(
        request.user, 'prescription_updated', 'prescription_updated', data,
        {'id': pk, 'status': data['status'], 'dispensed': data['dispensed']},
    )
    return Response({'ok': True, 'prescription': data})


@api_view(['PUT', 'POST'])
@permission_classes([allow('prescriptions.dispense')])
def prescription_dispense(request, pk: int):
    prescription = get_object_or_404(Prescription, pk=pk)
    with get_store().write():
        for field, value in _dispense_fields(request, True).items():
            setattr(prescription, field, value)
        prescription.save(update_fields=['dispensed', 'dispensed_at', 'dispensed_by', 'updated_at'])
    data = PrescriptionSerializer(_prescriptions().get(pk=pk)).data
    publish_change(request.user, 'prescription_dispensed', 'prescription_dispensed', data, {'id': pk})
    return Response({'ok': True, 'prescription': data})
