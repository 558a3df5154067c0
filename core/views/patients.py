"""
Patient registry.

Every department can look patients up; reception, doctors and
administrators register and edit them.  Deleting a patient is admin only
and is refused while clinical history still references the patient.
"""
from __future__ import annotations

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Patient
from core.permissions import allow
from core.serializers.patients import PatientListQuerySerializer, PatientSerializer
from core.services.events import publish_change
from core.store import get_store


@api_view(['GET', 'POST'])
@permission_classes([allow('patients.read', POST='patients.write')])
def patients(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = Patient.objects.order_by('-created_at', '-id')
        term = (q.validated_data.get('q') or '').strip()
        if term:
            qs = qs.filter(Q(name__icontains=term) | Q(phone__icontains=term) | Q(national_id__icontains=term))
        return Response(PatientSerializer(qs, many=True).data)

    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        patient = s.save()
    data = PatientSerializer(patient).data
    publish_change(request.user, 'patient_created', 'patient_added', data, {'id': patient.id, 'name': patient.name})
    return Response({'ok': True, 'patient': data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([allow('patients.read', PUT='patients.write', DELETE='destructive')])
def patient_detail(request, pk: int):
    patient = get_object_or_404(Patient, pk=pk)

    if request.method == 'GET':
        return Response(PatientSerializer(patient).data)

    if request.method == 'PUT':
        s = PatientSerializer(patient, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        with get_store().write():
            patient = s.save()
        data = PatientSerializer(patient).data
        publish_change(request.user, 'patient_updated', 'patient_updated', data, {'id': patient.id})
        return Response({'ok': True, 'patient': data})

    with get_store().write():
        patient.delete()
    publish_change(request.user, 'patient_deleted', 'patient_deleted', {'id': pk}, {'id': pk})
    return Response({'ok': True})
