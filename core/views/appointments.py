"""Appointment book endpoints."""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Appointment
from core.permissions import allow
from core.serializers.appointments import AppointmentListQuerySerializer, AppointmentSerializer
from core.services.events import publish_change
from core.store import get_store


def _appointments():
    return Appointment.objects.select_related('patient', 'doctor')


@api_view(['GET', 'POST'])
@permission_classes([allow('appointments.read', POST='appointments.write')])
def appointments(request):
    if request.method == 'GET':
        q = AppointmentListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = _appointments().order_by('appointment_date', 'appointment_time', 'id')
        if q.validated_data.get('date'):
            qs = qs.filter(appointment_date=q.validated_data['date'])
        if q.validated_data.get('status'):
            qs = qs.filter(status=q.validated_data['status'])
        if q.validated_data.get('doctor_id'):
            qs = qs.filter(doctor_id=q.validated_data['doctor_id'])
        return Response(AppointmentSerializer(qs, many=True).data)

    s = AppointmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        appointment = s.save()
    data = AppointmentSerializer(_appointments().get(pk=appointment.pk)).data
    publish_change(
        request.user, 'appointment_created', 'appointment_added', data,
        {'id': appointment.id, 'patient_id': appointment.patient_id},
    )
    return Response({'ok': True, 'appointment': data}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([allow('appointments.read', PUT='appointments.write', DELETE='destructive')])
def appointment_detail(request, pk: int):
    appointment = get_object_or_404(_appointments(), pk=pk)

    if request.method == 'GET':
        return Response(AppointmentSerializer(appointment).data)

    if request.method == 'PUT':
        s = AppointmentSerializer(appointment, data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        with get_store().write():
            s.save()
        data = AppointmentSerializer(_appointments().get(pk=pk)).data
        publish_change(request.user, 'appointment_updated', 'appointment_updated', data, {'id': pk, 'status': data['status']})
        return Response({'ok': True, 'appointment': data})

    with get_store().write():
        appointment.delete()
    publish_change(request.user, 'appointment_deleted', 'appointment_deleted', {'id': pk}, {'id': pk})
    return Response({'ok': True})
