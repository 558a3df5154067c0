"""
Department work queues.

Doctors order injections from nursing and scans from ultrasound; each
department works its queue through ``pending`` and updates the status.
Ultrasound staff attach scan images to their orders.
"""
from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from core.models import NursingOrder, UltrasoundOrder
from core.permissions import allow
from core.serializers.orders import (
    NursingOrderSerializer,
    NursingOrderUpdateSerializer,
    StatusQuerySerializer,
    UltrasoundOrderSerializer,
    UltrasoundOrderUpdateSerializer,
)
from core.services.events import publish_change
from core.services.uploads import attach_ultrasound_image, image_url
from core.store import get_store


def _nursing():
    return NursingOrder.objects.select_related('patient', 'doctor')


def _ultrasound():
    return UltrasoundOrder.objects.select_related('patient', 'doctor')


def _filtered(request, qs):
    q = StatusQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    if q.validated_data.get('status'):
        qs = qs.filter(status=q.validated_data['status'])
    return qs


# ---------------------------------------------------------------------
# Nursing
# ---------------------------------------------------------------------
@api_view(['GET', 'POST'])
@permission_classes([allow('nursing.read', POST='nursing.order')])
def nursing_orders(request):
    if request.method == 'GET':
        qs = _filtered(request, _nursing().order_by('-created_at', '-id'))
        return Response(NursingOrderSerializer(qs, many=True).data)

    s = NursingOrderSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        order = s.save(doctor_id=request.user.id)
    data = NursingOrderSerializer(_nursing().get(pk=order.pk)).data
    publish_change(
        request.user, 'nursing_order_created', 'nursing_order_added', data,
        {'patient_id': order.patient_id, 'injection_type': order.injection_type},
    )
    return Response({'ok': True, 'order': data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([allow('nursing.read')])
def nursing_orders_pending(request):
    qs = _nursing().filter(status='pending').order_by('created_at', 'id')
    return Response(NursingOrderSerializer(qs, many=True).data)


@api_view(['GET', 'PUT'])
@permission_classes([allow('nursing.read', PUT='nursing.update')])
def nursing_order_detail(request, pk: int):
    order = get_object_or_404(_nursing(), pk=pk)
    if request.method == 'GET':
        return Response(NursingOrderSerializer(order).data)

    s = NursingOrderUpdateSerializer(order, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    with get_store().write():
        s.save()
    data = NursingOrderSerializer(_nursing().get(pk=pk)).data
    publish_change(request.user, 'nursing_order_updated', 'nursing_order_updated', data, {'id': pk, 'status': data['status']})
    return Response({'ok': True, 'order': data})


# ---------------------------------------------------------------------
# Ultrasound
# ---------------------------------------------------------------------
@api_view(['GET', 'POST'])
@permission_classes([allow('ultrasound.read', POST='ultrasound.order')])
def ultrasound_orders(request):
    if request.method == 'GET':
        qs = _filtered(request, _ultrasound().order_by('-created_at', '-id'))
        return Response(UltrasoundOrderSerializer(qs, many=True).data)

    s = UltrasoundOrderSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    with get_store().write():
        order = s.save(doctor_id=request.user.id)
    data = UltrasoundOrderSerializer(_ultrasound().get(pk=order.pk)).data
    publish_change(
        request.user, 'ultrasound_order_created', 'ultrasound_order_added', data,
        {'patient_id': order.patient_id, 'scan_type': order.scan_type},
    )
    return Response({'ok': True, 'order': data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([allow('ultrasound.read')])
def ultrasound_orders_pending(request):
    qs = _ultrasound().filter(status='pending').order_by('created_at', 'id')
    return Response(UltrasoundOrderSerializer(qs, many=True).data)


@api_view(['GET', 'PUT'])
@permission_classes([allow('ultrasound.read', PUT='ultrasound.update')])
def ultrasound_order_detail(request, pk: int):
    order = get_object_or_404(_ultrasound(), pk=pk)
    if request.method == 'GET':
        return Response(UltrasoundOrderSerializer(order).data)

    s = UltrasoundOrderUpdateSerializer(order, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    with get_store().write():
        s.save()
    data = UltrasoundOrderSerializer(_ultrasound().get(pk=pk)).data
    publish_change(
        request.user, 'ultrasound_order_updated', 'ultrasound_order_updated', data, {'id': pk, 'status': data['status']},
    )
    return Response({'ok': True, 'order': data})


@api_view(['POST'])
@permission_classes([allow('ultrasound.update')])
@parser_classes([MultiPartParser, FormParser])
def ultrasound_order_upload(request, pk: int):
    order = get_object_or_404(UltrasoundOrder, pk=pk)
    order, filename = attach_ultrasound_image(order, request.FILES.get('image'))
    payload = {'id': order.id, 'filename': filename, 'url': image_url(filename), 'images': order.image_list}
    publish_change(request.user, 'ultrasound_image_uploaded', 'ultrasound_image_uploaded', payload, {'id': order.id, 'filename': filename})
    return Response({'ok': True, **payload}, status=status.HTTP_201_CREATED)
