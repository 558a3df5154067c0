"""Cashier endpoints: payment history and new payments."""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from core.models import Payment
from core.permissions import allow
from core.serializers.payments import PaymentSerializer
from core.services.events import publish_change
from core.services.payments import record_payment


@api_view(['GET', 'POST'])
@permission_classes([allow('payments.read', POST='payments.write')])
def payments(request):
    if request.method == 'GET':
        qs = Payment.objects.select_related('patient').order_by('-created_at', '-id')
        patient_id = request.query_params.get('patient_id')
        if patient_id and patient_id.isdigit():
            qs = qs.filter(patient_id=int(patient_id))
        return Response(PaymentSerializer(qs, many=True).data)

    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    payment = record_payment(s)
    data = PaymentSerializer(payment).data
    publish_change(
        request.user, 'payment_created', 'payment_added', data,
        {'id': payment.id, 'amount': str(payment.amount), 'method': payment.payment_method},
    )
    return Response({'ok': True, 'payment': data}, status=status.HTTP_201_CREATED)
