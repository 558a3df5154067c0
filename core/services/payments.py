"""
Payment recording and QR generation.

Payments made with the QR method (``settings.PAYMENT_QR_METHOD``) carry a
QR code encoding the clinic account, the amount and a reference, stored as
a PNG data URL.  ``settings.PAYMENT_QR_FAILURE_POLICY`` decides what
happens when the image cannot be produced: ``reject`` fails the payment
before anything is written, ``degrade`` stores it without a code.
"""
from __future__ import annotations

import base64
import io
import json
import logging
import time
from decimal import Decimal

import qrcode
from django.conf import settings

from core.exceptions import QRGenerationFailed
from core.models import Payment
from core.store import get_store

logger = logging.getLogger(__name__)


def new_reference() -> str:
    return f"PAY-{int(time.time() * 1000)}"


def qr_payload(amount: Decimal, reference: str, patient_id: int) -> str:
    return json.dumps({
        'account': settings.PAYMENT_ACCOUNT,
        'amount': str(amount),
        'reference': reference,
        'description': f"Payment for patient #{patient_id}",
    }, ensure_ascii=False)


def render_qr_data_url(text: str) -> str:
    image = qrcode.make(text)
    buffer = io.BytesIO()
    image.save(buffer, format='PNG')
    return 'data:image/png;base64,' + base64.b64encode(buffer.getvalue()).decode('ascii')


def record_payment(serializer) -> Payment:
    data = serializer.validated_data
    reference = new_reference()
    qr_code = None
    if data['payment_method'] == settings.PAYMENT_QR_METHOD:
        try:
            qr_code = render_qr_data_url(qr_payload(data['amount'], reference, data['patient'].pk))
        except Exception as exc:
            if settings.PAYMENT_QR_FAILURE_POLICY == 'reject':
                raise QRGenerationFailed() from exc
            logger.warning("QR generation failed for %s, storing payment without code: %s", reference, exc)
    with get_store().write():
        return serializer.save(qr_code=qr_code, reference=reference)
